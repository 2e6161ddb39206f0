import asyncio
import io
import pathlib
import threading

import aiofiles.threadpool
import pytest
from fastapi import UploadFile

from jobboard.services.resumes import ResumeRejectedError, discard_resume, save_resume

ONE_MB = 1024 * 1024


def _upload(content: bytes, filename: str = 'cv.pdf') -> UploadFile:
    return UploadFile(io.BytesIO(content), filename=filename)


def test_save_resume_opens_file_off_the_event_loop_thread(tmp_path, monkeypatch) -> None:
    executor_threads: list[int] = []
    loop_thread_path_opens: list[int] = []
    original_sync_open = aiofiles.threadpool.sync_open
    original_path_open = pathlib.Path.open

    def recording_sync_open(*args, **kwargs):
        executor_threads.append(threading.get_ident())
        return original_sync_open(*args, **kwargs)

    def recording_path_open(self, *args, **kwargs):
        loop_thread_path_opens.append(threading.get_ident())
        return original_path_open(self, *args, **kwargs)

    monkeypatch.setattr(aiofiles.threadpool, 'sync_open', recording_sync_open)
    monkeypatch.setattr(pathlib.Path, 'open', recording_path_open)

    async def store() -> tuple[int, str]:
        return threading.get_ident(), await save_resume(_upload(b'%PDF resume'), tmp_path, ONE_MB)

    loop_thread, resume_ref = asyncio.run(store())

    assert executor_threads
    assert loop_thread not in executor_threads
    assert loop_thread not in loop_thread_path_opens
    stored = tmp_path / resume_ref.removeprefix('/uploads/')
    assert stored.read_bytes() == b'%PDF resume'


def test_save_resume_removes_partial_file_when_too_large(tmp_path) -> None:
    with pytest.raises(ResumeRejectedError):
        asyncio.run(save_resume(_upload(b'x' * (ONE_MB + 1)), tmp_path, ONE_MB))

    assert list(tmp_path.iterdir()) == []


def test_save_resume_rejects_unknown_extension(tmp_path) -> None:
    with pytest.raises(ResumeRejectedError):
        asyncio.run(save_resume(_upload(b'MZ', 'cv.exe'), tmp_path, ONE_MB))


def test_discard_resume_removes_file_and_tolerates_missing(tmp_path) -> None:
    resume_ref = asyncio.run(save_resume(_upload(b'%PDF resume'), tmp_path, ONE_MB))

    asyncio.run(discard_resume(resume_ref, tmp_path))
    asyncio.run(discard_resume(resume_ref, tmp_path))

    assert list(tmp_path.iterdir()) == []
