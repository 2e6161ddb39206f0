import logging
import secrets
from pathlib import Path

import aiofiles
import aiofiles.os
import anyio
from fastapi import UploadFile

from jobboard.core.errors import JobBoardError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.pdf', '.doc', '.docx', '.txt'}
PUBLIC_PREFIX = '/uploads/'
CHUNK_SIZE = 64 * 1024


class ResumeRejectedError(JobBoardError):
    default_message = "Resume file was rejected."


def get_file_extension(filename: str) -> str:
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def _remove_quietly(path: Path) -> None:
    # Cleanup must finish even when the request is being cancelled.
    with anyio.CancelScope(shield=True):
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass


async def save_resume(upload: UploadFile, upload_dir: Path, max_bytes: int) -> str:
    """Store the upload and return its ``/uploads/<name>`` reference."""
    if not upload.filename:
        raise ResumeRejectedError("No resume file provided.")

    extension = get_file_extension(upload.filename)
    if extension not in ALLOWED_EXTENSIONS:
        raise ResumeRejectedError(f"Unsupported file type '{extension}'. Allowed: PDF, DOC, DOCX, TXT.")

    await aiofiles.os.makedirs(upload_dir, exist_ok=True)
    stored_name = f"{secrets.token_hex(16)}{extension}"
    destination = upload_dir / stored_name

    written = 0
    try:
        async with aiofiles.open(destination, 'wb') as handle:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > max_bytes:
                    raise ResumeRejectedError(f"Resume exceeds {max_bytes // (1024 * 1024)}MB.")
                await handle.write(chunk)
    except BaseException:
        await _remove_quietly(destination)
        raise

    if written == 0:
        await _remove_quietly(destination)
        raise ResumeRejectedError("Resume file is empty.")

    logger.info('Stored resume %s (%d bytes)', stored_name, written)
    return PUBLIC_PREFIX + stored_name


async def discard_resume(resume_ref: str, upload_dir: Path) -> None:
    """Remove a stored resume whose application was not recorded."""
    if not resume_ref.startswith(PUBLIC_PREFIX):
        return
    await _remove_quietly(upload_dir / resume_ref[len(PUBLIC_PREFIX):])
