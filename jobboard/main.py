import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from jobboard.auth.jwt_handler import TokenService
from jobboard.core import config
from jobboard.database import Base, build_engine, build_session_factory, ensure_application_schema
from jobboard.models import application, job, user  # noqa: F401  (register tables)
from jobboard.routes import application_routes, auth_routes, favorite_routes, job_routes

logger = logging.getLogger(__name__)


def create_app(
    *,
    database_url: str | None = None,
    token_config: config.TokenConfig | None = None,
    upload_dir: str | Path | None = None,
) -> FastAPI:
    logging.basicConfig(level=config.LOG_LEVEL)
    config.validate_runtime_config()

    engine = build_engine(database_url or config.DATABASE_URL)
    token_service = TokenService(token_config or config.load_token_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            Base.metadata.create_all(bind=engine)
            ensure_application_schema(engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL.')
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title='Job Board API', lifespan=lifespan)
    app.state.session_factory = build_session_factory(engine)
    app.state.token_service = token_service
    app.state.upload_dir = str(upload_dir or config.UPLOAD_DIR)
    app.state.max_resume_bytes = config.MAX_RESUME_SIZE_MB * 1024 * 1024

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.get('/')
    def root():
        return {'status': 'Job Board API Running'}

    app.include_router(auth_routes.router, prefix='/auth')
    app.include_router(job_routes.router, prefix='/jobs')
    app.include_router(application_routes.router, prefix='/applications')
    app.include_router(favorite_routes.router, prefix='/favorites')

    return app


app = create_app()
