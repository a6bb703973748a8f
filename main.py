from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.apis.study.main import router as study_router
from app.core.config import settings
from app.core.errors import InternalError, StudyError
from app.core.logging import get_logger, setup_logging
from app.modules.study.state import StudySessionManager, build_manager

logger = get_logger(__name__)


def create_app(manager: Optional[StudySessionManager] = None) -> FastAPI:
    manager = manager or build_manager(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await manager.storage.init()
        manager.start()
        try:
            yield
        finally:
            await manager.stop()
            await manager.storage.close()

    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )
    app.state.study_manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StudyError)
    async def study_error_handler(request: Request, exc: StudyError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code, content=jsonable_encoder(exc.to_payload())
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "message": "Invalid request data",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalError().to_payload())

    app.include_router(study_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        print(f"An error occurred when starting the server: {e}.")
