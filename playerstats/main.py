from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from playerstats.api import api_router
from playerstats.core.config import AppSettings
from playerstats.core.errors import ServiceError
from playerstats.db.database import dispose_engine, init_models


def get_app_settings() -> AppSettings:
    try:
        return AppSettings()
    except Exception as e:
        logger.error(f"Error loading settings: {e}")
        logger.error("Using default settings")
        return AppSettings.model_construct()


def setup_logging(settings: AppSettings):
    logger.add(
        settings.log_file,
        rotation=settings.log_rotation,
        compression=settings.log_compression.value,
        format=settings.log_format,
        level=settings.app_log_level.value.upper(),
    )


async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Bad request on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"code": "bad-request", "message": "Bad request!", "errors": jsonable_errors(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"code": "internal-error", "message": "Internal server error"})


def jsonable_errors(exc: RequestValidationError):
    return [{"loc": list(error.get("loc", ())), "msg": error.get("msg", "")} for error in exc.errors()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info("Database tables ready")
    yield
    await dispose_engine()


def create_app(init_db: bool = True):
    settings = get_app_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Player statistics and engagement API",
        version="1.0.0",
        lifespan=lifespan if init_db else None,
    )
    setup_logging(settings)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()

if __name__ == "__main__":
    settings = get_app_settings()
    uvicorn.run(
        "playerstats.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_reload,
    )
