"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.exceptions import ConversaError, ValidationFailure
from app.infra.logging_config import configure_logging, get_logger
from app.routers import conversations_router, messages_router, system

logger = get_logger("api")


async def conversa_error_handler(request: Request, exc: ConversaError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request shape or enum mismatches are answered with 400, not FastAPI's 422."""
    errors = [
        {
            "loc": list(err.get("loc", ())),
            "msg": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    messages = "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in errors
    )
    failure = ValidationFailure(messages or "Validation failed", errors=errors)
    logger.info("%s %s rejected: %s", request.method, request.url.path, messages)
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


def create_app(testing: bool = False) -> FastAPI:
    settings = get_settings()
    configure_logging("DEBUG" if testing else settings.log_level)

    app = FastAPI(
        title="Conversa Records API",
        description="Customer-support conversations and messages",
        version="0.1.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )

    app.add_exception_handler(ConversaError, conversa_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(system.router)
    app.include_router(conversations_router.router)
    app.include_router(messages_router.router)

    logger.info("Application created (environment=%s)", settings.environment)
    return app


app = create_app()
