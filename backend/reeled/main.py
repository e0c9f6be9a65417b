# reeled/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reeled.core.config import settings
from reeled.core.logging_config import configure_logging
from reeled.middleware.request_logging import RequestLoggingMiddleware
from reeled.routers.health import router as health_router
from reeled.routers.generate import router as generate_router
from reeled.routers.llm_health import router as llm_health_router
from reeled.routers.root import router as root_router
from reeled.core.exception_handlers import app_error_handler, llm_exhausted_handler, unhandled_exception_handler
from reeled.core import AppError
from reeled.llm.errors import LLMExhaustedError

configure_logging()


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)

    app.add_middleware(RequestLoggingMiddleware)

    # ---- CORS (env-driven) ----
    # CORS_ALLOW_ORIGINS="http://localhost:3000,https://reeled.vercel.app"
    cors_kwargs = dict(
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.CORS_ALLOW_VERCEL_PREVIEWS:
        # Allows https://<anything>.vercel.app
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"^https:\/\/.*\.vercel\.app$",
            **cors_kwargs,
        )
    else:
        # With credentials, never "*"; default to the local workspace UI
        allow_origins = _split_csv(settings.CORS_ALLOW_ORIGINS) or ["http://localhost:3000"]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            **cors_kwargs,
        )

    # Exception handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(LLMExhaustedError, llm_exhausted_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(generate_router)
    app.include_router(llm_health_router)

    return app


app = create_app()
