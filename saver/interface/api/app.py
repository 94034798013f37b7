"""FastAPI application."""

from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from saver.config import Settings, validate_settings
from saver.interface.api.errors import register_error_handlers
from saver.interface.api.routes import account_linking, auth, health
from saver.interface.worker.cleanup import VerificationCodeSweeper
from saver.util.di.container import create_container, setup_di
from saver.util.observability import instrument_fastapi, instrument_httpx


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Run with ``uvicorn saver.interface.api.app:create_app --factory``.
    Logfire should be configured before calling this function; in
    production start_app.py handles this.

    Args:
        container: DI container to serve from. Defaults to the production
            container; tests pass one built from mock providers.

    Raises:
        ConfigurationError: If the JWT signing secret is missing or weak
    """
    settings = Settings()
    validate_settings(settings)

    if container is None:
        container = create_container()

    sweeper = VerificationCodeSweeper(
        container, settings.verification.cleanup_interval_seconds
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper.start()
        try:
            yield
        finally:
            await sweeper.stop()
            await container.close()
            logfire.info("Application shut down")

    # Instrument httpx for outbound HTTP requests
    # (Logfire must be configured before instrumentation)
    instrument_httpx()

    app_instance = FastAPI(
        title="Article Saver API",
        description="Identity resolution and account linking for Article Saver",
        version="0.1.0",
        lifespan=lifespan,
    )

    instrument_fastapi(app_instance)

    # The desktop client calls from localhost on an arbitrary port
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
        max_age=600,
    )

    setup_di(app_instance, container)
    register_error_handlers(app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)
    app_instance.include_router(account_linking.router)

    return app_instance
