"""API gateway entrypoint."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from libs.core.config import get_settings
from libs.core.logging import setup_logging
from services.api_gateway.dependencies import get_surveillance_service
from services.api_gateway.presentation.http.routes import router


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    if not get_settings().autostart_dispatcher:
        yield
        return
    service = get_surveillance_service()
    service.start()
    try:
        yield
    finally:
        service.stop()


app = FastAPI(title="Perimeter Watch API", lifespan=lifespan)
app.include_router(router)
