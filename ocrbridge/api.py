"""REST routes exposing the bridge services to the plugin UI."""

import os
from typing import Any, Dict, List, NoReturn

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel

from .errors import ForbiddenPathError, InvalidInputError
from .host import LocalHost, PluginEnterEvent
from .limiter import limiter
from .logger import get_logger
from .services import BridgeServices

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["OCR Bridge"])

services: BridgeServices | None = None
host: LocalHost | None = None

TEMP_IMAGE_LIMIT = os.getenv("TEMP_IMAGE_RATE_LIMIT", "30/minute")


def set_bridge(bridge_services: BridgeServices, bridge_host: LocalHost) -> None:
    """Configure the services and host used by the router."""

    global services, host
    services = bridge_services
    host = bridge_host


def _services() -> BridgeServices:
    if services is None:
        raise HTTPException(status_code=500, detail="services not configured")
    return services


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, HTTPException):
        raise exc
    if isinstance(exc, ForbiddenPathError):
        raise HTTPException(status_code=403, detail="forbidden") from exc
    if isinstance(exc, InvalidInputError):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, FileNotFoundError):
        raise HTTPException(status_code=404, detail="file not found") from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


class ClipboardRequest(BaseModel):
    text: str | None = None


class ImageDataRequest(BaseModel):
    data: str | None = None


class ImagePathRequest(BaseModel):
    path: str | None = None


class PluginEnterRequest(BaseModel):
    code: str = ""
    type: str = ""
    payload: str | List[Dict[str, Any]] | None = None


@router.get("/settings")
async def get_settings() -> dict:
    return _services().get_settings().to_dict()


@router.put("/settings")
async def save_settings(payload: Any = Body(...)) -> dict:
    """Replace the stored settings; ``tokens`` may be a comma separated string."""

    try:
        saved = _services().save_settings(payload)
    except Exception as exc:
        _raise_http(exc)
    return saved.to_dict()


@router.get("/token")
async def random_token() -> dict:
    return {"token": _services().get_random_token()}


@router.post("/clipboard")
async def copy_to_clipboard(req: ClipboardRequest) -> dict:
    try:
        _services().copy_to_clipboard(req.text)
    except Exception as exc:
        _raise_http(exc)
    return {"status": "copied"}


@router.post("/temp-images")
@limiter.limit(TEMP_IMAGE_LIMIT)
async def save_temp_image(request: Request, req: ImageDataRequest) -> dict:
    """Decode base64 image data into a temporary PNG file."""

    try:
        path = _services().save_temp_image(req.data)
    except Exception as exc:
        _raise_http(exc)
    return {"path": path}


@router.delete("/temp-images")
async def delete_temp_image(req: ImagePathRequest) -> dict:
    try:
        deleted = _services().delete_temp_image(req.path)
    except Exception as exc:
        _raise_http(exc)
    return {"deleted": deleted}


@router.post("/images/read")
async def read_image(req: ImagePathRequest) -> dict:
    """Return the file at ``path`` as a PNG data URL."""

    try:
        data = _services().read_image_as_base64(req.path)
    except Exception as exc:
        _raise_http(exc)
    return {"data": data}


@router.post("/plugin-enter")
async def plugin_enter(req: PluginEnterRequest) -> dict:
    """Deliver a launcher ``plugin-enter`` event to the registered handlers."""

    if host is None:
        raise HTTPException(status_code=500, detail="host not configured")
    event = PluginEnterEvent.from_dict(req.model_dump())
    await host.emit(event)
    return {"status": "dispatched"}
