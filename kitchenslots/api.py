"""
FastAPI app exposing the read-only availability query.

No authentication: the projection is public, only the booking mutation is
gated (and lives elsewhere).
"""

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import AppConfig, load_config
from .domain.exceptions import InvalidInput, UpstreamUnavailable
from .services.availability_service import AvailabilityService, build_service

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_BAD_REQUEST = 400
STATUS_SERVICE_UNAVAILABLE = 503


def _parse_duration(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidInput(f"Invalid duration {raw!r}, expected minutes as an integer") from exc


def get_service(request: Request) -> AvailabilityService:
    return request.app.state.availability_service


@router.get("/api/services/availability")
def availability(request: Request, date: Optional[str] = None, duration: Optional[str] = None):
    """
    Return open and blocked slots for the requested date.

    When no reservation store is configured the response has degraded=true
    and only allSlots is filled: the status of each slot is unknown.
    """
    service = get_service(request)
    result = service.get_availability(
        date,
        requested_duration_minutes=_parse_duration(duration),
    )
    return result.to_dict()


@router.get("/api/services/slots")
def slot_calendar(request: Request):
    """Return the full slot calendar."""
    service = get_service(request)
    return {
        "slots": [slot.to_dict() for slot in service.slot_calendar],
        "bufferMinutes": service.buffer_minutes,
    }


@router.get("/health")
def health():
    return {"status": "ok", "version": __version__}


async def _invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    logger.info("Rejected availability query %s: %s", request.url.query, exc)
    return JSONResponse(status_code=STATUS_BAD_REQUEST, content={"error": str(exc)})


async def _upstream_handler(request: Request, exc: UpstreamUnavailable) -> JSONResponse:
    logger.error("Reservation store unavailable: %s", exc)
    return JSONResponse(
        status_code=STATUS_SERVICE_UNAVAILABLE,
        content={"error": "Failed to fetch availability"},
    )


def create_app(
    config: Optional[AppConfig] = None,
    service: Optional[AvailabilityService] = None,
    *,
    mock: bool = False,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: App configuration, defaults to load_config() (config.yaml plus
            environment overrides)
        service: Pre-built service (tests inject one with a stub store)
        mock: Serve bookings from the bundled mock data
    """
    app = FastAPI(title="kitchenslots", version=__version__)
    if service is None:
        service = build_service(config or load_config(), mock=mock)
    app.state.availability_service = service
    app.add_exception_handler(InvalidInput, _invalid_input_handler)
    app.add_exception_handler(UpstreamUnavailable, _upstream_handler)
    app.include_router(router)
    return app
