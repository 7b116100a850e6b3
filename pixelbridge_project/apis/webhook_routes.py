# pixelbridge_project/apis/webhook_routes.py
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from config.settings import Settings
from ..core.dependencies import get_app_settings, get_conversions_client
from ..core.error_handlers import internal_error_response, utc_timestamp
from ..core.exceptions import ConversionsApiError, EventValidationError
from ..core.middleware import client_ip
from ..core.request_parsing import read_inbound_event
from ..models.event_models import (
    EVENT_DESCRIPTIONS,
    EventAccepted,
    EventCatalog,
    EventDescription,
    InboundEvent,
)
from ..services import event_service
from ..services.conversions_api_service import ConversionsApiClient

logger = logging.getLogger(__name__)

VERIFY_MODE_SUBSCRIBE = "subscribe"

router = APIRouter(
    prefix="/webhook/facebook-pixel",
    tags=["Facebook Pixel Webhook"]
)


@router.post("", response_model=EventAccepted)
async def receive_event(
    request: Request,
    event_in: InboundEvent = Depends(read_inbound_event),
    settings: Settings = Depends(get_app_settings),
    client: ConversionsApiClient = Depends(get_conversions_client),
):
    """
    Validates one event (JSON or form-encoded), hashes its user identifiers and forwards it to the Conversions API.

    Unsupported or missing event names are rejected with 400 before anything is sent.
    Upstream failures are logged and reported as a generic 500.
    """
    ip = client_ip(request)
    request_user_agent = request.headers.get("user-agent")
    try:
        outbound = event_service.assemble_event(
            event_in,
            origin=request.headers.get("origin"),
            request_user_agent=request_user_agent,
            request_client_ip=ip,
            default_currency=settings.DEFAULT_CURRENCY,
        )
        result = await client.send_event(outbound)
    except EventValidationError:
        # rendered as a 400 by the registered exception handler
        raise
    except ConversionsApiError as e:
        logger.error(f"Webhook error: upstream rejected event '{event_in.eventName}': {e.body}")
        return internal_error_response()
    except Exception as e:
        logger.error(f"Webhook error while forwarding '{event_in.eventName}': {e}", exc_info=True)
        return internal_error_response()

    logger.info(
        f"Event sent successfully: event={outbound.event_name.value} timestamp={utc_timestamp()} "
        f"ip={ip} user_agent={request_user_agent}"
    )

    return EventAccepted(
        eventId=(result.get("events_received") if isinstance(result, dict) else None) or 1,
        timestamp=utc_timestamp(),
    )


@router.get("", response_class=PlainTextResponse)
async def verify_webhook(
    mode: Optional[str] = Query(None, alias="hub.mode"),
    token: Optional[str] = Query(None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(None, alias="hub.challenge"),
    settings: Settings = Depends(get_app_settings),
):
    """Subscription handshake: echoes `hub.challenge` when the mode and verify token match."""
    if not mode or not token:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Missing verification parameters", "code": "MISSING_VERIFICATION_PARAMS"},
        )

    expected = settings.WEBHOOK_VERIFY_TOKEN
    if mode == VERIFY_MODE_SUBSCRIBE and expected and secrets.compare_digest(token.encode(), expected.encode()):
        logger.info("Webhook verified successfully")
        return PlainTextResponse(challenge or "", status_code=status.HTTP_200_OK)

    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"success": False, "error": "Invalid verification token", "code": "INVALID_VERIFY_TOKEN"},
    )


@router.get("/events", response_model=EventCatalog)
async def list_supported_events():
    """Lists the event names this webhook accepts."""
    return EventCatalog(
        events=[EventDescription(name=name, description=text) for name, text in EVENT_DESCRIPTIONS.items()]
    )
