# pixelbridge_project/services/event_service.py
import math
import time
from typing import Any, Dict, Optional

from ..core.exceptions import EventValidationError
from ..models.event_models import (
    CUSTOM_DATA_PASSTHROUGH_FIELDS,
    ACTION_SOURCE_WEBSITE,
    CustomData,
    EventName,
    InboundEvent,
    OutboundEvent,
)
from .pii_service import normalize_user_data

UNKNOWN_SOURCE_URL = "unknown"


def supported_event_names() -> str:
    return ", ".join(e.value for e in EventName)


def validate_event_name(event_name: Optional[str]) -> EventName:
    """Resolves the inbound name to a whitelisted EventName or raises EventValidationError."""
    if not event_name:
        raise EventValidationError("MISSING_EVENT_NAME", "eventName is required")
    try:
        return EventName(event_name)
    except ValueError:
        raise EventValidationError(
            "UNSUPPORTED_EVENT",
            f"Unsupported event. Valid events: {supported_event_names()}",
        )


def _coerce_value(value: Any) -> Optional[float]:
    # bools are ints in Python but are not monetary values
    if value is None or isinstance(value, bool):
        return None
    try:
        coerced = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(coerced):
        return None
    return coerced


def build_custom_data(custom_data: CustomData, default_currency: str = "BRL") -> Optional[Dict[str, Any]]:
    """Maps inbound customData onto the wire `custom_data`. Returns None when nothing was sent."""
    if not custom_data.model_fields_set and not custom_data.model_extra:
        return None

    result: Dict[str, Any] = {}

    value = _coerce_value(custom_data.value)
    if value is not None:
        result["value"] = value

    if custom_data.currency:
        result["currency"] = custom_data.currency.upper()
    else:
        result["currency"] = default_currency

    for field in CUSTOM_DATA_PASSTHROUGH_FIELDS:
        if field in custom_data.model_fields_set and getattr(custom_data, field) is not None:
            result[field] = getattr(custom_data, field)

    return result


def assemble_event(
    event_in: InboundEvent,
    origin: Optional[str] = None,
    request_user_agent: Optional[str] = None,
    request_client_ip: Optional[str] = None,
    default_currency: str = "BRL",
    now: Optional[float] = None,
) -> OutboundEvent:
    """
    Validates the inbound event and builds the record sent to the Conversions API.

    Explicit fields on the payload (eventTime, sourceUrl, userAgent, clientIp) win
    over values taken from the HTTP request itself.
    """
    event_name = validate_event_name(event_in.eventName)

    if event_in.eventTime is not None:
        event_time = event_in.eventTime
    else:
        event_time = int(now if now is not None else time.time())

    user_data = normalize_user_data(
        event_in.userData,
        user_agent=event_in.userAgent or request_user_agent,
        client_ip=event_in.clientIp or request_client_ip,
    )

    return OutboundEvent(
        event_name=event_name,
        event_time=event_time,
        action_source=ACTION_SOURCE_WEBSITE,
        event_source_url=event_in.sourceUrl or origin or UNKNOWN_SOURCE_URL,
        user_data=user_data,
        custom_data=build_custom_data(event_in.customData, default_currency),
    )
