# pixelbridge_project/services/conversions_api_service.py
import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import Settings
from ..core.exceptions import ConversionsApiError
from ..models.event_models import OutboundEvent

logger = logging.getLogger(__name__)


class ConversionsApiClient:
    """
    Sends events to the Facebook Conversions API.

    Exactly one POST is made per event: no retries, and httpx's default timeout.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.endpoint = settings.events_endpoint
        self.access_token = settings.FACEBOOK_ACCESS_TOKEN
        self.test_event_code = settings.TEST_EVENT_CODE
        self._transport = transport

    def build_payload(self, event: OutboundEvent) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"data": [event.to_wire()]}
        if self.test_event_code:
            payload["test_event_code"] = self.test_event_code
        return payload

    async def send_event(self, event: OutboundEvent) -> Dict[str, Any]:
        """Posts a single event and returns the parsed response body (e.g. {"events_received": 1, ...})."""
        payload = self.build_payload(event)
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                self.endpoint,
                params={"access_token": self.access_token},
                json=payload,
            )

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            logger.error(f"Conversions API rejected {event.event_name.value} ({response.status_code}): {body}")
            raise ConversionsApiError(response.status_code, body)

        return response.json()
