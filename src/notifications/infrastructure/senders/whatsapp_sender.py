from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from src.shared.config import Settings, get_settings
from src.shared.exceptions import ExternalServiceError
from src.shared.logging import get_logger

logger = get_logger(__name__)


def whatsapp_address(phone: str) -> str:
    phone = phone.strip()
    return phone if phone.startswith("whatsapp:") else f"whatsapp:{phone}"


class WhatsAppSender:
    """
    Minimal client for the Twilio Messages API.
    - POST {base}/Accounts/{sid}/Messages.json, form encoded, basic auth.
    - Auth token never logged.
    """

    service = "whatsapp"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._base = settings.twilio_api_base_url.rstrip("/")
        self._sid = settings.twilio_account_sid
        self._token = settings.twilio_auth_token
        self._from = settings.twilio_whatsapp_from
        self._timeout = float(settings.notification_timeout_seconds)
        self._transport = transport
        self.configured = settings.whatsapp_configured

    async def send(self, to: str, body: str) -> Optional[Dict[str, Any]]:
        """
        Returns the Twilio message resource, or None when WhatsApp is not configured.

        Raises:
            ExternalServiceError: Transport failure or non-2xx answer
        """
        if not self.configured:
            logger.warning("WhatsApp not configured, skipping")
            return None
        url = f"{self._base}/Accounts/{self._sid}/Messages.json"
        data = {"From": whatsapp_address(self._from), "To": whatsapp_address(to), "Body": body}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(url, data=data, auth=(self._sid, self._token))
                r.raise_for_status()
                payload = r.json()
        except httpx.HTTPError as exc:
            raise ExternalServiceError(self.service, f"WhatsApp delivery failed: {exc}") from exc
        logger.info("WhatsApp message sent", to=to, sid=payload.get("sid"))
        return payload


_sender: Optional[WhatsAppSender] = None


def get_whatsapp_sender() -> WhatsAppSender:
    global _sender
    if _sender is None:
        _sender = WhatsAppSender(get_settings())
    return _sender
