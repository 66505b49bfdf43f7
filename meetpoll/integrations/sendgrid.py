"""
SendGrid Email Service
Delivers invitation and confirmation notices
"""
from typing import Optional

import httpx

from meetpoll.core.logging_config import get_logger
from meetpoll.integrations.base import NotificationMessage
from meetpoll.integrations.http import client_scope

logger = get_logger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class SendGridNotifier:
    """Notifier backed by the SendGrid v3 mail API."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self._client = http_client

    async def send(self, to_email: str, message: NotificationMessage) -> bool:
        recipient = {"email": to_email}
        if message.to_name:
            recipient["name"] = message.to_name

        async with client_scope(self._client) as client:
            response = await client.post(
                SENDGRID_SEND_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "personalizations": [{"to": [recipient]}],
                    "from": {"email": self.from_email, "name": self.from_name},
                    "subject": message.subject,
                    "content": [{"type": "text/html", "value": message.html}],
                },
            )

        if response.status_code >= 300:
            logger.warning("sendgrid_rejected", status_code=response.status_code, body=response.text[:500])
            return False
        return True
