"""
Zoom Meetings Service
Creates scheduled meetings through Zoom's server-to-server OAuth app
"""
import base64
from datetime import datetime
from typing import Optional, Sequence

import httpx

from meetpoll.core.exceptions import CollaboratorFailure
from meetpoll.core.logging_config import get_logger
from meetpoll.core.utils import to_utc
from meetpoll.integrations.base import MeetingBooking
from meetpoll.integrations.http import client_scope

logger = get_logger(__name__)

ZOOM_TOKEN_URL = "https://zoom.us/oauth/token"
ZOOM_API = "https://api.zoom.us/v2"
SCHEDULED_MEETING = 2


class ZoomBookingProvider:
    """BookingProvider backed by the Zoom REST API."""

    def __init__(
        self,
        account_id: str,
        client_id: str,
        client_secret: str,
        timezone_name: str = "America/New_York",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.account_id = account_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.timezone_name = timezone_name
        self._client = http_client

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        credentials = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        response = await client.post(
            ZOOM_TOKEN_URL,
            params={"grant_type": "account_credentials", "account_id": self.account_id},
            headers={"Authorization": f"Basic {credentials}"},
        )
        token = response.json().get("access_token") if response.status_code == 200 else None
        if not token:
            raise CollaboratorFailure("zoom", f"token request failed ({response.status_code})")
        return token

    async def create_meeting(
        self,
        topic: str,
        start: datetime,
        duration_minutes: int,
        invitee_emails: Sequence[str],
    ) -> MeetingBooking:
        async with client_scope(self._client) as client:
            token = await self._access_token(client)
            response = await client.post(
                f"{ZOOM_API}/users/me/meetings",
                headers={"Authorization": f"Bearer {token}"},
                json={
                    "topic": topic,
                    "type": SCHEDULED_MEETING,
                    "start_time": to_utc(start).strftime("%Y-%m-%dT%H:%M:%SZ"),
                    "duration": duration_minutes,
                    "timezone": self.timezone_name,
                    "settings": {
                        "host_video": True,
                        "participant_video": True,
                        "join_before_host": True,
                        "waiting_room": False,
                        "meeting_invitees": [{"email": email} for email in invitee_emails],
                    },
                },
            )

        if response.status_code not in (200, 201):
            raise CollaboratorFailure("zoom", f"meeting creation failed ({response.status_code}): {response.text}")

        data = response.json()
        if not data.get("join_url") or data.get("id") is None:
            raise CollaboratorFailure("zoom", "response missing join_url or id")

        logger.info("zoom_meeting_created", meeting_id=str(data["id"]))
        return MeetingBooking(join_url=data["join_url"], meeting_id=str(data["id"]))
