"""
Google Calendar Service
Creates events and reads free/busy data with a service account
"""
import json
import time
from datetime import datetime
from typing import List, Optional, Sequence
from urllib.parse import quote

import httpx
import jwt

from meetpoll.core.exceptions import CollaboratorFailure
from meetpoll.core.logging_config import get_logger
from meetpoll.core.utils import to_utc
from meetpoll.integrations.base import BusyInterval
from meetpoll.integrations.http import client_scope

logger = get_logger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class GoogleCalendarProvider:
    """CalendarProvider backed by the Google Calendar v3 API."""

    def __init__(
        self,
        service_account_key: str,
        calendar_id: str,
        timezone_name: str = "America/New_York",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        try:
            self.key = json.loads(service_account_key)
        except json.JSONDecodeError as exc:
            raise ValueError("GOOGLE_SERVICE_ACCOUNT_KEY is not valid JSON") from exc
        self.calendar_id = calendar_id
        self.timezone_name = timezone_name
        self._client = http_client
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _assertion(self, now: int) -> str:
        claims = {
            "iss": self.key["client_email"],
            "scope": CALENDAR_SCOPE,
            "aud": GOOGLE_TOKEN_URL,
            "iat": now,
            "exp": now + 3600,
        }
        return jwt.encode(claims, self.key["private_key"], algorithm="RS256")

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        # Reuse the token until five minutes before it expires
        if self._token and time.time() < self._token_expires_at - 300:
            return self._token

        now = int(time.time())
        response = await client.post(
            GOOGLE_TOKEN_URL,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": self._assertion(now)},
        )
        token = response.json().get("access_token") if response.status_code == 200 else None
        if not token:
            raise CollaboratorFailure("google_calendar", f"token request failed ({response.status_code})")

        self._token = token
        self._token_expires_at = now + int(response.json().get("expires_in", 3600))
        return token

    async def create_event(
        self,
        summary: str,
        description: str,
        start: datetime,
        end: datetime,
        attendee_emails: Sequence[str],
        location_link: Optional[str] = None,
    ) -> str:
        body = {
            "summary": summary,
            "description": description + (f"\n\nJoin: {location_link}" if location_link else ""),
            "start": {"dateTime": to_utc(start).isoformat(), "timeZone": self.timezone_name},
            "end": {"dateTime": to_utc(end).isoformat(), "timeZone": self.timezone_name},
            "attendees": [{"email": email} for email in attendee_emails],
            "reminders": {"useDefault": True},
        }
        if location_link:
            body["location"] = location_link

        async with client_scope(self._client) as client:
            token = await self._access_token(client)
            response = await client.post(
                f"{GOOGLE_CALENDAR_API}/calendars/{quote(self.calendar_id, safe='')}/events",
                params={"sendUpdates": "all"},
                headers={"Authorization": f"Bearer {token}"},
                json=body,
            )

        if response.status_code not in (200, 201):
            raise CollaboratorFailure(
                "google_calendar", f"event creation failed ({response.status_code}): {response.text}"
            )

        event_id = response.json().get("id")
        if not event_id:
            raise CollaboratorFailure("google_calendar", "response missing event id")

        logger.info("calendar_event_created", event_id=event_id)
        return event_id

    async def get_busy_times(self, start: datetime, end: datetime) -> List[BusyInterval]:
        async with client_scope(self._client) as client:
            token = await self._access_token(client)
            response = await client.post(
                f"{GOOGLE_CALENDAR_API}/freeBusy",
                headers={"Authorization": f"Bearer {token}"},
                json={
                    "timeMin": to_utc(start).isoformat(),
                    "timeMax": to_utc(end).isoformat(),
                    "timeZone": self.timezone_name,
                    "items": [{"id": self.calendar_id}],
                },
            )

        if response.status_code != 200:
            raise CollaboratorFailure("google_calendar", f"free/busy query failed ({response.status_code})")

        busy = response.json().get("calendars", {}).get(self.calendar_id, {}).get("busy", [])
        return [
            BusyInterval(
                start=datetime.fromisoformat(item["start"].replace("Z", "+00:00")),
                end=datetime.fromisoformat(item["end"].replace("Z", "+00:00")),
            )
            for item in busy
        ]
