"""Unit tests for the Zoom, Google Calendar and SendGrid clients."""
import json
from datetime import datetime, timezone

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from meetpoll.core.exceptions import CollaboratorFailure
from meetpoll.integrations import GoogleCalendarProvider, NotificationMessage, SendGridNotifier, ZoomBookingProvider

START = datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc)
END = datetime(2024, 1, 8, 15, 30, tzinfo=timezone.utc)


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture(scope="module")
def service_account_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return {
        "json": json.dumps({"client_email": "scheduler@project.iam.gserviceaccount.com", "private_key": pem}),
        "public_key": public_pem,
    }


@pytest.mark.unit
class TestZoomBookingProvider:
    """Test Zoom meeting creation."""

    @pytest.mark.asyncio
    async def test_create_meeting(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.host == "zoom.us":
                return httpx.Response(200, json={"access_token": "zoom-token"})
            return httpx.Response(201, json={"id": 987654321, "join_url": "https://zoom.us/j/987654321"})

        async with _client(handler) as client:
            provider = ZoomBookingProvider("acct", "cid", "secret", http_client=client)
            booking = await provider.create_meeting("Kickoff", START, 30, ["a@example.com", "b@example.com"])

        assert booking.join_url == "https://zoom.us/j/987654321"
        assert booking.meeting_id == "987654321"

        token_request, meeting_request = requests
        assert token_request.url.params["grant_type"] == "account_credentials"
        assert token_request.url.params["account_id"] == "acct"
        assert token_request.headers["Authorization"].startswith("Basic ")

        assert meeting_request.url.path == "/v2/users/me/meetings"
        assert meeting_request.headers["Authorization"] == "Bearer zoom-token"
        body = json.loads(meeting_request.content)
        assert body["type"] == 2
        assert body["start_time"] == "2024-01-08T15:00:00Z"
        assert body["duration"] == 30
        assert body["settings"]["meeting_invitees"] == [{"email": "a@example.com"}, {"email": "b@example.com"}]

    @pytest.mark.asyncio
    async def test_token_failure(self):
        def handler(request):
            return httpx.Response(401, json={"reason": "Invalid client_id or client_secret"})

        async with _client(handler) as client:
            provider = ZoomBookingProvider("acct", "cid", "bad", http_client=client)
            with pytest.raises(CollaboratorFailure) as exc_info:
                await provider.create_meeting("Kickoff", START, 30, [])
        assert exc_info.value.provider == "zoom"

    @pytest.mark.asyncio
    async def test_meeting_creation_error(self):
        def handler(request):
            if request.url.host == "zoom.us":
                return httpx.Response(200, json={"access_token": "zoom-token"})
            return httpx.Response(429, text="Too many requests")

        async with _client(handler) as client:
            provider = ZoomBookingProvider("acct", "cid", "secret", http_client=client)
            with pytest.raises(CollaboratorFailure, match="429"):
                await provider.create_meeting("Kickoff", START, 30, [])


@pytest.mark.unit
class TestGoogleCalendarProvider:
    """Test calendar event creation and free/busy reads."""

    @pytest.mark.asyncio
    async def test_create_event_with_video_link(self, service_account_key):
        requests = []

        def handler(request):
            requests.append(request)
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "g-token", "expires_in": 3600})
            return httpx.Response(200, json={"id": "evt_42"})

        async with _client(handler) as client:
            provider = GoogleCalendarProvider(service_account_key["json"], "team@example.com", http_client=client)
            event_id = await provider.create_event(
                "Kickoff", "Agenda", START, END, ["a@example.com"], location_link="https://zoom.us/j/1"
            )

        assert event_id == "evt_42"
        token_request, event_request = requests

        form = dict(httpx.QueryParams(token_request.content.decode()))
        assert form["grant_type"] == "urn:ietf:params:oauth:grant-type:jwt-bearer"
        claims = jwt.decode(
            form["assertion"],
            service_account_key["public_key"],
            algorithms=["RS256"],
            audience="https://oauth2.googleapis.com/token",
        )
        assert claims["iss"] == "scheduler@project.iam.gserviceaccount.com"
        # Plain service-account grant, no domain-wide delegation
        assert set(claims) == {"iss", "scope", "aud", "iat", "exp"}

        assert event_request.url.path == "/calendar/v3/calendars/team@example.com/events"
        assert event_request.url.params["sendUpdates"] == "all"
        body = json.loads(event_request.content)
        assert body["location"] == "https://zoom.us/j/1"
        assert body["description"].endswith("Join: https://zoom.us/j/1")
        assert body["attendees"] == [{"email": "a@example.com"}]

    @pytest.mark.asyncio
    async def test_token_is_reused(self, service_account_key):
        hosts = []

        def handler(request):
            hosts.append(request.url.host)
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "g-token", "expires_in": 3600})
            return httpx.Response(200, json={"id": "evt"})

        async with _client(handler) as client:
            provider = GoogleCalendarProvider(service_account_key["json"], "cal", http_client=client)
            await provider.create_event("A", "", START, END, [])
            await provider.create_event("B", "", START, END, [])

        assert hosts.count("oauth2.googleapis.com") == 1

    @pytest.mark.asyncio
    async def test_busy_times(self, service_account_key):
        def handler(request):
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "g-token"})
            return httpx.Response(
                200,
                json={"calendars": {"cal": {"busy": [{"start": "2024-01-08T14:00:00Z", "end": "2024-01-08T15:00:00Z"}]}}},
            )

        async with _client(handler) as client:
            provider = GoogleCalendarProvider(service_account_key["json"], "cal", http_client=client)
            busy = await provider.get_busy_times(START, END)

        assert len(busy) == 1
        assert busy[0].start == datetime(2024, 1, 8, 14, 0, tzinfo=timezone.utc)
        assert busy[0].end == datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_event_failure(self, service_account_key):
        def handler(request):
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "g-token"})
            return httpx.Response(403, text="forbidden")

        async with _client(handler) as client:
            provider = GoogleCalendarProvider(service_account_key["json"], "cal", http_client=client)
            with pytest.raises(CollaboratorFailure, match="403"):
                await provider.create_event("A", "", START, END, [])

    def test_invalid_key_rejected(self):
        with pytest.raises(ValueError):
            GoogleCalendarProvider("not json", "cal")


@pytest.mark.unit
class TestSendGridNotifier:
    """Test email delivery."""

    @pytest.mark.asyncio
    async def test_send(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(202)

        async with _client(handler) as client:
            notifier = SendGridNotifier("sg-key", "scheduling@example.com", "Meetpoll", http_client=client)
            sent = await notifier.send(
                "alice@example.com", NotificationMessage(subject="Hi", html="<p>Hi</p>", to_name="Alice")
            )

        assert sent is True
        body = json.loads(requests[0].content)
        assert requests[0].headers["Authorization"] == "Bearer sg-key"
        assert body["personalizations"][0]["to"] == [{"email": "alice@example.com", "name": "Alice"}]
        assert body["from"] == {"email": "scheduling@example.com", "name": "Meetpoll"}
        assert body["content"][0]["type"] == "text/html"

    @pytest.mark.asyncio
    async def test_rejected(self):
        async with _client(lambda request: httpx.Response(400, json={"errors": []})) as client:
            notifier = SendGridNotifier("sg-key", "scheduling@example.com", "Meetpoll", http_client=client)
            assert await notifier.send("bad@", NotificationMessage(subject="Hi", html="")) is False
