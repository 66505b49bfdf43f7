"""Helpers for driving the API end to end."""
from urllib.parse import parse_qs, urlparse

import pytest

KICKOFF = {
    "title": "Project kickoff",
    "description": "Agenda and owners",
    "duration_minutes": 30,
    "modality": "video",
    "slots": [
        {"start_time": "2024-01-08T09:00:00Z", "end_time": "2024-01-08T09:30:00Z"},
        {"start_time": "2024-01-08T10:00:00Z", "end_time": "2024-01-08T10:30:00Z"},
    ],
    "participants": [
        {"name": "Alice", "email": "alice@example.com"},
        {"name": "Bob", "email": "bob@example.com"},
    ],
}


def token_from_url(url):
    return parse_qs(urlparse(url).query)["token"][0]


@pytest.fixture
def create_poll(admin_client):
    """Create a poll through the API.

    Returns the creation body plus ``tokens`` (by email) and ``slot_ids``
    (in start order).
    """
    async def _create(**overrides):
        payload = {**KICKOFF, **overrides}
        response = await admin_client.post("/api/v1/polls", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()

        detail = await admin_client.get(f"/api/v1/polls/{body['poll_id']}")
        body["tokens"] = {link["email"]: token_from_url(link["url"]) for link in body["voting_links"]}
        body["slot_ids"] = [slot["id"] for slot in detail.json()["time_slots"]]
        return body

    return _create


@pytest.fixture
def respond(client):
    """Submit one participant's answers."""
    async def _respond(poll_id, token, answers):
        return await client.post(
            f"/api/v1/polls/{poll_id}/responses",
            json={"token": token, "responses": {str(k): v for k, v in answers.items()}},
        )

    return _respond
