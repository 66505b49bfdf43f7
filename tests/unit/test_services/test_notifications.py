"""Unit tests for notification templates and delivery."""
import asyncio
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from meetpoll.core.utils import format_slot_range
from meetpoll.integrations.base import NotificationMessage
from meetpoll.services.email_templates import confirmation_email, invite_email
from meetpoll.services.notifications import build_voting_url, deliver, send_invitations

TZ = ZoneInfo("America/New_York")
START = datetime(2024, 1, 8, 15, 0, tzinfo=timezone.utc)
END = datetime(2024, 1, 8, 15, 30, tzinfo=timezone.utc)


@pytest.mark.unit
class TestTemplates:
    """Test notification content."""

    def test_slot_range_in_local_time(self):
        assert format_slot_range(START, END, TZ) == "Monday, January 8, 2024, 10:00 AM - 10:30 AM EST"

    def test_voting_url(self):
        assert build_voting_url("https://meet.example.com/", 7, "abc") == "https://meet.example.com/poll/7?token=abc"

    def test_invite_lists_slots_and_link(self):
        message = invite_email(
            "Alice", "Kickoff", None, "https://meet.example.com/poll/7?token=abc", [(START, END)], TZ
        )
        assert message.subject == "When are you available? - Kickoff"
        assert message.to_name == "Alice"
        assert "10:00 AM - 10:30 AM EST" in message.html
        assert 'href="https://meet.example.com/poll/7?token=abc"' in message.html

    def test_user_text_is_escaped(self):
        message = invite_email("Al & Co", "Q&A", "5 > 3", "https://x", [], TZ)
        assert "Al &amp; Co" in message.html
        assert "5 &gt; 3" in message.html

    def test_confirmation_with_and_without_video(self):
        with_video = confirmation_email("Bob", "Kickoff", START, END, TZ, video_join_url="https://zoom.us/j/1")
        assert "Join Video Meeting" in with_video.html
        assert with_video.subject == "Confirmed: Kickoff"

        plain = confirmation_email("Bob", "Kickoff", START, END, TZ, calendar_invite_sent=True)
        assert "Join Video Meeting" not in plain.html
        assert "calendar invite" in plain.html


@pytest.mark.unit
class TestDeliver:
    """Test delivery outcomes and the email log."""

    @pytest.mark.asyncio
    async def test_rejected_message_is_logged_as_failed(self, make_poll, repository, fakes):
        created = await make_poll()
        alice = created.participants[0]
        notifier = fakes.notifier(reject_for={"alice@example.com"})

        result = await deliver(
            repository, notifier, created.poll.id, alice.id, alice.email, "invite",
            NotificationMessage(subject="Hi", html=""), 1.0,
        )
        await repository.commit()

        assert (result.sent, result.reason) == (False, "rejected by provider")
        log = await repository.get_email_log(created.poll.id)
        assert [(e.to_email, e.status, e.error) for e in log] == [
            ("alice@example.com", "failed", "rejected by provider")
        ]

    @pytest.mark.asyncio
    async def test_timeout(self, make_poll, repository):
        class SlowNotifier:
            async def send(self, to_email, message):
                await asyncio.sleep(5)

        created = await make_poll()
        alice = created.participants[0]

        result = await deliver(
            repository, SlowNotifier(), created.poll.id, alice.id, alice.email, "invite",
            NotificationMessage(subject="Hi", html=""), 0.05,
        )

        assert (result.sent, result.reason) == (False, "timed out")

    @pytest.mark.asyncio
    async def test_invitations_without_notifier(self, make_poll, repository):
        created = await make_poll()

        results = await send_invitations(
            repository, None, created.poll, created.slots, created.participants,
            "https://meet.example.com", TZ, 1.0,
        )

        assert [(r.email, r.sent, r.reason) for r in results] == [
            ("alice@example.com", False, "notifications disabled"),
            ("bob@example.com", False, "notifications disabled"),
        ]
        assert await repository.get_email_log(created.poll.id) == []

    @pytest.mark.asyncio
    async def test_one_failed_invite_does_not_stop_the_rest(self, make_poll, repository, fakes):
        created = await make_poll()
        notifier = fakes.notifier(fail_for={"alice@example.com"})

        results = await send_invitations(
            repository, notifier, created.poll, created.slots, created.participants,
            "https://meet.example.com", TZ, 1.0,
        )

        assert [r.sent for r in results] == [False, True]
        bob_message = notifier.sent[0][1]
        bob = created.participants[1]
        assert build_voting_url("https://meet.example.com", created.poll.id, bob.token) in bob_message.html
