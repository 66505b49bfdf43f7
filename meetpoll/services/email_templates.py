"""
Email Templates
HTML bodies for invitation and confirmation notices
"""
from datetime import datetime
from html import escape
from typing import Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from meetpoll.core.utils import format_slot_range
from meetpoll.integrations.base import NotificationMessage

THEME = {
    "primary": "#476B8E",
    "success": "#52B788",
    "video": "#2D8CFF",
    "background": "#F0F4F8",
    "text_primary": "#1E293B",
    "text_secondary": "#555555",
    "text_muted": "#94A3B8",
}


def _button(url: str, label: str, color: str) -> str:
    return (
        f'<div style="text-align:center;margin:28px 0;">'
        f'<a href="{escape(url, quote=True)}" style="display:inline-block;background:{color};color:#ffffff;'
        f'text-decoration:none;padding:14px 36px;border-radius:12px;font-size:16px;font-weight:600;">'
        f"{escape(label)}</a></div>"
    )


def get_base_template(heading: str, content: str) -> str:
    """Wrap content in the shared card layout."""
    return (
        f'<div style="font-family:Helvetica,Arial,sans-serif;background:{THEME["background"]};padding:40px 20px;">'
        f'<div style="max-width:520px;margin:0 auto;background:#ffffff;border-radius:16px;overflow:hidden;">'
        f'<div style="background:{THEME["primary"]};padding:28px 32px;">'
        f'<h1 style="margin:0;color:#ffffff;font-size:22px;">{escape(heading)}</h1></div>'
        f'<div style="padding:32px;">{content}</div></div></div>'
    )


def invite_email(
    participant_name: str,
    poll_title: str,
    poll_description: Optional[str],
    voting_url: str,
    slots: Sequence[Tuple[datetime, datetime]],
    tz: ZoneInfo,
) -> NotificationMessage:
    """Invitation asking a participant to mark their availability."""
    slot_items = "".join(
        f'<li style="margin-bottom:8px;color:{THEME["text_primary"]};">{escape(format_slot_range(start, end, tz))}</li>'
        for start, end in slots
    )
    description = f" {escape(poll_description)}" if poll_description else ""
    content = (
        f'<p style="color:{THEME["text_primary"]};font-size:16px;">Hi {escape(participant_name)},</p>'
        f'<p style="color:{THEME["text_secondary"]};font-size:15px;line-height:1.6;">'
        f"You have been invited to find a time for <strong>{escape(poll_title)}</strong>.{description}</p>"
        f'<p style="color:{THEME["text_secondary"]};font-size:14px;font-weight:600;">Available time options:</p>'
        f'<ul style="padding-left:20px;">{slot_items}</ul>'
        + _button(voting_url, "Vote on Availability", THEME["primary"])
        + f'<p style="color:{THEME["text_muted"]};font-size:12px;text-align:center;">'
        "Click the button above to mark which times work for you.</p>"
    )
    return NotificationMessage(
        subject=f"When are you available? - {poll_title}",
        html=get_base_template(poll_title, content),
        to_name=participant_name,
    )


def confirmation_email(
    participant_name: str,
    poll_title: str,
    start: datetime,
    end: datetime,
    tz: ZoneInfo,
    video_join_url: Optional[str] = None,
    calendar_invite_sent: bool = False,
) -> NotificationMessage:
    """Notice that everyone answered and the meeting time is fixed."""
    content = (
        f'<h2 style="text-align:center;color:{THEME["text_primary"]};">Meeting Confirmed</h2>'
        f'<p style="color:{THEME["text_primary"]};">Hi {escape(participant_name)},</p>'
        f'<p style="color:{THEME["text_secondary"]};">Everyone has responded and your meeting is locked in:</p>'
        f'<p style="font-size:18px;font-weight:600;color:{THEME["primary"]};text-align:center;">'
        f"{escape(format_slot_range(start, end, tz))}</p>"
    )
    if video_join_url:
        content += _button(video_join_url, "Join Video Meeting", THEME["video"])
    if calendar_invite_sent:
        content += (
            f'<p style="color:{THEME["text_muted"]};font-size:13px;text-align:center;">'
            "A calendar invite has also been sent.</p>"
        )
    return NotificationMessage(
        subject=f"Confirmed: {poll_title}",
        html=get_base_template(poll_title, content),
        to_name=participant_name,
    )
