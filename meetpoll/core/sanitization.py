"""Input sanitization utilities."""
import re
from typing import Optional


# Maximum length constraints for security
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000
MAX_NAME_LENGTH = 120
MAX_EMAIL_LENGTH = 254
MAX_TOKEN_LENGTH = 100        # Tokens should be ~43 chars for URL-safe base64

EMAIL_PATTERN = re.compile(r"^[^@\s<>]+@[^@\s<>]+\.[^@\s<>]+$")


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    Strips HTML tags and normalizes whitespace. Output is escaped again when
    it is interpolated into notification HTML.

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Reject inputs that still contain HTML-like patterns after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_title(title: str) -> str:
    """Sanitize a poll title. Emptiness is checked by poll validation."""
    return sanitize_text(title, max_length=MAX_TITLE_LENGTH)


def sanitize_description(description: Optional[str]) -> Optional[str]:
    """Sanitize an optional description, keeping line breaks."""
    if description is None:
        return None
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(f"Input exceeds maximum length of {MAX_DESCRIPTION_LENGTH} characters")
    lines = [sanitize_text(line) for line in description.strip().splitlines()]
    cleaned = "\n".join(lines).strip()
    return cleaned or None


def sanitize_participant_name(name: str) -> str:
    """Sanitize a participant display name."""
    sanitized = sanitize_text(name, max_length=MAX_NAME_LENGTH)
    if not sanitized:
        raise ValueError("Participant name cannot be empty")
    return sanitized


def normalize_email(email: str) -> str:
    """Trim, lowercase and validate an email address."""
    if not isinstance(email, str):
        raise ValueError("Email must be a string")

    normalized = email.strip().lower()

    if len(normalized) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email exceeds maximum length of {MAX_EMAIL_LENGTH} characters")

    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Email address is invalid")

    return normalized


def validate_token_format(token: str) -> str:
    """
    Validate token format before processing.

    Tokens should be URL-safe base64 strings.
    This prevents malformed tokens from causing unnecessary database queries.

    Raises:
        ValueError: If token format is invalid
    """
    if not isinstance(token, str):
        raise ValueError("Token must be a string")

    token = token.strip()

    if not token:
        raise ValueError("Token cannot be empty")

    if len(token) > MAX_TOKEN_LENGTH:
        raise ValueError(f"Token exceeds maximum length of {MAX_TOKEN_LENGTH} characters")

    # URL-safe base64 uses: A-Z, a-z, 0-9, -, _
    if not re.match(r'^[A-Za-z0-9_-]+$', token):
        raise ValueError("Token format is invalid (must be URL-safe base64)")

    return token
