"""Slot desirability scoring."""


def score(available_count: int, total_responses: int) -> int:
    """Return a 0-100 desirability score for a slot.

    ``round(100 * available / total)`` with halves rounded up, computed in
    integers. A slot nobody has answered for scores 0.

    Raises:
        ValueError: If either count is negative
    """
    if available_count < 0 or total_responses < 0:
        raise ValueError("Response counts cannot be negative")

    if total_responses == 0:
        return 0

    value = (200 * available_count + total_responses) // (2 * total_responses)
    return max(0, min(100, value))
