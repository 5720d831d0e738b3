"""Text utilities for log previews."""


def safe_truncate(text: str, max_chars: int, suffix: str = "...") -> str:
    """Truncate text for display, preferring a word boundary.

    Args:
        text: Text to truncate
        max_chars: Maximum characters (excluding suffix)
        suffix: Suffix to append if truncated (default "...")

    Returns:
        Truncated text with suffix if needed
    """
    if not text or len(text) <= max_chars:
        return text

    truncated = text[:max_chars]

    # Look back up to 20 characters for a clean break point
    break_chars = {" ", "\n", "\t", ",", ".", "!", "?", ";", ":", "-"}
    for i in range(min(20, max_chars - 1), 0, -1):
        if truncated[-i] in break_chars:
            truncated = truncated[: -(i - 1) or None].rstrip()
            break

    return truncated + suffix
