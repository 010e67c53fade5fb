"""Text helpers applied between extraction and prompting."""

from typing import Tuple

from readerlens.config.settings import DEFAULT_MAX_TEXT_LENGTH

TRUNCATION_MARKER = "\n\n[内容已截断…]"


def truncate_text(text: str, limit: int = DEFAULT_MAX_TEXT_LENGTH) -> Tuple[str, bool]:
    """
    Cap text at ``limit`` characters, appending the truncation marker when cut.

    Returns:
        (text, truncated)
    """
    if len(text) <= limit:
        return text, False
    return text[:limit] + TRUNCATION_MARKER, True
