"""Text cleanup utilities for feed content.

Feed summaries arrive as HTML fragments with entities; job records store
plain text that is safe to render as-is.
"""

import html
import re
from typing import Optional


def clean_html(html_text: Optional[str]) -> str:
    """Clean HTML tags and entities from text.

    Performs the following transformations:
    1. Convert <br> and </p> to newlines
    2. Strip remaining HTML tags
    3. Decode HTML entities (&amp; → &, etc.)
    4. Collapse horizontal whitespace (preserve newlines)
    5. Collapse multiple newlines to double newline (paragraph separation)
    6. Strip leading/trailing whitespace

    Tags are stripped before entities are decoded so that escaped markup such
    as ``&lt;b&gt;`` survives as literal text.

    Args:
        html_text: Text containing HTML formatting

    Returns:
        Plain text with whitespace normalized and HTML removed
    """
    if not html_text:
        return ""

    text = html_text

    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</p>", "\n\n", text, flags=re.IGNORECASE)

    text = re.sub(r"<[^>]+>", " ", text)

    text = html.unescape(text)
    # Non-breaking spaces decode to \xa0
    text = text.replace("\xa0", " ")

    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)

    return text.strip()


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim text and collapse all whitespace runs to a single space."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def truncate_text(text: str, max_length: int = 300, suffix: str = "...") -> str:
    """Truncate text to maximum length, adding suffix if truncated.

    Tries to break at word boundaries for cleaner truncation.

    Args:
        text: Text to truncate
        max_length: Maximum length (including suffix)
        suffix: Suffix to add if truncated (default: ...)

    Returns:
        Truncated text with suffix if needed

    Example:
        >>> truncate_text("This is a very long text that needs truncating", max_length=30)
        'This is a very long text...'
    """
    if not text or len(text) <= max_length:
        return text

    truncate_at = max_length - len(suffix)

    if truncate_at <= 0:
        return suffix[:max_length]

    truncated = text[:truncate_at]

    # Only break at a space if it's not too far back
    last_space = truncated.rfind(" ")
    if last_space > truncate_at * 0.8:
        truncated = truncated[:last_space]

    return truncated.rstrip() + suffix


def slugify(value: str) -> str:
    """Lowercase a name and drop everything but letters and digits.

    Example:
        >>> slugify("We Work Remotely")
        'weworkremotely'
    """
    return re.sub(r"[^a-z0-9]", "", value.lower())
