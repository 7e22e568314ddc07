import html
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import bleach


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """Clean a user-supplied string before it is stored.

    - Removes NUL bytes
    - Decodes HTML entities, so encoded markup is stripped as well
    - Strips HTML tags using bleach.clean(..., strip=True)
    - Stores plain text: ``&``, ``<`` and ``>`` are not left entity-encoded
    - Trims whitespace

    ``None`` passes through so optional fields stay unset.
    """
    if value is None:
        return None
    val = value.replace("\x00", "")
    previous = None
    while previous != val:
        previous, val = val, html.unescape(val)
    val = bleach.clean(val, tags=set(), strip=True)
    # bleach escapes the characters it leaves behind; keep the text itself
    return html.unescape(val).strip()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def escape_like(term: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so ``term`` matches as a literal substring."""
    return (
        term.replace(escape, escape * 2)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; gateway amounts round .5 upwards
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
