"""
Clan and player tag normalization.
"""

from urllib.parse import quote, unquote

ENCODED_HASH = "%23"


def normalize_tag(tag: str) -> str:
    """Return the URL-safe form of a clan or player tag.

    ``#2l0qrvr2v``, ``2L0QRVR2V`` and ``%232L0QRVR2V`` all normalize to
    ``%232L0QRVR2V``. Everything after the prefix is percent-encoded, so a
    tag can never add path segments or query parameters upstream.
    Normalizing an already normalized tag is a no-op.
    """
    value = tag.strip()
    if value.startswith(ENCODED_HASH):
        value = value[len(ENCODED_HASH):]
    # Existing escapes are decoded first so they are not encoded twice.
    value = unquote(value).upper().lstrip("#").replace("#", "")
    return f"{ENCODED_HASH}{quote(value, safe='')}"
