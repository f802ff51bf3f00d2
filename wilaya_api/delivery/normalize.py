from __future__ import annotations

import re
import unicodedata

_WS_RE = re.compile(r"\s+")


def normalize_name(text: str) -> str:
    """
    Canonical lookup key for wilaya names, delivery option keys, etc.

    - diacritics folded ("Béjaïa" -> "bejaia"), the reference data mixes both spellings
    - casefold
    - trim + inner whitespace collapsed

    Lookups are plain equality on this key; no fuzzy or partial matching.
    """
    if not isinstance(text, str):
        raise TypeError(f"name must be str, got {type(text).__name__}")

    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WS_RE.sub(" ", stripped.casefold()).strip()
