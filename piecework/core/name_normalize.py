from __future__ import annotations

import unicodedata


def normalize(name: str) -> str:
    normalized = unicodedata.normalize("NFKC", name).strip().lower()
    return " ".join(normalized.split())


def sort_key(name: str) -> str:
    """Accent-insensitive key so that "Émile" sorts among the E's."""

    decomposed = unicodedata.normalize("NFKD", normalize(name))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))
