"""
Carrier identity derived from document storage keys.

Every filename heuristic lives here so ingestion and display stay consistent.

Edge cases of derive_carrier_id:
    "acme-iul-guide.pdf"        -> "acme"
    "Sentinel_Life_2024.PDF"    -> "sentinel"
    "guides/acme-guide.pdf"     -> "acme"      (directories are ignored)
    "acme.pdf"                  -> "acme"      (no delimiter: whole stem)
    "2024-acme-guide.pdf"       -> "2024"      (leading digits are kept as-is)
    "Zürich-guide.pdf"          -> "zürich"    (non-ASCII kept, NFKC + casefold)
    "-guide.pdf", ".pdf", ""    -> "unknown"
"""

import re
import unicodedata
from pathlib import PurePosixPath

from carrierllm.pipeline.models import UNKNOWN_CARRIER_ID

MAX_VECTOR_ID_LENGTH = 64

_TOKEN_DELIMITERS = re.compile(r"[-_]")
_NAME_DELIMITERS = re.compile(r"[-_\s]+")


def _stem(source_key: str) -> str:
    """File name without directories or final extension."""
    name = PurePosixPath(source_key.replace("\\", "/")).name
    if "." in name:
        name = name.rsplit(".", 1)[0]
    return name


def _first_token(source_key: str) -> str:
    stem = unicodedata.normalize("NFKC", _stem(source_key)).strip()
    return _TOKEN_DELIMITERS.split(stem, maxsplit=1)[0].strip()


def derive_carrier_id(source_key: str) -> str:
    """Lower-cased first hyphen/underscore-delimited token of the file name."""
    token = _first_token(source_key)
    return token.casefold() if token else UNKNOWN_CARRIER_ID


def placeholder_text(source_key: str, reason: str = "PDF parsing returned empty text") -> str:
    """Deterministic stand-in text used when extraction yields nothing."""
    token = _first_token(source_key) or UNKNOWN_CARRIER_ID
    return (
        f"{token.upper()} UNDERWRITING GUIDELINES - {reason}, "
        f"using filename-based content"
    )


def vector_id(source_key: str, ordinal: int) -> str:
    """Stable vector id "{key-without-extension}-{ordinal}", capped at 64 characters."""
    key = source_key
    dot = key.rfind(".")
    if dot > key.rfind("/"):
        key = key[:dot]
    return f"{key}-{ordinal}"[:MAX_VECTOR_ID_LENGTH]


def format_carrier_name(carrier_id: str) -> str:
    """Display name: "acme-life" -> "Acme Life"."""
    words = [w for w in _NAME_DELIMITERS.split(carrier_id) if w]
    if not words:
        return carrier_id
    return " ".join(w[:1].upper() + w[1:] for w in words)
