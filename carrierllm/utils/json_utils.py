import json
import re
import logging
from itertools import groupby
from typing import Any, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)

_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Wrapper keys some models put around the payload
_WRAPPER_KEYS = ("analysis", "response", "result")


def _scan(text: str, start: int = 0) -> Iterator[Tuple[int, str, bool]]:
    """Yield (index, char, in_string) from `start`; quote characters count as in-string."""
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            yield idx, char, True
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
            yield idx, char, True
        else:
            yield idx, char, False


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} substring of `text`, or None.
    Braces inside JSON string literals are ignored.
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        depth = 0
        for idx, char, in_string in _scan(text, start):
            if in_string:
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start: idx + 1]
        # Unbalanced from this brace; try the next opening brace
        start = text.find("{", start + 1)
    return None


def repair_json(json_str: str) -> str:
    """
    Light repair: drop trailing commas and quote bare object keys.
    String literals are left untouched.
    """
    parts = []
    for in_string, run in groupby(_scan(json_str), key=lambda item: item[2]):
        segment = "".join(char for _, char, _ in run)
        if not in_string:
            segment = _TRAILING_COMMA_RE.sub(r"\1", segment)
            segment = _BARE_KEY_RE.sub(r'\1"\2"\3', segment)
        parts.append(segment)
    return "".join(parts)


def extract_json_from_text(text: str) -> dict:
    """
    Robustly extract the first JSON object from a string.
    Handles markdown code blocks, surrounding prose, trailing commas and bare keys.
    Returns {} when nothing parseable is found.
    """
    json_str = find_json_object(text)
    if json_str is None:
        return {}

    for candidate in (json_str, repair_json(json_str)):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError as e:
            logger.debug(f"JSON candidate rejected: {e}")
            continue
        if isinstance(data, dict):
            return normalize_keys(data)
        return {}

    logger.warning("JSON extraction failed after repair")
    return {}


def to_snake_case(key: str) -> str:
    """Convert "fitPct" / "Fit Pct" / "fit-pct" to "fit_pct"."""
    key = _CAMEL_BOUNDARY_RE.sub("_", key.strip())
    return re.sub(r"[\s\-]+", "_", key).lower()


def normalize_keys(data: Any) -> Any:
    """
    Recursively normalize dictionary keys to snake_case.
    Also flattens 'analysis', 'response' or 'result' wrappers.
    """
    if isinstance(data, list):
        return [normalize_keys(item) for item in data]
    if not isinstance(data, dict):
        return data

    for wrapper in _WRAPPER_KEYS:
        if len(data) == 1 and isinstance(data.get(wrapper), dict):
            return normalize_keys(data[wrapper])

    return {to_snake_case(str(k)): normalize_keys(v) for k, v in data.items()}
