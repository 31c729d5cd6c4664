"""
Carrier analysis parsing.

Model output is interpreted by an ordered list of strategies. Each strategy
returns either a CarrierAnalysis or a ParseFailure describing why it gave up;
the first success wins. The retrieval-score fallback always succeeds, so
parsing never raises.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from carrierllm.pipeline.models import CarrierAnalysis, CarrierGroup
from carrierllm.utils.json_utils import extract_json_from_text
from carrierllm.utils.numbers import clamp, coerce_number, round_half_up
from .carrier_ids import format_carrier_name


logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 70.0
MIN_FALLBACK_FIT = 60
FALLBACK_PRODUCT = "Life Insurance"
FALLBACK_UNDERWRITING_PATH = "standard"

_CONFIDENCE_WORDS = {"high": 90.0, "medium": 70.0, "moderate": 70.0, "low": 40.0}
_LIST_ITEM_KEYS = ("text", "reason", "description", "note", "advisory", "name")

_FIT_RE = re.compile(r"""["']?fit_?pct["']?\s*[:=]\s*["']?(-?\d+(?:\.\d+)?)""", re.IGNORECASE)
_CONFIDENCE_RE = re.compile(
    r"""["']?confidence["']?\s*[:=]\s*["']?(-?\d+(?:\.\d+)?|high|medium|moderate|low)""",
    re.IGNORECASE,
)
_QUOTED_RE = re.compile(r'"((?:[^"\\]|\\.)*)"')


@dataclass(frozen=True)
class ParseFailure:
    """Why a strategy could not produce an analysis."""
    strategy: str
    reason: str


ParseResult = Union[CarrierAnalysis, ParseFailure]


def coerce_confidence(value: Any) -> float:
    """
    Numeric confidence in [0, 100].

    Accepts numbers, numeric strings, fractions in (0, 1] and the words
    high/medium/low. Anything else yields the default of 70.
    """
    if isinstance(value, str) and value.strip().lower() in _CONFIDENCE_WORDS:
        return _CONFIDENCE_WORDS[value.strip().lower()]

    number = coerce_number(value)
    if number is None:
        return DEFAULT_CONFIDENCE
    if 0 < number <= 1:
        number = round(number * 100, 2)
    return clamp(number, 0.0, 100.0)


def _string_list(value: Any) -> List[str]:
    """Normalize a model-provided list of reasons/advisories to strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        return []

    items = []
    for item in value:
        if isinstance(item, str):
            text = item.strip()
        elif isinstance(item, dict):
            text = next(
                (str(item[k]).strip() for k in _LIST_ITEM_KEYS if item.get(k)),
                "",
            )
        elif item is not None:
            text = str(item).strip()
        else:
            text = ""
        if text:
            items.append(text)
    return items


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class JsonObjectStrategy:
    """First balanced JSON object in the response, with light repair."""

    name = "json"

    def attempt(self, raw: str, group: CarrierGroup) -> ParseResult:
        data = extract_json_from_text(raw)
        if not data:
            return ParseFailure(self.name, "no JSON object found")

        fit_pct = coerce_number(data.get("fit_pct", data.get("fit_score")))
        if fit_pct is None:
            return ParseFailure(self.name, "fitPct missing or not numeric")

        citations = data.get("citations")
        return CarrierAnalysis(
            fit_pct=fit_pct,
            reasons=_string_list(data.get("reasons")),
            advisories=_string_list(data.get("advisories")),
            confidence=coerce_confidence(data.get("confidence")),
            product=_optional_text(data.get("product")),
            underwriting_path=_optional_text(data.get("underwriting_path")),
            citations=[c for c in citations if isinstance(c, dict)] if isinstance(citations, list) else [],
            source="json",
        )


class FieldRegexStrategy:
    """Field-by-field extraction for responses that are almost JSON."""

    name = "regex"

    @staticmethod
    def _quoted_list(raw: str, field: str) -> List[str]:
        match = re.search(
            rf"""["']?{field}["']?\s*:\s*\[(.*?)\]""",
            raw,
            re.IGNORECASE | re.DOTALL,
        )
        if not match:
            return []
        return [item.strip() for item in _QUOTED_RE.findall(match.group(1)) if item.strip()]

    def attempt(self, raw: str, group: CarrierGroup) -> ParseResult:
        if not raw:
            return ParseFailure(self.name, "empty response")

        fit_match = _FIT_RE.search(raw)
        if not fit_match:
            return ParseFailure(self.name, "fitPct not found")

        confidence_match = _CONFIDENCE_RE.search(raw)
        return CarrierAnalysis(
            fit_pct=float(fit_match.group(1)),
            reasons=self._quoted_list(raw, "reasons"),
            advisories=self._quoted_list(raw, "advisories"),
            confidence=coerce_confidence(confidence_match.group(1)) if confidence_match else DEFAULT_CONFIDENCE,
            source="regex",
        )


class RetrievalScoreFallback:
    """Analysis synthesized from the best retrieval score alone."""

    name = "retrieval_fallback"

    def attempt(self, raw: str, group: CarrierGroup) -> ParseResult:
        score_pct = round_half_up(group.top_match.score * 100)
        return CarrierAnalysis(
            fit_pct=max(MIN_FALLBACK_FIT, score_pct),
            reasons=[f"{format_carrier_name(group.carrier_id)} underwriting guidelines match client profile"],
            advisories=[],
            confidence=DEFAULT_CONFIDENCE,
            product=FALLBACK_PRODUCT,
            underwriting_path=FALLBACK_UNDERWRITING_PATH,
            source="retrieval_fallback",
        )


DEFAULT_STRATEGIES = (JsonObjectStrategy(), FieldRegexStrategy(), RetrievalScoreFallback())


def parse_analysis(
    raw: str,
    group: CarrierGroup,
    strategies: Sequence = DEFAULT_STRATEGIES,
) -> CarrierAnalysis:
    """
    Run the strategies in order and return the first analysis produced.

    Args:
        raw: Raw model output ("" when the call failed)
        group: Carrier group the output refers to
        strategies: Ordered parse strategies, ending with an infallible one

    Returns:
        CarrierAnalysis tagged with the strategy that produced it
    """
    for strategy in strategies:
        result = strategy.attempt(raw, group)
        if isinstance(result, CarrierAnalysis):
            return result
        logger.debug(f"{group.carrier_id}: {result.strategy} strategy failed ({result.reason})")

    logger.warning(f"{group.carrier_id}: no parse strategy succeeded, using retrieval fallback")
    return RetrievalScoreFallback().attempt(raw, group)
