"""
Parser for suggested questions embedded in free-form model output.

parse -> classify into TopicGroups / FlatStrings / Malformed -> fold to a list of strings.
"""

import json
import re
from typing import Any, List, Optional, Union

import structlog

from .rag_models import FlatStrings, Malformed, TopicGroups

logger = structlog.get_logger(__name__)

SuggestionPayload = Union[TopicGroups, FlatStrings, Malformed]

_FENCED_JSON = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)


def extract_json_text(raw: Optional[str]) -> str:
    """
    Locate the JSON payload inside model output.

    Prefers a ```json fenced block; otherwise slices from the first ``[`` to
    the last ``]``. Returns the stripped input when neither is present.
    """
    text = (raw or '').strip()

    match = _FENCED_JSON.search(text)
    if match and match.group(1):
        return match.group(1)

    first = text.find('[')
    last = text.rfind(']')
    if first != -1 and last > first:
        return text[first:last + 1]
    return text


def classify(data: Any) -> SuggestionPayload:
    """Classify decoded JSON into one of the payload variants."""
    if not isinstance(data, list):
        return Malformed(reason="not an array", raw=data)
    if not data:
        return FlatStrings([])

    first = data[0]
    if isinstance(first, dict) and isinstance(first.get('questions'), list):
        return TopicGroups(data)
    if isinstance(first, str):
        return FlatStrings(data)
    return Malformed(reason="unexpected element type", raw=data)


def parse_suggestions(raw: Optional[str]) -> SuggestionPayload:
    """Extract and classify the payload, mapping decode errors to Malformed."""
    json_text = extract_json_text(raw)
    try:
        data = json.loads(json_text)
    except (ValueError, TypeError, RecursionError) as e:
        return Malformed(reason=f"invalid JSON: {e}", raw=json_text)
    return classify(data)


def fold_questions(payload: SuggestionPayload) -> List[str]:
    """Fold any payload variant to a flat list of questions."""
    if isinstance(payload, Malformed):
        logger.warning(
            "Received unexpected format for example questions",
            reason=payload.reason,
            raw=str(payload.raw)[:500]
        )
    return payload.questions()


def extract_questions(raw: Optional[str]) -> List[str]:
    """Return the suggested questions found in ``raw``, or an empty list."""
    return fold_questions(parse_suggestions(raw))
