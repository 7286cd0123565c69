import json
import logging
import re
from typing import Any, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A ```json fence wins over an untagged one; the first block of either kind is used
_JSON_FENCE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```\s*(.*?)\s*```", re.DOTALL)


def extract_json(raw_text: Optional[str], fallback: T) -> Any:
    """Parse the JSON payload out of a model completion.

    Models wrap JSON in code fences or prose, or truncate it when they hit the
    output limit. The interior of the first fenced block is parsed if there is
    one, otherwise the whole text. Any failure returns `fallback` itself and
    logs a warning; this function never raises.
    """
    if not raw_text or not raw_text.strip():
        logger.warning("Empty completion, using fallback")
        return fallback

    match = _JSON_FENCE.search(raw_text) or _ANY_FENCE.search(raw_text)
    candidate = match.group(1) if match else raw_text
    try:
        return json.loads(candidate.strip())
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning("JSON parsing failed (%s); raw text: %.200s", e, raw_text)
        return fallback
