"""core.model_id

Validation for the model identifiers sent to the LLM endpoint, e.g.

    "gpt-4o-mini"   "claude-3.5-sonnet"   "llama_3_70b"

Only ASCII letters, digits, hyphen, underscore and dot are accepted. The
check lives in the **core** layer so that configuration, the client and the
services can share it without import cycles.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Regular-expression helpers
# ---------------------------------------------------------------------------

MODEL_ID_PATTERN = r'^[A-Za-z0-9_.-]+$'

_MODEL_ID_REGEX: re.Pattern[str] = re.compile(MODEL_ID_PATTERN)


def is_valid_model_id(raw: object) -> bool:
    """Return True when *raw* is a usable model identifier.

    Case is preserved: providers treat model names case-sensitively.

    >>> is_valid_model_id('gpt-4o-mini')
    True
    >>> is_valid_model_id('openai/gpt-4o')
    False
    """
    return isinstance(raw, str) and _MODEL_ID_REGEX.fullmatch(raw) is not None
