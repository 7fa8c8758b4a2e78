"""core.guard

Validation and sanitisation of free text before it reaches the network.

Two limits exist and both are defined here, so there is exactly one place to
change them:

* messages sent to the model: 1..10 000 characters
* recipe text accepted for modification: 100..8 000 characters
"""

from __future__ import annotations

import re
import unicodedata

from recipe_bridge.core.exceptions import InvalidInputError

MAX_MESSAGE_LENGTH = 10_000
MIN_RECIPE_LENGTH = 100
MAX_RECIPE_LENGTH = 8_000

_WHITESPACE_RUN = re.compile(r'\s+')


def validate(text: object) -> bool:
    """Return True when *text* is a string of acceptable length that survives sanitising."""
    return isinstance(text, str) and len(text) <= MAX_MESSAGE_LENGTH and bool(sanitize(text))


def sanitize(text: str) -> str:
    """Strip control characters, collapse whitespace runs and trim.

    Control characters that are whitespace (tab, newline, ...) become spaces so
    that words on either side stay apart.

    ``sanitize(sanitize(s)) == sanitize(s)`` for every string.
    """
    without_controls = ''.join(_drop_control(ch) for ch in text)
    return _WHITESPACE_RUN.sub(' ', without_controls).strip()


def _drop_control(ch: str) -> str:
    if unicodedata.category(ch) != 'Cc':
        return ch
    return ' ' if ch.isspace() else ''


def validate_recipe_text(text: object) -> str:
    """Check the bounds for recipe text submitted for modification.

    Returns the text untouched; raises :class:`InvalidInputError` otherwise.
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError('Recipe text cannot be empty')
    if len(text) > MAX_RECIPE_LENGTH:
        raise InvalidInputError(f'Recipe text is too long. Maximum {MAX_RECIPE_LENGTH} characters allowed.')
    if len(text) < MIN_RECIPE_LENGTH:
        raise InvalidInputError(f'Recipe text must be at least {MIN_RECIPE_LENGTH} characters')
    return text
