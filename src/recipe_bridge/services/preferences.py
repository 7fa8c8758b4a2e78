"""services.preferences

Renders a user's dietary preferences as a constraint block for the prompt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recipe_bridge.core.types import PreferencesRecord

# (field, label) in render order
_TEXT_FIELDS: tuple[tuple[str, str], ...] = (
    ('diet_type', 'Diet type'),
    ('daily_calorie_requirement', 'Target daily calories'),
    ('allergies', 'Allergies'),
    ('food_intolerances', 'Food intolerances'),
    ('preferred_cuisines', 'Preferred cuisines'),
    ('excluded_ingredients', 'Ingredients to avoid'),
)

_MACRO_FIELDS: tuple[tuple[str, str], ...] = (
    ('macro_distribution_protein', 'Protein'),
    ('macro_distribution_fats', 'Fats'),
    ('macro_distribution_carbohydrates', 'Carbohydrates'),
)


def _is_present(value: object) -> bool:
    # None, blank strings and 0 all mean "not set"
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def _render(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def format_preferences(record: PreferencesRecord) -> str:
    """Return one ``Label: value`` line per populated preference.

    >>> format_preferences(PreferencesRecord(macro_distribution_protein=30, macro_distribution_carbohydrates=50))
    'Macro distribution: Protein: 30%, Carbohydrates: 50%'
    """
    lines = [
        f'{label}: {_render(getattr(record, field))}'
        for field, label in _TEXT_FIELDS
        if _is_present(getattr(record, field))
    ]

    macros = [
        f'{label}: {_render(getattr(record, field))}%'
        for field, label in _MACRO_FIELDS
        if _is_present(getattr(record, field))
    ]
    if macros:
        lines.append(f"Macro distribution: {', '.join(macros)}")

    return '\n'.join(lines)
