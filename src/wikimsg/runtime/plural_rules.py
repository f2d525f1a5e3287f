"""PLURAL form order and form selection over CLDR plural categories.

The categories themselves come from Babel (Locale.plural_form) in
build_profile; this module only orders them and maps a category to one
of the forms a message supplies.

Python 3.13+.

Reference: https://www.unicode.org/cldr/charts/47/supplemental/language_plural_rules.html
"""

from collections.abc import Iterable

from wikimsg.enums import PluralCategory

__all__ = [
    "CLDR_CATEGORY_ORDER",
    "ordered_categories",
    "select_form_index",
]

# Positional order of PLURAL forms. "other" is always the last form.
CLDR_CATEGORY_ORDER: tuple[str, ...] = tuple(c.value for c in PluralCategory)

_OTHER: str = PluralCategory.OTHER.value


def ordered_categories(tags: Iterable[str]) -> tuple[str, ...]:
    """Sort category names into CLDR order, always ending with "other".

    Examples:
        >>> ordered_categories({"other", "few", "one"})
        ('one', 'few', 'other')
    """
    present = set(tags)
    ordered = [c for c in CLDR_CATEGORY_ORDER if c in present and c != _OTHER]
    ordered.append(_OTHER)
    return tuple(ordered)


def select_form_index(category: str, categories: tuple[str, ...], form_count: int) -> int:
    """Map a plural category to a position in the supplied forms.

    Forms are matched to categories by position. "other" and any category
    without a corresponding form select the last form.

    Args:
        category: Category chosen for the count
        categories: The locale's categories in form order
        form_count: Number of forms supplied (must be >= 1)

    Examples:
        >>> select_form_index("one", ("one", "other"), 2)
        0
        >>> select_form_index("other", ("one", "other"), 2)
        1
        >>> select_form_index("few", ("one", "few", "other"), 2)
        1
        >>> select_form_index("few", ("one", "few", "other"), 1)
        0
    """
    last = form_count - 1
    if category == _OTHER or category not in categories:
        return last
    return min(categories.index(category), last)
