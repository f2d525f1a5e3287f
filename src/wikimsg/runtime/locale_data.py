"""Built-in locale data tables.

Babel supplies the CLDR part of a language profile (plural rules, decimal
and group symbols). This module holds what CLDR does not decide for us:

- Which numbering system a language's interface messages use
- The digit set of each numbering system
- Grammatical case transformations, as ordered (regex, replacement) rules

All per-language behavior is data. Callers extend or override it with a
LocaleData record, which is also what an asynchronous locale fetcher
returns (see LanguageProfileCache.load).

Python 3.13+.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

__all__ = [
    "ASCII_DIGITS",
    "GRAMMAR_TRANSFORMATIONS",
    "LANGUAGE_ALIASES",
    "LANGUAGE_NUMBERING_SYSTEMS",
    "NUMBERING_SYSTEM_DIGITS",
    "LocaleData",
    "PluralRule",
]

type PluralRule = Callable[[Decimal], str]
"""Maps a count to a CLDR plural category name."""

ASCII_DIGITS: str = "0123456789"


def _digit_run(zero: int) -> str:
    return "".join(chr(zero + offset) for offset in range(10))


# CLDR numbering system id -> digits 0-9
NUMBERING_SYSTEM_DIGITS: Mapping[str, str] = {
    "latn": ASCII_DIGITS,
    "arab": _digit_run(0x0660),
    "arabext": _digit_run(0x06F0),
    "beng": _digit_run(0x09E6),
    "deva": _digit_run(0x0966),
    "mymr": _digit_run(0x1040),
    "tibt": _digit_run(0x0F20),
}

# Languages whose interface numerals are not Latin digits.
# Everything else uses "latn".
LANGUAGE_NUMBERING_SYSTEMS: Mapping[str, str] = {
    "ar": "arab",
    "ckb": "arab",
    "fa": "arabext",
    "ps": "arabext",
    "as": "beng",
    "bn": "beng",
    "mr": "deva",
    "ne": "deva",
    "my": "mymr",
    "bo": "tibt",
    "dz": "tibt",
}

# Wiki language codes that CLDR knows under another identifier
LANGUAGE_ALIASES: Mapping[str, str] = {
    "sh": "sr_Latn",
}

# language -> case -> ordered (pattern, replacement) rules; first match wins.
# Patterns use Python re syntax and are matched with re.search.
GRAMMAR_TRANSFORMATIONS: Mapping[str, Mapping[str, Sequence[tuple[str, str]]]] = {
    "ru": {
        "genitive": (
            (r"(.+)ь$", r"\1я"),
            (r"(.+)ия$", r"\1ии"),
            (r"(.+)ка$", r"\1ки"),
            (r"(.+)ти$", r"\1тей"),
            (r"(.+)ды$", r"\1дов"),
            (r"(.+)д$", r"\1да"),
            (r"(.+)ник$", r"\1ника"),
            (r"(.+)ные$", r"\1ных"),
        ),
        "prepositional": (
            (r"(.+)ь$", r"\1е"),
            (r"(.+)ия$", r"\1ии"),
            (r"(.+)ка$", r"\1ке"),
            (r"(.+)ти$", r"\1тях"),
            (r"(.+)ды$", r"\1дах"),
            (r"(.+)д$", r"\1де"),
            (r"(.+)ник$", r"\1нике"),
            (r"(.+)ные$", r"\1ных"),
        ),
        "languagegen": (
            (r"^(.+)ский$", r"\1ского"),
            (r"^(.+)цкий$", r"\1цкого"),
            (r"^иврит$", "иврита"),
            (r"^эсперанто$", "эсперанто"),
        ),
    },
    "fi": {
        # Vowel harmony: a back vowel not followed by a front vowel
        # selects the back-vowel suffix.
        "elative": (
            (r"^(.*[aou][^äöy]*)$", r"\1sta"),
            (r"^(.+)$", r"\1stä"),
        ),
        "inessive": (
            (r"^(.*[aou][^äöy]*)$", r"\1ssa"),
            (r"^(.+)$", r"\1ssä"),
        ),
        "partitive": (
            (r"^(.*[aou][^äöy]*)$", r"\1a"),
            (r"^(.+)$", r"\1ä"),
        ),
        "illative": (
            (r"^(.*)([aeiouyäö])$", r"\1\2\2n"),
            (r"^(.+)$", r"\1iin"),
        ),
    },
}


@dataclass(frozen=True, slots=True)
class LocaleData:
    """Overrides for building a language profile.

    Every field is optional; unset fields come from Babel and the built-in
    tables above.

    Attributes:
        numbering_system: CLDR numbering system id (e.g. "arab")
        digits: Ten characters for digits 0-9; overrides numbering_system
        decimal_symbol: Decimal separator
        group_symbol: Group separator (recognized when parsing, never inserted)
        plural_rule: Count -> CLDR plural category
        plural_categories: Categories plural_rule can return, in form order
        grammar_transformations: case -> ordered (pattern, replacement) rules,
            merged over the built-in rules for the language
        grammar_forms: case -> word -> form, exact overrides checked first
    """

    numbering_system: str | None = None
    digits: str | None = None
    decimal_symbol: str | None = None
    group_symbol: str | None = None
    plural_rule: PluralRule | None = None
    plural_categories: tuple[str, ...] | None = None
    grammar_transformations: Mapping[str, Sequence[tuple[str, str]]] = field(
        default_factory=dict
    )
    grammar_forms: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate digit table and plural configuration."""
        if self.digits is not None and len(self.digits) != 10:
            msg = f"digits must contain exactly 10 characters, got {len(self.digits)}"
            raise ValueError(msg)
        if self.numbering_system is not None and self.numbering_system not in (
            NUMBERING_SYSTEM_DIGITS
        ):
            if self.digits is None:
                msg = f"Unknown numbering system '{self.numbering_system}' and no digits given"
                raise ValueError(msg)
        if self.plural_rule is not None and self.plural_categories is None:
            msg = "plural_categories is required when plural_rule is given"
            raise ValueError(msg)
