"""Enumerations for wikimsg type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from enum import StrEnum


class RenderFormat(StrEnum):
    """Output requested from MessageEngine.render().

    StrEnum provides automatic string conversion: str(RenderFormat.HTML) == "html"
    """

    HTML = "html"
    """Serialized HTML markup (escaped text, verbatim trusted markup)"""

    TEXT = "text"
    """Plain text: markup stripped, links reduced to their visible text"""

    NODE = "node"
    """Unserialized RenderedNode tree (reusable as a trusted argument)"""


class Gender(StrEnum):
    """Grammatical gender values understood by {{GENDER:...}}.

    Anything that is not MALE or FEMALE selects the neutral form.
    """

    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class PluralCategory(StrEnum):
    """CLDR plural categories in canonical CLDR order."""

    ZERO = "zero"
    ONE = "one"
    TWO = "two"
    FEW = "few"
    MANY = "many"
    OTHER = "other"


class LoadStatus(StrEnum):
    """Outcome of loading one locale bundle."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    ERROR = "error"


class TemplateName(StrEnum):
    """Template constructs with built-in semantics.

    Names are matched case-insensitively; members hold the lowercase form.
    Any other name is treated as a nested message lookup.
    """

    PLURAL = "plural"
    GENDER = "gender"
    GRAMMAR = "grammar"
    FORMATNUM = "formatnum"
    INT = "int"
    SITENAME = "sitename"


__all__ = [
    "Gender",
    "LoadStatus",
    "PluralCategory",
    "RenderFormat",
    "TemplateName",
]
