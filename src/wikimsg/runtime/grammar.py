"""Grammatical case transformation driven by data tables.

A language's grammar is a mapping case -> ordered (pattern, replacement)
rules plus exact word overrides. The first rule whose pattern matches the
word rewrites it; a word no rule matches is returned unchanged.

Python 3.13+.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

__all__ = ["GrammarRules", "compile_grammar"]

type CompiledRule = tuple[re.Pattern[str], str]


@dataclass(frozen=True, slots=True)
class GrammarRules:
    """Compiled grammatical case rules for one language.

    Attributes:
        transformations: case -> compiled (pattern, replacement) rules
        forms: case -> word -> form (checked before the rules)

    Example:
        >>> rules = compile_grammar({"genitive": [(r"(.+)ь$", r"\\1я")]})
        >>> rules.transform("Викисловарь", "genitive")
        'Викисловаря'
        >>> rules.transform("Викисловарь", "grammar_case_foo")
        'Викисловарь'
    """

    transformations: Mapping[str, tuple[CompiledRule, ...]] = field(default_factory=dict)
    forms: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def supports(self, case: str) -> bool:
        """Check whether the case is defined for this language."""
        return case in self.transformations or case in self.forms

    def transform(self, word: str, case: str) -> str:
        """Apply the case to word; unknown cases leave the word unchanged."""
        override = self.forms.get(case, {}).get(word)
        if override is not None:
            return override

        for pattern, replacement in self.transformations.get(case, ()):
            if pattern.search(word):
                return pattern.sub(replacement, word, count=1)
        return word


def compile_grammar(
    *tables: Mapping[str, Sequence[tuple[str, str]]],
    forms: Mapping[str, Mapping[str, str]] | None = None,
) -> GrammarRules:
    """Compile rule tables into GrammarRules.

    Later tables take precedence: a case present in several tables keeps
    the rules of the last one.

    Raises:
        ValueError: If a pattern is not a valid regular expression
    """
    merged: dict[str, tuple[CompiledRule, ...]] = {}
    for table in tables:
        for case, rules in table.items():
            compiled: list[CompiledRule] = []
            for pattern, replacement in rules:
                try:
                    compiled.append((re.compile(pattern), replacement))
                except re.error as e:
                    msg = f"Invalid grammar pattern for case '{case}': {pattern!r} ({e})"
                    raise ValueError(msg) from e
            merged[case] = tuple(compiled)
    return GrammarRules(transformations=merged, forms=dict(forms or {}))
