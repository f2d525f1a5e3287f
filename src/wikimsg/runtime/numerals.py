"""Locale numeral formatting and parsing.

Converts between canonical numbers ("-12.89": ASCII digits, "." decimal
point, optional leading "-") and a locale's display form ("-١٢٫٨٩").

Format rules:
    - Digits are transliterated through the locale's digit table
    - "." becomes the locale decimal symbol
    - The minus sign is kept as ASCII "-"
    - No grouping separators are inserted
    - Input that is not a canonical number is returned unchanged

Parsing transliterates digits back to ASCII (ASCII digits are accepted as
well), drops bidi marks, reads Unicode minus as "-" and hands the rest to
Babel parse_decimal with the CLDR symbols of the formatter's Babel locale.

Python 3.13+. Uses Babel for CLDR-compliant parsing.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from babel.numbers import NumberFormatError, get_decimal_symbol, get_group_symbol, parse_decimal

from wikimsg.diagnostics import ErrorTemplate, NumeralError
from wikimsg.runtime.locale_data import ASCII_DIGITS

__all__ = ["NumeralFormatter", "to_canonical"]

_CANONICAL_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?", re.ASCII)

# Characters dropped while parsing: bidi marks some locales put around signs
_BIDI_MARKS = dict.fromkeys(map(ord, "\u061c\u200e\u200f"))

_UNICODE_MINUS = "\u2212"


def to_canonical(value: object) -> str | None:
    """Convert a number or numeric string to canonical form.

    Returns:
        Canonical string, or None if value is not a plain decimal number

    Examples:
        >>> to_canonical(987654321.654321)
        '987654321.654321'
        >>> to_canonical(Decimal("1E+3"))
        '1000'
        >>> to_canonical(" 42 ")
        '42'
        >>> to_canonical("invalidnumber") is None
        True
    """
    match value:
        case bool():
            return None
        case int():
            return str(value)
        case float() | Decimal():
            number = Decimal(repr(value)) if isinstance(value, float) else value
            if not number.is_finite():
                return None
            text = format(number, "f")
        case str():
            text = value.strip()
        case _:
            return None

    if text.startswith("+"):
        text = text[1:]
    if _CANONICAL_RE.fullmatch(text) is None:
        return None
    return text


@dataclass(frozen=True, slots=True)
class NumeralFormatter:
    """Digit and separator substitution for one locale.

    Attributes:
        locale_code: Locale the symbols belong to (for diagnostics)
        digits: Ten characters for digits 0-9
        decimal_symbol: Decimal separator
        group_symbol: Group separator, recognized when parsing
        babel_locale: CLDR locale whose parsing rules apply
        numbering_system: CLDR numbering system of decimal_symbol and group_symbol

    Examples:
        >>> ar = NumeralFormatter("ar", "٠١٢٣٤٥٦٧٨٩", "٫", "٬")
        >>> ar.format(-12.89)
        '-١٢٫٨٩'
        >>> ar.parse("-١٢٫٨٩")
        '-12.89'
        >>> ar.parse_integer("-١٢٫٨٩")
        '-12'
    """

    locale_code: str = "en"
    digits: str = ASCII_DIGITS
    decimal_symbol: str = "."
    group_symbol: str = ","
    babel_locale: str = "en"
    numbering_system: str = "latn"

    def __post_init__(self) -> None:
        """Validate digit table."""
        if len(self.digits) != 10:
            msg = f"digits must contain exactly 10 characters, got {len(self.digits)}"
            raise ValueError(msg)

    def format(self, value: object) -> str:
        """Format a canonical number in this locale's numerals.

        Non-numeric input is returned unchanged (as str).

        Examples:
            >>> NumeralFormatter("nl", decimal_symbol=",", group_symbol=".").format("987654321.654321")
            '987654321,654321'
            >>> NumeralFormatter("nl", decimal_symbol=",", group_symbol=".").format("invalidnumber")
            'invalidnumber'
        """
        canonical = to_canonical(value)
        if canonical is None:
            return value if isinstance(value, str) else str(value)

        out: list[str] = []
        for ch in canonical:
            if ch == ".":
                out.append(self.decimal_symbol)
            elif ch == "-":
                out.append(ch)
            else:
                out.append(self.digits[ord(ch) - 48])
        return "".join(out)

    def parse(self, text: str) -> str:
        """Parse locale numerals back to a canonical number string.

        Digits are transliterated to ASCII and this formatter's separators
        respelled as the CLDR ones of babel_locale, then Babel parses the
        result. A plain space is accepted where CLDR groups with a space
        variant ("1 234,5" in French).

        Raises:
            NumeralError: If text is not a number in this locale
        """
        cleaned = (
            text.strip()
            .translate(_BIDI_MARKS)
            .replace(_UNICODE_MINUS, "-")
            .translate(self._to_ascii)
        )
        respelled = self._respell_symbols(cleaned)
        try:
            number = parse_decimal(
                respelled, locale=self.babel_locale, numbering_system=self.numbering_system
            )
        except (NumberFormatError, InvalidOperation, ValueError) as e:
            diagnostic = ErrorTemplate.number_parse_failed(text, self.locale_code)
            raise NumeralError(
                diagnostic, input_value=text, locale_code=self.locale_code
            ) from e

        canonical = to_canonical(number)
        if canonical is None:
            diagnostic = ErrorTemplate.number_parse_failed(text, self.locale_code)
            raise NumeralError(diagnostic, input_value=text, locale_code=self.locale_code)
        return canonical

    @property
    def _to_ascii(self) -> dict[int, str]:
        return {ord(ch): ASCII_DIGITS[i] for i, ch in enumerate(self.digits)}

    def _respell_symbols(self, text: str) -> str:
        """Replace this formatter's separators with the CLDR ones Babel expects."""
        cldr = {
            self.decimal_symbol: get_decimal_symbol(
                self.babel_locale, numbering_system=self.numbering_system
            ),
            self.group_symbol: get_group_symbol(
                self.babel_locale, numbering_system=self.numbering_system
            ),
        }
        if all(own == theirs for own, theirs in cldr.items() if own):
            return text
        pattern = "|".join(re.escape(own) for own in sorted(cldr, key=len, reverse=True) if own)
        return re.sub(pattern, lambda m: cldr[m.group()], text)

    def parse_integer(self, text: str) -> str:
        """Parse locale numerals and truncate toward zero.

        Examples:
            >>> NumeralFormatter("ar", "٠١٢٣٤٥٦٧٨٩", "٫", "٬").parse_integer("٩٨٧٦٥٤٣٢١٫٦٥٤٣٢١")
            '987654321'

        Raises:
            NumeralError: If text is not a number in this locale
        """
        return str(int(Decimal(self.parse(text))))

    def to_decimal(self, text: str) -> Decimal:
        """Parse locale numerals to a Decimal (used for plural selection).

        Raises:
            NumeralError: If text is not a number in this locale
        """
        return Decimal(self.parse(text))
