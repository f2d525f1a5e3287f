"""Deprecation warnings for legacy call forms.

MessageEngine still accepts two older call forms: render(format=...) and
the plain() alias of text(). Both keep working until the removal version
named in their warning, and the warning names the replacement.

Python 3.13+.
"""

import functools
import warnings
from collections.abc import Callable
from typing import ParamSpec, TypeVar

__all__ = [
    "deprecated",
    "warn_deprecated",
]

P = ParamSpec("P")
R = TypeVar("R")


def warn_deprecated(
    feature: str,
    *,
    removal_version: str,
    alternative: str | None = None,
    stacklevel: int = 2,
) -> None:
    """Emit a DeprecationWarning for feature.

    Args:
        feature: What the caller used, e.g. "render(format=...)"
        removal_version: Release that drops it
        alternative: What to call instead
        stacklevel: Passed to warnings.warn; 2 points at the caller

    Example:
        >>> warn_deprecated("render(format=...)", removal_version="1.0.0",
        ...                 alternative="render(..., options=RenderOptions(...))")
        DeprecationWarning: render(format=...) is deprecated and will be removed
        in version 1.0.0. Use render(..., options=RenderOptions(...)) instead.
    """
    text = f"{feature} is deprecated and will be removed in version {removal_version}."
    if alternative:
        text += f" Use {alternative} instead."
    warnings.warn(text, DeprecationWarning, stacklevel=stacklevel)


def deprecated(
    *,
    removal_version: str,
    alternative: str | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Mark a method deprecated: warn on every call and note it in the docstring."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            warn_deprecated(
                f"{func.__qualname__}()",
                removal_version=removal_version,
                alternative=alternative,
                stacklevel=3,
            )
            return func(*args, **kwargs)

        note = f".. deprecated::\n    Removed in version {removal_version}."
        if alternative:
            note += f" Use :meth:`{alternative}` instead."
        wrapper.__doc__ = f"{wrapper.__doc__}\n\n{note}" if wrapper.__doc__ else note
        return wrapper

    return decorator
