"""Locale bundle loading for MessageStore.

Provides the protocol for message bundle loaders, a filesystem
implementation for JSON bundles with path-traversal security, and
result/summary data structures for tracking load attempts.

Bundle format (one file per locale):

    {
        "@metadata": {"authors": ["..."]},
        "newarticletext": "...",
        "found-items": "Found $1 {{PLURAL:$1|item|items}}"
    }

Keys starting with "@" are metadata and never become messages.

Components:
    MessageLoader - Protocol for loading bundles (structural typing)
    PathMessageLoader - Disk-based JSON loader with path-traversal prevention
    BundleLoadResult - Immutable result of a single bundle load attempt
    LoadSummary - Immutable aggregate of load results

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from wikimsg.enums import LoadStatus
from wikimsg.localization.types import LocaleCode, MessageBundle

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocol
    "MessageLoader",
    # Concrete loader
    "PathMessageLoader",
    "parse_bundle",
    # Load result types
    "BundleLoadResult",
    "LoadSummary",
]

logger = logging.getLogger(__name__)

_METADATA_PREFIX = "@"


class MessageLoader(Protocol):
    """Protocol for loading the message bundle of a locale.

    Example:
        >>> class DictLoader:
        ...     def __init__(self, bundles):
        ...         self.bundles = bundles
        ...     def load(self, locale):
        ...         return self.bundles[locale]
        ...     def describe_path(self, locale):
        ...         return f"memory:{locale}"
    """

    def load(self, locale: LocaleCode) -> MessageBundle:
        """Load all messages of a locale.

        Raises:
            FileNotFoundError: If no bundle exists for this locale
            OSError: If the bundle cannot be read
            ValueError: If the bundle is malformed
        """

    def describe_path(self, locale: LocaleCode) -> str:
        """Return human-readable path for diagnostics."""
        return locale


def parse_bundle(source: str, *, source_path: str = "<bundle>") -> dict[str, str]:
    """Parse a JSON bundle into key -> raw message.

    Metadata keys are dropped. Non-string values are skipped with a
    warning so that one bad entry does not lose the whole locale.

    Raises:
        ValueError: If the source is not a JSON object
    """
    data = json.loads(source)
    if not isinstance(data, dict):
        msg = f"Bundle {source_path} must be a JSON object, got {type(data).__name__}"
        raise ValueError(msg)  # noqa: TRY004 - malformed content, not a caller type error

    messages: dict[str, str] = {}
    for key, value in data.items():
        if key.startswith(_METADATA_PREFIX):
            continue
        if not isinstance(value, str):
            logger.warning(
                "Skipping non-string message '%s' in %s (%s)", key, source_path, type(value).__name__
            )
            continue
        messages[key] = value
    return messages


@dataclass(frozen=True, slots=True)
class PathMessageLoader:
    """File system loader for JSON locale bundles.

    Security:
        Locale codes containing path separators or ".." are rejected, and
        every resolved path is checked against a fixed root directory.

    Example:
        >>> loader = PathMessageLoader("i18n/{locale}.json")
        >>> messages = loader.load("en")
        # Loads from: i18n/en.json

    Attributes:
        base_path: Path template with {locale} placeholder
        root_dir: Fixed root directory for path traversal validation.
                  Defaults to the static prefix of base_path.
    """

    base_path: str
    root_dir: str | None = None
    _resolved_root: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Cache resolved root directory and validate template at initialization.

        Raises:
            ValueError: If base_path does not contain {locale} placeholder
        """
        if "{locale}" not in self.base_path:
            msg = (
                f"base_path must contain '{{locale}}' placeholder for locale substitution, "
                f"got: '{self.base_path}'"
            )
            raise ValueError(msg)

        if self.root_dir is not None:
            resolved = Path(self.root_dir).resolve()
        else:
            static_prefix = self.base_path.split("{locale}")[0].rstrip("/\\")
            resolved = Path(static_prefix).resolve() if static_prefix else Path.cwd().resolve()
        object.__setattr__(self, "_resolved_root", resolved)

    @staticmethod
    def _validate_locale(locale: LocaleCode) -> None:
        """Reject locale codes that could escape the bundle directory.

        Raises:
            ValueError: If locale contains unsafe path components
        """
        if not locale:
            msg = "Locale code cannot be empty"
            raise ValueError(msg)
        if ".." in locale:
            msg = f"Path traversal sequences not allowed in locale: '{locale}'"
            raise ValueError(msg)
        if "/" in locale or "\\" in locale:
            msg = f"Path separators not allowed in locale: '{locale}'"
            raise ValueError(msg)

    def _is_safe_path(self, full_path: Path) -> bool:
        try:
            full_path.resolve().relative_to(self._resolved_root)
        except ValueError:
            return False
        return True

    def describe_path(self, locale: LocaleCode) -> str:
        """Return the locale-substituted path."""
        return self.base_path.replace("{locale}", locale)

    def load(self, locale: LocaleCode) -> MessageBundle:
        """Load and parse the JSON bundle of a locale.

        Raises:
            ValueError: If locale contains path traversal sequences, or the
                bundle is malformed
            FileNotFoundError: If the bundle doesn't exist
            OSError: If the bundle cannot be read
        """
        self._validate_locale(locale)

        full_path = Path(self.describe_path(locale)).resolve()
        if not self._is_safe_path(full_path):
            msg = f"Path traversal detected: resolved path escapes root directory. locale='{locale}'"
            raise ValueError(msg)

        return parse_bundle(full_path.read_text(encoding="utf-8"), source_path=str(full_path))


@dataclass(frozen=True, slots=True)
class BundleLoadResult:
    """Result of loading one locale bundle.

    Attributes:
        locale: Locale code
        status: Load status (success, not_found, error)
        error: Exception if status is ERROR, None otherwise
        source_path: Human-readable path to the bundle
        message_count: Number of messages loaded
    """

    locale: LocaleCode
    status: LoadStatus
    error: Exception | None = None
    source_path: str | None = None
    message_count: int = 0

    @property
    def is_success(self) -> bool:
        """Check if the bundle loaded successfully."""
        return self.status == LoadStatus.SUCCESS

    @property
    def is_not_found(self) -> bool:
        """Check if the bundle was not found (expected for optional locales)."""
        return self.status == LoadStatus.NOT_FOUND

    @property
    def is_error(self) -> bool:
        """Check if the bundle load failed with an error."""
        return self.status == LoadStatus.ERROR


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Immutable aggregate of bundle load results.

    Attributes:
        results: All individual load results, in fallback-chain order
    """

    results: tuple[BundleLoadResult, ...]

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"LoadSummary(total={len(self.results)}, "
            f"ok={self.successful}, "
            f"not_found={self.not_found}, "
            f"errors={self.errors})"
        )

    @property
    def successful(self) -> int:
        """Number of successful loads."""
        return sum(1 for r in self.results if r.is_success)

    @property
    def not_found(self) -> int:
        """Number of bundles not found."""
        return sum(1 for r in self.results if r.is_not_found)

    @property
    def errors(self) -> int:
        """Number of load errors."""
        return sum(1 for r in self.results if r.is_error)

    @property
    def all_successful(self) -> bool:
        """True when every attempted bundle loaded."""
        return all(r.is_success for r in self.results)

    def get_errors(self) -> tuple[BundleLoadResult, ...]:
        """Results whose load failed with an error."""
        return tuple(r for r in self.results if r.is_error)
