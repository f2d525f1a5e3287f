"""Message store package.

Holds the raw translations the engine reads: the store itself, bundle
loading infrastructure, and type aliases.

Submodules:
    types   - PEP 695 type aliases (MessageKey, LocaleCode, RawMessage, MessageBundle)
    loading - MessageLoader protocol, PathMessageLoader, BundleLoadResult, LoadSummary
    store   - MessageStore (thread-safe store with a locale fallback chain)

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

from wikimsg.enums import LoadStatus
from wikimsg.localization.loading import (
    BundleLoadResult,
    LoadSummary,
    MessageLoader,
    PathMessageLoader,
    parse_bundle,
)
from wikimsg.localization.store import MessageStore
from wikimsg.localization.types import LocaleCode, MessageBundle, MessageKey, RawMessage

__all__ = [
    # Store
    "MessageStore",
    # Loader protocol and implementations
    "MessageLoader",
    "PathMessageLoader",
    "parse_bundle",
    # Load tracking
    "BundleLoadResult",
    "LoadStatus",
    "LoadSummary",
    # Type aliases for user code type annotations
    "LocaleCode",
    "MessageBundle",
    "MessageKey",
    "RawMessage",
]
