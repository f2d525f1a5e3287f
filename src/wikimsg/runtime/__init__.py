"""Message runtime package.

Provides evaluation, rendering, language profiles, numerals and the
MessageEngine API. Depends on syntax package for parsing.

Python 3.13+.
"""

from .cache import ParseCache
from .engine import (
    MessageEngine,
    MessageSource,
    RenderOptions,
    clear_shared_caches,
    default_title_resolver,
    get_shared_parse_cache,
    get_shared_profile_cache,
)
from .evaluator import MessageEvaluator, ResolutionContext
from .language import LanguageProfile, LanguageProfileCache, build_profile
from .locale_data import LocaleData
from .numerals import NumeralFormatter
from .rendered import (
    Anchor,
    Escaped,
    Fragment,
    GenderedUser,
    HtmlProvider,
    Raw,
    RenderedNode,
    TrustedHtml,
)
from .renderer import escape_html, render_node, to_html, to_text

__all__ = [
    "Anchor",
    "Escaped",
    "Fragment",
    "GenderedUser",
    "HtmlProvider",
    "LanguageProfile",
    "LanguageProfileCache",
    "LocaleData",
    "MessageEngine",
    "MessageEvaluator",
    "MessageSource",
    "NumeralFormatter",
    "ParseCache",
    "Raw",
    "RenderOptions",
    "RenderedNode",
    "ResolutionContext",
    "TrustedHtml",
    "build_profile",
    "clear_shared_caches",
    "default_title_resolver",
    "escape_html",
    "get_shared_parse_cache",
    "get_shared_profile_cache",
    "render_node",
    "to_html",
    "to_text",
]
