"""Message parser package.

Public entry point is MessageParser; grammar rules live in ``rules`` and
low-level helpers in ``primitives``.
"""

from .core import MessageParser, make_junk
from .rules import ParseContext

__all__ = ["MessageParser", "ParseContext", "make_junk"]
