"""Error types raised by hook evaluation and extraction.

Every error derives from HookError so callers can tell a failed check
apart from a rule that simply evaluated to False.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hookfire.arguments import Argument


class HookError(Exception):
    """Base class for all hookfire errors."""


class ArgumentError(HookError):
    """An argument could not be resolved against its source.

    Attributes:
        argument: The argument that failed to resolve
        partial: Values resolved before the failure (argv/env extraction)
    """

    def __init__(self, argument: Argument, partial: list[str] | None = None) -> None:
        self.argument = argument
        self.partial = partial if partial is not None else []
        super().__init__(f"couldn't retrieve argument for {argument!r}")


class SourceError(HookError):
    """An argument names a source that cannot be used as a splice target."""

    def __init__(self, argument: Argument) -> None:
        self.argument = argument
        super().__init__(f"invalid source for argument {argument!r}")


class ParseError(HookError):
    """User supplied data could not be parsed."""


class SignatureError(HookError):
    """The payload signature did not match.

    Attributes:
        signature: Signature computed from the payload (not the one provided)
    """

    def __init__(self, signature: str) -> None:
        self.signature = signature
        super().__init__(f"invalid payload signature {signature}")


class PatternError(HookError):
    """A match rule regular expression failed to compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"invalid regex {pattern!r}: {reason}")


class HookConfigError(HookError):
    """A hooks file or config file could not be loaded."""
