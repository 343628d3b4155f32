"""Trigger rule evaluation.

A trigger rule is a tree of ``and``, ``or`` and ``not`` nodes with ``match``
leaves. Each node holds exactly one of these branches:

    {"and": [{"match": {...}}, {"not": {"match": {...}}}]}

Evaluation returns a plain bool. Errors (a failed signature check, a bad
regular expression) are raised rather than folded into False, so a caller can
always tell a failed security check apart from a request that just did not
match.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hookfire.arguments import Argument
from hookfire.errors import PatternError
from hookfire.signature import check_payload_signature

if TYPE_CHECKING:
    from hookfire.request import Request

logger = logging.getLogger(__name__)


class MatchType(str, Enum):
    """Comparison performed by a match rule."""

    VALUE = "value"
    REGEX = "regex"
    PAYLOAD_HASH_SHA1 = "payload-hash-sha1"


class MatchRule(BaseModel):
    """Leaf rule comparing one request argument.

    Attributes:
        type: Comparison to perform
        parameter: Argument to resolve from the request
        value: Expected value for ``value`` matches
        regex: Pattern for ``regex`` matches, searched anywhere in the value
        secret: Shared secret for ``payload-hash-sha1`` matches
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: MatchType
    parameter: Argument
    value: str = ""
    regex: str = ""
    secret: str = Field(default="", repr=False)

    def evaluate(self, request: Request) -> bool:
        """Evaluate against a request.

        An argument that cannot be resolved makes the rule False without
        raising.

        Raises:
            PatternError: If ``regex`` does not compile
            SignatureError: If the payload signature does not match
        """
        arg, ok = self.parameter.get(request.headers, request.query, request.payload)
        if not ok:
            logger.debug("Match parameter %s not found in request", self.parameter.name)
            return False

        if self.type == MatchType.VALUE:
            return arg == self.value

        if self.type == MatchType.REGEX:
            # Compiled per evaluation; patterns are not cached across requests
            try:
                pattern = re.compile(self.regex)
            except re.error as e:
                raise PatternError(self.regex, str(e)) from e
            return pattern.search(arg) is not None

        if self.type == MatchType.PAYLOAD_HASH_SHA1:
            check_payload_signature(request.body, self.secret, arg)
            return True

        return False


class Rules(BaseModel):
    """A node in a trigger rule tree.

    At most one branch may be set. A node with no branch evaluates to False.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    and_: tuple[Rules, ...] | None = Field(default=None, alias="and")
    or_: tuple[Rules, ...] | None = Field(default=None, alias="or")
    not_: Rules | None = Field(default=None, alias="not")
    match: MatchRule | None = None

    @model_validator(mode="after")
    def _check_single_branch(self) -> Rules:
        populated = [
            name
            for name, value in (("and", self.and_), ("or", self.or_), ("not", self.not_), ("match", self.match))
            if value is not None
        ]
        if len(populated) > 1:
            raise ValueError(f"rule must have exactly one of and/or/not/match, got {', '.join(populated)}")
        return self

    @property
    def kind(self) -> str | None:
        """Name of the populated branch, or None for an empty node."""
        if self.and_ is not None:
            return "and"
        if self.or_ is not None:
            return "or"
        if self.not_ is not None:
            return "not"
        if self.match is not None:
            return "match"
        return None

    def evaluate(self, request: Request) -> bool:
        """Evaluate this node against a request.

        Branches are checked in the order and, or, not, match and the first
        one set is evaluated.

        Raises:
            HookError: Propagated unchanged from any match leaf
        """
        if self.and_ is not None:
            return self._evaluate_and(request)
        if self.or_ is not None:
            return self._evaluate_or(request)
        if self.not_ is not None:
            return not self.not_.evaluate(request)
        if self.match is not None:
            return self.match.evaluate(request)
        return False

    def _evaluate_and(self, request: Request) -> bool:
        for child in self.and_ or ():
            if not child.evaluate(request):
                return False
        return True

    def _evaluate_or(self, request: Request) -> bool:
        for child in self.or_ or ():
            if child.evaluate(request):
                return True
        return False


Rules.model_rebuild()


def evaluate(rules: Rules | None, request: Request) -> bool:
    """Evaluate an optional trigger rule.

    A hook without a trigger rule always fires.
    """
    if rules is None:
        return True
    result = rules.evaluate(request)
    logger.debug("Trigger rule (%s) evaluated to %s", rules.kind, result)
    return result
