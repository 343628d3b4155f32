"""Argument sources and resolution against request data."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from hookfire.parameters import encode_json, extract_parameter_as_string

logger = logging.getLogger(__name__)

ENV_NAMESPACE = "HOOK_"
"""Prefix for environment variables passed to a hook command."""


class ArgumentSource(str, Enum):
    """Where an argument value is read from."""

    HEADER = "header"
    QUERY = "url"
    PAYLOAD = "payload"
    STRING = "string"
    ENTIRE_PAYLOAD = "entire-payload"
    ENTIRE_QUERY = "entire-query"
    ENTIRE_HEADERS = "entire-headers"


class Argument(BaseModel):
    """A named value taken from one part of the request.

    For ``string`` sources ``name`` is the literal value itself; for the
    ``entire-*`` sources it is only used to name environment variables.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: ArgumentSource
    name: str = ""

    def get(self, headers: Any, query: Any, payload: Any) -> tuple[str, bool]:
        """Resolve this argument to a string.

        Args:
            headers: Header tree
            query: Query parameter tree
            payload: Decoded payload tree

        Returns:
            ``(value, True)`` on success, ``("", False)`` if unresolvable
        """
        if self.source == ArgumentSource.STRING:
            return self.name, True

        if self.source == ArgumentSource.HEADER:
            return extract_parameter_as_string(self.name, headers)
        if self.source == ArgumentSource.QUERY:
            return extract_parameter_as_string(self.name, query)
        if self.source == ArgumentSource.PAYLOAD:
            return extract_parameter_as_string(self.name, payload)

        whole = {
            ArgumentSource.ENTIRE_PAYLOAD: payload,
            ArgumentSource.ENTIRE_QUERY: query,
            ArgumentSource.ENTIRE_HEADERS: headers,
        }
        if self.source in whole:
            try:
                return encode_json(whole[self.source]), True
            except (TypeError, ValueError) as e:
                logger.debug("Failed to serialize %s: %s", self.source.value, e)
                return "", False

        return "", False
