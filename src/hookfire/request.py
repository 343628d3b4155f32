"""Request dataclass handed to rule evaluation and extraction.

Bundles the three value trees and the raw body of one incoming request.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl

from hookfire.errors import ParseError
from hookfire.parameters import decode_json

logger = logging.getLogger(__name__)


@dataclass
class Request:
    """Data for a single incoming request.

    The trees are owned by this request. ``Hook.parse_json_parameters``
    rewrites them in place, so a Request must never be shared between
    concurrent evaluations.

    Attributes:
        headers: Header name to value
        query: Query parameter name to value
        payload: Decoded request body
        body: Raw request body, used for signature checks
    """

    headers: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    payload: dict[str, Any] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def from_raw(
        cls,
        headers: Iterable[tuple[str, str]] = (),
        query_string: str = "",
        body: bytes = b"",
        content_type: str | None = None,
    ) -> Request:
        """Build a Request from wire-level pieces.

        Repeated headers and query parameters keep their first value. The
        body is decoded as JSON when the content type says so (or when no
        content type is given and the body is not empty).

        Args:
            headers: Header name/value pairs
            query_string: Raw query string without the leading ``?``
            body: Raw request body
            content_type: Content-Type of the body

        Returns:
            Request instance

        Raises:
            ParseError: If a JSON body cannot be decoded
        """
        header_tree: dict[str, Any] = {}
        for name, value in headers:
            header_tree.setdefault(name, value)

        query_tree: dict[str, Any] = {}
        for name, value in parse_qsl(query_string, keep_blank_values=True):
            query_tree.setdefault(name, value)

        payload: dict[str, Any] = {}
        if body and (content_type is None or "json" in content_type.lower()):
            try:
                decoded = decode_json(body)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ParseError(f"error parsing JSON payload: {e}") from e
            if isinstance(decoded, dict):
                payload = decoded
            else:
                logger.debug("JSON payload is not an object, exposing it under 'root'")
                payload = {"root": decoded}

        return cls(headers=header_tree, query=query_tree, payload=payload, body=body)
