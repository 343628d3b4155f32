"""Dot-path addressing over decoded request data.

Request headers, query parameters and payloads are all represented as a
value tree: JSON scalars, ``dict`` mappings and ``list`` sequences. A path
such as ``commits.0.author.name`` is resolved one segment at a time against
the shape of the tree, so a segment is read as a list index only when the
current node is a list.

Lookups never raise for a bad path. A missing key, an index that does not
parse or is out of range, or a scalar reached with path left over all
report ``found=False``.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Union

Scalar = Union[str, int, float, Decimal, bool, None]
ValueTree = Union[Scalar, dict[str, "ValueTree"], list["ValueTree"]]

PATH_SEPARATOR = "."


class JSONNumber(Decimal):
    """A decoded JSON number that remembers its source literal.

    Compares and computes like ``Decimal``; ``literal`` is the exact text
    from the document, so ``1e5`` is never rewritten as ``1E+5``.
    """

    __slots__ = ("literal",)

    def __new__(cls, literal: str) -> JSONNumber:
        number = super().__new__(cls, literal)
        number.literal = literal
        return number


def _split(path: str) -> tuple[str, str | None]:
    head, sep, rest = path.partition(PATH_SEPARATOR)
    return head, (rest if sep else None)


def _parse_index(segment: str, length: int) -> int | None:
    # Plain ASCII digits only: no sign, no whitespace, no underscores
    if not segment or not (segment.isascii() and segment.isdigit()):
        return None
    index = int(segment)
    if index >= length:
        return None
    return index


def get_parameter(path: str, tree: ValueTree) -> tuple[Any, bool]:
    """Look up the value at ``path`` inside ``tree``.

    Args:
        path: Dot-delimited path
        tree: Value tree to search

    Returns:
        ``(value, True)`` when the path resolves, ``(None, False)`` otherwise
    """
    if tree is None:
        return None, False

    head, rest = _split(path)

    if isinstance(tree, list):
        index = _parse_index(head, len(tree))
        if index is None:
            return None, False
        if rest is None:
            return tree[index], True
        return get_parameter(rest, tree[index])

    if isinstance(tree, dict):
        if head not in tree:
            return None, False
        if rest is None:
            return tree[head], True
        return get_parameter(rest, tree[head])

    return None, False


def replace_parameter(path: str, tree: ValueTree, value: Any) -> bool:
    """Replace the value at ``path`` inside ``tree`` in place.

    Only keys that already exist in the terminal mapping are replaced. New
    keys are never inserted and list elements are never replaced, so a path
    ending in a list index always fails.

    Args:
        path: Dot-delimited path
        tree: Value tree to modify
        value: Replacement value

    Returns:
        True if a value was replaced
    """
    if tree is None:
        return False

    head, rest = _split(path)

    if isinstance(tree, list):
        if rest is None:
            return False
        index = _parse_index(head, len(tree))
        if index is None:
            return False
        return replace_parameter(rest, tree[index], value)

    if isinstance(tree, dict):
        if head not in tree:
            return False
        if rest is None:
            tree[head] = value
            return True
        return replace_parameter(rest, tree[head], value)

    return False


def stringify(value: Any) -> str:
    """Render a tree value as the string handed to rules and commands.

    Strings are returned unchanged and numbers keep their full precision.
    Booleans render as ``true``/``false``; null, mappings and sequences
    render as canonical JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, JSONNumber):
        return value.literal
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    return encode_json(value)


def extract_parameter_as_string(path: str, tree: ValueTree) -> tuple[str, bool]:
    """Look up ``path`` and stringify the result.

    Returns:
        ``(text, True)`` when the path resolves, ``("", False)`` otherwise
    """
    value, found = get_parameter(path, tree)
    if not found:
        return "", False
    return stringify(value), True


def decode_json(text: str | bytes) -> Any:
    """Decode JSON keeping numeric precision.

    Integers decode to ``int`` and fractional or exponent numbers to
    ``JSONNumber``, so no value is rounded through a binary float and the
    literal text is kept for re-rendering.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON
    """
    return json.loads(text, parse_float=JSONNumber)


def encode_json(value: Any) -> str:
    """Encode a value tree as canonical JSON.

    Mapping keys are sorted, separators are compact and decoded numbers
    are written back as their source literal.

    Raises:
        TypeError: If the tree holds a value JSON cannot represent
        ValueError: If the tree holds a non-finite number
    """
    if isinstance(value, dict):
        parts = []
        for key in sorted(value):
            if not isinstance(key, str):
                raise TypeError(f"mapping key must be a string, got {type(key).__name__}")
            parts.append(f"{_encode_scalar(key)}:{encode_json(value[key])}")
        return "{" + ",".join(parts) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(encode_json(item) for item in value) + "]"
    return _encode_scalar(value)


def _encode_scalar(value: Any) -> str:
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"cannot encode non-finite number {value}")
        if isinstance(value, JSONNumber):
            return value.literal
        return str(value)
    return json.dumps(value, ensure_ascii=False, allow_nan=False)
