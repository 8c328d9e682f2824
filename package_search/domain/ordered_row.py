"""
Ordered row projection and its JSON encoding.

A row fetched from the index is captured as a sequence of (column, value)
pairs in the order the columns appear in the result set, and encoded as a
JSON object whose keys follow that same order.
"""
from __future__ import annotations

import json
import math
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from package_search.domain.errors import SerializationError

# Values a flat result row may carry.
Scalar = Union[str, int, float, bool, None]

_SCALAR_TYPES = (str, int, float, bool, type(None))


class OrderedRow:
    """
    A single result row with its column order preserved.

    Keys are expected to be unique; the fixed search projection guarantees
    this, so ``set`` does not check.
    """

    __slots__ = ("_keys", "_data")

    def __init__(self, pairs: Optional[Iterable[Tuple[str, Scalar]]] = None):
        self._keys: List[str] = []
        self._data: Dict[str, Scalar] = {}
        if pairs is not None:
            for key, value in pairs:
                self.set(key, value)

    def set(self, key: str, value: Scalar) -> None:
        self._keys.append(key)
        self._data[key] = value

    def keys(self) -> List[str]:
        return list(self._keys)

    def items(self) -> Iterator[Tuple[str, Scalar]]:
        for key in self._keys:
            yield key, self._data[key]


def _encode_value(key: str, value: Any) -> str:
    # bool is a subclass of int, so the isinstance check covers it too.
    if not isinstance(value, _SCALAR_TYPES):
        raise SerializationError(
            f"column '{key}' has unsupported value type {type(value).__name__}"
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise SerializationError(f"column '{key}' has non-finite value {value!r}")
    return json.dumps(value, ensure_ascii=False)


def encode_row(row: OrderedRow) -> bytes:
    """
    Encode one row as a JSON object, keys in insertion order.

    Raises:
        SerializationError: If any value is not a JSON scalar.
    """
    return _encode_row_text(row).encode("utf-8")


def _encode_row_text(row: OrderedRow) -> str:
    parts = [
        f"{json.dumps(key, ensure_ascii=False)}:{_encode_value(key, value)}"
        for key, value in row.items()
    ]
    return "{" + ",".join(parts) + "}"


def encode_result_set(rows: Iterable[OrderedRow]) -> bytes:
    """
    Encode a result set as a JSON array of row objects.

    An empty result set encodes as ``[]``. Encoding is all-or-nothing: the
    first unsupported value aborts with SerializationError.
    """
    return ("[" + ",".join(_encode_row_text(row) for row in rows) + "]").encode("utf-8")
