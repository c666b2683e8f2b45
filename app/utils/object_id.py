"""24-character hexadecimal object identifiers."""

from __future__ import annotations

import itertools
import os
import re
import time
from typing import Any

from app.exceptions import InvalidIdFormat

OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")

_process_unique = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, str) and OBJECT_ID_PATTERN.fullmatch(value) is not None


def generate_object_id() -> str:
    """Return a new id: 4-byte epoch seconds, 5 process bytes, 3-byte counter."""
    timestamp = int(time.time()).to_bytes(4, "big")
    count = (next(_counter) & 0xFFFFFF).to_bytes(3, "big")
    return (timestamp + _process_unique + count).hex()


def require_object_id(value: Any, field: str) -> None:
    """Raise InvalidIdFormat naming ``field`` unless ``value`` is a 24-hex id."""
    if not is_valid_object_id(value):
        raise InvalidIdFormat(field)
