"""
Record identifiers.

Every record gets a 24-hex-digit identifier built like a MongoDB ObjectId
(4-byte timestamp, 5-byte per-process random, 3-byte counter), so ids sort
in creation order within one process.  Anything that accepts an id from a
caller checks its shape with ``is_valid_id`` before touching the database.
Ids are lower-case hex; any other spelling is rejected rather than
looked up.
"""
import itertools
import os
import re
import time

from app.errors import FieldError

_ID_RE = re.compile(r"^[0-9a-f]{24}$")

_PROCESS_RANDOM = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))


def new_id() -> str:
    """Return a new 24-hex-digit identifier."""
    ts = int(time.time()).to_bytes(4, "big")
    seq = (next(_counter) & 0xFFFFFF).to_bytes(3, "big")
    return (ts + _PROCESS_RANDOM + seq).hex()


def is_valid_id(value) -> bool:
    return isinstance(value, str) and bool(_ID_RE.match(value))


def id_error(field: str, value, msg: str = "Invalid identifier") -> FieldError | None:
    """Return a FieldError for *value* if it is not a well-formed id."""
    if is_valid_id(value):
        return None
    return FieldError(field, msg)
