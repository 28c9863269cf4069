"""Post and comment identifiers."""

import secrets
import time

from .constants import ID_ALPHABET, ID_SUFFIX_LEN


def to_base36(n: int) -> str:
    """Encode a non-negative integer in base 36 (digits then lowercase)."""
    if n < 0:
        raise ValueError(f"cannot encode negative number: {n}")
    if n == 0:
        return ID_ALPHABET[0]
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(ID_ALPHABET[rem])
    return "".join(reversed(digits))


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def new_id(timestamp_ms: int | None = None) -> str:
    """Build an id from a base-36 timestamp plus a short random suffix.

    Ids sort roughly by creation time but are not strictly monotonic, and
    collisions are not checked; two ids minted in the same millisecond share
    a prefix and differ only in the 36**5 random tail.
    """
    ts = now_ms() if timestamp_ms is None else timestamp_ms
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LEN))
    return to_base36(ts) + suffix
