"""Fractional order keys.

An order key is a string of base-62 digits (``0-9``, ``A-Z``, ``a-z``, in
ASCII order) read as the digits of a fraction after the radix point, so
plain byte-wise string comparison orders keys the same way their numeric
values are ordered. A new key can be placed between any two distinct keys
by extending the digit string, which means siblings never have to be
renumbered and the key space never runs out.

Generated keys never end in the zero digit: ``"a"`` and ``"a0"`` have the
same value but different byte order, and a key ending in zero leaves no
room directly below it. Keys written by older versions (the store default
``"0"``, or keys such as ``"a0"``) are still accepted as bounds.
"""

DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
ZERO = DIGITS[0]

_DIGIT_VALUES = {digit: value for value, digit in enumerate(DIGITS)}


class OrderKeyError(ValueError):
    """Raised for malformed keys or when no key fits the requested interval."""


def validate_order_key(key: str) -> str:
    """Check that ``key`` is a non-empty base-62 digit string.

    Args:
        key: The key to check.

    Returns:
        The key, unchanged.

    Raises:
        OrderKeyError: If the key is empty or has characters outside the alphabet.
    """
    if not isinstance(key, str) or not key:
        raise OrderKeyError(f"Invalid order key: {key!r}")
    for char in key:
        if char not in _DIGIT_VALUES:
            raise OrderKeyError(f"Invalid order key {key!r}: bad character {char!r}")
    return key


def _midpoint(low: str, high: str | None) -> str:
    """Return a digit string strictly between ``low`` and ``high``.

    ``low`` may be empty (the value zero) and ``high`` may be None (the
    value one). Neither bound may end in the zero digit.
    """
    if high is not None:
        # Copy the shared prefix; pad ``low`` with zeros while scanning.
        n = 0
        while n < len(high) and (low[n] if n < len(low) else ZERO) == high[n]:
            n += 1
        if n > 0:
            return high[:n] + _midpoint(low[n:], high[n:])

    digit_low = _DIGIT_VALUES[low[0]] if low else 0
    digit_high = _DIGIT_VALUES[high[0]] if high is not None else len(DIGITS)

    if digit_high - digit_low > 1:
        return DIGITS[(digit_low + digit_high + 1) // 2]

    # Adjacent leading digits.
    if high is not None and len(high) > 1:
        return high[0]
    return DIGITS[digit_low] + _midpoint(low[1:], None)


def key_between(before: str | None, after: str | None) -> str:
    """Generate a key that sorts strictly between ``before`` and ``after``.

    Args:
        before: Key of the preceding item, or None for no lower bound.
        after: Key of the following item, or None for no upper bound.

    Returns:
        A new key. ``key_between(None, None)`` returns ``DEFAULT_KEY``.

    Raises:
        OrderKeyError: If a bound is malformed, ``before >= after``, or no
            key exists between the bounds (e.g. ``"a"`` and ``"a0"``).
    """
    low = ""
    high = None
    if before is not None:
        low = validate_order_key(before).rstrip(ZERO)
    if after is not None:
        high = validate_order_key(after).rstrip(ZERO)
        if before is not None and before >= after:
            raise OrderKeyError(f"Order keys out of order: {before!r} >= {after!r}")
        if low == high:
            raise OrderKeyError(f"No order key fits between {before!r} and {after!r}")

    return _midpoint(low, high)


def key_at_start(first: str | None) -> str:
    """Generate a key that sorts before ``first`` (or the default key)."""
    return key_between(None, first)


def key_at_end(last: str | None) -> str:
    """Generate a key that sorts after ``last`` (or the default key)."""
    return key_between(last, None)


DEFAULT_KEY = key_between(None, None)
