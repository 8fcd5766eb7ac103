"""Random coupon code generation."""

import secrets
import string

ALPHABET = string.ascii_uppercase + string.digits
MIN_RANDOM_LENGTH = 4


def generate_code(length: int = 8, prefix: str | None = None) -> str:
    """Return ``prefix`` (upper-cased) followed by random characters, ``length`` long in total."""
    if length < MIN_RANDOM_LENGTH:
        raise ValueError("Coupon code length must be at least 4 characters")

    prefix = (prefix or "").upper()
    random_length = length - len(prefix)
    if random_length < MIN_RANDOM_LENGTH:
        raise ValueError("Coupon code length after prefix must be at least 4 characters")

    return prefix + "".join(secrets.choice(ALPHABET) for _ in range(random_length))


def generate_formatted_code(segment_length: int = 4, segments: int = 2) -> str:
    """Return dash-separated random segments, e.g. ``7KQ2-MZ9A``."""
    if segment_length < 3:
        raise ValueError("Segment length must be at least 3 characters")
    if segments < 1:
        raise ValueError("Number of segments must be at least 1")

    return "-".join(
        "".join(secrets.choice(ALPHABET) for _ in range(segment_length)) for _ in range(segments)
    )
