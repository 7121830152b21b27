import secrets
from datetime import datetime

__all__ = ["to_base36", "gen_quote_id"]

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def gen_quote_id(created_at: datetime) -> str:
    """QC-<base36 epoch millis>-<5 random base36 chars>, upper-cased."""
    epoch_ms = int(created_at.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(5))
    return f"QC-{to_base36(epoch_ms)}-{suffix}".upper()
