"""
Field extraction from loosely shaped gateway payloads.

The gateway may wrap transaction fields under `data` or send them flat.
Each lookup is an ordered list of key paths tried in sequence; the first
path that resolves to a non-null value wins.
"""

from typing import Any, List, Optional, Sequence, Tuple

Path = Tuple[str, ...]

TRANSACTION_ID_KEYS = ("id", "transaction_id", "transactionId")
BOOKING_ID_KEYS = ("booking_id", "bookingId")
QR_CODE_KEYS = ("qr_code", "qrCode")
COPY_PASTE_KEYS = ("copy_paste", "copyPaste", "emv")


def dig(payload: Any, path: Path) -> Any:
    current = payload
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def first_present(payload: Any, paths: Sequence[Path]) -> Any:
    for path in paths:
        value = dig(payload, path)
        if value is not None:
            return value
    return None


def nested_then_flat(keys: Sequence[str], wrapper: str = "data") -> List[Path]:
    return [(wrapper, key) for key in keys] + [(key,) for key in keys]


def flat_then_nested(keys: Sequence[str], wrapper: str = "data") -> List[Path]:
    return [(key,) for key in keys] + [(wrapper, key) for key in keys]


def as_identifier(value: Any) -> Optional[str]:
    """Ids arrive as strings or numbers; anything else is unusable"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        return text or None
    return None


def as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def normalize_status(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ""
