"""Record identifiers and timestamps shared by the stores."""
import secrets
import string
import time
from datetime import datetime, timezone

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LEN = 9


def now_ms() -> int:
    return int(time.time() * 1000)


def new_record_id(prefix: str, created_ms: int | None = None) -> str:
    """'pay' -> 'pay_1719999999999_k3j9x0a1b' (epoch ms + 9 random base36 chars)."""
    ms = created_ms if created_ms is not None else now_ms()
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"{prefix}_{ms}_{suffix}"


def iso_timestamp(created_ms: int) -> str:
    """Epoch ms -> '2026-02-27T02:08:24.123Z'."""
    dt = datetime.fromtimestamp(created_ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
