"""Time helpers."""

from __future__ import annotations

import datetime as dt
import time


def now_ms() -> int:
    return int(time.time() * 1000)


def format_ms(ts: int) -> str:
    return dt.datetime.fromtimestamp(ts / 1000).strftime("%Y-%m-%d %H:%M")
