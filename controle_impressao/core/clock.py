# controle_impressao/core/clock.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    # datas gravadas sem tzinfo, sempre em UTC
    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc).replace(tzinfo=None)
