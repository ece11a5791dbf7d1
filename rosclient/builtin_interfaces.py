"""Over-the-wire ``Time`` and ``Duration`` message types.

``Time`` is held in memory as a signed 64-bit nanosecond count since the
Unix epoch.  On the wire it is a signed 32-bit whole-second part plus an
unsigned nanosecond fraction, so serialization saturates in 2038.
"""

from __future__ import annotations

import logging
import time as _time
from dataclasses import dataclass
from typing import ClassVar

logger = logging.getLogger(__name__)

NANOS_PER_SEC = 1_000_000_000
I32_MIN = -(2**31)
I32_MAX = 2**31 - 1
U32_MAX = 2**32 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


def _trunc_divmod(dividend: int, divisor: int) -> tuple[int, int]:
    """Division that truncates toward zero; the remainder takes the dividend's sign."""
    quot = abs(dividend) // divisor
    if dividend < 0:
        quot = -quot
    return quot, dividend - quot * divisor


@dataclass(frozen=True)
class WireTime:
    """Wire representation of a timestamp: whole seconds and a non-negative fraction."""

    sec: int
    nanosec: int


@dataclass(frozen=True, order=True)
class Time:
    """A timestamp as nanoseconds since the Unix epoch."""

    nanos_since_epoch: int = 0

    ZERO: ClassVar[Time]
    DUMMY: ClassVar[Time]

    @classmethod
    def now(cls) -> Time:
        """Return the current system-clock time."""
        nanos = _time.time_ns()
        if not I64_MIN <= nanos <= I64_MAX:
            logger.error("Timestamp out of range.")
            return cls.ZERO
        return cls(nanos)

    @classmethod
    def from_nanos(cls, nanos: int) -> Time:
        return cls(nanos)

    def to_nanos(self) -> int:
        return self.nanos_since_epoch

    def to_wire(self) -> WireTime:
        """Convert to seconds and fraction, saturating the seconds to 32 bits."""
        quot, rem = _trunc_divmod(self.nanos_since_epoch, NANOS_PER_SEC)
        if rem >= 0:
            if quot > I32_MAX:
                logger.warning("rcl_interfaces::Time conversion overflow")
                sec = I32_MAX
            elif quot < I32_MIN:
                logger.warning("rcl_interfaces::Time conversion underflow")
                sec = I32_MIN
            else:
                sec = quot
            return WireTime(sec=sec, nanosec=rem)
        # Negative time with a non-zero fraction: borrow one second so the
        # fractional part stays positive.
        if quot >= I32_MIN:
            quot_sat = quot
        else:
            logger.warning("rcl_interfaces::Time conversion underflow")
            quot_sat = I32_MIN
        return WireTime(sec=quot_sat - 1, nanosec=NANOS_PER_SEC + rem)

    @classmethod
    def from_wire(cls, wire: WireTime) -> Time:
        """Build from the wire form; an out-of-range fraction is warned about but kept."""
        if wire.nanosec >= NANOS_PER_SEC:
            logger.warning(
                "builtin_interfaces::Time fractional part at 1 or greater: %s / 10^9 ",
                wire.nanosec,
            )
        return cls(wire.sec * NANOS_PER_SEC + wire.nanosec)


Time.ZERO = Time(0)
Time.DUMMY = Time(1234567890123)


@dataclass(frozen=True)
class Duration:
    """Wire representation of a time difference."""

    sec: int = 0
    nanosec: int = 0

    @classmethod
    def zero(cls) -> Duration:
        return cls(0, 0)

    @classmethod
    def from_secs(cls, sec: int) -> Duration:
        return cls(sec, 0)

    @classmethod
    def from_millis(cls, millis: int) -> Duration:
        return cls.from_nanos(millis * 1_000_000)

    @classmethod
    def from_nanos(cls, nanos: int) -> Duration:
        """Split a nanosecond count, saturating when the seconds overflow 32 bits."""
        quot, rem = _trunc_divmod(nanos, NANOS_PER_SEC)
        if rem >= 0:
            if quot > I32_MAX:
                return cls(I32_MAX, U32_MAX)
            if quot <= I32_MIN:
                return cls(I32_MIN, 0)
            return cls(quot, rem)
        if quot <= I32_MIN:
            return cls(I32_MIN, 0)
        return cls(quot + 1, NANOS_PER_SEC + rem)

    def to_nanos(self) -> int:
        return NANOS_PER_SEC * self.sec + self.nanosec