"""Column-oriented OHLCV candle series."""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

CandleRow = Tuple[int, float, float, float, float, float]

FIELDS = ("time", "open", "high", "low", "close", "volume")


@dataclass
class CandleSeries:
    """
    Six aligned columns of candles.

    ``time`` holds candle open times in seconds since the epoch and is kept
    strictly increasing; every column has the same length.
    """

    time: List[int] = field(default_factory=list)
    open: List[float] = field(default_factory=list)
    high: List[float] = field(default_factory=list)
    low: List[float] = field(default_factory=list)
    close: List[float] = field(default_factory=list)
    volume: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.time)

    def __iter__(self) -> Iterator[CandleRow]:
        return iter(zip(self.time, self.open, self.high, self.low, self.close, self.volume))

    @property
    def is_empty(self) -> bool:
        return not self.time

    @property
    def first_time(self) -> Optional[int]:
        return self.time[0] if self.time else None

    @property
    def last_time(self) -> Optional[int]:
        return self.time[-1] if self.time else None

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]]) -> "CandleSeries":
        """Build a series from ``(time, open, high, low, close, volume)`` rows."""
        series = cls()
        for row in rows:
            series.time.append(int(row[0]))
            series.open.append(float(row[1]))
            series.high.append(float(row[2]))
            series.low.append(float(row[3]))
            series.close.append(float(row[4]))
            series.volume.append(float(row[5]) if len(row) > 5 and row[5] is not None else 0.0)
        return series

    def copy(self) -> "CandleSeries":
        return self.take(0, len(self))

    def take(self, start: int, stop: int) -> "CandleSeries":
        """Return the candles at positions ``[start, stop)`` as a new series."""
        return CandleSeries(
            time=self.time[start:stop],
            open=self.open[start:stop],
            high=self.high[start:stop],
            low=self.low[start:stop],
            close=self.close[start:stop],
            volume=self.volume[start:stop],
        )

    def between(self, from_time: int, to_time: int) -> "CandleSeries":
        """
        Return candles with ``from_time <= t <= to_time``.

        The first candle at or after ``to_time`` bounds the slice and is only
        kept when it sits exactly on ``to_time``.
        """
        if to_time < from_time:
            return CandleSeries()
        start = bisect_left(self.time, from_time)
        stop = bisect_right(self.time, to_time)
        return self.take(start, stop)

    def before(self, time_limit: int) -> "CandleSeries":
        """Return candles strictly older than ``time_limit``."""
        return self.take(0, bisect_left(self.time, time_limit))

    def since(self, time_limit: int) -> "CandleSeries":
        """Return candles at or after ``time_limit``."""
        return self.take(bisect_left(self.time, time_limit), len(self))

    def after(self, time_limit: int) -> "CandleSeries":
        """Return candles strictly newer than ``time_limit``."""
        return self.take(bisect_right(self.time, time_limit), len(self))

    def concat(self, other: "CandleSeries") -> "CandleSeries":
        """Field-by-field concatenation; the caller guarantees ordering."""
        return CandleSeries(
            time=self.time + other.time,
            open=self.open + other.open,
            high=self.high + other.high,
            low=self.low + other.low,
            close=self.close + other.close,
            volume=self.volume + other.volume,
        )

    @classmethod
    def concatenate(cls, parts: Iterable["CandleSeries"]) -> "CandleSeries":
        """
        Join ordered parts, dropping candles that do not move time forward.

        Adjacent upstream chunks may both report the candle on their shared
        boundary; the first report is kept.
        """
        result = cls()
        for part in parts:
            if part.is_empty:
                continue
            if result.is_empty:
                result = result.concat(part)
                continue
            result = result.concat(part.after(result.time[-1]))
        return result

    def is_well_formed(self) -> bool:
        """True when the columns are aligned and ``time`` strictly increases."""
        length = len(self.time)
        if any(len(getattr(self, name)) != length for name in FIELDS):
            return False
        return all(earlier < later for earlier, later in zip(self.time, self.time[1:]))

    def to_udf(self) -> Dict[str, List[Any]]:
        """Render as the UDF ``t/o/h/l/c/v`` arrays."""
        return {
            "t": list(self.time),
            "o": list(self.open),
            "h": list(self.high),
            "l": list(self.low),
            "c": list(self.close),
            "v": list(self.volume),
        }
