"""Application grid – Formatter applying a column's ``format`` to raw cell values.

Formats produce values for a spreadsheet, not for a browser: ``integer`` and
``decimal`` return numbers so the written cell stays numeric, and ``text``
returns the string unescaped (writers escape for their own medium).
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Sequence, Union

from grid_export.config.validation import ExportConfigError

FormatSpec = Union[str, Sequence[Any], Callable[[Any], Any], None]


class Formatter:
    """Formats values by name (``"decimal"``) or ``[name, *args]`` (``["decimal", 3]``)."""

    def __init__(
        self,
        *,
        boolean_format: tuple[str, str] = ("No", "Yes"),
        date_format: str = "%Y-%m-%d",
        datetime_format: str = "%Y-%m-%d %H:%M:%S",
        time_format: str = "%H:%M:%S",
        decimals: int = 2,
    ) -> None:
        self.boolean_format = boolean_format
        self.date_format = date_format
        self.datetime_format = datetime_format
        self.time_format = time_format
        self.decimals = decimals
        self._formats: dict[str, Callable[..., Any]] = {
            "raw": lambda v: v,
            "text": self.as_text,
            "ntext": self.as_text,
            "html": self.as_text,
            "email": self.as_text,
            "url": self.as_text,
            "integer": self.as_integer,
            "decimal": self.as_decimal,
            "percent": self.as_percent,
            "boolean": self.as_boolean,
            "date": self.as_date,
            "datetime": self.as_datetime,
            "time": self.as_time,
        }

    def format(self, value: Any, fmt: FormatSpec) -> Any:
        if value is None or value == "":
            return ""
        if fmt is None:
            return value
        if callable(fmt):
            return fmt(value)
        args: Sequence[Any] = ()
        if not isinstance(fmt, str):
            if not fmt:
                return value
            fmt, *args = fmt
        handler = self._formats.get(str(fmt).lower())
        if handler is None:
            raise ExportConfigError(f"Unknown format type: {fmt!r}", detail={"format": fmt})
        return handler(value, *args)

    def register(self, name: str, handler: Callable[..., Any]) -> None:
        """Register a custom named format; *handler* receives ``(value, *args)``."""
        self._formats[name.lower()] = handler

    @staticmethod
    def as_text(value: Any) -> str:
        return str(value)

    @staticmethod
    def as_integer(value: Any) -> int:
        return int(float(value))

    def as_decimal(self, value: Any, decimals: int | None = None) -> float:
        return round(float(value), self.decimals if decimals is None else decimals)

    def as_percent(self, value: Any, decimals: int = 0) -> str:
        return f"{float(value) * 100:.{decimals}f}%"

    def as_boolean(self, value: Any) -> str:
        if isinstance(value, str):
            value = value.strip().lower() not in ("", "0", "false", "no", "off")
        return self.boolean_format[1] if value else self.boolean_format[0]

    def as_date(self, value: Any, fmt: str | None = None) -> str:
        return self._to_datetime(value).strftime(fmt or self.date_format)

    def as_datetime(self, value: Any, fmt: str | None = None) -> str:
        return self._to_datetime(value).strftime(fmt or self.datetime_format)

    def as_time(self, value: Any, fmt: str | None = None) -> str:
        if isinstance(value, dt.time):
            return value.strftime(fmt or self.time_format)
        return self._to_datetime(value).strftime(fmt or self.time_format)

    @staticmethod
    def _to_datetime(value: Any) -> dt.datetime | dt.date:
        if isinstance(value, (dt.datetime, dt.date)):
            return value
        if isinstance(value, (int, float)):
            return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
        return dt.datetime.fromisoformat(str(value))


__all__ = ["FormatSpec", "Formatter"]
