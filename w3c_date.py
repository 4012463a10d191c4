"""Formats and parses dates in the six W3C date/time formats.

The formats are described in "Date and Time Formats"
(https://www.w3.org/TR/NOTE-datetime):

- YEAR: YYYY (eg 1997)
- MONTH: YYYY-MM (eg 1997-07)
- DAY: YYYY-MM-DD (eg 1997-07-16)
- MINUTE: YYYY-MM-DDThh:mmTZD (eg 1997-07-16T19:20+01:00)
- SECOND: YYYY-MM-DDThh:mm:ssTZD (eg 1997-07-16T19:20:30+01:00)
- MILLISECOND: YYYY-MM-DDThh:mm:ss.sssTZD (eg 1997-07-16T19:20:30.450+01:00)

W3C time zone designators (TZD) are either the letter "Z" (for UTC) or an
offset like "+00:30" or "-08:00".

A formatter either uses one fixed pattern or, in AUTO mode, picks the
coarsest pattern that loses no information when formatting:

1. If the date has non-zero milliseconds, use MILLISECOND
2. Otherwise, if the date has non-zero seconds, use SECOND
3. Otherwise, if the date is not exactly midnight, use MINUTE
4. Otherwise, use DAY. MONTH and YEAR must be requested explicitly.

When parsing in AUTO mode any of the six shapes is accepted.
"""

import dataclasses
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import ClassVar, Dict, Optional, Union

from sitemap_errors import FormatError


class Precision(Enum):
    """Precision of a W3C date/time pattern."""
    YEAR = 'year'
    MONTH = 'month'
    DAY = 'day'
    MINUTE = 'minute'
    SECOND = 'second'
    MILLISECOND = 'millisecond'
    AUTO = 'auto'


_YEAR = r'(?P<year>\d{4})'
_MONTH = r'-(?P<month>\d{2})'
_DAY = r'-(?P<day>\d{2})'
_MINUTE = r'T(?P<hour>\d{2}):(?P<minute>\d{2})'
_SECOND = r':(?P<second>\d{2})'
_FRACTION = r'\.(?P<fraction>\d+)'
_TZD = r'(?P<tzd>Z|[+-]\d{2}:\d{2})?'

_PARSERS: Dict[Precision, re.Pattern] = {
    Precision.YEAR: re.compile(_YEAR),
    Precision.MONTH: re.compile(_YEAR + _MONTH),
    Precision.DAY: re.compile(_YEAR + _MONTH + _DAY),
    Precision.MINUTE: re.compile(_YEAR + _MONTH + _DAY + _MINUTE + _TZD),
    Precision.SECOND: re.compile(_YEAR + _MONTH + _DAY + _MINUTE + _SECOND + _TZD),
    Precision.MILLISECOND: re.compile(
        _YEAR + _MONTH + _DAY + _MINUTE + _SECOND + _FRACTION + _TZD
    ),
    Precision.AUTO: re.compile(
        _YEAR + '(?:' + _MONTH + '(?:' + _DAY + '(?:' + _MINUTE
        + '(?:' + _SECOND + '(?:' + _FRACTION + ')?)?' + _TZD + ')?)?)?'
    ),
}

Timestamp = Union[datetime, date]


def _as_datetime(value: Timestamp) -> datetime:
    """Return an offset-aware datetime; naive values and plain dates are UTC."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None or value.utcoffset() is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _auto_precision(value: datetime) -> Precision:
    if value.microsecond // 1000 > 0:
        return Precision.MILLISECOND
    elif value.second > 0:
        return Precision.SECOND
    elif value.hour + value.minute > 0:
        return Precision.MINUTE
    else:
        return Precision.DAY


def _format_tzd(value: datetime) -> str:
    offset = value.utcoffset()
    if not offset:
        return 'Z'
    sign = '-' if offset < timedelta(0) else '+'
    minutes = abs(int(offset.total_seconds())) // 60
    return f'{sign}{minutes // 60:02d}:{minutes % 60:02d}'


def _parse_tzd(tzd: Optional[str]) -> tzinfo:
    if tzd is None or tzd == 'Z':
        return timezone.utc
    sign = -1 if tzd[0] == '-' else 1
    hours, minutes = int(tzd[1:3]), int(tzd[4:6])
    offset = sign * timedelta(hours=hours, minutes=minutes)
    if not offset:
        return timezone.utc
    return timezone(offset)


@dataclasses.dataclass(frozen=True)
class W3CDateFormat:
    """Formatter/parser for one W3C pattern (or AUTO) bound to a time zone.

    Instances are immutable and can be shared between generators and
    threads. Use the class-level constants (``W3CDateFormat.AUTO``,
    ``W3CDateFormat.SECOND``, ...) and ``with_zone`` to get a formatter.

    Attributes:
        precision: Which pattern to use, or ``Precision.AUTO``.
        time_zone: Zone that formatted dates are converted into.
    """

    precision: Precision = Precision.AUTO
    time_zone: tzinfo = timezone.utc

    AUTO: ClassVar['W3CDateFormat']
    MILLISECOND: ClassVar['W3CDateFormat']
    SECOND: ClassVar['W3CDateFormat']
    MINUTE: ClassVar['W3CDateFormat']
    DAY: ClassVar['W3CDateFormat']
    MONTH: ClassVar['W3CDateFormat']
    YEAR: ClassVar['W3CDateFormat']

    @property
    def is_auto(self) -> bool:
        return self.precision is Precision.AUTO

    def with_zone(self, time_zone: tzinfo) -> 'W3CDateFormat':
        """Return a copy of this formatter that converts dates into ``time_zone``."""
        return dataclasses.replace(self, time_zone=time_zone)

    def format(self, value: Timestamp) -> str:
        """Format a date using this formatter's pattern.

        Args:
            value: Date to format. Naive datetimes and plain dates are UTC.

        Returns:
            The W3C formatted date string.
        """
        value = _as_datetime(value).astimezone(self.time_zone)
        precision = _auto_precision(value) if self.is_auto else self.precision

        text = f'{value.year:04d}'
        if precision is Precision.YEAR:
            return text
        text += f'-{value.month:02d}'
        if precision is Precision.MONTH:
            return text
        text += f'-{value.day:02d}'
        if precision is Precision.DAY:
            return text
        text += f'T{value.hour:02d}:{value.minute:02d}'
        if precision is Precision.SECOND or precision is Precision.MILLISECOND:
            text += f':{value.second:02d}'
        if precision is Precision.MILLISECOND:
            text += f'.{value.microsecond // 1000:03d}'
        return text + _format_tzd(value)

    def parse(self, text: str) -> datetime:
        """Parse a W3C date string.

        Fields missing from the text default to the start of the period
        (month 1, day 1, midnight) and a missing designator means UTC. The
        returned datetime keeps the offset written in the text.

        Raises:
            FormatError: If the text does not match this formatter's pattern(s).
        """
        match = _PARSERS[self.precision].fullmatch(text.strip()) if text else None
        if match is None:
            raise FormatError(f"Unparseable {self.precision.value} date: {text!r}")

        fields = match.groupdict()
        fraction = fields.get('fraction') or '0'
        try:
            return datetime(
                int(fields['year']),
                int(fields.get('month') or 1),
                int(fields.get('day') or 1),
                int(fields.get('hour') or 0),
                int(fields.get('minute') or 0),
                int(fields.get('second') or 0),
                int(fraction[:6].ljust(6, '0')),
                tzinfo=_parse_tzd(fields.get('tzd')),
            )
        except ValueError as e:
            raise FormatError(f"Invalid {self.precision.value} date: {text!r}") from e


W3CDateFormat.AUTO = W3CDateFormat(Precision.AUTO)
W3CDateFormat.MILLISECOND = W3CDateFormat(Precision.MILLISECOND)
W3CDateFormat.SECOND = W3CDateFormat(Precision.SECOND)
W3CDateFormat.MINUTE = W3CDateFormat(Precision.MINUTE)
W3CDateFormat.DAY = W3CDateFormat(Precision.DAY)
W3CDateFormat.MONTH = W3CDateFormat(Precision.MONTH)
W3CDateFormat.YEAR = W3CDateFormat(Precision.YEAR)
