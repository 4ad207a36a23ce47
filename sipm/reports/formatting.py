"""
Indonesian (id-ID) display formatting.

Matches what the registry has always shown:
    date      -> 10/3/2024
    timestamp -> 10/3/2024, 14.05.00
    short     -> 10 Mar
"""

from datetime import datetime, tzinfo
from typing import Optional


_SHORT_MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
    "Jul", "Agu", "Sep", "Okt", "Nov", "Des",
]


def _localize(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    return moment.astimezone(tz) if tz is not None else moment


def format_date(moment: datetime, tz: Optional[tzinfo] = None) -> str:
    moment = _localize(moment, tz)
    return f"{moment.day}/{moment.month}/{moment.year}"


def format_timestamp(moment: datetime, tz: Optional[tzinfo] = None) -> str:
    moment = _localize(moment, tz)
    return f"{format_date(moment)}, {moment:%H.%M.%S}"


def format_short_date(moment: datetime, tz: Optional[tzinfo] = None) -> str:
    moment = _localize(moment, tz)
    return f"{moment.day:02d} {_SHORT_MONTHS[moment.month - 1]}"
