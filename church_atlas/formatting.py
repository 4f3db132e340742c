"""
Display formatting for popup fields.

None of these functions raise on bad input: a value that cannot be
interpreted is shown as-is (dates) or as an empty string (feast days).
"""

import re
from datetime import date, datetime
from typing import Any

import pandas as pd
from dateutil import parser as date_parser

# Missing date parts default to 1 January 1970
_DATE_DEFAULT = datetime(1970, 1, 1)

# Feast days carry no year; 2000 is a leap year so 2.29 is valid
_FEAST_YEAR = 2000

_NON_ASCII = re.compile(r'[^\x00-\x7f]')

# Text without a three or four digit run has no year to anchor on
_YEAR_TOKEN = re.compile(r'\d{3,4}')


def display_value(value: Any) -> str:
    """Missing or falsy values (None, NaN, '', 0) render as an empty string."""
    if isinstance(value, float) and pd.isna(value):
        return ''
    if not value:
        return ''
    return str(value)


def format_date(value: Any) -> str:
    """Render a date as 'Tue Mar 19 1920', or the raw text if it is not a date."""
    text = display_value(value)
    if not text:
        return ''
    if not _YEAR_TOKEN.search(text):
        return text
    try:
        parsed = date_parser.parse(text, default=_DATE_DEFAULT)
    except (ValueError, OverflowError):
        return text
    return f'{parsed:%a %b %d} {parsed.year:04d}'


def format_feast(value: Any) -> str:
    """Convert a saint's 'month.day' feast code, e.g. '3.19' -> 'March 19'."""
    text = display_value(value).strip()
    if not text:
        return ''
    parts = text.split('.')
    try:
        month, day = int(parts[0]), int(parts[1])
        feast = date(_FEAST_YEAR, month, day)
    except (IndexError, ValueError):
        return ''
    return f'{feast:%B} {feast.day}'


def fix_encoding(value: Any) -> str:
    """Undo UTF-8 text that was decoded as Latin-1 ('JosÃ©' -> 'José').

    Text that is already correct is returned unchanged: either the
    round trip fails, or it would strip every non-ASCII character.
    """
    text = display_value(value)
    if not text:
        return ''
    try:
        fixed = text.encode('latin-1').decode('utf-8')
    except (UnicodeEncodeError, UnicodeDecodeError):
        return text
    if _NON_ASCII.search(text) and not _NON_ASCII.search(fixed):
        return text
    return fixed
