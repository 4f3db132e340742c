"""
Record search.

Saints are searched server-side with pagination; popes and miracles are
small enough to return every match.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from church_atlas.categories import get_category
from church_atlas.config import PAGE_LIMIT


def parse_page(value: Optional[Any]) -> int:
    """Page numbers start at 1; missing, non-numeric or < 1 values mean page 1."""
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def _contains(frame: pd.DataFrame, field: str, needle: str) -> pd.Series:
    """Case-insensitive substring mask for one column."""
    if field not in frame.columns:
        return pd.Series(False, index=frame.index)
    return frame[field].fillna('').astype(str).str.lower().str.contains(needle, regex=False)


def _clause(frame: pd.DataFrame, field: str, needle: str) -> pd.Series:
    # An empty search value places no constraint on its field
    if not needle:
        return pd.Series(True, index=frame.index)
    return _contains(frame, field, needle)


def paginate(frame: pd.DataFrame, page: int, limit: int = PAGE_LIMIT) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    total = len(frame)
    start = (page - 1) * limit
    records = frame.iloc[start:start + limit].to_dict('records')
    return records, {
        'total': total,
        'totalPages': math.ceil(total / limit),
        'currentPage': page,
        'limit': limit,
    }


def filter_saints(frame: pd.DataFrame,
                  name: Optional[str] = '',
                  country: Optional[str] = '',
                  born: Optional[str] = '',
                  page: int = 1,
                  limit: int = PAGE_LIMIT) -> Dict[str, Any]:
    """
    Filter saints and return one page.

    A saint matches if ANY clause holds: `name` in Name, `country` in
    Country, or `born` in Born Location (case-insensitive substrings).
    An empty value makes its clause true, so a single empty parameter
    matches every saint. The web client sends the same search text in all
    three parameters, which makes this an OR-search over the three fields.
    """
    name = (name or '').lower()
    country = (country or '').lower()
    born = (born or '').lower()

    mask = (
        _clause(frame, 'Name', name)
        | _clause(frame, 'Country', country)
        | _clause(frame, 'Born Location', born)
    )
    records, pagination = paginate(frame[mask], page, limit)
    return {'saints': records, 'pagination': pagination}


def search_records(frame: pd.DataFrame, category: str, query: Optional[str]) -> List[Dict[str, Any]]:
    """List-panel search for popes and miracles, in load order.

    A record matches when any searchable field is non-empty and contains
    the query. An empty query therefore returns every record that has at
    least one searchable field filled in.
    """
    cat = get_category(category)
    needle = (query or '').lower()
    mask = pd.Series(False, index=frame.index)
    for field in cat.search_fields:
        if field not in frame.columns:
            continue
        filled = frame[field].fillna('').astype(str) != ''
        mask |= filled & _contains(frame, field, needle)
    return frame[mask].to_dict('records')
