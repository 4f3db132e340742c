"""
Popup and list rendering.

`render_detail` decides between a single detail card and a carousel for a
co-located group; `render_carousel_page` re-renders the carousel after a
next/previous step. Both return a DisplayPayload carrying the structured
card and its HTML.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape

from church_atlas.carousel import CarouselCursor, open_carousel
from church_atlas.categories import get_category
from church_atlas.config import FLY_TO_ZOOM
from church_atlas.features import Feature, record_coordinates
from church_atlas.formatting import display_value, fix_encoding, format_date, format_feast

Record = Dict[str, Any]
FieldRule = Tuple[str, Callable[[Record], str]]

_templates = Environment(
    loader=PackageLoader('church_atlas', 'templates'),
    autoescape=select_autoescape(['html']),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _plain(field: str) -> Callable[[Record], str]:
    return lambda r: display_value(r.get(field))


def _date(field: str) -> Callable[[Record], str]:
    return lambda r: format_date(r.get(field))


def _repaired(field: str) -> Callable[[Record], str]:
    return lambda r: fix_encoding(r.get(field))


def _date_if_flagged(field: str, flag: str) -> Callable[[Record], str]:
    # Saints carry a companion column (Born2, Died2) that is blank when the date is unknown
    return lambda r: format_date(r.get(field)) if display_value(r.get(flag)) else ''


POPE_ROWS: Tuple[FieldRule, ...] = (
    ('Actual Name', _plain('Actual Name')),
    ('Number', _plain('Pope Number')),
    ('Birth Place', _plain('Birth Place')),
    ('Country', _plain('Country')),
    ('Birth Day', _date('Birthday2')),
    ('Elected Date', _date('Elected Date2')),
    ('Election Age', _plain('Age at Election')),
    ('Installed Date', _date('Installed Date')),
    ('Installation Age', _plain('Age at Installation')),
    ('End of Reign', _date('End of Reign Date')),
    ('End of Reign Age', _plain('End of Reign Age')),
    ('Length', _plain('Length')),
    ('Century', _plain('Century')),
)

SAINT_ROWS: Tuple[FieldRule, ...] = (
    ('Born Date', _date_if_flagged('Born', 'Born2')),
    ('Born Location', _repaired('Born Location')),
    ('Country', _plain('Country')),
    ('Died Date', _date_if_flagged('Died', 'Died2')),
    ('Died Location', _repaired('Died Location')),
    ('Feast Date', lambda r: format_feast(r.get('Feast'))),
    ('Beatified', _date('Beatified')),
    ('Beatified Location', _plain('Beatified Location')),
    ('Canonized', _date('Canonised')),
    ('Bio', _repaired('Bio')),
)

MIRACLE_ROWS: Tuple[FieldRule, ...] = (
    ('Miracle', _plain('Summary')),
    ('Location', _plain('Location')),
    ('Date', _date('Date')),
    ('Details', _plain('Additional Details')),
    ('Summaries', _plain('Summaries')),
)

CARD_TEMPLATES: Dict[str, Tuple[Callable[[Record], str], Tuple[FieldRule, ...]]] = {
    'popes': (_plain('Papal Name'), POPE_ROWS),
    'saints': (_repaired('Name'), SAINT_ROWS),
    'miracles': (lambda r: 'Miracle Summary', MIRACLE_ROWS),
}


@dataclass(frozen=True)
class DetailCard:
    title: str
    rows: Tuple[Tuple[str, str], ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'rows': [{'label': label, 'value': value} for label, value in self.rows],
        }


@dataclass(frozen=True)
class DisplayPayload:
    kind: str  # 'detail' or 'carousel'
    category: str
    card: DetailCard
    html: str
    cursor: Optional[CarouselCursor] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            'kind': self.kind,
            'category': self.category,
            'card': self.card.to_dict(),
            'html': self.html,
            'carousel': None,
        }
        if self.cursor is not None:
            payload['carousel'] = {
                'index': self.cursor.index,
                'size': self.cursor.size,
                'position': self.cursor.position_label,
                'ids': [f.id for f in self.cursor.group],
            }
        return payload


def build_card(category: str, record: Record) -> DetailCard:
    key = get_category(category).key
    title_rule, rows = CARD_TEMPLATES[key]
    return DetailCard(
        title=title_rule(record),
        rows=tuple((label, rule(record)) for label, rule in rows),
    )


def render_detail(category: str, group: Sequence[Feature]) -> DisplayPayload:
    """Render the popup for a clicked point.

    One feature (or a category without carousels) gets a detail card for
    the first feature. Larger groups get a carousel shell whose first page
    is rendered from a fresh cursor at index 0.
    """
    if not group:
        raise ValueError("Cannot render a popup for an empty group")
    cat = get_category(category)
    if len(group) <= 1 or not cat.supports_carousel:
        card = build_card(cat.key, group[0].properties)
        html = _templates.get_template('card.html').render(card=card)
        return DisplayPayload(kind='detail', category=cat.key, card=card, html=html)
    return render_carousel_page(cat.key, open_carousel(group))


def render_carousel_page(category: str, cursor: CarouselCursor) -> DisplayPayload:
    """Render the feature under the cursor inside the carousel shell."""
    key = get_category(category).key
    card = build_card(key, cursor.current.properties)
    html = _templates.get_template('carousel.html').render(
        card=card, category=key, position=cursor.position_label)
    return DisplayPayload(kind='carousel', category=key, card=card, html=html, cursor=cursor)


# ---------------------------------------------------------------------------
# List panel entries
# ---------------------------------------------------------------------------

LIST_DETAILS: Dict[str, Tuple[Tuple[str, str], ...]] = {
    'popes': (('Actual Name', 'Actual Name'), ('Country', 'Country')),
    'saints': (('Country', 'Country'), ('Bio', 'Bio')),
    'miracles': (('Location', 'Location'), ('Country', 'Country2')),
}


def fly_to_target(record: Record) -> Optional[Dict[str, Any]]:
    """Map centre and zoom for jumping to a record, if it has coordinates."""
    coordinates = record_coordinates(record)
    if coordinates is None:
        return None
    return {'center': list(coordinates), 'zoom': FLY_TO_ZOOM}


def list_title(category: str, record: Record, position: int) -> str:
    if category == 'popes':
        return (display_value(record.get('Papal Name'))
                or display_value(record.get('Name'))
                or f'Item {position + 1}')
    if category == 'saints':
        return display_value(record.get('Name'))
    return display_value(record.get('Summary'))


def list_entries(category: str, records: Sequence[Record]) -> List[Dict[str, Any]]:
    key = get_category(category).key
    return [
        {
            'title': list_title(key, record, i),
            'details': [
                {'label': label, 'value': display_value(record.get(field))}
                for label, field in LIST_DETAILS[key]
            ],
            'target': fly_to_target(record),
        }
        for i, record in enumerate(records)
    ]
