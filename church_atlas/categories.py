"""Category registry: file names, field schemas and map styling per category."""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


class UnknownCategoryError(KeyError):
    """Raised when a category outside popes/saints/miracles is requested."""


@dataclass(frozen=True)
class Category:
    key: str
    csv_file: str
    fields: Tuple[str, ...]
    search_fields: Tuple[str, ...]
    icon: str
    # (lightest, medium, darker, darkest) cluster fill colours
    cluster_colors: Tuple[str, str, str, str]
    supports_carousel: bool = True


POPES = Category(
    key='popes',
    csv_file='popes.csv',
    fields=(
        'Papal Name', 'Actual Name', 'Pope Number', 'Birth Place', 'Country',
        'Birthday2', 'Elected Date2', 'Age at Election', 'Installed Date',
        'Age at Installation', 'End of Reign Date', 'End of Reign Age',
        'Length', 'Century', 'Latitude', 'Longitude',
    ),
    search_fields=('Papal Name', 'Actual Name', 'Birth Place', 'Country'),
    icon='pope-icon',
    cluster_colors=('#ffebee', '#ef9a9a', '#e57373', '#c62828'),
)

SAINTS = Category(
    key='saints',
    csv_file='saints.csv',
    fields=(
        'Name', 'Born', 'Born2', 'Born Location', 'Country', 'Died', 'Died2',
        'Died Location', 'Feast', 'Beatified', 'Beatified Location',
        'Canonised', 'Bio', 'Latitude', 'Longitude',
    ),
    search_fields=('Name', 'Country', 'Born Location'),
    icon='saint-icon',
    cluster_colors=('#e8f5e9', '#a5d6a7', '#66bb6a', '#2e7d32'),
)

MIRACLES = Category(
    key='miracles',
    csv_file='miracles.csv',
    fields=(
        'Summary', 'Location', 'Date', 'Additional Details', 'Summaries',
        'Country2', 'Latitude', 'Longitude',
    ),
    search_fields=('Summary', 'Country2', 'Location'),
    icon='miracle-icon',
    cluster_colors=('#e3f2fd', '#90caf9', '#42a5f5', '#1565c0'),
    supports_carousel=False,
)

CATEGORIES: Dict[str, Category] = {c.key: c for c in (POPES, SAINTS, MIRACLES)}
CATEGORY_KEYS: List[str] = list(CATEGORIES)

# point_count thresholds at which the cluster colour and radius step up
CLUSTER_STEPS = (10, 30, 100)
CLUSTER_RADII = (10, 12, 14, 16)


def get_category(key: str) -> Category:
    try:
        return CATEGORIES[key]
    except KeyError:
        raise UnknownCategoryError(key) from None


def layer_ids(key: str) -> Dict[str, str]:
    """Map source/layer ids the browser uses for a category."""
    return {
        'source': f'{key}-source',
        'clusters': f'{key}-clusters',
        'counts': f'{key}-cluster-counts',
        'points': f'{key}-points',
    }


def cluster_color_expression(category: Category) -> List[Any]:
    """MapLibre `step` expression colouring clusters by point_count."""
    lightest, medium, darker, darkest = category.cluster_colors
    low, mid, high = CLUSTER_STEPS
    return ['step', ['get', 'point_count'],
            lightest, low, medium, mid, darker, high, darkest]


def cluster_radius_expression() -> List[Any]:
    r0, r1, r2, r3 = CLUSTER_RADII
    low, mid, high = CLUSTER_STEPS
    return ['step', ['get', 'point_count'], r0, low, r1, mid, r2, high, r3]
