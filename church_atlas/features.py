"""Map features: records with a parsed coordinate, and their GeoJSON form."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from shapely.geometry import MultiPoint, Point, mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Feature:
    id: str
    category: str
    point: Point  # Shapely uses (lon, lat) order
    properties: Dict[str, Any] = field(hash=False)

    @property
    def lon(self) -> float:
        return self.point.x

    @property
    def lat(self) -> float:
        return self.point.y

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.point.x, self.point.y)

    def to_geojson(self) -> Dict[str, Any]:
        return {
            'type': 'Feature',
            'id': self.id,
            'geometry': mapping(self.point),
            'properties': {**self.properties, 'category': self.category},
        }


def parse_coordinates(frame: pd.DataFrame) -> pd.DataFrame:
    """Numeric Longitude/Latitude columns; unparseable cells become NaN."""
    coords = frame[['Longitude', 'Latitude']].apply(pd.to_numeric, errors='coerce')
    # inf/-inf parse as numbers but cannot be placed on a map
    return coords.where(coords.abs() != float('inf'))


def build_features(category: str, frame: pd.DataFrame) -> List[Feature]:
    """Wrap every record with usable coordinates as a Feature.

    Rows with blank or malformed coordinates are skipped and logged, never
    raised. Feature ids number the usable rows only: "{category}-{i}".
    """
    if frame.empty or not {'Longitude', 'Latitude'}.issubset(frame.columns):
        logger.warning("No valid coordinates found for %s", category)
        return []

    coords = parse_coordinates(frame)
    valid = coords.notna().all(axis=1)
    skipped = int((~valid).sum())
    if skipped:
        logger.warning("Skipped %d %s records with malformed coordinates", skipped, category)

    records = frame[valid].to_dict('records')
    lons = coords.loc[valid, 'Longitude'].tolist()
    lats = coords.loc[valid, 'Latitude'].tolist()
    features = [
        Feature(id=f'{category}-{i}', category=category, point=Point(lon, lat), properties=record)
        for i, (record, lon, lat) in enumerate(zip(records, lons, lats))
    ]
    logger.info("Valid entries for %s: %d/%d", category, len(features), len(frame))
    return features


def record_coordinates(record: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    """(lon, lat) of a single record under the same rule as build_features, or None."""
    frame = pd.DataFrame([{'Longitude': record.get('Longitude'), 'Latitude': record.get('Latitude')}])
    coords = parse_coordinates(frame).iloc[0]
    if coords.isna().any():
        return None
    return (float(coords['Longitude']), float(coords['Latitude']))


def features_from_records(category: str, records: Iterable[Dict[str, Any]]) -> List[Feature]:
    """Build features from plain record dicts, as delivered by /api/church-data."""
    frame = pd.DataFrame.from_records(list(records))
    if not frame.empty:
        frame = frame.fillna('').astype(str)
    return build_features(category, frame)


def feature_collection(features: Iterable[Feature]) -> Dict[str, Any]:
    return {
        'type': 'FeatureCollection',
        'features': [f.to_geojson() for f in features],
    }


def data_bounds(features: Iterable[Feature]) -> Optional[Tuple[float, float, float, float]]:
    """(west, south, east, north) around all features, or None when empty."""
    points = [f.point for f in features]
    if not points:
        return None
    return MultiPoint(points).bounds
