from typing import List, Sequence, Tuple

from church_atlas.config import COORD_TOLERANCE
from church_atlas.features import Feature


def group_by_location(all_features: Sequence[Feature],
                      reference_coord: Tuple[float, float],
                      tolerance: float = COORD_TOLERANCE) -> List[Feature]:
    """
    Return every feature sitting at the clicked point, in load order.

    A feature matches when its longitude AND its latitude each differ from
    the reference by less than `tolerance` degrees. This is a per-axis
    box test, not a radial distance. `reference_coord` is (lon, lat) as
    delivered by the click, so grouping on a feature's own coordinate
    always includes that feature.
    """
    ref_lon, ref_lat = reference_coord
    return [
        f for f in all_features
        if abs(f.lon - ref_lon) < tolerance and abs(f.lat - ref_lat) < tolerance
    ]
