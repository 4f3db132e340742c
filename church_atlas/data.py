"""
Data provider: loads the popes, saints and miracles CSVs once at startup
and keeps them in memory as string-typed DataFrames.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from church_atlas.categories import CATEGORIES, get_category
from church_atlas.features import Feature, build_features

logger = logging.getLogger(__name__)


def read_category_csv(path: Path, fields: List[str]) -> pd.DataFrame:
    """Read one category CSV with every cell as a string ('' for blanks)."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding='utf-8')

    # Schema columns the file lacks are added empty so lookups never KeyError
    missing = [col for col in fields if col not in df.columns]
    if missing:
        logger.warning("%s is missing columns %s; filling with blanks", path.name, missing)
        for col in missing:
            df[col] = ''
    return df.reset_index(drop=True)


class ChurchData:
    """The three loaded record sets plus the map features derived from them."""

    def __init__(self, frames: Dict[str, pd.DataFrame]):
        self.frames = frames
        self.records: Dict[str, List[Dict[str, Any]]] = {
            key: df.to_dict('records') for key, df in frames.items()
        }
        self.features: Dict[str, List[Feature]] = {
            key: build_features(key, df) for key, df in frames.items()
        }

    def frame(self, category: str) -> pd.DataFrame:
        return self.frames[get_category(category).key]

    def features_for(self, category: str) -> List[Feature]:
        return self.features[get_category(category).key]

    def all_features(self) -> List[Feature]:
        return [f for key in self.features for f in self.features[key]]

    def to_json(self) -> Dict[str, List[Dict[str, Any]]]:
        return dict(self.records)


def load_church_data(data_dir: Union[str, Path]) -> ChurchData:
    data_dir = Path(data_dir)
    frames = {}
    for key, category in CATEGORIES.items():
        frames[key] = read_category_csv(data_dir / category.csv_file, list(category.fields))
        logger.info("Total %s loaded: %d", key.capitalize(), len(frames[key]))
    return ChurchData(frames)


class DataProvider:
    """Holds the loaded data, or the reason loading failed.

    A failed load does not stop the server; routes that need the data
    answer 500 instead.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.data: Optional[ChurchData] = None
        self.error: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.data is not None

    def load(self) -> Optional[ChurchData]:
        try:
            self.data = load_church_data(self.data_dir)
            self.error = None
        except (OSError, ValueError) as e:
            # FileNotFoundError, pandas ParserError/EmptyDataError, bad encodings
            logger.exception("Failed to load church data from %s", self.data_dir)
            self.data = None
            self.error = str(e)
        return self.data
