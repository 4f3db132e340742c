"""
Central configuration for the Church Atlas server.
All paths, tunables and environment overrides live here.
"""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent

# Data location (override with CHURCH_ATLAS_DATA_DIR for deployments)
DATA_DIR = Path(os.getenv('CHURCH_ATLAS_DATA_DIR', PROJECT_ROOT / 'data'))

# Server
PORT = int(os.getenv('PORT', 3000))
DEBUG = os.getenv('FLASK_ENV', 'production') == 'development'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

# Saints search pagination
PAGE_LIMIT = 100

# Two features share a location when both axes differ by less than this (degrees)
COORD_TOLERANCE = 0.00001

# Map clustering parameters handed to the browser
CLUSTER_MAX_ZOOM = 14
CLUSTER_RADIUS = 50

# Zoom used when jumping to a record picked from the list panel
FLY_TO_ZOOM = 22
