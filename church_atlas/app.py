import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from flask_compress import Compress
from flask_cors import CORS
from werkzeug.datastructures import ImmutableMultiDict

from church_atlas import config
from church_atlas.carousel import STEPS, open_carousel
from church_atlas.categories import (
    CATEGORIES, CATEGORY_KEYS, UnknownCategoryError, cluster_color_expression,
    cluster_radius_expression, get_category, layer_ids,
)
from church_atlas.data import ChurchData, DataProvider
from church_atlas.features import data_bounds, feature_collection
from church_atlas.grouping import group_by_location
from church_atlas.render import list_entries, render_carousel_page, render_detail
from church_atlas.search import filter_saints, parse_page, search_records

logger = logging.getLogger(__name__)

api = Blueprint('church_atlas', __name__)

LOAD_ERROR = 'Failed to load church data'


def get_data() -> Optional[ChurchData]:
    return current_app.extensions['church_atlas'].data


def data_unavailable() -> Tuple[Response, int]:
    return jsonify({'error': LOAD_ERROR}), 500


# ============================================================================
# HELPER FUNCTIONS: Input Validation
# ============================================================================

def validate_popup_args(request_args: ImmutableMultiDict) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Validate the clicked coordinate and carousel position for a popup request.

    Returns:
        tuple: (parsed dict, error_message str or None)
    """
    parsed = {}

    for name in ('lon', 'lat'):
        raw = request_args.get(name)
        if raw is None or raw == '':
            return None, f"Missing {name} parameter"
        try:
            parsed[name] = float(raw)
        except ValueError:
            return None, f"Invalid {name} format - must be numeric"

    if not -180.0 <= parsed['lon'] <= 180.0:
        return None, "Longitude must be between -180 and 180"
    if not -90.0 <= parsed['lat'] <= 90.0:
        return None, "Latitude must be between -90 and 90"

    index_str = request_args.get('index')
    parsed['index'] = 0
    if index_str:
        try:
            parsed['index'] = int(index_str)
        except ValueError:
            return None, "Invalid index format - must be an integer"
        if parsed['index'] < 0:
            return None, "Index must not be negative"

    step = request_args.get('step')
    if step and step not in STEPS:
        return None, f"Step must be one of: {', '.join(STEPS)}"
    parsed['step'] = step or None

    return parsed, None


# ============================================================================
# ROUTES
# ============================================================================

@api.route('/api/church-data')  # type: ignore
def get_church_data() -> Union[Response, Tuple[Response, int]]:
    """Return every loaded record, grouped by category"""
    data = get_data()
    if data is None:
        return data_unavailable()
    return jsonify(data.to_json())


@api.route('/filter-saints')  # type: ignore
def get_filtered_saints() -> Union[Response, Tuple[Response, int]]:
    """
    Return one page of saints matching the search.

    Query parameters (all optional):
    - name: substring of the saint's name
    - country: substring of the country
    - born: substring of the birth location
    - page: 1-based page number (100 saints per page)
    """
    data = get_data()
    if data is None:
        return data_unavailable()
    return jsonify(filter_saints(
        data.frame('saints'),
        name=request.args.get('name', ''),
        country=request.args.get('country', ''),
        born=request.args.get('born', ''),
        page=parse_page(request.args.get('page')),
    ))


@api.route('/api/features/<category>')  # type: ignore
def get_features(category: str) -> Union[Response, Tuple[Response, int]]:
    """Return a category's mappable records as a GeoJSON FeatureCollection"""
    key = get_category(category).key
    data = get_data()
    if data is None:
        return data_unavailable()
    return jsonify(feature_collection(data.features_for(key)))


@api.route('/api/layers')  # type: ignore
def get_layers() -> Response:
    """Return source/layer ids, icons and cluster styling per category"""
    layers = {}
    for key, category in CATEGORIES.items():
        layers[key] = {
            **layer_ids(key),
            'icon': category.icon,
            'clusterColor': cluster_color_expression(category),
            'clusterRadius': cluster_radius_expression(),
        }
    return jsonify({
        'categories': CATEGORY_KEYS,
        'layers': layers,
        'cluster': {'clusterMaxZoom': config.CLUSTER_MAX_ZOOM, 'clusterRadius': config.CLUSTER_RADIUS},
    })


@api.route('/api/bounds')  # type: ignore
def get_bounds() -> Union[Response, Tuple[Response, int]]:
    """Return the bounding box of every mappable record"""
    data = get_data()
    if data is None:
        return data_unavailable()
    bounds = data_bounds(data.all_features())
    if bounds is None:
        return jsonify({'error': 'No records with valid coordinates'}), 404
    west, south, east, north = bounds
    return jsonify({'west': west, 'south': south, 'east': east, 'north': north})


@api.route('/api/popup/<category>')  # type: ignore
def get_popup(category: str) -> Union[Response, Tuple[Response, int]]:
    """
    Return the popup for a clicked point.

    Query parameters:
    - lon, lat: clicked coordinate (required)
    - index: carousel position the client is showing (default 0)
    - step: optional 'next' or 'previous' to move the carousel
    """
    key = get_category(category).key
    data = get_data()
    if data is None:
        return data_unavailable()

    args, error = validate_popup_args(request.args)
    if error:
        return jsonify({'error': error}), 400

    group = group_by_location(data.features_for(key), (args['lon'], args['lat']))
    if not group:
        return jsonify({'error': f"No {key} found at this location"}), 404

    if len(group) < 2 or not get_category(key).supports_carousel:
        return jsonify(render_detail(key, group).to_dict())

    if args['index'] >= len(group):
        return jsonify({'error': f"Index must be below {len(group)}"}), 400
    cursor = open_carousel(group, args['index'])
    if args['step']:
        cursor = cursor.step(args['step'])
    return jsonify(render_carousel_page(key, cursor).to_dict())


@api.route('/api/search/<category>')  # type: ignore
def search_category(category: str) -> Union[Response, Tuple[Response, int]]:
    """
    Return list-panel entries matching the search box text.

    Saints are paginated (`page` parameter) and searched by name, country
    and birth location; popes and miracles return every match.
    """
    key = get_category(category).key
    data = get_data()
    if data is None:
        return data_unavailable()

    query = request.args.get('q', '')
    if key == 'saints':
        result = filter_saints(data.frame(key), name=query, country=query, born=query,
                               page=parse_page(request.args.get('page')))
        return jsonify({'entries': list_entries(key, result['saints']),
                        'pagination': result['pagination']})

    records = search_records(data.frame(key), key, query)
    return jsonify({'entries': list_entries(key, records), 'pagination': None})


@api.errorhandler(UnknownCategoryError)  # type: ignore
def unknown_category(error: UnknownCategoryError) -> Tuple[Response, int]:
    return jsonify({'error': f"Unknown category: {error.args[0]}"}), 404


def create_app(data_dir: Optional[Union[str, Path]] = None) -> Flask:
    """Build the app and load the CSVs once; a failed load leaves the data routes answering 500."""
    app = Flask(__name__)
    Compress(app)  # Enable gzip/brotli compression for all responses
    CORS(app, send_wildcard=True, methods=['GET', 'POST', 'PUT', 'DELETE'],
         allow_headers=['Content-Type', 'Authorization'])

    provider = DataProvider(data_dir if data_dir is not None else config.DATA_DIR)
    if provider.load() is None:
        logger.error("Serving without data; data routes will return 500: %s", provider.error)
    app.extensions['church_atlas'] = provider

    app.register_blueprint(api)
    return app


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s:%(name)s:%(message)s")
    app = create_app()

    print("\n" + "="*80)
    print("CHURCH ATLAS MAP SERVER")
    print("="*80)
    print(f"\nStarting server at http://localhost:{config.PORT}")
    print(f"   Data directory: {config.DATA_DIR}")
    print(f"   Debug mode: {'ON' if config.DEBUG else 'OFF'}")
    print(f"   Press Ctrl+C to stop the server\n")
    print("="*80 + "\n")
    app.run(debug=config.DEBUG, port=config.PORT)


if __name__ == '__main__':
    main()
