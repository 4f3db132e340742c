"""
Browser-side map state.

`MapSession` owns what the map page keeps between user actions: the
feature sets per category, which categories are toggled on, and the popup
that is currently open (with its carousel cursor). `SearchPanel` drives
the saints list and applies only the newest search response.
"""

import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from church_atlas.categories import CATEGORY_KEYS, get_category
from church_atlas.features import Feature, features_from_records
from church_atlas.grouping import group_by_location
from church_atlas.render import DisplayPayload, render_carousel_page, render_detail

logger = logging.getLogger(__name__)


class MapSession:

    def __init__(self):
        self.features: Dict[str, List[Feature]] = {}
        self.visible: Dict[str, bool] = {key: True for key in CATEGORY_KEYS}
        self.popup: Optional[DisplayPayload] = None
        self.error: Optional[str] = None

    def load(self, church_data: Dict[str, List[Dict[str, Any]]]) -> None:
        """Build features for every category in a /api/church-data payload."""
        for key, records in church_data.items():
            self.features[get_category(key).key] = features_from_records(key, records)

    def load_from(self, client) -> bool:
        try:
            self.load(client.church_data())
        except requests.RequestException as e:
            logger.error("Error loading church data: %s", e)
            self.error = f'Failed to load church data: {e}'
            return False
        self.error = None
        return True

    def toggle(self, category: str, visible: bool) -> None:
        self.visible[get_category(category).key] = visible

    def click(self, category: str, coord: Tuple[float, float]) -> Optional[DisplayPayload]:
        """Open the popup for a point click; the new popup replaces any open one."""
        key = get_category(category).key
        features = self.features.get(key)
        if features is None:
            logger.warning("Ignoring click on %s: features not loaded yet", key)
            return None
        if not self.visible[key]:
            logger.info("Ignoring click on hidden category %s", key)
            return None
        group = group_by_location(features, coord)
        if not group:
            logger.info("No %s feature at %s", key, coord)
            return None
        self.popup = render_detail(key, group)
        return self.popup

    def close_popup(self) -> None:
        self.popup = None

    def _step(self, direction: str) -> Optional[DisplayPayload]:
        if self.popup is None or self.popup.cursor is None:
            logger.info("No carousel open; ignoring %s", direction)
            return None
        self.popup = render_carousel_page(self.popup.category, self.popup.cursor.step(direction))
        return self.popup

    def next(self) -> Optional[DisplayPayload]:
        return self._step('next')

    def previous(self) -> Optional[DisplayPayload]:
        return self._step('previous')


class RequestSequencer:
    """Hands out increasing tickets; only the newest ticket is current."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._latest = 0

    def issue(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest


class SearchPanel:
    """Saints search list with pagination.

    Every keystroke issues a request; responses may come back in any
    order, so each carries the ticket it was issued with and stale ones
    are dropped.
    """

    def __init__(self, fetch: Callable[[Dict[str, Any]], Dict[str, Any]]):
        self.fetch = fetch
        self.sequencer = RequestSequencer()
        self.params: Dict[str, Any] = {'name': '', 'country': '', 'born': '', 'page': 1}
        self.saints: List[Dict[str, Any]] = []
        self.pagination: Optional[Dict[str, int]] = None
        self.error: Optional[str] = None

    def begin(self, text: Optional[str] = None, page: Optional[int] = None) -> Tuple[int, Dict[str, Any]]:
        """Update the query and issue a ticket for the request to send."""
        if text is not None:
            # One search box feeds all three fields
            self.params.update(name=text, country=text, born=text, page=1)
        if page is not None:
            self.params['page'] = page
        return self.sequencer.issue(), dict(self.params)

    def receive(self, ticket: int, response: Dict[str, Any]) -> bool:
        if not self.sequencer.is_current(ticket):
            logger.debug("Dropping stale saints response (ticket %d)", ticket)
            return False
        self.saints = response['saints']
        self.pagination = response['pagination']
        self.error = None
        return True

    def _request(self, ticket: int, params: Dict[str, Any]) -> bool:
        try:
            response = self.fetch(params)
        except requests.RequestException as e:
            logger.error("Error fetching saints: %s", e)
            self.error = f'Failed to load saints: {e}'
            return False
        return self.receive(ticket, response)

    def search(self, text: str) -> bool:
        ticket, params = self.begin(text=text)
        return self._request(ticket, params)

    def go_to_page(self, page: int) -> bool:
        ticket, params = self.begin(page=page)
        return self._request(ticket, params)

    def next_page(self) -> bool:
        total_pages = self.pagination['totalPages'] if self.pagination else 0
        if self.params['page'] >= total_pages:
            return False
        return self.go_to_page(self.params['page'] + 1)

    def previous_page(self) -> bool:
        if self.params['page'] <= 1:
            return False
        return self.go_to_page(self.params['page'] - 1)
