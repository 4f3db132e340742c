"""HTTP client for the Church Atlas service."""

from typing import Any, Dict, Optional

import requests

DEFAULT_BASE_URL = 'http://localhost:3000'


class ChurchAtlasClient:

    def __init__(self, base_url: str = DEFAULT_BASE_URL,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = self.session.get(f'{self.base_url}{path}', params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def church_data(self) -> Dict[str, Any]:
        return self._get('/api/church-data')

    def filter_saints(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self._get('/filter-saints', params=params)
