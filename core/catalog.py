"""
catalog.py -- Creature lookups against the external catalog (PokeAPI).

The catalog is free and public; no API key is needed. Lookups are read-only
and nothing fetched here is persisted -- the dex only stores creature names.
"""

import logging
from typing import Any
from urllib.parse import quote

import requests

from core.errors import NotFound, UpstreamFailure

logger = logging.getLogger("catchdex.catalog")


class CatalogClient:
    """Thin client over GET {base_url}/pokemon/{name}.

    One requests.Session per client for connection pooling. max_redirects=3
    replaces the requests default of 30 -- the catalog is a known public API,
    3 hops is generous and protects against redirect chains.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._session.max_redirects = 3

    def fetch_creature(self, name: str) -> dict[str, Any]:
        """Return the raw catalog record for name.

        Raises NotFound when the catalog answers 404, UpstreamFailure for any
        other HTTP error, network failure, or a body that is not JSON.
        """
        # quote() with safe="" keeps a name like "../berry" inside one path segment.
        url = f"{self.base_url}/pokemon/{quote(name, safe='')}"
        try:
            resp = self._session.get(url, timeout=self.timeout)
            if resp.status_code == 404:
                raise NotFound("Your Pokémon was not found!")
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            logger.warning("Catalog fetch failed for %s: %s", name, e)
            raise UpstreamFailure() from e
        except ValueError as e:
            logger.warning("Catalog returned invalid JSON for %s: %s", name, e)
            raise UpstreamFailure() from e

    def close(self) -> None:
        self._session.close()
