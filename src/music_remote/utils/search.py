"""
Search proxy client.

Searches go through the same-origin proxy, which forwards to the player's
search endpoint. Failures are raised as SearchError carrying the message to
show the user.
"""

import asyncio
import logging
from typing import List, Optional
from urllib.parse import quote

import aiohttp

from music_remote.core.models import Track
from music_remote.utils.constants import MESSAGES, PROXY_PATH, SEARCH_PATH, SEARCH_TIMEOUT
from music_remote.utils.exceptions import SearchError

logger = logging.getLogger(__name__)


class SearchClient:
    """Stateless request/response search: one GET per query, no retry."""

    def __init__(self, origin: str, search_base: str,
                 http_session: Optional[aiohttp.ClientSession] = None):
        self.origin = origin.rstrip('/')
        self.search_base = search_base.rstrip('/')
        self.session = http_session
        self._owns_session = http_session is None

    async def __aenter__(self):
        if self.session is None:
            self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._owns_session and self.session:
            await self.session.close()
            self.session = None

    def search_url(self, query: str) -> str:
        """The upstream URL the proxy is asked to fetch"""
        return f"{self.search_base}{SEARCH_PATH}?query={quote(query, safe='')}"

    async def search(self, query: str) -> List[Track]:
        """
        Search for tracks.

        Args:
            query: Free-text search

        Returns:
            List of matching tracks, in the order the service returned them

        Raises:
            SearchError: With the proxy's error string, or a generic message
        """
        if self.session is None:
            self.session = aiohttp.ClientSession()

        proxy_url = f"{self.origin}{PROXY_PATH}"
        logger.info(f"Searching for: {query}")
        try:
            async with self.session.get(
                proxy_url,
                params={'url': self.search_url(query)},
                timeout=aiohttp.ClientTimeout(total=SEARCH_TIMEOUT)
            ) as response:
                if response.status >= 400:
                    raise SearchError(await self._error_message(response), code=response.status)
                data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            logger.error(f"Timeout searching for: {query}")
            raise SearchError(MESSAGES['SEARCH_FALLBACK'])
        except aiohttp.ClientError as e:
            logger.error(f"Search error: {e}")
            raise SearchError(str(e) or MESSAGES['SEARCH_FALLBACK'])
        except ValueError as e:
            logger.error(f"Search returned invalid JSON: {e}")
            raise SearchError(MESSAGES['SEARCH_FALLBACK'])

        if not isinstance(data, list):
            logger.error(f"Search returned {type(data).__name__}, expected a list")
            raise SearchError(MESSAGES['SEARCH_FALLBACK'])

        tracks = [t for t in (Track.from_dict(item) for item in data) if t is not None]
        logger.info(f"Search for {query!r} returned {len(tracks)} tracks")
        return tracks

    @staticmethod
    async def _error_message(response) -> str:
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError):
            return MESSAGES['SEARCH_FAILED']
        if isinstance(body, dict) and isinstance(body.get('error'), str) and body['error']:
            return body['error']
        return MESSAGES['SEARCH_FAILED']
