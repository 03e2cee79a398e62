"""
Scryfall API service for searching commanders by color identity.

This module wraps the Scryfall card search endpoint. Every non-success
outcome (HTTP error status, timeout, connection problem, bad JSON) is
reported as a single SearchFailed error; there are no retries.
"""

import json
import time
import logging
import random
from typing import Any, Dict, List, Optional, Union

import requests

from .models import ColorIdentityQuery


class SearchFailed(Exception):
    """Raised when a Scryfall search does not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ScryfallService:
    """Service for searching cards on the Scryfall API."""

    BASE_URL = "https://api.scryfall.com"
    USER_AGENT = "Commander-Finder/0.1.0"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 15,
        min_request_interval: float = 0.1,
        max_pages: int = 1,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize Scryfall service.

        Args:
            base_url: API root (defaults to https://api.scryfall.com)
            timeout: Request timeout in seconds
            min_request_interval: Minimum delay between requests in seconds
            max_pages: Maximum number of result pages to follow per search
            user_agent: User-Agent header sent with every request
            session: Optional pre-built requests session
        """
        self.logger = logging.getLogger(__name__)

        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.timeout = timeout
        self.max_pages = max(1, max_pages)

        # Scryfall asks clients to keep to roughly 10 requests per second
        self.last_request_time = 0.0
        self.min_request_interval = min_request_interval

        # Session for connection pooling
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or self.USER_AGENT,
            'Accept': 'application/json'
        })

        self.logger.debug(f"Scryfall service initialized for {self.base_url}")

    def search_cards(self, query: Union[ColorIdentityQuery, str], cancel_token=None) -> List[Dict[str, Any]]:
        """
        Run a card search and return the raw card objects.

        Args:
            query: Search query (ColorIdentityQuery or raw Scryfall syntax)
            cancel_token: Optional token; paging stops once it is cancelled

        Returns:
            List of raw Scryfall card objects in upstream order

        Raises:
            SearchFailed: If any request does not succeed
        """
        query_text = str(query)
        url = f"{self.base_url}/cards/search"
        params = {'q': query_text}

        cards: List[Dict[str, Any]] = []
        pages = 0

        while url and pages < self.max_pages:
            if cancel_token is not None and cancel_token.cancelled:
                self.logger.debug(f"Search for '{query_text}' cancelled after {pages} page(s)")
                break

            payload = self._get_json(url, params)
            pages += 1

            data = payload.get('data', [])
            if not isinstance(data, list):
                raise SearchFailed("Unexpected search response: 'data' is not a list")
            cards.extend(data)

            # next_page already carries the query string
            url = payload.get('next_page') if payload.get('has_more') else None
            params = None

        self.logger.info(f"Search '{query_text}' returned {len(cards)} cards")
        return cards

    def _get_json(self, url: str, params: Optional[Dict[str, str]]) -> Dict[str, Any]:
        """Perform one GET request and decode the JSON body."""
        self._rate_limit_with_jitter()

        try:
            self.logger.debug(f"GET {url} params={params}")
            response = self.session.get(url, params=params, timeout=self.timeout)

            if response.status_code != 200:
                raise SearchFailed(
                    self._error_message(response),
                    status_code=response.status_code
                )

            payload = response.json()

        except requests.Timeout:
            raise SearchFailed("Request timeout")
        except requests.ConnectionError as e:
            raise SearchFailed(f"Connection error: {e}")
        except json.JSONDecodeError as e:
            # requests' own JSONDecodeError is also a RequestException
            raise SearchFailed(f"Invalid JSON response: {e}")
        except requests.RequestException as e:
            raise SearchFailed(f"Network error: {e}")

        if not isinstance(payload, dict):
            raise SearchFailed("Unexpected search response: expected a JSON object")

        return payload

    def _error_message(self, response: requests.Response) -> str:
        """Build a message from a Scryfall error object when there is one."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get('object') == 'error' and body.get('details'):
            return f"Scryfall error {response.status_code}: {body['details']}"

        return f"Search request failed with status {response.status_code}"

    def _rate_limit_with_jitter(self):
        """Apply rate limiting with jitter between consecutive requests."""
        current_time = time.time()
        time_since_last = current_time - self.last_request_time

        if time_since_last < self.min_request_interval:
            sleep_time = self.min_request_interval - time_since_last
            # Add small random jitter (±10%)
            jitter = sleep_time * 0.2 * (random.random() - 0.5)
            time.sleep(max(0, sleep_time + jitter))

        self.last_request_time = time.time()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
