"""
HTTP client for the secure-view endpoint.

GET {base_url}/api/books/{id}/secure-view with a bearer credential. Response
bodies of failed calls are logged, never surfaced.
"""

import logging

import requests

logger = logging.getLogger(__name__)

FETCH_FAILED = 'Failed to get secure PDF access'
LOAD_FAILED = 'Failed to load book'


class SecureViewError(Exception):
    """The secure-view endpoint could not be reached or refused the request."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class SecureViewClient:
    """Client for the secure-view endpoint."""

    PATH = '/api/books/{book_id}/secure-view'

    def __init__(self, base_url: str, timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def url_for(self, book_id) -> str:
        return self.base_url + self.PATH.format(book_id=book_id)

    def fetch(self, book_id, bearer_token: str) -> dict:
        """
        Fetch the raw secure-view payload.

        Raises:
            SecureViewError: transport failure, non-2xx status or non-JSON body
        """
        url = self.url_for(book_id)
        try:
            response = requests.get(
                url,
                headers={'Authorization': f'Bearer {bearer_token}', 'Accept': 'application/json'},
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error(f"SecureViewClient: Timeout fetching book {book_id}")
            raise SecureViewError(LOAD_FAILED)
        except requests.exceptions.RequestException as e:
            logger.error(f"SecureViewClient: Request error for book {book_id}: {e}")
            raise SecureViewError(LOAD_FAILED)

        logger.debug(f"SecureViewClient: {url} -> {response.status_code}")

        if not response.ok:
            logger.error(f"SecureViewClient: {response.status_code} for book {book_id}: {response.text}")
            raise SecureViewError(FETCH_FAILED, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            logger.error(f"SecureViewClient: Non-JSON body for book {book_id}")
            raise SecureViewError(LOAD_FAILED, status_code=response.status_code)
