"""
Async HTTP Requester for FuzzHawk

Streaming async HTTP client with:
- A single pooled session
- Optional delay between requests
- Whole-request retry with backoff
- SSL handling
"""

import asyncio
import aiohttp
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional
from urllib.parse import urlparse
from enum import Enum
import ssl
import logging

from fuzzhawk.scanner.errors import ConfigurationError, RequestBuildError, RequestError

logger = logging.getLogger(__name__)


class RequestMethod(Enum):
    """HTTP request methods."""
    GET = 'GET'
    POST = 'POST'
    PUT = 'PUT'
    DELETE = 'DELETE'
    HEAD = 'HEAD'
    OPTIONS = 'OPTIONS'
    PATCH = 'PATCH'

    @classmethod
    def parse(cls, value: str) -> 'RequestMethod':
        """Look up a method by name (case-insensitive)."""
        try:
            return cls(value.upper())
        except ValueError:
            raise ConfigurationError(f"Unsupported HTTP method: {value}") from None


class AsyncRequester:
    """
    Async HTTP requester that hands out live response streams.

    Responses are not buffered: ``stream()`` yields the aiohttp response so
    the body can be consumed incrementally, and releases the connection when
    the caller is done with it.
    """

    DEFAULT_HEADERS = {
        'User-Agent': 'FuzzHawk/1.0 Content Discovery',
        'Accept': '*/*',
        'Accept-Encoding': 'gzip, deflate',
        'Connection': 'keep-alive',
    }

    def __init__(
            self,
            timeout: Optional[float] = 30,
            delay: float = 0.0,
            max_retries: int = 1,
            verify_ssl: bool = True,
            custom_headers: Optional[Dict[str, str]] = None,
            cookies: Optional[Dict[str, str]] = None,
            proxy: Optional[str] = None,
            user_agent: Optional[str] = None
    ):
        """
        Initialize the async requester.

        Args:
            timeout: Connect and per-read timeout in seconds (None disables)
            delay: Minimum delay between requests to the same host in seconds
            max_retries: Attempts per request before giving up
            verify_ssl: Whether to verify SSL certificates
            custom_headers: Custom headers to include in all requests
            cookies: Cookies to include in all requests
            proxy: Proxy URL for all requests
            user_agent: Override for the User-Agent header
        """
        # Bodies may be arbitrarily long, so only bound connect and each read
        self.timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=timeout,
            sock_read=timeout
        )
        self.delay = delay
        self.max_retries = max(1, max_retries)
        self.verify_ssl = verify_ssl
        self.proxy = proxy

        # Headers
        self.headers = self.DEFAULT_HEADERS.copy()
        if user_agent:
            self.headers['User-Agent'] = user_agent
        if custom_headers:
            self.headers.update(custom_headers)

        # Cookies
        self.cookies = cookies or {}

        # Rate limiting
        self._last_request_time: Dict[str, float] = {}

        # Session
        self._session: Optional[aiohttp.ClientSession] = None

        # Statistics
        self.stats = {
            'requests_made': 0,
            'requests_successful': 0,
            'requests_failed': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the aiohttp session."""
        if self._session is None or self._session.closed:
            # SSL context
            ssl_context = ssl.create_default_context()
            if not self.verify_ssl:
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_NONE

            connector = aiohttp.TCPConnector(ssl=ssl_context)

            # Cookie jar
            cookie_jar = aiohttp.CookieJar(unsafe=True)

            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers=self.headers,
                cookie_jar=cookie_jar
            )

            if self.cookies:
                self._session.cookie_jar.update_cookies(self.cookies)

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _rate_limit(self, domain: str):
        """Apply rate limiting for domain."""
        if self.delay <= 0:
            return
        if domain in self._last_request_time:
            elapsed = time.time() - self._last_request_time[domain]
            if elapsed < self.delay:
                await asyncio.sleep(self.delay - elapsed)
        self._last_request_time[domain] = time.time()

    async def _send(
            self,
            url: str,
            method: RequestMethod,
            allow_redirects: bool
    ) -> aiohttp.ClientResponse:
        """Send the request, retrying connection failures with backoff."""
        domain = urlparse(url).netloc
        last_error = None

        for attempt in range(self.max_retries):
            try:
                await self._rate_limit(domain)
                return await self._session.request(
                    method.value,
                    url,
                    allow_redirects=allow_redirects,
                    proxy=self.proxy
                )

            except aiohttp.InvalidURL as e:
                raise RequestBuildError(url, f"Invalid URL: {e}") from e

            except asyncio.TimeoutError:
                last_error = "Request timed out"
                logger.warning(f"Timeout on {url} (attempt {attempt + 1}/{self.max_retries})")

            except aiohttp.ClientError as e:
                last_error = str(e) or type(e).__name__
                logger.warning(f"Client error on {url}: {e} (attempt {attempt + 1}/{self.max_retries})")

            # Exponential backoff
            if attempt < self.max_retries - 1:
                await asyncio.sleep(2 ** attempt)

        raise RequestError(url, last_error)

    @asynccontextmanager
    async def stream(
            self,
            url: str,
            method: RequestMethod = RequestMethod.GET,
            allow_redirects: bool = True
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        Make an HTTP request and yield the unread response.

        Args:
            url: Target URL
            method: HTTP method
            allow_redirects: Follow redirects

        Yields:
            aiohttp.ClientResponse whose ``content`` is the body stream

        Raises:
            RequestBuildError: If the URL is malformed
            RequestError: If every attempt failed
        """
        if self._session is None:
            await self.start()

        self.stats['requests_made'] += 1
        try:
            response = await self._send(url, method, allow_redirects)
        except RequestError:
            self.stats['requests_failed'] += 1
            raise

        self.stats['requests_successful'] += 1
        try:
            yield response
        finally:
            response.release()

    def get_stats(self) -> Dict[str, int]:
        """Get request statistics."""
        return self.stats.copy()
