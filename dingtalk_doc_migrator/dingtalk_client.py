"""HTTP transport for the DingTalk document platform with defensive gzip handling."""

import gzip
import json
import logging
import time
import zlib
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import urljoin

import requests
import urllib3
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict
from urllib3.util.retry import Retry

from .config_loader import DEFAULT_BASE_URL, DEFAULT_USER_AGENT

logger = logging.getLogger('dingtalk_doc_migrator.client')

GZIP_MAGIC = b'\x1f\x8b'


def is_gzip_compressed(data: Optional[bytes]) -> bool:
    """Check the gzip magic number (0x1f 0x8b)."""
    return bool(data) and len(data) >= 2 and data[:2] == GZIP_MAGIC


def maybe_decompress(data: bytes) -> bytes:
    """
    Decompress gzip bodies by sniffing the magic bytes.

    Servers sometimes send gzip payloads with a missing or wrong
    ``Content-Encoding`` header, so the header is never consulted. When
    decompression fails the raw bytes are returned unchanged.
    """
    if not is_gzip_compressed(data):
        return data

    logger.debug("Detected gzip magic bytes, decompressing response body")
    try:
        decompressed = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        logger.error(f"Gzip decompression failed, using raw body: {e}")
        return data

    logger.debug(f"Decompressed {len(data)} -> {len(decompressed)} bytes")
    return decompressed


def charset_from_headers(headers: Mapping[str, str]) -> Optional[str]:
    """Extract the charset parameter from a Content-Type header."""
    content_type = CaseInsensitiveDict(headers or {}).get('Content-Type') or ''
    for param in content_type.split(';')[1:]:
        key, _, value = param.strip().partition('=')
        if key.strip().lower() == 'charset' and value:
            return value.strip().strip('"\'')
    return None


def decode_body(data: bytes, headers: Mapping[str, str]) -> str:
    """Decode with the declared charset, falling back to UTF-8."""
    charset = charset_from_headers(headers)
    if charset:
        try:
            return data.decode(charset, errors='replace')
        except LookupError:
            logger.warning(f"Unknown charset '{charset}', decoding as UTF-8")
    return data.decode('utf-8', errors='replace')


def cookie_headers(cookie: Optional[str]) -> Dict[str, str]:
    """Build the cookie-style credential header."""
    return {'Cookie': cookie} if cookie else {}


class DingTalkClient:
    """HTTP client for DingTalk document pages, document data and images."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30,
        verify_ssl: bool = True,
        max_retries: int = 0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Platform base URL (e.g., "https://alidocs.dingtalk.com")
            user_agent: User-Agent sent with every request
            timeout: HTTP request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            max_retries: Transport-level retries for idempotent GET requests
            session: Optional pre-built session (used by tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent,
            'Accept-Encoding': 'gzip, deflate',
            'Accept-Language': 'zh-CN,zh;q=0.9,en-US;q=0.8,en;q=0.7',
        })

        self.session.verify = verify_ssl
        if not verify_ssl:
            logger.warning("SSL verification disabled - this is insecure!")
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        if max_retries > 0:
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=1.0,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["HEAD", "GET", "OPTIONS"]
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

        logger.debug(f"Client configured for {self.base_url} with timeout={timeout}s, "
                     f"max_retries={max_retries}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'DingTalkClient':
        """Build a client from the ``dingtalk`` configuration section."""
        section = config.get('dingtalk', {}) or {}
        return cls(
            base_url=section.get('base_url') or DEFAULT_BASE_URL,
            user_agent=section.get('user_agent') or DEFAULT_USER_AGENT,
            timeout=section.get('timeout', 30),
            verify_ssl=section.get('verify_ssl', True),
            max_retries=section.get('max_retries', 0) or 0
        )

    def absolute_url(self, url: str) -> str:
        """Join relative URLs onto the base URL."""
        if url.startswith('http://') or url.startswith('https://'):
            return url
        return urljoin(self.base_url + '/', url.lstrip('/'))

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Issue a request and return the response with its raw body.

        Raises:
            requests.exceptions.HTTPError: For non-2xx responses
            requests.exceptions.RequestException: For transport errors
        """
        start_time = time.time()
        logger.debug(f"Request: {method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, stream=True, **kwargs)
        except requests.exceptions.Timeout:
            logger.error(f"Request timeout after {self.timeout}s: {method} {url}")
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {method} {url} - {str(e)}")
            raise

        elapsed = time.time() - start_time
        logger.debug(f"Response: {response.status_code} {url} ({elapsed:.3f}s)")
        logger.debug(f"Content-Encoding: {response.headers.get('Content-Encoding')}")

        if not 200 <= response.status_code < 300:
            logger.error(f"HTTP Error {response.status_code}: {method} {url}")
            response.close()
            response.raise_for_status()
            # raise_for_status ignores 1xx/3xx
            raise requests.exceptions.HTTPError(
                f"Unexpected status {response.status_code} for {url}", response=response
            )

        return response

    @staticmethod
    def _read_body(response: requests.Response) -> bytes:
        """
        Read the body exactly as sent.

        Content-Encoding is not applied here; gzip is detected from the
        magic bytes afterwards, so a mislabeled header cannot break decoding.
        """
        try:
            return response.raw.read(decode_content=False) or b''
        finally:
            response.close()

    def get_bytes(self, url: str, headers: Optional[Dict[str, str]] = None) -> Tuple[bytes, Mapping[str, str]]:
        """
        GET a URL and return the (possibly decompressed) body with response headers.
        """
        response = self._request('GET', self.absolute_url(url), headers=headers or {})
        body = self._read_body(response)
        logger.debug(f"Response body size: {len(body)} bytes")
        return maybe_decompress(body), response.headers

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """GET a URL and return the decoded text body."""
        body, response_headers = self.get_bytes(url, headers)
        if not body:
            logger.warning(f"Empty response body: {url}")
            return ''
        return decode_body(body, response_headers)

    def post(self, url: str, body: Any, headers: Optional[Dict[str, str]] = None) -> Any:
        """
        POST a JSON body.

        Returns:
            Parsed JSON value, the text body when it is not JSON, or None
            when the body is empty
        """
        request_headers = {'Content-Type': 'application/json'}
        request_headers.update(headers or {})

        response = self._request(
            'POST',
            self.absolute_url(url),
            data=json.dumps(body).encode('utf-8'),
            headers=request_headers
        )

        raw = maybe_decompress(self._read_body(response))
        if not raw:
            logger.warning(f"Empty POST response body: {url}")
            return None

        text = decode_body(raw, response.headers)
        try:
            return json.loads(text)
        except ValueError:
            logger.debug("POST response is not JSON, returning text")
            return text

    def download(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """Download raw bytes (relative URLs are resolved against the base URL)."""
        body, _ = self.get_bytes(url, headers)
        return body

    def close(self) -> None:
        self.session.close()


__all__ = [
    'DingTalkClient',
    'is_gzip_compressed',
    'maybe_decompress',
    'decode_body',
    'charset_from_headers',
    'cookie_headers'
]
