"""
Acquirer Transport

HTTP POST of signed documents to an acquirer endpoint. TLS client
authentication is configured on the underlying httpx client.
"""

import logging
import ssl
from typing import Optional

import httpx

from .errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

REQUEST_HEADERS = {
    "Content-Type": 'text/xml; charset="utf-8"',
    "Version": "1.0",
    "Encoding": "UTF-8",
}


class HTTPTransport:
    """
    Posts protocol messages over HTTPS.

    One call is one exchange: nothing is retried.
    """

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
        client_certificate: Optional[tuple[str, str]] = None,
        private_key_password: Optional[str] = None,
    ):
        """
        Initialize the transport.

        Args:
            http_client: Client to use instead of creating one; it is not
                closed by close()
            timeout: Request timeout in seconds
            client_certificate: Tuple of (certificate_path, private_key_path)
                for TLS client authentication
            private_key_password: Password of the TLS private key, if any
        """
        self._owns_client = http_client is None
        if http_client is None:
            verify: ssl.SSLContext | bool = True
            if client_certificate:
                verify = ssl.create_default_context()
                try:
                    verify.load_cert_chain(*client_certificate, password=private_key_password)
                except OSError as e:
                    raise ConfigurationError(f"Failed to load TLS client certificate: {e}") from e
            http_client = httpx.Client(timeout=timeout, verify=verify)
        self._http_client = http_client

    def close(self) -> None:
        """Close the HTTP client if this transport created it"""
        if self._owns_client:
            self._http_client.close()

    def post(self, url: str, body: bytes) -> bytes:
        """
        Post body to url and return the response body.

        Raises:
            TransportError: Connection failures and non-200 responses
        """
        try:
            response = self._http_client.post(url, content=body, headers=REQUEST_HEADERS)
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(f"HTTP request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Request to {url} failed: {response.status_code}")
            raise TransportError(
                f"HTTP error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        return response.content
