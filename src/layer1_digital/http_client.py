"""
Authenticated HTTP client for the Layer1 API

This module assembles outbound requests, signs them with RFC 9421 HTTP
Message Signatures and maps transport and HTTP failures into the SDK's
error types.
"""

import json
import logging
from typing import Any, Mapping, Optional
from urllib.parse import urljoin, urlencode

import requests

from .config import Layer1Config
from .exceptions import ApiError, NetworkError, ValidationError
from .signing import RFC9421Signer
from .signing.utils import normalize_method

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'Content-Type': 'application/json',
    'Accept': 'application/json',
}


def serialize_body(body: Any) -> str:
    """
    Serialize a request body to its canonical JSON text.

    Args:
        body: JSON-serializable body, or None

    Returns:
        str: Compact JSON text, or an empty string when there is no body

    Raises:
        ValidationError: If the text cannot be encoded as UTF-8 (lone surrogates)
    """
    if body is None:
        return ''

    text = json.dumps(body, separators=(',', ':'), ensure_ascii=False)
    try:
        text.encode('utf-8')
    except UnicodeEncodeError as e:
        raise ValidationError(
            f"Request body is not valid UTF-8 text: {e.reason}",
            "INVALID_PARAMETER",
            {"position": e.start}
        )
    return text


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class AuthenticatedClient:
    """
    HTTP client for the Layer1 API with per-request signing.

    The request is prepared first and the signature is computed over the
    prepared URL and the exact body bytes, so what is signed is what is sent.
    No retries are performed.
    """

    def __init__(
        self,
        config: Layer1Config,
        signer: Optional[RFC9421Signer] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the HTTP client.

        Args:
            config: Layer1 configuration
            signer: Optional signer; built from the configuration if omitted
            session: Optional requests session to reuse
        """
        self.config = config
        self.signer = signer or RFC9421Signer(config.private_key, config.client_id)
        self.session = session or requests.Session()

        logger.info(f"Initialized Layer1 HTTP client for server: {config.base_url}")

    def build_url(self, endpoint: str, query_params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Resolve an endpoint against the base URL and append query parameters.

        Parameters whose value is None are skipped.

        Args:
            endpoint: Endpoint path, e.g. /digital/v1/transactions
            query_params: Optional query parameters

        Returns:
            str: Absolute URL
        """
        url = urljoin(self.config.base_url, endpoint)

        if query_params:
            pairs = [
                (key, _query_value(value))
                for key, value in query_params.items()
                if value is not None
            ]
            if pairs:
                try:
                    query = urlencode(pairs)
                except UnicodeEncodeError as e:
                    raise ValidationError(
                        f"Query parameter is not valid UTF-8 text: {e.reason}",
                        "INVALID_PARAMETER"
                    )
                separator = '&' if '?' in url else '?'
                url = f"{url}{separator}{query}"

        return url

    def request(
        self,
        endpoint: str,
        method: str = 'GET',
        body: Any = None,
        query_params: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """
        Make a signed request to the Layer1 API.

        Args:
            endpoint: Endpoint path
            method: HTTP method
            body: Optional JSON-serializable body
            query_params: Optional query parameters

        Returns:
            Parsed JSON response body

        Raises:
            ValidationError: If the body cannot be encoded as UTF-8
            SigningError: If the method is invalid or the request cannot be signed; nothing is sent
            ApiError: On a non-2xx response
            NetworkError: When no response is received
        """
        method = normalize_method(method)
        url = self.build_url(endpoint, query_params)
        payload = serialize_body(body)

        prepared = self.session.prepare_request(requests.Request(
            method=method,
            url=url,
            headers=dict(DEFAULT_HEADERS),
            data=payload.encode('utf-8') if payload else None,
        ))

        prepared.headers.update(self.signer.build_headers(prepared.url, payload, method))

        settings = self.session.merge_environment_settings(
            prepared.url, {}, None, self.config.verify_ssl, None
        )

        try:
            logger.debug(f"Making {method} request to {prepared.url}")
            response = self.session.send(prepared, timeout=self.config.timeout, **settings)
        except requests.exceptions.Timeout as e:
            raise NetworkError(
                f"Request timeout after {self.config.timeout} seconds: {e}",
                "TIMEOUT",
                {"url": prepared.url, "original_error": str(e)}
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Request failed: {e}",
                details={"url": prepared.url, "original_error": str(e)}
            )

        return self._handle_response(response)

    def _handle_response(self, response: requests.Response) -> Any:
        if not response.ok:
            logger.error(f"API error {response.status_code}: {response.url}")
            raise ApiError(
                f"API Error ({response.status_code})",
                http_status=response.status_code,
                body=response.text,
                details={"reason": response.reason}
            )

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                f"Invalid JSON response: {e}",
                http_status=response.status_code,
                body=response.text,
                error_code="INVALID_JSON"
            )

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        logger.debug("HTTP session closed")

    def __enter__(self) -> 'AuthenticatedClient':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def create_client(config: Layer1Config) -> AuthenticatedClient:
    """
    Create a signed Layer1 HTTP client.

    Args:
        config: Layer1 configuration

    Returns:
        AuthenticatedClient: Configured client
    """
    return AuthenticatedClient(config)
