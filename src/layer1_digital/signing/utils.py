"""
Utility functions for request signing

This module provides utility functions for RFC 9421 HTTP Message Signatures,
including timestamp handling, content digest calculation, structured field
string encoding and URL validation.
"""

import time
import hashlib
import base64
import re
from typing import Iterable
from urllib.parse import urlparse

from ..exceptions import SigningError
from .types import (
    SigningErrorCodes,
    DigestAlgorithm,
    ContentDigest,
    SignatureAlgorithm,
    SignatureComponent,
    RequestBody,
)

# Methods are bare ASCII letters; no surrounding whitespace
_METHOD_TOKEN = re.compile(r"[A-Za-z]+")


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.

    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def normalize_method(method: str) -> str:
    """
    Normalize an HTTP method for the signature base.

    Args:
        method: HTTP method in any case

    Returns:
        str: Uppercased method

    Raises:
        SigningError: If the method is empty or not a token
    """
    if not isinstance(method, str) or not method:
        raise SigningError(
            "HTTP method cannot be empty",
            SigningErrorCodes.INVALID_METHOD,
            {"method": method}
        )

    if not _METHOD_TOKEN.fullmatch(method):
        raise SigningError(
            f"Invalid HTTP method: {method}",
            SigningErrorCodes.INVALID_METHOD,
            {"method": method}
        )

    return method.upper()


def validate_target_uri(url: str) -> str:
    """
    Check that a URL is absolute before it is used as @target-uri.

    The URL is returned unchanged; the verifier compares it byte for byte.

    Args:
        url: Absolute request URL

    Returns:
        str: The same URL

    Raises:
        SigningError: If the URL is not an absolute http(s) URL
    """
    if not isinstance(url, str) or not url:
        raise SigningError("Request URL cannot be empty", SigningErrorCodes.INVALID_URL, {"url": url})

    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise SigningError(
            f"Request URL must be an absolute http(s) URL: {url}",
            SigningErrorCodes.INVALID_URL,
            {"url": url}
        )

    if any(ch in url for ch in ('\r', '\n')):
        raise SigningError(
            "Request URL cannot contain line breaks",
            SigningErrorCodes.INVALID_URL,
            {"url": url}
        )

    return url


def has_payload(payload: RequestBody) -> bool:
    """Return True if the payload carries at least one byte."""
    return payload is not None and len(payload) > 0


def calculate_content_digest(
    content: RequestBody,
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA256
) -> ContentDigest:
    """
    Calculate content digest for request body.

    Args:
        content: Exact serialized request body (string is UTF-8 encoded)
        algorithm: Digest algorithm to use

    Returns:
        ContentDigest: Calculated digest with header value

    Raises:
        SigningError: If digest calculation fails
    """
    if content is None:
        content = b""
    elif isinstance(content, str):
        content = content.encode('utf-8')
    elif not isinstance(content, bytes):
        raise SigningError(
            f"Content must be string, bytes, or None, got {type(content)}",
            SigningErrorCodes.DIGEST_CALCULATION_FAILED,
            {"content_type": str(type(content))}
        )

    if algorithm != DigestAlgorithm.SHA256:
        raise SigningError(
            f"Unsupported digest algorithm: {algorithm}",
            SigningErrorCodes.DIGEST_CALCULATION_FAILED,
            {"algorithm": str(algorithm)}
        )

    digest_b64 = base64.b64encode(hashlib.sha256(content).digest()).decode('ascii')

    return ContentDigest(
        algorithm=algorithm,
        digest=digest_b64,
        header_value=f"{algorithm.value}=:{digest_b64}:"
    )


def serialize_sf_string(value: str) -> str:
    """
    Serialize a structured field string (RFC 8941 section 4.1.6).

    Args:
        value: Printable ASCII text

    Returns:
        str: Quoted string with backslash and double quote escaped

    Raises:
        SigningError: If the value contains non-printable or non-ASCII characters
    """
    if any(ord(ch) < 0x20 or ord(ch) > 0x7e for ch in value):
        raise SigningError(
            "Structured field strings must be printable ASCII",
            SigningErrorCodes.INVALID_KEY_ID,
            {"value": value}
        )

    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def encode_signature_component(name: str, value: str) -> str:
    """
    Encode one line of the signature base.

    Args:
        name: Component name (e.g., "@method", "content-digest")
        value: Component value, used verbatim

    Returns:
        str: Line of the form '"<name>": <value>'
    """
    return f'"{name}": {value}'


def build_signature_params_string(
    covered_components: Iterable[SignatureComponent],
    created: int,
    keyid: str,
    alg: SignatureAlgorithm
) -> str:
    """
    Build the @signature-params value, also used for Signature-Input.

    Args:
        covered_components: Covered components in signature base order
        created: Creation timestamp
        keyid: Key identifier
        alg: Algorithm tag

    Returns:
        str: Inner list with parameters, e.g.
            ("@method" "@target-uri");created=1700000000;keyid="abc";alg="rsa-v1_5-sha256"
    """
    components_str = " ".join(f'"{comp.value}"' for comp in covered_components)

    return (
        f"({components_str})"
        f";created={created}"
        f";keyid={serialize_sf_string(keyid)}"
        f";alg=\"{alg.value}\""
    )


def encode_signature_value(signature: bytes) -> str:
    """Base64-encode raw signature bytes."""
    return base64.b64encode(signature).decode('ascii')


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000
