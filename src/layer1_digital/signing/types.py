"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the RFC 9421
HTTP Message Signatures implementation with RSASSA-PKCS1-v1_5 / SHA-256.
"""

from typing import Dict, Optional, Tuple, Callable, Union
from dataclasses import dataclass, field
from enum import Enum


class SignatureAlgorithm(str, Enum):
    """Signature algorithm tags carried in the signature parameters"""
    RSA_V1_5_SHA256 = "rsa-v1_5-sha256"


class DigestAlgorithm(str, Enum):
    """Content digest algorithms"""
    SHA256 = "sha-256"


class SignatureComponent(str, Enum):
    """
    Request components that can be covered by a signature.

    Declaration order is the order components appear in the signature base.
    """
    METHOD = "@method"
    TARGET_URI = "@target-uri"
    CONTENT_DIGEST = "content-digest"


# Label of the single signature emitted per request
SIGNATURE_LABEL = "sig"

# Pseudo-component that always closes the signature base
SIGNATURE_PARAMS_COMPONENT = "@signature-params"


@dataclass(frozen=True)
class ContentDigest:
    """
    Content digest for a request body

    Attributes:
        algorithm: Digest algorithm used
        digest: Base64-encoded raw digest
        header_value: Complete value for the Content-Digest header
    """
    algorithm: DigestAlgorithm
    digest: str
    header_value: str

    def __post_init__(self):
        """Validate content digest"""
        if not self.digest:
            raise ValueError("Digest value cannot be empty")

        if not self.header_value:
            raise ValueError("Header value cannot be empty")


@dataclass(frozen=True)
class SignatureParams:
    """
    Signature parameters for RFC 9421

    Attributes:
        components: Covered components, in signature base order
        created: Unix timestamp (seconds) captured at signing time
        keyid: Client identifier bound to the signing key
        alg: Signature algorithm tag
    """
    components: Tuple[SignatureComponent, ...]
    created: int
    keyid: str
    alg: SignatureAlgorithm = SignatureAlgorithm.RSA_V1_5_SHA256

    def __post_init__(self):
        """Validate signature parameters"""
        if not self.keyid:
            raise ValueError("Key ID cannot be empty")

        if self.created <= 0:
            raise ValueError("Created timestamp must be positive")

        if not self.components:
            raise ValueError("At least one component must be covered")


@dataclass(frozen=True)
class SigningContext:
    """
    Per-call signing state.

    Built fresh for every request and never stored on the signer, so a
    single signer can be shared by concurrent requests.

    Attributes:
        method: Uppercased HTTP method
        url: Absolute request URL, used verbatim as @target-uri
        params: Signature parameters for this request
        content_digest: Content digest if the request carries a body
    """
    method: str
    url: str
    params: SignatureParams
    content_digest: Optional[ContentDigest] = None


@dataclass
class SignatureResult:
    """
    Generated signature for one request

    Attributes:
        signature_input: Signature-Input header value
        signature: Signature header value
        headers: All headers that should be added to the request
        signature_base: Exact string that was signed
    """
    signature_input: str
    signature: str
    headers: Dict[str, str] = field(default_factory=dict)
    signature_base: str = ""


# Standard error codes for signing operations
class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Key errors
    INVALID_PRIVATE_KEY = "INVALID_PRIVATE_KEY"
    INVALID_KEY_ENCODING = "INVALID_KEY_ENCODING"
    UNSUPPORTED_KEY_TYPE = "UNSUPPORTED_KEY_TYPE"
    INVALID_KEY_ID = "INVALID_KEY_ID"

    # Request errors
    INVALID_URL = "INVALID_URL"
    INVALID_METHOD = "INVALID_METHOD"

    # Signing errors
    SIGNING_FAILED = "SIGNING_FAILED"
    SIGNATURE_BASE_FAILED = "SIGNATURE_BASE_FAILED"
    DIGEST_CALCULATION_FAILED = "DIGEST_CALCULATION_FAILED"


# Type aliases for convenience
TimestampGenerator = Callable[[], int]
RequestBody = Union[str, bytes, None]
