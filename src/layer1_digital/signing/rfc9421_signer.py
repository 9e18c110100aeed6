"""
RFC 9421 HTTP Message Signatures implementation with RSA

This module provides the request signer used to authenticate every outbound
API call. Signatures use RSASSA-PKCS1-v1_5 with SHA-256 over a signature base
covering the method, the target URI and, when a body is present, the content
digest.
"""

import logging
import threading
from typing import Dict, Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..exceptions import SigningError
from .keys import normalize_private_key_pem, load_rsa_private_key
from .types import (
    RequestBody,
    SignatureAlgorithm,
    SignatureComponent,
    SignatureParams,
    SignatureResult,
    SigningContext,
    SigningErrorCodes,
    TimestampGenerator,
    SIGNATURE_LABEL,
)
from .utils import (
    calculate_content_digest,
    encode_signature_value,
    generate_timestamp,
    has_payload,
    normalize_method,
    serialize_sf_string,
    validate_target_uri,
    PerformanceTimer,
)
from .canonical_message import build_signature_base, build_signature_input

logger = logging.getLogger(__name__)

# Signing is expected to stay well below this
SIGNING_TIME_WARNING_MS = 10


class RFC9421Signer:
    """
    RFC 9421 HTTP Message Signatures signer with RSA

    The signer holds only the immutable key and client identifier. All
    per-request values (timestamp, digest, parameters) live in a
    SigningContext built inside each call, so one instance can sign
    concurrent requests from several threads.
    """

    def __init__(
        self,
        private_key: str,
        client_id: str,
        timestamp_generator: Optional[TimestampGenerator] = None
    ):
        """
        Initialize the signer.

        The key text is normalized immediately but parsed on first use.

        Args:
            private_key: PKCS#8 RSA private key, PEM armor optional
            client_id: Client identifier sent as keyid
            timestamp_generator: Optional clock override returning Unix seconds

        Raises:
            SigningError: If the client identifier is empty or not printable ASCII
            KeyFormatError: If the key text is empty
        """
        if not client_id or not isinstance(client_id, str):
            raise SigningError("Client ID cannot be empty", SigningErrorCodes.INVALID_KEY_ID)
        serialize_sf_string(client_id)

        self.client_id = client_id
        self.algorithm = SignatureAlgorithm.RSA_V1_5_SHA256
        self._pem = normalize_private_key_pem(private_key)
        self._timestamp_generator = timestamp_generator or generate_timestamp
        self._private_key: Optional[rsa.RSAPrivateKey] = None
        self._key_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"RFC9421Signer(client_id={self.client_id!r}, algorithm={self.algorithm.value!r})"

    @property
    def pem(self) -> str:
        """Canonical PEM form of the configured key."""
        return self._pem

    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        """
        Parsed RSA private key, loaded on first access.

        Raises:
            KeyFormatError: If the key cannot be parsed
        """
        if self._private_key is None:
            with self._key_lock:
                if self._private_key is None:
                    self._private_key = load_rsa_private_key(self._pem)
        return self._private_key

    def build_headers(self, url: str, payload: RequestBody, method: str) -> Dict[str, str]:
        """
        Build the authentication headers for a request.

        Args:
            url: Absolute request URL, exactly as it will be dispatched
            payload: Exact serialized request body, or empty/None
            method: HTTP method, any case

        Returns:
            dict: Content-Digest (only with a body), Signature-Input and Signature

        Raises:
            SigningError: If the request cannot be signed
            KeyFormatError: If the key cannot be parsed
        """
        return self.sign_request(url, payload, method).headers

    def sign_request(
        self,
        url: str,
        payload: RequestBody,
        method: str,
        created: Optional[int] = None
    ) -> SignatureResult:
        """
        Sign a request according to RFC 9421.

        Args:
            url: Absolute request URL
            payload: Exact serialized request body, or empty/None
            method: HTTP method
            created: Optional fixed creation timestamp

        Returns:
            SignatureResult: Headers plus the signature base that was signed

        Raises:
            SigningError: If signing fails
            KeyFormatError: If the key cannot be parsed
        """
        timer = PerformanceTimer()

        context = self._create_signing_context(url, payload, method, created)
        signature_base = build_signature_base(context)
        logger.debug(f"Signature base:\n{signature_base}")

        signature_value = encode_signature_value(self._sign(signature_base))
        signature_input = build_signature_input(context.params)
        signature = f"{SIGNATURE_LABEL}=:{signature_value}:"

        headers = {}
        if context.content_digest:
            headers['Content-Digest'] = context.content_digest.header_value
        headers['Signature-Input'] = signature_input
        headers['Signature'] = signature

        elapsed_ms = timer.elapsed_ms()
        if elapsed_ms > SIGNING_TIME_WARNING_MS:
            logger.warning(f"Signing operation took {elapsed_ms:.2f}ms (target: <{SIGNING_TIME_WARNING_MS}ms)")

        return SignatureResult(
            signature_input=signature_input,
            signature=signature,
            headers=headers,
            signature_base=signature_base
        )

    def _create_signing_context(
        self,
        url: str,
        payload: RequestBody,
        method: str,
        created: Optional[int]
    ) -> SigningContext:
        """
        Create the per-request signing context.

        The content-digest component is covered if and only if the payload
        is non-empty.
        """
        normalized_method = normalize_method(method)
        target_uri = validate_target_uri(url)

        components = [SignatureComponent.METHOD, SignatureComponent.TARGET_URI]
        content_digest = None
        if has_payload(payload):
            content_digest = calculate_content_digest(payload)
            components.append(SignatureComponent.CONTENT_DIGEST)

        timestamp = created if created is not None else self._timestamp_generator()

        try:
            params = SignatureParams(
                components=tuple(components),
                created=timestamp,
                keyid=self.client_id,
                alg=self.algorithm
            )
        except ValueError as e:
            raise SigningError(
                f"Invalid signature parameters: {e}",
                SigningErrorCodes.SIGNING_FAILED,
                {"original_error": str(e)}
            )

        return SigningContext(
            method=normalized_method,
            url=target_uri,
            params=params,
            content_digest=content_digest
        )

    def _sign(self, signature_base: str) -> bytes:
        """
        Sign the UTF-8 bytes of a signature base with RSASSA-PKCS1-v1_5 / SHA-256.

        Raises:
            SigningError: If the key rejects the operation
            KeyFormatError: If the key cannot be parsed
        """
        private_key = self.private_key

        try:
            return private_key.sign(
                signature_base.encode('utf-8'),
                padding.PKCS1v15(),
                hashes.SHA256()
            )
        except Exception as e:
            raise SigningError(
                f"Message signing failed: {e}",
                SigningErrorCodes.SIGNING_FAILED,
                {"original_error": str(e)}
            )


def create_signer(
    private_key: str,
    client_id: str,
    timestamp_generator: Optional[TimestampGenerator] = None
) -> RFC9421Signer:
    """
    Create a new RFC 9421 signer.

    Args:
        private_key: PKCS#8 RSA private key text
        client_id: Client identifier
        timestamp_generator: Optional clock override

    Returns:
        RFC9421Signer: Configured signer instance
    """
    return RFC9421Signer(private_key, client_id, timestamp_generator)
