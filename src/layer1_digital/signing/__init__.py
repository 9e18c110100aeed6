"""
Layer1 Digital SDK - Request Signing Module

RFC 9421 HTTP Message Signatures implementation with RSA (rsa-v1_5-sha256).
This module provides request signing for authenticating with the Layer1
digital asset API.
"""

from .types import (
    SignatureAlgorithm,
    DigestAlgorithm,
    SignatureComponent,
    ContentDigest,
    SignatureParams,
    SigningContext,
    SignatureResult,
    SigningErrorCodes,
)

from .keys import (
    normalize_private_key_pem,
    load_rsa_private_key,
)

from .rfc9421_signer import (
    RFC9421Signer,
    create_signer,
)

from .canonical_message import (
    build_signature_base,
    build_signature_input,
    extract_covered_components,
)

from .utils import (
    generate_timestamp,
    calculate_content_digest,
    build_signature_params_string,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'RFC9421Signer',
    'create_signer',
    # Types
    'SignatureAlgorithm',
    'DigestAlgorithm',
    'SignatureComponent',
    'ContentDigest',
    'SignatureParams',
    'SigningContext',
    'SignatureResult',
    'SigningErrorCodes',
    # Keys
    'normalize_private_key_pem',
    'load_rsa_private_key',
    # Signature base
    'build_signature_base',
    'build_signature_input',
    'extract_covered_components',
    # Utilities
    'generate_timestamp',
    'calculate_content_digest',
    'build_signature_params_string',
]
