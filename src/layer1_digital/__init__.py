"""
Layer1 Digital SDK
Layer1 digital asset API client with RFC 9421 request signing
"""

from .version import __version__
from .exceptions import (
    Layer1Error,
    KeyFormatError,
    SigningError,
    ValidationError,
    ConfigurationError,
    ApiError,
    NetworkError,
)
from .config import Layer1Config
from .signing import (
    RFC9421Signer,
    create_signer,
    SignatureResult,
    SignatureComponent,
    normalize_private_key_pem,
)
from .http_client import (
    AuthenticatedClient,
    create_client,
    serialize_body,
)
from .digital_assets import (
    DigitalAssetService,
    Network,
    Asset,
)

# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'Layer1Error',
    'KeyFormatError',
    'SigningError',
    'ValidationError',
    'ConfigurationError',
    'ApiError',
    'NetworkError',
    # Configuration
    'Layer1Config',
    # Request Signing
    'RFC9421Signer',
    'create_signer',
    'SignatureResult',
    'SignatureComponent',
    'normalize_private_key_pem',
    # HTTP Client
    'AuthenticatedClient',
    'create_client',
    'serialize_body',
    # Digital assets
    'DigitalAssetService',
    'Network',
    'Asset',
]
