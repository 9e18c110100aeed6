"""
Exception classes for Layer1 Digital SDK
"""

from typing import Optional, Dict, Any


class Layer1Error(Exception):
    """Base exception for all Layer1 Digital SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class SigningError(Layer1Error):
    """
    Exception raised when a request cannot be signed.
    
    A request is never dispatched after a signing failure.
    """
    
    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class KeyFormatError(SigningError):
    """
    Exception raised when the signing key material cannot be parsed as an RSA private key.
    
    Keys are parsed lazily, so this surfaces on the first signing attempt.
    """
    
    def __init__(self, message: str, error_code: str = "INVALID_PRIVATE_KEY", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ValidationError(Layer1Error):
    """Exception raised for invalid tool or method parameters, before any network call"""
    
    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ConfigurationError(Layer1Error):
    """Exception raised for missing or malformed configuration"""
    
    def __init__(self, message: str, error_code: str = "INVALID_CONFIG", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ApiError(Layer1Error):
    """Exception raised when the remote API answers with a non-2xx status"""
    
    def __init__(self, message: str, http_status: int, body: str = "",
                 error_code: str = "API_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
        self.body = body
    
    def __str__(self) -> str:
        return f"API Error ({self.http_status}): {self.body}"


class NetworkError(Layer1Error):
    """Exception raised when no response was received (DNS, TLS, timeout, connection reset)"""
    
    def __init__(self, message: str, error_code: str = "NETWORK_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
