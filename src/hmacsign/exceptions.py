"""
Exception classes for hmacsign
"""

from typing import Optional, Dict, Any


class HmacSignError(Exception):
    """Base exception for all hmacsign errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class ConfigurationError(HmacSignError):
    """Exception raised for invalid configuration (unsupported algorithm, encoding, skew)"""
    
    def __init__(self, message: str, error_code: str = "INVALID_CONFIG", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class DigestError(HmacSignError):
    """Exception raised when data cannot be digested or a digest cannot be decoded"""
    
    def __init__(self, message: str, error_code: str = "DIGEST_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class SigningError(HmacSignError):
    """Exception raised for signer misuse"""
    
    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class SigningErrorCodes:
    """Standard error codes for signing operations"""
    
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_NORMALIZED = "NOT_NORMALIZED"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    SIGNING_FAILED = "SIGNING_FAILED"
