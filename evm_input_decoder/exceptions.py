"""
Decoder exceptions - error taxonomy shared by the registry, decoder and API
"""
from typing import Any, Dict, Optional


class DecoderError(Exception):
    """Base exception for the input data decoder."""

    def __init__(
        self,
        message: str,
        error_code: str = "DECODER_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputData(DecoderError):
    """Raised when call data is too short to carry a selector or is not hex."""

    def __init__(self, message: str = "Invalid input data", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_INPUT_DATA", details)


class SchemaNotFound(DecoderError):
    """Raised when a registered signature has no cached or stored schema body."""

    def __init__(self, canonical_signature: str, details: Optional[Dict[str, Any]] = None):
        self.canonical_signature = canonical_signature
        message = f"Schema not found: {canonical_signature}"
        super().__init__(message, "SCHEMA_NOT_FOUND", details)


class SchemaParseError(DecoderError):
    """Raised when an ABI definition or a stored schema body cannot be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "SCHEMA_PARSE_ERROR", details)


class UnsupportedDecodedShape(DecoderError):
    """Raised when a decoded value does not fit the declared parameter type."""

    def __init__(self, param_name: str, param_type: str, value: Any):
        self.param_name = param_name
        self.param_type = param_type
        message = (
            f"Unsupported decoded value for parameter '{param_name}' "
            f"of type {param_type}: {type(value).__name__}"
        )
        super().__init__(
            message,
            "UNSUPPORTED_DECODED_SHAPE",
            {"parameter": param_name, "type": param_type},
        )


class StoreUnavailable(DecoderError):
    """Raised when a store operation is requested but no store is configured."""

    def __init__(self, operation: str):
        message = f"No schema store configured for {operation}"
        super().__init__(message, "STORE_UNAVAILABLE", {"operation": operation})
