"""
EVM input data decoder.

Decode raw contract call data into named, typed parameter trees using a
selector registry built from bundled, stored and imported ABIs.
"""
from .calldata_decoder import CalldataDecoder, format_human_readable
from .exceptions import (
    DecoderError,
    InvalidInputData,
    SchemaNotFound,
    SchemaParseError,
    StoreUnavailable,
    UnsupportedDecodedShape,
)
from .schema import FunctionData, FunctionHeader, FunctionSchema, ParameterType, compute_selector
from .signature_registry import SignatureRegistry
from .store import JsonFileSchemaStore, MemorySchemaStore, SchemaStore
from .values import ArrayValue, FunctionMatch, IntegerValue, ScalarValue, TupleValue

__version__ = "1.0.0"
__all__ = [
    "CalldataDecoder",
    "format_human_readable",
    "DecoderError",
    "InvalidInputData",
    "SchemaNotFound",
    "SchemaParseError",
    "StoreUnavailable",
    "UnsupportedDecodedShape",
    "FunctionData",
    "FunctionHeader",
    "FunctionSchema",
    "ParameterType",
    "compute_selector",
    "SignatureRegistry",
    "JsonFileSchemaStore",
    "MemorySchemaStore",
    "SchemaStore",
    "ArrayValue",
    "FunctionMatch",
    "IntegerValue",
    "ScalarValue",
    "TupleValue",
    "__version__",
]
