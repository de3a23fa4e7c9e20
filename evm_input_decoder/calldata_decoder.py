"""
Calldata Decoder - Decode transaction calldata into a tree of named values
"""
import logging
import re
from decimal import Decimal
from typing import Any, Callable, List, Sequence

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from .exceptions import InvalidInputData, UnsupportedDecodedShape
from .schema import ParameterType
from .signature_registry import SignatureRegistry
from .values import (
    ArrayValue,
    DecodedValue,
    FunctionMatch,
    IntegerValue,
    ScalarValue,
    TupleValue,
)

logger = logging.getLogger(__name__)

# "0x" prefix + 4-byte selector
SELECTOR_LENGTH = 10

HEX_PAYLOAD = re.compile(r"(?:[0-9a-fA-F]{2})*")


class CalldataDecoder:
    """Decode transaction calldata against the signature registry"""

    def __init__(
        self,
        registry: SignatureRegistry,
        abi_decode: Callable[[Sequence[str], bytes], Sequence[Any]] = decode
    ):
        self.registry = registry
        self._abi_decode = abi_decode
        self.decode_count = 0
        self.unknown_selector_count = 0
        self.match_count = 0

    async def decode_calldata(self, calldata: str) -> List[FunctionMatch]:
        """
        Decode transaction calldata

        Args:
            calldata: Hex-encoded calldata (e.g., "0xa9059cbb000...")

        Returns:
            One match per candidate schema the payload decodes against, in
            registration order. Empty when the selector is unknown.
        """
        calldata = calldata.strip()
        if len(calldata) < SELECTOR_LENGTH:
            raise InvalidInputData(
                "Invalid input data - too short",
                {"length": len(calldata), "minimum": SELECTOR_LENGTH},
            )

        selector = calldata[:SELECTOR_LENGTH].lower()
        params_bytes = self._payload_bytes(calldata[SELECTOR_LENGTH:])
        self.decode_count += 1

        candidates = self.registry.candidates(selector)
        if not candidates:
            self.unknown_selector_count += 1
            logger.info(f"Signature not found: {selector}")
            return []

        matches = []
        for signature in candidates:
            schema = await self.registry.resolve_schema(signature)

            try:
                decoded_values = self._abi_decode(schema.canonical_types, params_bytes)
            except (DecodingError, UnicodeDecodeError) as e:
                logger.warning(f"Calldata does not decode as {signature}: {e}")
                continue

            parameters = [
                self._flatten(param, value, param.name or f"param{i}")
                for i, (param, value) in enumerate(zip(schema.inputs, decoded_values))
            ]
            matches.append(FunctionMatch(
                name=schema.name,
                canonical_signature=signature,
                selector=selector,
                parameters=parameters,
            ))

        self.match_count += len(matches)
        return matches

    def _payload_bytes(self, params_hex: str) -> bytes:
        if not HEX_PAYLOAD.fullmatch(params_hex):
            raise InvalidInputData(
                "Invalid input data - payload is not hex",
                {"payload_length": len(params_hex)},
            )
        return bytes.fromhex(params_hex)

    def _flatten(self, param: ParameterType, value: Any, name: str) -> DecodedValue:
        """Turn a decoded value into a named tree shaped like its declared type"""
        if param.is_array:
            items = self._as_sequence(param, value, name)
            child = param.array_children
            return ArrayValue(name, param.type, [
                self._flatten(child, item, f"{name}[{index}]")
                for index, item in enumerate(items)
            ])

        if param.is_tuple:
            items = self._as_sequence(param, value, name)
            if len(items) != len(param.components):
                raise UnsupportedDecodedShape(name, param.type, value)
            return TupleValue(name, param.type, [
                self._flatten(component, item, component.name)
                for component, item in zip(param.components, items)
            ])

        return self._format_scalar(param, value, name)

    def _as_sequence(self, param: ParameterType, value: Any, name: str) -> Sequence[Any]:
        if not isinstance(value, (list, tuple)):
            raise UnsupportedDecodedShape(name, param.type, value)
        return value

    def _format_scalar(self, param: ParameterType, value: Any, name: str) -> DecodedValue:
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return ScalarValue(name, param.type, "true" if value else "false")

        if isinstance(value, int):
            return IntegerValue(name, param.type, str(value))

        if isinstance(value, bytes):
            return ScalarValue(name, param.type, "0x" + value.hex())

        if isinstance(value, str):
            return ScalarValue(name, param.type, value)

        if isinstance(value, Decimal):
            return ScalarValue(name, param.type, str(value))

        raise UnsupportedDecodedShape(name, param.type, value)

    def stats(self):
        return {
            "decode_count": self.decode_count,
            "unknown_selector_count": self.unknown_selector_count,
            "match_count": self.match_count,
        }


def format_human_readable(match: FunctionMatch) -> str:
    """Format as human-readable description"""
    if not match.parameters:
        return f"{match.name}()"

    param_strs = []
    for param in match.parameters:
        if isinstance(param, ArrayValue):
            param_strs.append(f"{param.name}=[{len(param.value)} items]")
        elif isinstance(param, TupleValue):
            fields = ", ".join(_format_tuple_field(item) for item in param.value)
            param_strs.append(f"{param.name}=({fields})")
        else:
            param_strs.append(f"{param.name}={param.value}")

    return f"{match.name}({', '.join(param_strs)})"


def _format_tuple_field(item: DecodedValue) -> str:
    if isinstance(item, (ArrayValue, TupleValue)):
        return f"{item.name}=[{len(item.value)} items]"
    return f"{item.name}={item.value}"
