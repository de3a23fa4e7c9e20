"""
Function schemas - parse ABI JSON fragments and derive canonical signatures
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import parse as parse_type_str
from eth_utils import keccak, to_hex

from .exceptions import SchemaParseError

TYPE_ALIASES = {
    "uint": "uint256",
    "int": "int256",
    "fixed": "fixed128x18",
    "ufixed": "ufixed128x18",
}


@dataclass(frozen=True)
class FunctionHeader:
    """Lightweight registry entry persisted by the schema store"""

    selector: str
    canonical_signature: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "selector": self.selector,
            "canonical_signature": self.canonical_signature,
        }


@dataclass(frozen=True)
class FunctionData:
    """Serialized schema body persisted by the schema store"""

    canonical_signature: str
    body: str


@dataclass
class ParameterType:
    """
    A declared ABI parameter.

    Arrays carry their element type in ``array_children``; tuples carry their
    ordered ``components``. Every other type tag is a scalar.
    """

    name: str
    type: str
    components: Optional[List["ParameterType"]] = None
    array_children: Optional["ParameterType"] = None
    internal_type: Optional[str] = None

    @property
    def is_array(self) -> bool:
        return self.array_children is not None

    @property
    def is_tuple(self) -> bool:
        return self.components is not None and not self.is_array

    @property
    def canonical_type(self) -> str:
        """Type string as used in signatures and by eth_abi"""
        if self.is_array:
            suffix = self.type[self.type.rindex("["):]
            return self.array_children.canonical_type + suffix
        if self.is_tuple:
            return "(" + ",".join(c.canonical_type for c in self.components) + ")"
        return TYPE_ALIASES.get(self.type, self.type)

    @classmethod
    def from_abi(cls, entry: Dict[str, Any]) -> "ParameterType":
        if not isinstance(entry, dict) or not isinstance(entry.get("type"), str):
            raise SchemaParseError(f"Invalid ABI parameter: {entry!r}")

        name = entry.get("name") or ""
        type_tag = entry["type"].replace(" ", "")
        components = entry.get("components")

        if type_tag.endswith("]"):
            if "[" not in type_tag:
                raise SchemaParseError(f"Malformed array type: {type_tag}")
            element = dict(entry)
            element["name"] = ""
            element["type"] = type_tag[:type_tag.rindex("[")]
            return cls(
                name=name,
                type=type_tag,
                array_children=cls.from_abi(element),
                internal_type=entry.get("internalType"),
            )

        if type_tag == "tuple":
            if not isinstance(components, list):
                raise SchemaParseError(f"Tuple parameter '{name}' has no components")
            return cls(
                name=name,
                type=type_tag,
                components=[cls.from_abi(c) for c in components],
                internal_type=entry.get("internalType"),
            )

        return cls(name=name, type=type_tag, internal_type=entry.get("internalType"))

    def to_abi(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.internal_type:
            entry["internalType"] = self.internal_type
        # Array element types share the components of their innermost tuple
        inner = self
        while inner.is_array:
            inner = inner.array_children
        if inner.is_tuple:
            entry["components"] = [c.to_abi() for c in inner.components]
        return entry


@dataclass
class FunctionSchema:
    """A function fragment: name plus ordered input parameters"""

    name: str
    inputs: List[ParameterType] = field(default_factory=list)
    state_mutability: str = "nonpayable"

    @property
    def canonical_signature(self) -> str:
        """Minimal signature, e.g. ``transfer(address,uint256)``; the dedup key"""
        return f"{self.name}({','.join(self.canonical_types)})"

    @property
    def canonical_types(self) -> List[str]:
        return [p.canonical_type for p in self.inputs]

    @property
    def selector(self) -> str:
        return compute_selector(self.canonical_signature)

    def header(self) -> FunctionHeader:
        return FunctionHeader(self.selector, self.canonical_signature)

    @classmethod
    def from_abi(cls, fragment: Dict[str, Any]) -> "FunctionSchema":
        if not isinstance(fragment, dict):
            raise SchemaParseError(f"ABI fragment must be an object, got {type(fragment).__name__}")

        name = fragment.get("name")
        if not isinstance(name, str) or not name:
            raise SchemaParseError("Function fragment has no name", {"fragment": fragment})

        inputs = fragment.get("inputs", [])
        if not isinstance(inputs, list):
            raise SchemaParseError(f"Inputs of '{name}' must be a list")

        schema = cls(
            name=name,
            inputs=[ParameterType.from_abi(p) for p in inputs],
            state_mutability=fragment.get("stateMutability", "nonpayable"),
        )
        for type_str in schema.canonical_types:
            try:
                parse_type_str(type_str).validate()
            except (ParseError, ABITypeError) as e:
                raise SchemaParseError(
                    f"Unsupported type {type_str} in '{name}': {e}",
                    {"function": name, "type": type_str},
                ) from e
        return schema

    def to_abi(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "name": self.name,
            "inputs": [p.to_abi() for p in self.inputs],
            "stateMutability": self.state_mutability,
        }

    @classmethod
    def from_json(cls, body: str) -> "FunctionSchema":
        try:
            fragment = json.loads(body)
        except (TypeError, ValueError) as e:
            raise SchemaParseError(f"Schema body is not valid JSON: {e}") from e
        return cls.from_abi(fragment)

    def to_json(self) -> str:
        return json.dumps(self.to_abi(), separators=(",", ":"))


def compute_selector(signature: str) -> str:
    """
    Calculate function selector from signature

    Args:
        signature: e.g., "transfer(address,uint256)"

    Returns:
        4-byte hex selector, e.g. "0xa9059cbb"
    """
    sig = signature.replace(" ", "")
    return to_hex(keccak(text=sig)[:4])


def parse_abi(abi: Union[str, List[Dict[str, Any]]]) -> List[FunctionSchema]:
    """
    Parse an ABI definition into function schemas

    Args:
        abi: JSON string or already-decoded list of ABI fragments

    Returns:
        Function schemas in declaration order (events, errors and
        constructors are ignored)
    """
    if isinstance(abi, str):
        try:
            abi = json.loads(abi)
        except ValueError as e:
            raise SchemaParseError(f"ABI is not valid JSON: {e}") from e

    if not isinstance(abi, list):
        raise SchemaParseError("ABI must be a list of fragments")

    schemas = []
    for fragment in abi:
        if not isinstance(fragment, dict):
            raise SchemaParseError(f"Invalid ABI fragment: {fragment!r}")
        # ABI JSON defaults a missing type to "function"
        if fragment.get("type", "function") != "function":
            continue
        schemas.append(FunctionSchema.from_abi(fragment))
    return schemas
