"""
Decoded values - the named tree produced by flattening decoded parameters
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass(frozen=True)
class ScalarValue:
    """Any non-integer scalar in its decoded string form"""

    name: str
    type: str
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "value": self.value}


@dataclass(frozen=True)
class IntegerValue:
    """An integer of any width, kept as an exact base-10 string"""

    name: str
    type: str
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "value": self.value}


@dataclass(frozen=True)
class TupleValue:
    """Tuple components, named and ordered as declared"""

    name: str
    type: str
    value: List["DecodedValue"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "value": [item.to_dict() for item in self.value],
        }


@dataclass(frozen=True)
class ArrayValue:
    """Array elements named ``<param>[<index>]``"""

    name: str
    type: str
    value: List["DecodedValue"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "value": [item.to_dict() for item in self.value],
        }


DecodedValue = Union[ScalarValue, IntegerValue, TupleValue, ArrayValue]


@dataclass(frozen=True)
class FunctionMatch:
    """One candidate schema that decoded the call data"""

    name: str
    canonical_signature: str
    selector: str
    parameters: List[DecodedValue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.canonical_signature,
            "selector": self.selector,
            "parameters": [p.to_dict() for p in self.parameters],
        }
