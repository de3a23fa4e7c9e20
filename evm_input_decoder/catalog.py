"""
Bundled ABI catalog - write functions of widely used contracts, shipped as package data
"""
import json
import logging
from importlib import resources
from typing import Iterator, List

from .schema import FunctionSchema, parse_abi

logger = logging.getLogger(__name__)

ABI_PACKAGE = "evm_input_decoder.abi"

# Load order decides collision tie-breaks, keep it stable
BUNDLED_SOURCES = [
    "erc20Permit.json",
    "weth9.json",
    "uniswapV2.json",
    "uniswapV3.json",
    "aave.json",
]


def load_source(filename: str) -> List[FunctionSchema]:
    """Parse one bundled ABI file"""
    text = resources.files(ABI_PACKAGE).joinpath(filename).read_text(encoding="utf-8")
    return parse_abi(json.loads(text))


def bundled_schemas() -> Iterator[FunctionSchema]:
    """
    Yield every function of every bundled source, in load order.

    Sources may redeclare the same function; callers dedup by canonical
    signature.
    """
    for filename in BUNDLED_SOURCES:
        schemas = load_source(filename)
        logger.debug(f"Loaded {len(schemas)} functions from {filename}")
        yield from schemas
