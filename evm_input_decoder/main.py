"""
EVM Input Data Decoder - Decode contract call data against known ABIs

HTTP service around the signature registry and calldata decoder
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from .calldata_decoder import CalldataDecoder, format_human_readable
from .exceptions import DecoderError, InvalidInputData, SchemaParseError
from .signature_registry import SignatureRegistry
from .store import JsonFileSchemaStore

# Load environment variables
load_dotenv()

# Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SCHEMA_STORE_PATH = os.getenv("SCHEMA_STORE_PATH")
PORT = int(os.getenv("PORT", "8000"))
BASE_URL = os.getenv("BASE_URL", f"http://localhost:{PORT}")

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize services
schema_store = JsonFileSchemaStore(SCHEMA_STORE_PATH) if SCHEMA_STORE_PATH else None
registry = SignatureRegistry(schema_store)
calldata_decoder = CalldataDecoder(registry)

if schema_store is None:
    logger.warning("No SCHEMA_STORE_PATH set - imported ABIs are kept in memory only")
else:
    logger.info(f"Schema store: {SCHEMA_STORE_PATH}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await registry.load_all_abi()
    logger.info(f"Input data decoder ready at {BASE_URL}")
    yield


# Initialize FastAPI
app = FastAPI(
    title="EVM Input Data Decoder",
    description="Decode smart contract call data into named, typed parameters",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response Models
class DecodeRequest(BaseModel):
    """Decode calldata request"""
    calldata: str = Field(..., description="Hex-encoded calldata to decode")

    class Config:
        json_schema_extra = {
            "example": {
                "calldata": "0xa9059cbb000000000000000000000000742d35cc6634c0532925a3b844bc9e7595f0beb00000000000000000000000000000000000000000000000000de0b6b3a7640000"
            }
        }


class SignatureLookupRequest(BaseModel):
    """Signature lookup request"""
    selector: str = Field(..., description="4-byte function selector (e.g., '0xa9059cbb')")

    class Config:
        json_schema_extra = {
            "example": {
                "selector": "0xa9059cbb"
            }
        }


class ImportRequest(BaseModel):
    """ABI import request"""
    abi: Union[str, List[Dict[str, Any]]] = Field(..., description="Contract ABI as JSON text or a list of fragments")

    class Config:
        json_schema_extra = {
            "example": {
                "abi": [
                    {
                        "type": "function",
                        "name": "mint",
                        "inputs": [
                            {"name": "to", "type": "address"},
                            {"name": "amount", "type": "uint256"}
                        ],
                        "stateMutability": "nonpayable"
                    }
                ]
            }
        }


class DecodeResponse(BaseModel):
    """Decode result; an empty match list means the selector is unknown"""
    function_selector: str
    decoded: bool
    matches: List[Dict[str, Any]]
    warning: Optional[str] = None


# API Endpoints
@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "evm-input-decoder",
        "version": "1.0.0",
        "functions": registry.function_count(),
        "store": schema_store is not None
    }


@app.get("/stats")
async def stats():
    """Registry and decoder counters"""
    return {
        "registry": registry.stats(),
        "decoder": calldata_decoder.stats()
    }


@app.post(
    "/entrypoints/decode/invoke",
    response_model=DecodeResponse,
    summary="Decode Transaction Calldata",
    description="Decode transaction calldata into named, typed parameters"
)
async def decode_calldata(request: DecodeRequest):
    """
    Decode transaction calldata

    Returns one match per known function sharing the selector, in
    registration order. Integers are exact decimal strings.
    """
    try:
        logger.info(f"Decoding calldata: {request.calldata[:20]}...")

        matches = await calldata_decoder.decode_calldata(request.calldata)

    except InvalidInputData as e:
        raise HTTPException(status_code=400, detail=e.message)
    except DecoderError as e:
        logger.error(f"Decode error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"{e.error_code}: {e.message}")

    result = {
        "function_selector": request.calldata.strip()[:10].lower(),
        "decoded": bool(matches),
        "matches": [
            dict(match.to_dict(), human_readable=format_human_readable(match))
            for match in matches
        ],
    }
    if not matches:
        result["warning"] = "Function signature not found in registry"
    return result


@app.post(
    "/entrypoints/lookup/invoke",
    summary="Lookup Function Signature",
    description="List the known signatures for a 4-byte selector"
)
async def lookup_signature(request: SignatureLookupRequest):
    """Look up candidate signatures by selector"""
    selector = request.selector.strip().lower()
    if not selector.startswith("0x"):
        selector = "0x" + selector

    logger.info(f"Looking up selector: {selector}")
    signatures = registry.candidates(selector)

    if not signatures:
        raise HTTPException(
            status_code=404,
            detail=f"Signature not found for selector: {request.selector}"
        )

    return {
        "selector": selector,
        "signatures": signatures
    }


@app.post(
    "/entrypoints/import/invoke",
    summary="Import Contract ABI",
    description="Register the functions of a contract ABI for later decoding"
)
async def import_abi(request: ImportRequest):
    """Import an ABI; functions already known are skipped"""
    try:
        imported = await registry.import_abi(request.abi)

    except SchemaParseError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        logger.error(f"Import error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Import failed: {str(e)}")

    return {
        "imported": imported,
        "function_count": registry.function_count(),
        "imported_function_count": registry.imported_function_count()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
