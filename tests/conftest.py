"""Pytest configuration and shared fixtures."""

import pytest
from eth_abi import encode
from httpx import ASGITransport, AsyncClient
from asgi_lifespan import LifespanManager

from evm_input_decoder import (
    CalldataDecoder,
    MemorySchemaStore,
    SignatureRegistry,
    compute_selector,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def encode_call():
    """Build call data: selector of ``signature`` followed by encoded args."""

    def _encode_call(signature, types, values, selector=None):
        selector = selector or compute_selector(signature)
        return selector + encode(types, values).hex()

    return _encode_call


@pytest.fixture
def memory_store():
    return MemorySchemaStore()


@pytest.fixture
async def registry():
    """Registry with the bundled catalog loaded and no store."""
    reg = SignatureRegistry()
    await reg.load_all_abi()
    return reg


@pytest.fixture
def decoder(registry):
    return CalldataDecoder(registry)


@pytest.fixture
async def async_client():
    """Shared HTTPX async client with FastAPI lifespan handling."""
    from evm_input_decoder import main

    main.registry.reset()
    async with LifespanManager(main.app):
        transport = ASGITransport(app=main.app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    main.registry.reset()
