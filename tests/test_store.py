"""Tests for JsonFileSchemaStore and registries that persist through it."""

import asyncio
import json

import pytest

from evm_input_decoder import (
    CalldataDecoder,
    FunctionData,
    FunctionHeader,
    JsonFileSchemaStore,
    SignatureRegistry,
    compute_selector,
)

pytestmark = pytest.mark.anyio


VAULT_ABI = [
    {
        "type": "function",
        "name": "depositFor",
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "shares", "type": "uint128"},
        ],
        "stateMutability": "nonpayable",
    }
]


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store" / "schemas.json"


class TestJsonFileSchemaStore:

    async def test_empty_when_missing(self, store_path):
        store = JsonFileSchemaStore(store_path)
        assert await store.load_all_function_headers() == []
        assert await store.get_function_data("f()") is None

    async def test_headers_and_data_persist(self, store_path):
        store = JsonFileSchemaStore(store_path)
        await store.save_function_headers([FunctionHeader("0x12345678", "f()")])
        await store.save_function_data([FunctionData("f()", '{"name":"f"}')])

        reopened = JsonFileSchemaStore(store_path)
        assert await reopened.load_all_function_headers() == [FunctionHeader("0x12345678", "f()")]
        assert await reopened.get_function_data("f()") == '{"name":"f"}'

        doc = json.loads(store_path.read_text())
        assert doc["headers"] == [{"selector": "0x12345678", "canonical_signature": "f()"}]

    async def test_headers_keep_save_order(self, store_path):
        store = JsonFileSchemaStore(store_path)
        await store.save_function_headers([FunctionHeader("0x00000001", "a()")])
        await store.save_function_headers([FunctionHeader("0x00000002", "b()")])

        headers = await store.load_all_function_headers()
        assert [h.canonical_signature for h in headers] == ["a()", "b()"]

    async def test_remove_all_data(self, store_path):
        store = JsonFileSchemaStore(store_path)
        await store.save_function_headers([FunctionHeader("0x12345678", "f()")])

        await store.remove_all_data()

        assert not store_path.exists()
        assert await store.load_all_function_headers() == []

    async def test_reads_run_alongside_other_tasks(self, store_path):
        store = JsonFileSchemaStore(store_path)
        await store.save_function_data([FunctionData("f()", "{}")])

        ticks = []

        async def ticker():
            ticks.append(1)

        results = await asyncio.gather(
            store.get_function_data("f()"),
            store.load_all_function_headers(),
            ticker(),
        )

        assert results[:2] == ["{}", []]
        assert ticks == [1]


class TestRegistryWithFileStore:

    async def test_imported_abi_survives_restart(self, store_path, encode_call):
        first = SignatureRegistry(JsonFileSchemaStore(store_path))
        await first.load_all_abi()
        await first.import_abi(VAULT_ABI)

        second = SignatureRegistry(JsonFileSchemaStore(store_path))
        await second.load_all_abi()

        signature = "depositFor(address,uint128)"
        assert second.candidates(compute_selector(signature)) == [signature]
        assert second.imported_function_count() == 1
        assert second.stats()["lazy_fetch_count"] == 0

        calldata = encode_call(
            signature,
            ["address", "uint128"],
            ["0x0000000000000000000000000000000000000abc", 2**100],
        )
        matches = await CalldataDecoder(second).decode_calldata(calldata)

        assert [p.name for p in matches[0].parameters] == ["account", "shares"]
        assert matches[0].parameters[1].value == str(2**100)
        assert second.stats()["lazy_fetch_count"] == 1
