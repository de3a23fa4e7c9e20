"""
Schema stores - durable storage for user-imported function schemas
"""
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .schema import FunctionData, FunctionHeader

logger = logging.getLogger(__name__)


class SchemaStore(Protocol):
    """Contract the registry consumes; implementations own the storage format"""

    async def load_all_function_headers(self) -> List[FunctionHeader]:
        """Return every stored header, in the order they were saved"""
        ...

    async def save_function_headers(self, headers: List[FunctionHeader]) -> None:
        ...

    async def save_function_data(self, items: List[FunctionData]) -> None:
        ...

    async def get_function_data(self, canonical_signature: str) -> Optional[str]:
        """Return the serialized schema body, or None if absent"""
        ...

    async def remove_all_data(self) -> None:
        ...


class MemorySchemaStore:
    """Process-local store, useful for tests and short-lived services"""

    def __init__(self):
        self.headers: List[FunctionHeader] = []
        self.data: Dict[str, str] = {}

    async def load_all_function_headers(self) -> List[FunctionHeader]:
        return list(self.headers)

    async def save_function_headers(self, headers: List[FunctionHeader]) -> None:
        self.headers.extend(headers)

    async def save_function_data(self, items: List[FunctionData]) -> None:
        for item in items:
            self.data[item.canonical_signature] = item.body

    async def get_function_data(self, canonical_signature: str) -> Optional[str]:
        return self.data.get(canonical_signature)

    async def remove_all_data(self) -> None:
        self.headers.clear()
        self.data.clear()


class JsonFileSchemaStore:
    """
    Store backed by a single JSON document.

    Layout::

        {
          "headers": [{"selector": "0x...", "canonical_signature": "..."}],
          "functions": {"<canonical signature>": "<serialized body>"}
        }

    Writes go to a sibling temp file that replaces the document, so a crash
    mid-write leaves the previous version intact. File I/O runs in a worker
    thread to keep the event loop free.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    async def load_all_function_headers(self) -> List[FunctionHeader]:
        doc = await asyncio.to_thread(self._read)
        return [
            FunctionHeader(h["selector"], h["canonical_signature"])
            for h in doc["headers"]
        ]

    async def save_function_headers(self, headers: List[FunctionHeader]) -> None:
        doc = await asyncio.to_thread(self._read)
        doc["headers"].extend(h.to_dict() for h in headers)
        await asyncio.to_thread(self._write, doc)

    async def save_function_data(self, items: List[FunctionData]) -> None:
        doc = await asyncio.to_thread(self._read)
        for item in items:
            doc["functions"][item.canonical_signature] = item.body
        await asyncio.to_thread(self._write, doc)

    async def get_function_data(self, canonical_signature: str) -> Optional[str]:
        doc = await asyncio.to_thread(self._read)
        return doc["functions"].get(canonical_signature)

    async def remove_all_data(self) -> None:
        if self._path.exists():
            await asyncio.to_thread(self._path.unlink)
            logger.info(f"Removed schema store {self._path}")

    def _read(self) -> Dict:
        if not self._path.exists():
            return {"headers": [], "functions": {}}
        with open(self._path, encoding="utf-8") as f:
            doc = json.load(f)
        doc.setdefault("headers", [])
        doc.setdefault("functions", {})
        return doc

    def _write(self, doc: Dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
        os.replace(tmp_path, self._path)
