"""
Signature Registry - selector index over bundled, stored and imported ABIs
"""
import logging
from typing import Any, Dict, List, Optional, Union

from . import catalog
from .exceptions import SchemaNotFound, SchemaParseError, StoreUnavailable
from .schema import FunctionData, FunctionSchema, parse_abi
from .store import SchemaStore

logger = logging.getLogger(__name__)


class SignatureRegistry:
    """
    Map 4-byte selectors to candidate function schemas.

    Selectors collide, so each selector keeps an ordered list of canonical
    signatures: bundled catalog first, then store headers, then runtime
    imports. Canonical signatures are unique across the registry.

    Bundled and imported schemas are cached in memory when registered.
    Schemas known only by a store header are fetched on first use.
    """

    def __init__(self, store: Optional[SchemaStore] = None):
        self.store = store
        self.reset()

    def reset(self):
        """Drop all in-memory state; the store is left untouched"""
        self._selectors: Dict[str, List[str]] = {}
        self._function_keys = set()
        self._schemas: Dict[str, FunctionSchema] = {}
        self._bundled_count = 0
        self._bundled_loaded = False
        self._loaded = False
        self._lazy_fetch_count = 0

    async def load_all_abi(self):
        """Load the bundled catalog, then merge store headers. Runs once."""
        if self._loaded:
            return
        self.load_bundled()
        await self.load_from_store()
        self._loaded = True
        logger.info(
            f"Signature registry loaded: {self.function_count()} functions "
            f"({self.imported_function_count()} from store)"
        )

    def load_bundled(self) -> int:
        """Register every bundled function; returns the number added"""
        if self._bundled_loaded:
            return 0

        added = 0
        for schema in catalog.bundled_schemas():
            signature = schema.canonical_signature
            if not self._register(schema.selector, signature):
                continue
            self._schemas[signature] = schema
            added += 1

        self._bundled_loaded = True
        self._bundled_count = self.function_count()
        logger.info(f"Loaded {added} bundled functions")
        return added

    async def load_from_store(self) -> int:
        """
        Merge function headers from the store without fetching bodies.

        Returns the number of headers added. Duplicates are skipped.
        """
        if self.store is None:
            logger.debug("No schema store configured, skipping store load")
            return 0

        headers = await self.store.load_all_function_headers()

        # No await below: the merge is all-or-nothing under cancellation
        added = 0
        for header in headers:
            if self._register(header.selector.lower(), header.canonical_signature):
                added += 1

        logger.info(f"Merged {added} of {len(headers)} stored function headers")
        return added

    async def import_abi(self, abi: Union[str, List[Dict[str, Any]]]) -> List[str]:
        """
        Register the functions of an ABI supplied at runtime

        Args:
            abi: JSON string or list of ABI fragments

        Returns:
            Canonical signatures that were newly registered
        """
        new_schemas: Dict[str, FunctionSchema] = {}
        for schema in parse_abi(abi):
            signature = schema.canonical_signature
            if signature in self._function_keys or signature in new_schemas:
                continue
            new_schemas[signature] = schema

        if not new_schemas:
            logger.info("Imported ABI contains no new functions")
            return []

        # Persist before registering so a failed write leaves no trace
        if self.store is not None:
            await self.store.save_function_headers(
                [schema.header() for schema in new_schemas.values()]
            )
            await self.store.save_function_data([
                FunctionData(signature, schema.to_json())
                for signature, schema in new_schemas.items()
            ])

        for signature, schema in new_schemas.items():
            self._register(schema.selector, signature)
            self._schemas[signature] = schema

        logger.info(f"Imported {len(new_schemas)} new functions")
        return list(new_schemas)

    async def resolve_schema(self, canonical_signature: str) -> FunctionSchema:
        """Return the cached schema, fetching it from the store on first use"""
        schema = self._schemas.get(canonical_signature)
        if schema is not None:
            return schema

        try:
            store = self._require_store("resolve_schema")
        except StoreUnavailable as e:
            raise SchemaNotFound(canonical_signature, e.details) from e

        body = await store.get_function_data(canonical_signature)
        if body is None:
            raise SchemaNotFound(canonical_signature)

        schema = FunctionSchema.from_json(body)
        if schema.canonical_signature != canonical_signature:
            raise SchemaParseError(
                f"Stored body for {canonical_signature} describes {schema.canonical_signature}",
                {"canonical_signature": canonical_signature},
            )

        self._schemas[canonical_signature] = schema
        self._lazy_fetch_count += 1
        logger.debug(f"Fetched schema {canonical_signature} from store")
        return schema

    async def delete_saved_abi(self):
        """Remove everything the store holds; in-memory state is kept"""
        store = self._require_store("delete_saved_abi")
        await store.remove_all_data()

    def candidates(self, selector: str) -> List[str]:
        """Canonical signatures registered under a selector, in registration order"""
        return list(self._selectors.get(selector.lower(), []))

    def function_count(self) -> int:
        return len(self._function_keys)

    def imported_function_count(self) -> int:
        return self.function_count() - self._bundled_count

    def stats(self) -> Dict[str, int]:
        return {
            "function_count": self.function_count(),
            "bundled_count": self._bundled_count,
            "imported_function_count": self.imported_function_count(),
            "selector_count": len(self._selectors),
            "cached_schema_count": len(self._schemas),
            "lazy_fetch_count": self._lazy_fetch_count,
        }

    def _register(self, selector: str, canonical_signature: str) -> bool:
        if canonical_signature in self._function_keys:
            return False
        self._function_keys.add(canonical_signature)
        self._selectors.setdefault(selector, []).append(canonical_signature)
        return True

    def _require_store(self, operation: str) -> SchemaStore:
        if self.store is None:
            raise StoreUnavailable(operation)
        return self.store
