"""Test helper functions."""

import asyncio
import json
from typing import Any, Dict, Optional

from src.models.search import StoreQuery, StoreResult
from src.services.property_store import InMemoryPropertyStore, PropertyStore


def create_vercel_request(
    path: str = "/imoveis",
    query: Optional[Dict[str, Any]] = None,
    method: str = "GET",
) -> Dict[str, Any]:
    """Create a Vercel request object for testing."""
    return {
        "method": method,
        "path": path,
        "headers": {"content-type": "application/json"},
        "body": "",
        "query": query or {},
    }


def response_json(response: Dict[str, Any]) -> Dict[str, Any]:
    return json.loads(response["body"])


class GatedStore(PropertyStore):
    """Store whose responses are released manually, to simulate network latency."""

    def __init__(self, inner: InMemoryPropertyStore):
        self.inner = inner
        self.gates: list[asyncio.Event] = []
        self.queries: list[StoreQuery] = []
        self.fail_next = False

    async def query(self, query: StoreQuery) -> StoreResult:
        gate = asyncio.Event()
        self.gates.append(gate)
        self.queries.append(query)
        should_fail = self.fail_next
        self.fail_next = False
        await gate.wait()
        if should_fail:
            raise ConnectionError("store unreachable")
        return await self.inner.query(query)


class FailingStore(PropertyStore):
    """Store that always fails."""

    def __init__(self, error: Exception = None):
        self.error = error or ConnectionError("connection refused")
        self.calls = 0

    async def query(self, query: StoreQuery) -> StoreResult:
        self.calls += 1
        raise self.error
