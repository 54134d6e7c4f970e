import asyncio

import pytest
import pytest_asyncio

from core.pipeline import AggregationPipeline
from providers import ProviderResult, ProviderStatus
from scheduler import SchedulerController
from storage import SnapshotStore


class StaticProvider:
    """Proveedor en memoria: retorna siempre los mismos items."""

    def __init__(
        self,
        name: str,
        items: list[dict] | None = None,
        status: ProviderStatus = ProviderStatus.OK,
        reason: str | None = None,
        gate: asyncio.Event | None = None,
    ):
        self.name = name
        self.items = items or []
        self.status = status
        self.reason = reason
        self.gate = gate
        self.queries: list[str] = []

    async def search(self, query: str) -> ProviderResult:
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        return ProviderResult(self.name, list(self.items), self.status, self.reason)


@pytest.fixture
def make_provider():
    return StaticProvider


@pytest.fixture
def store(tmp_path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "snapshots", "auto_results_")


def snapshot_files(store: SnapshotStore) -> list[str]:
    if not store.directory.exists():
        return []
    return sorted(p.name for p in store.directory.glob("auto_results_*.json"))


@pytest.fixture
def list_snapshots():
    return snapshot_files


@pytest_asyncio.fixture
async def make_controller(store):
    created: list[SchedulerController] = []

    def _make(providers, terms=("iptv", "m3u"), snapshot_store=None, interval_seconds=60):
        pipeline = AggregationPipeline(providers, terms, snapshot_store or store)
        controller = SchedulerController(
            pipeline, interval_seconds=interval_seconds, timezone="UTC"
        )
        created.append(controller)
        return controller

    yield _make

    for controller in created:
        controller.shutdown()
