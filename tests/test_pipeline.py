import asyncio
import json

import pytest

from core.pipeline import AggregationPipeline, PassStatus
from core.normalizer import NormalizedResult
from providers import BaseProvider, ProviderResult, ProviderStatus


class BrokenProvider(BaseProvider):
    """Proveedor configurado cuyo backend siempre falla."""

    def __init__(self, name: str, partial: list[dict] | None = None):
        super().__init__(api_key="key")
        self.name = name
        self.partial = partial or []

    async def _fetch(self, query, client, collected):
        collected.extend(self.partial)
        raise RuntimeError(f"{self.name} caído")


class RaisingProvider:
    """Rompe el contrato: lanza en vez de retornar un ProviderResult."""

    name = "raising"

    async def search(self, query):
        raise ValueError("boom")


@pytest.mark.asyncio
async def test_pass_scenario_filters_and_persists(make_provider, store) -> None:
    providers = [
        make_provider("google", [{"title": "A", "link": "http://iptv.example/a"}]),
        make_provider("exa", [{"title": "B", "url": "http://m3u.example/b"}]),
        make_provider("serpapi", [{"title": "C", "link": "http://unrelated.example/c"}]),
    ]
    pipeline = AggregationPipeline(providers, ["iptv", "m3u"], store)

    outcome = await pipeline.run()

    assert outcome.results == [
        NormalizedResult("A", "http://iptv.example/a"),
        NormalizedResult("B", "http://m3u.example/b"),
    ]
    assert outcome.status == PassStatus.SUCCESS
    assert all(p.queries == ["iptv m3u"] for p in providers)

    saved = json.loads((store.directory / outcome.snapshot_id).read_text(encoding="utf-8"))
    assert saved == [
        {"title": "A", "link": "http://iptv.example/a"},
        {"title": "B", "link": "http://m3u.example/b"},
    ]


@pytest.mark.asyncio
async def test_pass_dedups_across_providers_in_provider_order(make_provider, store) -> None:
    providers = [
        make_provider("google", [
            {"title": "g1", "link": "http://iptv.example/1"},
            {"title": "g2", "link": "http://iptv.example/2"},
        ]),
        make_provider("exa", [
            {"title": "e1", "url": "http://iptv.example/2"},
            {"title": "e2", "url": "http://iptv.example/3"},
            {"title": "no link"},
        ]),
        make_provider("serpapi", [{"title": "s1", "link": "http://iptv.example/1"}]),
    ]
    pipeline = AggregationPipeline(providers, ["iptv"], store)

    outcome = await pipeline.run()

    assert [(r.title, r.link) for r in outcome.results] == [
        ("g1", "http://iptv.example/1"),
        ("g2", "http://iptv.example/2"),
        ("e2", "http://iptv.example/3"),
    ]


@pytest.mark.asyncio
async def test_all_providers_failing_still_writes_empty_snapshot(store, list_snapshots) -> None:
    providers = [BrokenProvider("google"), BrokenProvider("exa"), BrokenProvider("serpapi")]
    pipeline = AggregationPipeline(providers, ["iptv", "m3u"], store)

    outcome = await pipeline.run()

    assert outcome.results == []
    assert outcome.status == PassStatus.FAILED
    assert [p.status for p in outcome.providers] == [ProviderStatus.DEGRADED] * 3
    assert list_snapshots(store) == [outcome.snapshot_id]
    assert json.loads((store.directory / outcome.snapshot_id).read_text()) == []


@pytest.mark.asyncio
async def test_failed_provider_keeps_partial_results(make_provider, store) -> None:
    providers = [
        BrokenProvider("google", partial=[{"title": "p", "link": "http://iptv.example/p"}]),
        make_provider("exa", [{"title": "e", "url": "http://iptv.example/e"}]),
    ]
    pipeline = AggregationPipeline(providers, ["iptv"], store)

    outcome = await pipeline.run()

    assert [r.title for r in outcome.results] == ["p", "e"]
    assert outcome.status == PassStatus.PARTIAL
    assert outcome.providers[0].reason == "google caído"


@pytest.mark.asyncio
async def test_provider_raising_is_isolated(make_provider, store) -> None:
    providers = [
        RaisingProvider(),
        make_provider("exa", [{"title": "e", "url": "http://iptv.example/e"}]),
    ]
    pipeline = AggregationPipeline(providers, ["iptv"], store)

    outcome = await pipeline.run()

    assert [r.title for r in outcome.results] == ["e"]
    assert outcome.providers[0].provider == "raising"
    assert outcome.providers[0].status == ProviderStatus.DEGRADED
    assert outcome.providers[0].reason == "boom"


@pytest.mark.asyncio
async def test_skipped_providers_are_not_failures(make_provider, store) -> None:
    providers = [
        make_provider("google", status=ProviderStatus.SKIPPED, reason="missing_credentials"),
        make_provider("exa", [{"title": "e", "url": "http://iptv.example/e"}]),
    ]
    pipeline = AggregationPipeline(providers, ["iptv"], store)

    outcome = await pipeline.run()

    assert outcome.status == PassStatus.SUCCESS
    assert outcome.to_dict()["providers"][0] == {
        "provider": "google",
        "status": "skipped",
        "count": 0,
        "reason": "missing_credentials",
    }


@pytest.mark.asyncio
async def test_providers_run_concurrently(store) -> None:
    first_started = asyncio.Event()

    class Waiter:
        name = "waiter"

        async def search(self, query):
            # Solo termina si el otro proveedor arranca mientras este espera
            await first_started.wait()
            return ProviderResult(self.name, [{"title": "w", "link": "http://iptv.example/w"}])

    class Starter:
        name = "starter"

        async def search(self, query):
            first_started.set()
            return ProviderResult(self.name, [{"title": "s", "link": "http://iptv.example/s"}])

    pipeline = AggregationPipeline([Waiter(), Starter()], ["iptv"], store)

    outcome = await asyncio.wait_for(pipeline.run(), timeout=2)

    # El orden de concatenación es el de los proveedores, no el de finalización
    assert [r.title for r in outcome.results] == ["w", "s"]


@pytest.mark.asyncio
async def test_real_adapter_without_credentials_is_noop(monkeypatch, store) -> None:
    from providers import GoogleSearchProvider

    def _no_client(*args, **kwargs):
        raise AssertionError("no debería abrir un cliente HTTP")

    monkeypatch.setattr("providers.base.httpx.AsyncClient", _no_client)
    pipeline = AggregationPipeline([GoogleSearchProvider()], ["iptv"], store)

    outcome = await pipeline.run()

    assert outcome.results == []
    assert outcome.providers[0].status == ProviderStatus.SKIPPED


def test_query_joins_terms_with_spaces(store) -> None:
    pipeline = AggregationPipeline([], ["iptv", "m3u", "bein", "بث مباشر"], store)

    assert pipeline.query == "iptv m3u bein بث مباشر"
