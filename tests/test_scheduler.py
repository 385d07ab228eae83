# File: tests/test_scheduler.py
import asyncio

import pytest

from policy_scout.engine import PolicyDiscovery
from policy_scout.models import DiscoveryMethod, DiscoveryResult, OutcomeKind
from policy_scout.scheduler import batch_discover


class ScriptedDiscovery(PolicyDiscovery):
    """Discovery whose per-domain behaviour is scripted; records concurrency."""

    def __init__(self, config, script):
        super().__init__(config, fetcher=object())
        self.script = script
        self.running = 0
        self.peak = 0
        self.started = []

    async def discover(self, base_domain):
        self.started.append(base_domain)
        self.running += 1
        self.peak = max(self.peak, self.running)
        try:
            await asyncio.sleep(0.01)
            outcome = self.script[base_domain]
            if isinstance(outcome, Exception):
                raise outcome
            return DiscoveryResult(privacy_policy_url=outcome, method=DiscoveryMethod.DIRECT, outcome=OutcomeKind.SUCCESS)
        finally:
            self.running -= 1


@pytest.mark.asyncio()
async def test_one_failing_domain_does_not_affect_others(fast_config):
    script = {
        "a.com": "https://a.com/privacy",
        "b.com": RuntimeError("boom"),
        "c.com": "https://c.com/legal/privacy",
        "d.com": "https://d.com/privacy-policy",
    }
    discovery = ScriptedDiscovery(fast_config, script)
    results = await batch_discover(list(script), discovery=discovery)

    assert list(results) == ["a.com", "b.com", "c.com", "d.com"]
    assert results["a.com"].privacy_policy_url == "https://a.com/privacy"
    assert results["b.com"].privacy_policy_url is None
    assert results["b.com"].method is DiscoveryMethod.FALLBACK
    assert results["d.com"].found


@pytest.mark.asyncio()
async def test_groups_respect_batch_size(fast_config):
    domains = [f"site{i}.com" for i in range(7)]
    config = fast_config.model_copy(update={"batch_size": 3})
    discovery = ScriptedDiscovery(config, {d: None for d in domains})
    results = await batch_discover(domains, discovery=discovery)

    assert len(results) == 7
    assert discovery.peak == 3
    assert discovery.started == domains


@pytest.mark.asyncio()
async def test_delay_between_groups(fast_config):
    config = fast_config.model_copy(update={"batch_size": 2, "batch_delay": 0.2})
    domains = ["a.com", "b.com", "c.com"]
    discovery = ScriptedDiscovery(config, {d: None for d in domains})

    loop = asyncio.get_running_loop()
    start = loop.time()
    await batch_discover(domains, discovery=discovery)
    assert loop.time() - start >= 0.2


@pytest.mark.asyncio()
async def test_duplicates_and_empty_input(fast_config):
    discovery = ScriptedDiscovery(fast_config, {"a.com": None})
    results = await batch_discover(["a.com", "a.com"], discovery=discovery)
    assert list(results) == ["a.com"]
    assert discovery.started == ["a.com"]
    assert await batch_discover([], config=fast_config) == {}
