from __future__ import annotations

import threading
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from depmatrix.domain.scoring import DynamicRuleEngine, RuleConfigError, RuleStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from depmatrix.domain.model import Claim


def test_dynamic_engine_applies_source_boost(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = DynamicRuleEngine(clock=clock)

    assert engine.score(make_claim(source_type="CODEBASE")) == pytest.approx(0.8)
    assert engine.score(make_claim(source_type="ROUTER_LOG")) == pytest.approx(0.65)
    assert engine.score(make_claim(source_type="NETWORK")) == pytest.approx(0.5)


def test_dynamic_engine_boosts_critical_apps(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = DynamicRuleEngine(clock=clock)
    claim = make_claim("web-app -> Critical-App-Payments", source_type="ROUTER_LOG")

    assert engine.score(claim) == pytest.approx(0.85)


def test_dynamic_engine_penalizes_test_data(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = DynamicRuleEngine(clock=clock)
    claim = make_claim(source_type="API_GATEWAY", raw_data="GET /api/TEST/users")

    assert engine.score(claim) == pytest.approx(0.45)


def test_dynamic_engine_penalizes_old_claims(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = DynamicRuleEngine(clock=clock)
    claim = make_claim(hours_ago=24 * 40)

    assert engine.score(claim) == pytest.approx(0.7)


def test_dynamic_engine_penalizes_missing_id(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = DynamicRuleEngine(clock=clock)

    assert engine.score(make_claim(claim_id="")) == pytest.approx(0.7)


def test_dynamic_engine_clamps_scores(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = DynamicRuleEngine(clock=clock)
    engine.update_rules({"codebase_boost": 0.9})

    assert engine.score(make_claim("web-app -> critical-app")) == 1.0


def test_update_rules_persists_and_applies(
    tmp_path: Path, make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    store = RuleStore(tmp_path / "rules.json")
    engine = DynamicRuleEngine.from_store(store, clock=clock)

    updated = engine.update_rules({"codebase_boost": 0.1})

    assert updated.codebase_boost == 0.1
    assert engine.score(make_claim()) == pytest.approx(0.6)
    assert store.load().codebase_boost == 0.1
    reloaded = DynamicRuleEngine.from_store(store, clock=clock)
    assert reloaded.rule_config == updated


def test_update_rules_rejects_invalid_values(tmp_path: Path) -> None:
    store = RuleStore(tmp_path / "rules.json")
    engine = DynamicRuleEngine.from_store(store)
    before = engine.rule_config

    with pytest.raises(RuleConfigError):
        engine.update_rules({"codebase_boost": "lots"})
    with pytest.raises(RuleConfigError):
        engine.update_rules({"unknown_rule": 1})

    assert engine.rule_config is before
    assert not store.path.exists()


def test_scoring_sees_whole_snapshots_during_updates(
    make_claim: Callable[..., Claim], clock: Callable[[], datetime]
) -> None:
    engine = DynamicRuleEngine(clock=clock)
    claim = make_claim("web-app -> critical-app", timestamp=clock() - timedelta(hours=1))
    # both boosts move together; a torn read would score 0.8
    snapshots = [
        {"codebase_boost": 0.1, "critical_app_boost": 0.1},
        {"codebase_boost": 0.2, "critical_app_boost": 0.2},
    ]
    allowed = {0.7, 0.9}
    observed: set[float] = set()
    stop = threading.Event()

    def writer() -> None:
        for index in range(200):
            engine.update_rules(snapshots[index % 2])
        stop.set()

    def reader() -> None:
        while True:
            observed.add(round(engine.score(claim), 6))
            if stop.is_set():
                break

    engine.update_rules(snapshots[0])
    threads = [threading.Thread(target=reader) for _ in range(4)]
    threads.append(threading.Thread(target=writer))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert observed
    assert observed <= allowed
