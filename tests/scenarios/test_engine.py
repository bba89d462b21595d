"""Tests for the scenario engine: registry, cache, selection, comparison."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from taxgraph.core.config import settings
from taxgraph.core.exceptions import (
    ModificationNotFoundError,
    ScenarioError,
    ScenarioNotFoundError,
)
from taxgraph.scenarios import engine as engine_module
from taxgraph.scenarios.engine import ScenarioEngine
from taxgraph.scenarios.models import Modification, ModificationType, Scenario
from taxgraph.scenarios.quick import max_401k_scenario
from taxgraph.scenarios.state_machine import ScenarioStatus


def _raise_income(amount: int) -> Modification:
    return Modification(kind=ModificationType.ADD_INCOME, label="Raise", value=amount)


@pytest.fixture
def engine(single_info) -> ScenarioEngine:
    return ScenarioEngine(single_info)


class TestScenarioRegistry:
    def test_create_starts_in_draft(self, engine) -> None:
        scenario = engine.create_scenario("Raise", modifications=[_raise_income(10000)])
        assert scenario.id.startswith("scenario_")
        assert engine.status(scenario.id) == ScenarioStatus.DRAFT
        assert engine.get_result(scenario.id) is None

    def test_explicit_id_must_be_unique(self, engine) -> None:
        engine.create_scenario("One", scenario_id="s1")
        with pytest.raises(ScenarioError, match="already exists"):
            engine.create_scenario("Two", scenario_id="s1")

    def test_get_returns_copy(self, engine) -> None:
        scenario = engine.create_scenario("Raise", modifications=[_raise_income(10000)])
        copy = engine.get_scenario(scenario.id)
        copy.modifications.clear()
        assert len(engine.get_scenario(scenario.id).modifications) == 1

    def test_list_in_creation_order(self, engine) -> None:
        engine.create_scenario("A")
        engine.create_scenario("B")
        assert [s.name for s in engine.list_scenarios()] == ["A", "B"]

    def test_unknown_scenario(self, engine) -> None:
        with pytest.raises(ScenarioNotFoundError):
            engine.get_scenario("missing")

    def test_update_scenario(self, engine) -> None:
        scenario = engine.create_scenario("Old")
        updated = engine.update_scenario(scenario.id, name="New", tax_year=2024)
        assert updated.name == "New"
        assert updated.tax_year == 2024
        assert updated.modified_at >= scenario.modified_at

    def test_update_rejects_other_attributes(self, engine) -> None:
        scenario = engine.create_scenario("Old")
        with pytest.raises(ScenarioError, match="modifications"):
            engine.update_scenario(scenario.id, modifications=[])

    def test_duplicate(self, engine) -> None:
        scenario = engine.create_scenario("Raise", modifications=[_raise_income(10000)])
        engine.calculate(scenario.id)
        copy = engine.duplicate_scenario(scenario.id)
        assert copy.id != scenario.id
        assert copy.name == "Raise (copy)"
        assert copy.modifications == scenario.modifications
        assert engine.status(copy.id) == ScenarioStatus.DRAFT

    def test_add_prebuilt_scenario(self, engine) -> None:
        scenario = engine.add_scenario(max_401k_scenario())
        assert engine.status(scenario.id) == ScenarioStatus.DRAFT

    def test_import_is_all_or_nothing(self, engine) -> None:
        engine.create_scenario("Existing", scenario_id="s1")
        with pytest.raises(ScenarioError):
            engine.import_scenarios(
                [Scenario(id="s2", name="New"), Scenario(id="s1", name="Clash")]
            )
        assert [s.id for s in engine.list_scenarios()] == ["s1"]

    def test_import_rejects_duplicate_ids(self, engine) -> None:
        with pytest.raises(ScenarioError):
            engine.import_scenarios([Scenario(id="s2", name="A"), Scenario(id="s2", name="B")])
        assert engine.list_scenarios() == []

    def test_clear_all(self, engine) -> None:
        engine.create_scenario("A")
        engine.create_scenario("B")
        engine.clear_all_scenarios()
        assert engine.list_scenarios() == []


class TestDelete:
    def test_delete_removes_everything(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        engine.calculate(scenario.id)
        engine.select_scenario(scenario.id)

        engine.delete_scenario(scenario.id)

        assert engine.get_result(scenario.id) is None
        assert engine.selected_ids == []
        with pytest.raises(ScenarioNotFoundError):
            engine.status(scenario.id)

    def test_delete_twice(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        engine.delete_scenario(scenario.id)
        with pytest.raises(ScenarioNotFoundError):
            engine.delete_scenario(scenario.id)

    def test_calculate_after_delete(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        engine.delete_scenario(scenario.id)
        with pytest.raises(ScenarioNotFoundError):
            engine.calculate(scenario.id)


class TestModifications:
    def test_add_invalidates_result(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        engine.calculate(scenario.id)
        assert engine.status(scenario.id) == ScenarioStatus.CALCULATED

        engine.add_modification(scenario.id, _raise_income(10000))

        assert engine.status(scenario.id) == ScenarioStatus.STALE
        assert engine.get_result(scenario.id) is None
        assert engine.calculate(scenario.id).wages_income == Decimal("60000")

    def test_update_modification(self, engine) -> None:
        mod = _raise_income(10000)
        scenario = engine.create_scenario("Raise", modifications=[mod])
        updated = engine.update_modification(scenario.id, mod.id, value=20000)
        assert updated.modifications[0].id == mod.id
        assert updated.modifications[0].value == 20000
        assert engine.calculate(scenario.id).wages_income == Decimal("70000")

    def test_update_modification_rejects_id(self, engine) -> None:
        mod = _raise_income(10000)
        scenario = engine.create_scenario("Raise", modifications=[mod])
        with pytest.raises(ScenarioError):
            engine.update_modification(scenario.id, mod.id, id="other")

    def test_update_missing_modification(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        with pytest.raises(ModificationNotFoundError):
            engine.update_modification(scenario.id, "mod_missing", value=1)

    def test_remove_modification(self, engine) -> None:
        keep, drop = _raise_income(1000), _raise_income(2000)
        scenario = engine.create_scenario("Raise", modifications=[keep, drop])
        updated = engine.remove_modification(scenario.id, drop.id)
        assert [m.id for m in updated.modifications] == [keep.id]
        with pytest.raises(ModificationNotFoundError):
            engine.remove_modification(scenario.id, drop.id)

    def test_failed_edit_keeps_cache(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        engine.calculate(scenario.id)
        with pytest.raises(ModificationNotFoundError):
            engine.remove_modification(scenario.id, "mod_missing")
        assert engine.status(scenario.id) == ScenarioStatus.CALCULATED

    def test_clear_modifications(self, engine) -> None:
        scenario = engine.create_scenario("Raise", modifications=[_raise_income(1000)])
        assert engine.clear_modifications(scenario.id).modifications == []


class TestSelection:
    def test_oldest_selection_evicted(self, engine) -> None:
        ids = [engine.create_scenario(f"S{n}").id for n in range(4)]
        for scenario_id in ids[:3]:
            engine.select_scenario(scenario_id)

        with capture_logs() as logs:
            selected = engine.select_scenario(ids[3])

        assert selected == ids[1:]
        evictions = [log for log in logs if log["event"] == "scenario_selection_evicted"]
        assert evictions[0]["scenario_id"] == ids[0]

    def test_reselect_keeps_order(self, engine) -> None:
        ids = [engine.create_scenario(f"S{n}").id for n in range(2)]
        engine.select_scenario(ids[0])
        engine.select_scenario(ids[1])
        assert engine.select_scenario(ids[0]) == ids

    def test_limit_comes_from_settings(self, engine, monkeypatch) -> None:
        monkeypatch.setattr(settings, "max_selected_scenarios", 1)
        ids = [engine.create_scenario(f"S{n}").id for n in range(2)]
        engine.select_scenario(ids[0])
        assert engine.select_scenario(ids[1]) == [ids[1]]

    def test_select_unknown(self, engine) -> None:
        with pytest.raises(ScenarioNotFoundError):
            engine.select_scenario("missing")

    def test_select_deleted_after_lookup(self, engine, monkeypatch) -> None:
        scenario = engine.create_scenario("Doomed")
        lookup = engine._entry

        def lookup_then_delete(scenario_id: str):
            entry = lookup(scenario_id)
            monkeypatch.setattr(engine, "_entry", lookup)
            engine.delete_scenario(scenario_id)
            return entry

        monkeypatch.setattr(engine, "_entry", lookup_then_delete)

        with pytest.raises(ScenarioNotFoundError):
            engine.select_scenario(scenario.id)
        assert engine.selected_ids == []

    def test_deselect_and_clear(self, engine) -> None:
        ids = [engine.create_scenario(f"S{n}").id for n in range(2)]
        engine.select_scenario(ids[0])
        engine.select_scenario(ids[1])
        assert engine.deselect_scenario(ids[0]) == [ids[1]]
        engine.clear_selection()
        assert engine.selected_ids == []


class TestCalculation:
    def test_calculate_caches(self, engine) -> None:
        scenario = engine.add_scenario(max_401k_scenario())
        result = engine.calculate(scenario.id)
        assert result.total_tax == Decimal("1075.00")
        assert engine.get_result(scenario.id) is result

    def test_invalid_modification_cached_as_failure(self, engine) -> None:
        scenario = engine.create_scenario(
            "Broken",
            modifications=[
                Modification(kind=ModificationType.SET_FIELD, value=1, field_path="nope")
            ],
        )
        result = engine.calculate(scenario.id)
        assert result.calculated_successfully is False
        assert engine.status(scenario.id) == ScenarioStatus.CALCULATED
        assert engine.get_result(scenario.id) is result

    def test_bad_hsa_coverage_cached_as_failure(self, engine) -> None:
        scenario = engine.create_scenario(
            "Bad HSA",
            modifications=[
                Modification(
                    kind=ModificationType.ADD_HSA_CONTRIBUTION,
                    value={"amount": 1000, "coverage_type": "bogus"},
                )
            ],
        )
        result = engine.calculate(scenario.id)
        assert result.calculated_successfully is False
        assert "Unknown HSA coverage" in result.errors[0]
        assert engine.status(scenario.id) == ScenarioStatus.CALCULATED

    def test_requires_base(self) -> None:
        engine = ScenarioEngine()
        scenario = engine.create_scenario("Raise")
        with pytest.raises(ScenarioError, match="No base information"):
            engine.calculate(scenario.id)
        with pytest.raises(ScenarioError):
            engine.calculate_baseline()

    def test_calculate_many(self, engine) -> None:
        ids = [
            engine.create_scenario(f"Raise {n}", modifications=[_raise_income(n * 1000)]).id
            for n in range(1, 6)
        ]
        results = engine.calculate_many(ids)
        assert list(results) == ids
        assert [r.wages_income for r in results.values()] == [
            Decimal(50000 + n * 1000) for n in range(1, 6)
        ]
        assert all(engine.status(i) == ScenarioStatus.CALCULATED for i in ids)

    def test_calculate_many_empty(self, engine) -> None:
        assert engine.calculate_many([]) == {}

    def test_same_scenario_calculations_do_not_overlap(self, engine, monkeypatch) -> None:
        scenario = engine.create_scenario("Raise", modifications=[_raise_income(1000)])
        real_calculate_taxes = engine_module.calculate_taxes
        guard = threading.Lock()
        active = 0
        peak = 0

        def tracked(*args, **kwargs):
            nonlocal active, peak
            with guard:
                active += 1
                peak = max(peak, active)
            try:
                time.sleep(0.01)
                return real_calculate_taxes(*args, **kwargs)
            finally:
                with guard:
                    active -= 1

        monkeypatch.setattr(engine_module, "calculate_taxes", tracked)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(engine.calculate, [scenario.id] * 4))

        assert peak == 1
        assert any(engine.get_result(scenario.id) is r for r in results)

    def test_edit_racing_calculation_never_caches_old_result(self, engine) -> None:
        for _ in range(20):
            scenario = engine.create_scenario("Raise", modifications=[_raise_income(1000)])
            barrier = threading.Barrier(2)

            def calculate(scenario_id: str = scenario.id, start=barrier):
                start.wait()
                return engine.calculate(scenario_id)

            def edit(scenario_id: str = scenario.id, start=barrier):
                start.wait()
                return engine.add_modification(scenario_id, _raise_income(9000))

            with ThreadPoolExecutor(max_workers=2) as pool:
                futures = [pool.submit(calculate), pool.submit(edit)]
                for future in futures:
                    future.result()

            status = engine.status(scenario.id)
            result = engine.get_result(scenario.id)
            if status == ScenarioStatus.STALE:
                assert result is None
            else:
                assert status == ScenarioStatus.CALCULATED
                assert result.wages_income == Decimal("60000")

    def test_new_base_makes_everything_stale(self, engine, family_info) -> None:
        scenario = engine.create_scenario("Raise")
        engine.calculate(scenario.id)
        engine.calculate_baseline()

        engine.set_base_information(family_info)

        assert engine.status(scenario.id) == ScenarioStatus.STALE
        assert engine.get_result(scenario.id) is None
        assert engine.calculate_baseline().filed_forms == ["f1040", "f1040s8812"]

    def test_clear_cache_leaves_drafts(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        engine.clear_calculation_cache()
        assert engine.status(scenario.id) == ScenarioStatus.DRAFT


class TestCompare:
    def test_compare_selected(self, engine) -> None:
        scenario = engine.add_scenario(max_401k_scenario())
        engine.select_scenario(scenario.id)

        comparison = engine.compare_selected()

        assert comparison.baseline.total_tax == Decimal("3871.50")
        assert comparison.scenarios[0].scenario_id == scenario.id
        assert comparison.differences[0].total_tax_diff == Decimal("-2796.50")

    def test_compare_uses_cached_result(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        cached = engine.calculate(scenario.id)
        assert engine.compare([scenario.id]).scenarios[0] is cached

    def test_compare_recalculates_stale(self, engine) -> None:
        scenario = engine.create_scenario("Raise")
        engine.calculate(scenario.id)
        engine.add_modification(scenario.id, _raise_income(10000))
        comparison = engine.compare([scenario.id])
        assert comparison.scenarios[0].wages_income == Decimal("60000")
        assert engine.status(scenario.id) == ScenarioStatus.CALCULATED
