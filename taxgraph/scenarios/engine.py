"""What-if scenario engine.

The engine keeps named scenarios against one base snapshot, caches each
scenario's calculation result, and tracks up to three selected scenarios
for side-by-side comparison.

Every edit to a scenario goes through ``_invalidate``, which drops the
cached result and moves the scenario's state machine to ``stale``. A
per-scenario lock is held across derive, compute and cache write, so two
calculations of the same scenario never interleave while distinct
scenarios compute in parallel.

Example:
    >>> engine = ScenarioEngine(info)
    >>> scenario = engine.add_scenario(max_401k_scenario())
    >>> engine.calculate(scenario.id).total_tax
    Decimal('1234.00')
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

import structlog

from taxgraph.core.config import settings
from taxgraph.core.exceptions import (
    InvalidModificationError,
    ModificationNotFoundError,
    ScenarioError,
    ScenarioNotFoundError,
)
from taxgraph.core.logging import scenario_id_ctx, tax_year_ctx
from taxgraph.models.information import ValidatedInformation
from taxgraph.scenarios.calculator import (
    BASELINE_ID,
    BASELINE_NAME,
    build_comparison,
    calculate_taxes,
    failed_result,
)
from taxgraph.scenarios.models import (
    Modification,
    Scenario,
    ScenarioComparison,
    TaxCalculationResult,
    new_scenario_id,
    utcnow,
)
from taxgraph.scenarios.modifications import apply_modifications
from taxgraph.scenarios.state_machine import ScenarioStateMachine, ScenarioStatus

logger = structlog.get_logger()

_SCENARIO_UPDATABLE = frozenset({"name", "description", "tax_year"})
_MODIFICATION_UPDATABLE = frozenset({"kind", "label", "value", "field_path"})


@dataclass
class _Entry:
    scenario: Scenario
    machine: ScenarioStateMachine
    lock: threading.Lock = field(default_factory=threading.Lock)


class ScenarioEngine:
    """Scenario registry, result cache and selection.

    Lock order is entry lock first, then the registry lock. The registry
    lock is only held for short structural reads and writes, never while
    computing.

    Attributes:
        base_information: Snapshot every scenario is derived from.
    """

    def __init__(self, base_information: ValidatedInformation | None = None) -> None:
        self._base = base_information
        self._entries: dict[str, _Entry] = {}
        self._results: dict[str, TaxCalculationResult] = {}
        self._selected: list[str] = []
        self._baseline: TaxCalculationResult | None = None
        self._registry_lock = threading.RLock()

    @property
    def base_information(self) -> ValidatedInformation | None:
        return self._base

    def _entry(self, scenario_id: str) -> _Entry:
        with self._registry_lock:
            entry = self._entries.get(scenario_id)
        if entry is None:
            raise ScenarioNotFoundError(scenario_id)
        return entry

    def _require_live(self, entry: _Entry) -> None:
        # A deleted entry can still be held by a caller that looked it up first
        if entry.machine.status is ScenarioStatus.DELETED:
            raise ScenarioNotFoundError(entry.scenario.id)

    def _require_base(self) -> ValidatedInformation:
        if self._base is None:
            raise ScenarioError("No base information has been set")
        return self._base

    def _invalidate(self, entry: _Entry) -> None:
        """Drop the cached result and mark the scenario stale.

        Caller must hold ``entry.lock``.
        """
        with self._registry_lock:
            self._results.pop(entry.scenario.id, None)
        entry.machine.invalidate()
        logger.debug("scenario_invalidated", scenario_id=entry.scenario.id)

    def _edit(
        self, scenario_id: str, change: Callable[[Scenario], dict[str, Any]]
    ) -> Scenario:
        """Apply ``change`` to a scenario under its lock, then invalidate it."""
        entry = self._entry(scenario_id)
        with entry.lock:
            self._require_live(entry)
            updates = change(entry.scenario)
            entry.scenario = entry.scenario.model_copy(
                update={**updates, "modified_at": utcnow()}
            )
            self._invalidate(entry)
            return entry.scenario.model_copy(deep=True)

    # =========================================================================
    # Scenarios
    # =========================================================================

    def create_scenario(
        self,
        name: str,
        description: str = "",
        modifications: Iterable[Modification] = (),
        tax_year: int | None = None,
        scenario_id: str | None = None,
    ) -> Scenario:
        """Register a new scenario in the draft state.

        Args:
            name: Display name.
            description: Free-form notes.
            modifications: Initial modifications, in application order.
            tax_year: Year override; ``None`` uses the base snapshot's year.
            scenario_id: Explicit id; generated when omitted.

        Returns:
            A copy of the stored scenario.

        Raises:
            ScenarioError: If ``scenario_id`` is already registered.
        """
        scenario = Scenario(
            id=scenario_id or new_scenario_id(),
            name=name,
            description=description,
            modifications=list(modifications),
            tax_year=tax_year,
        )
        self._register(scenario)
        logger.info(
            "scenario_created",
            scenario_id=scenario.id,
            modification_count=len(scenario.modifications),
        )
        return scenario.model_copy(deep=True)

    def add_scenario(self, scenario: Scenario) -> Scenario:
        """Register a prebuilt scenario, such as one from ``scenarios.quick``."""
        return self.import_scenarios([scenario])[0]

    def _register(self, scenario: Scenario) -> None:
        with self._registry_lock:
            if scenario.id in self._entries:
                raise ScenarioError(
                    f"Scenario '{scenario.id}' already exists",
                    details={"scenario_id": scenario.id},
                )
            self._entries[scenario.id] = _Entry(
                scenario=scenario, machine=ScenarioStateMachine(scenario.id)
            )

    def get_scenario(self, scenario_id: str) -> Scenario:
        entry = self._entry(scenario_id)
        with entry.lock:
            return entry.scenario.model_copy(deep=True)

    def list_scenarios(self) -> list[Scenario]:
        """All scenarios in creation order."""
        with self._registry_lock:
            entries = list(self._entries.values())
        return [entry.scenario.model_copy(deep=True) for entry in entries]

    def status(self, scenario_id: str) -> ScenarioStatus:
        return self._entry(scenario_id).machine.status

    def update_scenario(self, scenario_id: str, **updates: Any) -> Scenario:
        """Change a scenario's name, description or tax year.

        Raises:
            ScenarioError: If an update names any other attribute.
        """
        unknown = set(updates) - _SCENARIO_UPDATABLE
        if unknown:
            raise ScenarioError(
                f"Cannot update scenario attributes: {', '.join(sorted(unknown))}",
                details={"scenario_id": scenario_id},
            )
        return self._edit(scenario_id, lambda _: updates)

    def delete_scenario(self, scenario_id: str) -> None:
        """Remove a scenario, its cached result and its selection."""
        entry = self._entry(scenario_id)
        with entry.lock:
            self._require_live(entry)
            with self._registry_lock:
                self._entries.pop(scenario_id, None)
                self._results.pop(scenario_id, None)
                if scenario_id in self._selected:
                    self._selected.remove(scenario_id)
            entry.machine.delete()
        logger.info("scenario_deleted", scenario_id=scenario_id)

    def duplicate_scenario(
        self,
        scenario_id: str,
        new_name: str | None = None,
        new_id: str | None = None,
    ) -> Scenario:
        """Copy a scenario's modifications into a new draft scenario."""
        source = self.get_scenario(scenario_id)
        return self.create_scenario(
            new_name or f"{source.name} (copy)",
            description=source.description,
            modifications=source.modifications,
            tax_year=source.tax_year,
            scenario_id=new_id,
        )

    def import_scenarios(self, scenarios: Iterable[Scenario]) -> list[Scenario]:
        """Register previously saved scenarios alongside the existing ones.

        Raises:
            ScenarioError: If any imported id is already registered. Nothing
                is imported in that case.
        """
        incoming = [scenario.model_copy(deep=True) for scenario in scenarios]
        with self._registry_lock:
            clashes = [s.id for s in incoming if s.id in self._entries]
            ids = [s.id for s in incoming]
            if clashes or len(set(ids)) != len(ids):
                raise ScenarioError(
                    "Imported scenario ids clash with existing scenarios",
                    details={"scenario_ids": clashes or ids},
                )
            for scenario in incoming:
                self._register(scenario)
        logger.info("scenarios_imported", count=len(incoming))
        return [scenario.model_copy(deep=True) for scenario in incoming]

    def clear_all_scenarios(self) -> None:
        """Delete every scenario."""
        with self._registry_lock:
            ids = list(self._entries)
        for scenario_id in ids:
            try:
                self.delete_scenario(scenario_id)
            except ScenarioNotFoundError:
                # Deleted concurrently
                continue

    # =========================================================================
    # Modifications
    # =========================================================================

    def add_modification(self, scenario_id: str, modification: Modification) -> Scenario:
        return self._edit(
            scenario_id,
            lambda scenario: {"modifications": [*scenario.modifications, modification]},
        )

    def update_modification(
        self, scenario_id: str, modification_id: str, **updates: Any
    ) -> Scenario:
        """Replace attributes of one modification in place.

        Raises:
            ModificationNotFoundError: If the modification does not exist.
            ScenarioError: If an update names ``id`` or an unknown attribute.
        """
        unknown = set(updates) - _MODIFICATION_UPDATABLE
        if unknown:
            raise ScenarioError(
                f"Cannot update modification attributes: {', '.join(sorted(unknown))}",
                details={"scenario_id": scenario_id, "modification_id": modification_id},
            )

        def change(scenario: Scenario) -> dict[str, Any]:
            modifications = list(scenario.modifications)
            for index, existing in enumerate(modifications):
                if existing.id == modification_id:
                    modifications[index] = Modification.model_validate(
                        {**existing.model_dump(), **updates}
                    )
                    return {"modifications": modifications}
            raise ModificationNotFoundError(scenario_id, modification_id)

        return self._edit(scenario_id, change)

    def remove_modification(self, scenario_id: str, modification_id: str) -> Scenario:
        def change(scenario: Scenario) -> dict[str, Any]:
            kept = [m for m in scenario.modifications if m.id != modification_id]
            if len(kept) == len(scenario.modifications):
                raise ModificationNotFoundError(scenario_id, modification_id)
            return {"modifications": kept}

        return self._edit(scenario_id, change)

    def clear_modifications(self, scenario_id: str) -> Scenario:
        return self._edit(scenario_id, lambda _: {"modifications": []})

    # =========================================================================
    # Selection
    # =========================================================================

    def select_scenario(self, scenario_id: str) -> list[str]:
        """Add a scenario to the comparison selection.

        When the selection is full the oldest selection is evicted.
        Selecting an already selected scenario leaves the order unchanged.

        Returns:
            The selected ids, oldest first.
        """
        self._entry(scenario_id)
        with self._registry_lock:
            if scenario_id not in self._entries:
                # Deleted since the lookup above
                raise ScenarioNotFoundError(scenario_id)
            if scenario_id not in self._selected:
                self._selected.append(scenario_id)
                while len(self._selected) > settings.max_selected_scenarios:
                    evicted = self._selected.pop(0)
                    logger.info(
                        "scenario_selection_evicted",
                        scenario_id=evicted,
                        selected=scenario_id,
                    )
            return list(self._selected)

    def deselect_scenario(self, scenario_id: str) -> list[str]:
        with self._registry_lock:
            if scenario_id in self._selected:
                self._selected.remove(scenario_id)
            return list(self._selected)

    def clear_selection(self) -> None:
        with self._registry_lock:
            self._selected.clear()

    @property
    def selected_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._selected)

    # =========================================================================
    # Calculation
    # =========================================================================

    def get_result(self, scenario_id: str) -> TaxCalculationResult | None:
        """Cached result, or ``None`` if the scenario is not calculated."""
        with self._registry_lock:
            return self._results.get(scenario_id)

    def calculate(self, scenario_id: str) -> TaxCalculationResult:
        """Compute a scenario and cache the result.

        A modification that cannot be applied produces a cached failed
        result; the scenario still counts as calculated.

        Raises:
            ScenarioNotFoundError: If the scenario does not exist.
            ScenarioError: If no base information has been set.
            ConstructionError: If the form graph is wired incorrectly.
        """
        entry = self._entry(scenario_id)
        with entry.lock:
            self._require_live(entry)
            base = self._require_base()
            scenario = entry.scenario
            year = scenario.tax_year or base.tax_year
            id_token = scenario_id_ctx.set(scenario_id)
            year_token = tax_year_ctx.set(year)
            try:
                try:
                    info = apply_modifications(
                        base, scenario.modifications, tax_year=scenario.tax_year
                    )
                except InvalidModificationError as exc:
                    logger.warning(
                        "scenario_modification_invalid",
                        modification_id=exc.modification_id,
                        error=exc.message,
                    )
                    result = failed_result(
                        scenario.id, scenario.name, exc.message, tax_year=year
                    )
                else:
                    result = calculate_taxes(info, scenario.id, scenario.name)
                with self._registry_lock:
                    self._results[scenario_id] = result
                entry.machine.calculate()
                logger.info(
                    "scenario_calculated",
                    success=result.calculated_successfully,
                    total_tax=result.total_tax,
                )
            finally:
                tax_year_ctx.reset(year_token)
                scenario_id_ctx.reset(id_token)
        return result

    def calculate_many(
        self, scenario_ids: Iterable[str]
    ) -> dict[str, TaxCalculationResult]:
        """Calculate distinct scenarios in parallel.

        Returns:
            Results keyed by scenario id, in the order requested.
        """
        ids = list(dict.fromkeys(scenario_ids))
        if not ids:
            return {}
        with ThreadPoolExecutor(max_workers=settings.calculation_concurrency) as pool:
            results = list(pool.map(self.calculate, ids))
        return dict(zip(ids, results))

    def calculate_baseline(self) -> TaxCalculationResult:
        """Compute the unmodified base snapshot."""
        base = self._require_base()
        year_token = tax_year_ctx.set(base.tax_year)
        try:
            result = calculate_taxes(base, BASELINE_ID, BASELINE_NAME, is_baseline=True)
        finally:
            tax_year_ctx.reset(year_token)
        with self._registry_lock:
            self._baseline = result
        return result

    def _baseline_result(self) -> TaxCalculationResult:
        with self._registry_lock:
            baseline = self._baseline
        return baseline or self.calculate_baseline()

    def compare(self, scenario_ids: Iterable[str]) -> ScenarioComparison:
        """Compare scenarios against the baseline, calculating where needed."""
        ids = list(scenario_ids)
        results = []
        for scenario_id in ids:
            result = self.get_result(scenario_id)
            results.append(result or self.calculate(scenario_id))
        return build_comparison(self._baseline_result(), results)

    def compare_selected(self) -> ScenarioComparison:
        return self.compare(self.selected_ids)

    def clear_calculation_cache(self) -> None:
        """Drop every cached result and mark every scenario stale."""
        with self._registry_lock:
            entries = list(self._entries.values())
            self._baseline = None
        for entry in entries:
            with entry.lock:
                if entry.machine.status is not ScenarioStatus.DELETED:
                    self._invalidate(entry)
        logger.info("calculation_cache_cleared", scenario_count=len(entries))

    def set_base_information(self, base_information: ValidatedInformation) -> None:
        """Replace the base snapshot; every scenario becomes stale."""
        with self._registry_lock:
            self._base = base_information
        self.clear_calculation_cache()
        logger.info("base_information_set", tax_year=base_information.tax_year)
