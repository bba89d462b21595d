"""Tests for the exception hierarchy."""

from taxgraph.core.exceptions import (
    ConstructionError,
    DependencyCycleError,
    FieldLayoutError,
    InvalidModificationError,
    MissingDependencyError,
    ModificationNotFoundError,
    ScenarioError,
    ScenarioNotFoundError,
    TaxGraphError,
)


class TestHierarchy:
    """Construction defects and scenario misuse share one root."""

    def test_construction_errors(self) -> None:
        assert issubclass(MissingDependencyError, ConstructionError)
        assert issubclass(DependencyCycleError, ConstructionError)
        assert issubclass(FieldLayoutError, ConstructionError)
        assert issubclass(ConstructionError, TaxGraphError)

    def test_scenario_errors(self) -> None:
        assert issubclass(ScenarioNotFoundError, ScenarioError)
        assert issubclass(ModificationNotFoundError, ScenarioError)
        assert issubclass(InvalidModificationError, ScenarioError)
        assert issubclass(ScenarioError, TaxGraphError)


class TestDetails:
    """Errors carry structured details for logging."""

    def test_base_error_defaults(self) -> None:
        error = TaxGraphError("boom")
        assert str(error) == "boom"
        assert error.details == {}
        assert error.recoverable is False
        assert "TaxGraphError(message='boom'" in repr(error)

    def test_missing_dependency(self) -> None:
        error = MissingDependencyError("ScheduleD", "f8949")
        assert error.form == "ScheduleD"
        assert error.dependency == "f8949"
        assert error.details == {"form": "ScheduleD", "dependency": "f8949"}
        assert "f8949" in str(error)

    def test_cycle_path(self) -> None:
        error = DependencyCycleError("cycle", path=["a[0].l1", "a[0].l1"])
        assert error.details["path"] == ["a[0].l1", "a[0].l1"]

    def test_field_layout(self) -> None:
        error = FieldLayoutError("f1040", 89, 88)
        assert (error.tag, error.expected, error.actual) == ("f1040", 89, 88)

    def test_scenario_not_found(self) -> None:
        error = ScenarioNotFoundError("scenario_x")
        assert error.scenario_id == "scenario_x"
        assert "scenario_x" in str(error)

    def test_invalid_modification(self) -> None:
        error = InvalidModificationError("bad path", modification_id="mod_1")
        assert error.modification_id == "mod_1"
        assert error.details == {"modification_id": "mod_1"}
