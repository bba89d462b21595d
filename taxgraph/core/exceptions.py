"""Custom exceptions for the taxgraph engine.

Only construction defects and caller misuse of the scenario API are raised.
Missing optional data resolves to zero or "not applicable" inside the graph,
and a stale scenario cache is a state, not an error.

Example:
    try:
        f1040 = create_f1040(info)
    except ConstructionError as e:
        logger.error("return_construction_failed", error=str(e), **e.details)
        raise
"""

from typing import Any, Optional


class TaxGraphError(Exception):
    """Base exception for all taxgraph errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize TaxGraphError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the caller can reasonably retry. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


# =============================================================================
# Construction defects (always fatal)
# =============================================================================


class ConstructionError(TaxGraphError):
    """A programming defect in how the form graph is wired together."""


class MissingDependencyError(ConstructionError):
    """A form was constructed before a sibling it declares as a dependency.

    Attributes:
        form: Attribute name of the form being constructed.
        dependency: Attribute name of the sibling that was not yet built.
    """

    def __init__(self, form: str, dependency: str) -> None:
        """Initialize MissingDependencyError.

        Args:
            form: Attribute name of the form being constructed.
            dependency: Attribute name of the missing sibling.
        """
        super().__init__(
            f"Form '{form}' depends on '{dependency}', which has not been constructed",
            details={"form": form, "dependency": dependency},
        )
        self.form = form
        self.dependency = dependency


class DependencyCycleError(ConstructionError):
    """Line evaluation re-entered itself or exceeded the depth limit.

    Attributes:
        path: The chain of "tag.line" evaluations active when detected.
    """

    def __init__(self, message: str, path: list[str]) -> None:
        """Initialize DependencyCycleError.

        Args:
            message: Human-readable error description.
            path: Active evaluation chain, outermost first.
        """
        super().__init__(message, details={"path": path})
        self.path = path


class FieldLayoutError(ConstructionError):
    """A form produced a different number of field values than its template.

    Attributes:
        tag: Form tag.
        expected: Declared field count.
        actual: Number of values produced.
    """

    def __init__(self, tag: str, expected: int, actual: int) -> None:
        """Initialize FieldLayoutError.

        Args:
            tag: Form tag.
            expected: Declared field count.
            actual: Number of values produced.
        """
        super().__init__(
            f"Form '{tag}' produced {actual} field values, template expects {expected}",
            details={"tag": tag, "expected": expected, "actual": actual},
        )
        self.tag = tag
        self.expected = expected
        self.actual = actual


# =============================================================================
# Scenario API misuse
# =============================================================================


class ScenarioError(TaxGraphError):
    """Base class for errors raised by the scenario engine API."""


class ScenarioNotFoundError(ScenarioError):
    """No scenario with the given id exists."""

    def __init__(self, scenario_id: str) -> None:
        """Initialize ScenarioNotFoundError.

        Args:
            scenario_id: The id that was looked up.
        """
        super().__init__(
            f"Scenario '{scenario_id}' does not exist",
            details={"scenario_id": scenario_id},
        )
        self.scenario_id = scenario_id


class ModificationNotFoundError(ScenarioError):
    """No modification with the given id exists on the scenario."""

    def __init__(self, scenario_id: str, modification_id: str) -> None:
        """Initialize ModificationNotFoundError.

        Args:
            scenario_id: Scenario that was searched.
            modification_id: The modification id that was looked up.
        """
        super().__init__(
            f"Modification '{modification_id}' not found on scenario '{scenario_id}'",
            details={"scenario_id": scenario_id, "modification_id": modification_id},
        )
        self.scenario_id = scenario_id
        self.modification_id = modification_id


class InvalidModificationError(ScenarioError):
    """A modification cannot be applied to the information snapshot.

    Attributes:
        modification_id: Id of the offending modification.
    """

    def __init__(self, message: str, *, modification_id: str | None = None) -> None:
        """Initialize InvalidModificationError.

        Args:
            message: Human-readable error description.
            modification_id: Id of the offending modification, if known.
        """
        super().__init__(message, details={"modification_id": modification_id})
        self.modification_id = modification_id
