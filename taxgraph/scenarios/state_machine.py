"""Scenario lifecycle state machine.

Provides declarative transitions for a scenario's cached result, with
logging callbacks. The engine owns one machine per scenario.
"""

from enum import Enum

import structlog
from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

logger = structlog.get_logger()


class ScenarioStatus(str, Enum):
    """Whether a scenario's cached result can be trusted."""

    DRAFT = "draft"
    CALCULATED = "calculated"
    STALE = "stale"
    DELETED = "deleted"


class ScenarioStateMachine(StateMachine):
    """State machine for scenario lifecycle management.

    States:
    - draft: Created, never calculated
    - calculated: Cached result matches the current modifications
    - stale: Edited since the last calculation
    - deleted: Removed from the engine (final)

    Transitions:
    - calculate: draft/stale -> calculated, calculated -> calculated
    - invalidate: calculated -> stale, draft and stale stay put
    - delete: any live state -> deleted
    """

    draft = State(initial=True, value=ScenarioStatus.DRAFT)
    calculated = State(value=ScenarioStatus.CALCULATED)
    stale = State(value=ScenarioStatus.STALE)
    deleted = State(final=True, value=ScenarioStatus.DELETED)

    calculate = draft.to(calculated) | stale.to(calculated) | calculated.to.itself()
    invalidate = draft.to.itself() | calculated.to(stale) | stale.to.itself()
    delete = draft.to(deleted) | calculated.to(deleted) | stale.to(deleted)

    def __init__(self, scenario_id: str) -> None:
        """Initialize state machine for a scenario.

        Args:
            scenario_id: Id of the scenario this machine tracks.
        """
        self.scenario_id = scenario_id
        super().__init__()

    @property
    def status(self) -> ScenarioStatus:
        """Get current state as ScenarioStatus enum."""
        return self.current_state.value

    def on_calculate(self) -> None:
        logger.debug("scenario_state_calculated", scenario_id=self.scenario_id)

    def on_invalidate(self, source: State) -> None:
        if source.id == "calculated":
            logger.debug("scenario_state_stale", scenario_id=self.scenario_id)

    def on_delete(self) -> None:
        logger.info("scenario_state_deleted", scenario_id=self.scenario_id)


__all__ = [
    "ScenarioStateMachine",
    "ScenarioStatus",
    "TransitionNotAllowed",
]
