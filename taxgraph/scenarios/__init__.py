"""What-if scenarios over the form graph."""

from taxgraph.scenarios.calculator import calculate_taxes, compare_scenarios
from taxgraph.scenarios.engine import ScenarioEngine
from taxgraph.scenarios.export import generate_comparison_workbook
from taxgraph.scenarios.models import (
    Modification,
    ModificationType,
    Scenario,
    ScenarioComparison,
    ScenarioDifference,
    TaxCalculationResult,
)
from taxgraph.scenarios.modifications import apply_modification, apply_modifications
from taxgraph.scenarios.quick import (
    add_child_scenario,
    max_401k_scenario,
    max_hsa_scenario,
    spouse_works_scenario,
)
from taxgraph.scenarios.state_machine import (
    ScenarioStateMachine,
    ScenarioStatus,
    TransitionNotAllowed,
)

__all__ = [
    "Modification",
    "ModificationType",
    "Scenario",
    "ScenarioComparison",
    "ScenarioDifference",
    "ScenarioEngine",
    "ScenarioStateMachine",
    "ScenarioStatus",
    "TaxCalculationResult",
    "TransitionNotAllowed",
    "add_child_scenario",
    "apply_modification",
    "apply_modifications",
    "calculate_taxes",
    "compare_scenarios",
    "generate_comparison_workbook",
    "max_401k_scenario",
    "max_hsa_scenario",
    "spouse_works_scenario",
]
