"""Deriving a scenario's snapshot from the base snapshot.

Each modification is applied to a plain-data copy of the snapshot and the
result is validated back into a new frozen ``ValidatedInformation``. The
base snapshot is never touched. Modifications apply in order, so a later
write to the same field path wins and deltas accumulate.

Example:
    >>> info = apply_modifications(base, [
    ...     Modification(kind=ModificationType.SET_FIELD, field_path="w2s.0.income", value=60000),
    ...     Modification(kind=ModificationType.ADJUST_FIELD, field_path="w2s.0.income", value=-5000),
    ... ])
    >>> info.w2s[0].income
    Decimal('55000')
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, get_args

import structlog
from pydantic import BaseModel, ValidationError

from taxgraph.core.exceptions import InvalidModificationError
from taxgraph.models.information import (
    FilingStatus,
    HsaCoverage,
    ItemizedDeductions,
    PersonRole,
    ValidatedInformation,
)
from taxgraph.scenarios.models import Modification, ModificationType

logger = structlog.get_logger()

_PATH_TOKEN = re.compile(r"[^.\[\]]+")

PLACEHOLDER_SSID = "000-00-0000"
SPOUSE_WITHHOLDING_RATE = Decimal("0.15")
SS_RATE = Decimal("0.062")
MEDICARE_RATE = Decimal("0.0145")


def _thaw(value: Any) -> Any:
    """Turn a model dump into nested dicts and lists that can be edited."""
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(item) for item in value]
    return value


def _to_decimal(value: Any, mod: Modification) -> Decimal:
    if isinstance(value, bool):
        raise InvalidModificationError(
            f"Modification '{mod.id}' expects a number, got a boolean",
            modification_id=mod.id,
        )
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidModificationError(
            f"Modification '{mod.id}' expects a number, got {value!r}",
            modification_id=mod.id,
        ) from exc


def _whole_dollars(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def _mapping_value(mod: Modification, required: Iterable[str]) -> Mapping[str, Any]:
    if not isinstance(mod.value, Mapping):
        raise InvalidModificationError(
            f"Modification '{mod.id}' expects a mapping value",
            modification_id=mod.id,
        )
    missing = [key for key in required if key not in mod.value]
    if missing:
        raise InvalidModificationError(
            f"Modification '{mod.id}' is missing {', '.join(missing)}",
            modification_id=mod.id,
        )
    return mod.value


# =============================================================================
# Field paths
# =============================================================================


def parse_field_path(path: str) -> list[str | int]:
    """Split ``w2s.0.income`` or ``w2s[0].income`` into keys and indexes."""
    tokens: list[str | int] = [
        int(token) if token.isdigit() else token for token in _PATH_TOKEN.findall(path)
    ]
    if not tokens:
        raise InvalidModificationError(f"Empty field path {path!r}")
    return tokens


def _record_model(annotation: Any) -> type[BaseModel] | None:
    """Find the record model inside ``Foo | None`` or ``tuple[Foo, ...]``."""
    args = get_args(annotation)
    if args:
        for arg in args:
            found = _record_model(arg)
            if found is not None:
                return found
        return None
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


def _field_model(model: type[BaseModel] | None, name: str) -> type[BaseModel] | None:
    if model is None or name not in model.model_fields:
        return None
    return _record_model(model.model_fields[name].annotation)


def _empty_record(model: type[BaseModel]) -> dict[str, Any]:
    """Field defaults of ``model``; required fields start as ``None``."""
    record: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        value = None if info.is_required() else info.get_default(call_default_factory=True)
        if isinstance(value, BaseModel):
            value = value.model_dump()
        record[name] = _thaw(value)
    return record


def _step(
    node: Any, token: str | int, model: type[BaseModel] | None, mod: Modification
) -> tuple[Any, type[BaseModel] | None]:
    if isinstance(node, list) and isinstance(token, int):
        if token >= len(node):
            raise InvalidModificationError(
                f"Index {token} out of range in field path '{mod.field_path}'",
                modification_id=mod.id,
            )
        return node[token], model
    if isinstance(node, dict) and isinstance(token, str):
        if token not in node:
            raise InvalidModificationError(
                f"Unknown field '{token}' in field path '{mod.field_path}'",
                modification_id=mod.id,
            )
        child_model = _field_model(model, token)
        if node[token] is None and child_model is not None:
            # Optional sub-record not entered yet
            node[token] = _empty_record(child_model)
        return node[token], child_model
    raise InvalidModificationError(
        f"Cannot resolve '{token}' in field path '{mod.field_path}'",
        modification_id=mod.id,
    )


def _resolve(data: dict[str, Any], mod: Modification) -> tuple[Any, str | int]:
    """Walk to the container holding the last path segment."""
    if not mod.field_path:
        raise InvalidModificationError(
            f"Modification '{mod.id}' requires a field path",
            modification_id=mod.id,
        )
    tokens = parse_field_path(mod.field_path)
    node: Any = data
    model: type[BaseModel] | None = ValidatedInformation
    for token in tokens[:-1]:
        node, model = _step(node, token, model, mod)

    key = tokens[-1]
    if isinstance(node, list):
        if not isinstance(key, int) or key >= len(node):
            raise InvalidModificationError(
                f"Invalid list index in field path '{mod.field_path}'",
                modification_id=mod.id,
            )
    elif not isinstance(node, dict) or not isinstance(key, str):
        raise InvalidModificationError(
            f"Cannot assign through field path '{mod.field_path}'",
            modification_id=mod.id,
        )
    elif key not in node and model is not None:
        raise InvalidModificationError(
            f"Unknown field '{key}' in field path '{mod.field_path}'",
            modification_id=mod.id,
        )
    return node, key


def _set_field(data: dict[str, Any], mod: Modification) -> None:
    container, key = _resolve(data, mod)
    container[key] = mod.value


def _adjust_field(data: dict[str, Any], mod: Modification) -> None:
    container, key = _resolve(data, mod)
    current = container[key] if isinstance(container, list) else container.get(key)
    base = Decimal("0") if current is None else _to_decimal(current, mod)
    container[key] = base + _to_decimal(mod.value, mod)


# =============================================================================
# Domain shortcuts
# =============================================================================


def _first_w2(data: dict[str, Any], mod: Modification) -> dict[str, Any] | None:
    if not data["w2s"]:
        logger.warning(
            "modification_skipped",
            modification_id=mod.id,
            kind=mod.kind.value,
            reason="no_w2",
        )
        return None
    return data["w2s"][0]


def _add_income(data: dict[str, Any], mod: Modification) -> None:
    w2 = _first_w2(data, mod)
    if w2 is None:
        return
    amount = _to_decimal(mod.value, mod)
    w2["income"] = w2["income"] + amount
    if w2.get("medicare_income") is not None:
        w2["medicare_income"] = w2["medicare_income"] + amount


def _modify_income(data: dict[str, Any], mod: Modification) -> None:
    w2 = _first_w2(data, mod)
    if w2 is None:
        return
    new_income = _to_decimal(mod.value, mod)
    diff = new_income - w2["income"]
    w2["income"] = new_income
    if w2.get("medicare_income") is not None:
        w2["medicare_income"] = w2["medicare_income"] + diff


def _add_401k(data: dict[str, Any], mod: Modification) -> None:
    w2 = _first_w2(data, mod)
    if w2 is None:
        return
    amount = _to_decimal(mod.value, mod)
    box12 = dict(w2.get("box12") or {})
    box12["D"] = box12.get("D", Decimal("0")) + amount
    w2["box12"] = box12
    # Elective deferrals leave box 1 but stay in Medicare wages
    if w2.get("medicare_income") is None:
        w2["medicare_income"] = w2["income"]
    w2["income"] = max(Decimal("0"), w2["income"] - amount)


def _add_hsa(data: dict[str, Any], mod: Modification) -> None:
    if isinstance(mod.value, Mapping):
        amount = _to_decimal(mod.value.get("amount"), mod)
        try:
            coverage = HsaCoverage(mod.value.get("coverage_type", HsaCoverage.SELF_ONLY))
        except ValueError as exc:
            raise InvalidModificationError(
                f"Unknown HSA coverage type {mod.value.get('coverage_type')!r}",
                modification_id=mod.id,
            ) from exc
    else:
        amount = _to_decimal(mod.value, mod)
        coverage = HsaCoverage.SELF_ONLY
    role = data["w2s"][0]["person_role"] if data["w2s"] else PersonRole.PRIMARY
    data["health_savings_accounts"].append(
        {
            "label": "Scenario HSA",
            "coverage_type": coverage,
            "contributions": amount,
            "total_distributions": Decimal("0"),
            "qualified_distributions": Decimal("0"),
            "person_role": role,
        }
    )


def _add_dependent(data: dict[str, Any], mod: Modification) -> None:
    value = _mapping_value(mod, ("first_name", "last_name", "date_of_birth"))
    data["taxpayer"]["dependents"].append(
        {
            "first_name": value["first_name"],
            "last_name": value["last_name"],
            "ssid": value.get("ssid", PLACEHOLDER_SSID),
            "role": PersonRole.DEPENDENT,
            "date_of_birth": value["date_of_birth"],
            "is_blind": False,
            "relationship": value.get("relationship", ""),
        }
    )


def _add_spouse(data: dict[str, Any], mod: Modification) -> None:
    value = _mapping_value(mod, ("first_name", "last_name", "date_of_birth"))
    data["taxpayer"]["spouse"] = {
        "first_name": value["first_name"],
        "last_name": value["last_name"],
        "ssid": value.get("ssid", PLACEHOLDER_SSID),
        "role": PersonRole.SPOUSE,
        "date_of_birth": value["date_of_birth"],
        "is_blind": False,
        "is_taxpayer_dependent": False,
    }

    income = _to_decimal(value.get("income") or 0, mod)
    if income > 0:
        data["w2s"].append(
            {
                "employer_name": "",
                "occupation": "Employee",
                "income": income,
                "medicare_income": income,
                "fed_withholding": _whole_dollars(income * SPOUSE_WITHHOLDING_RATE),
                "ss_wages": income,
                "ss_withholding": _whole_dollars(income * SS_RATE),
                "medicare_withholding": _whole_dollars(income * MEDICARE_RATE),
                "box12": {},
                "person_role": PersonRole.SPOUSE,
            }
        )


def _change_filing_status(data: dict[str, Any], mod: Modification) -> None:
    try:
        data["taxpayer"]["filing_status"] = FilingStatus(mod.value)
    except ValueError as exc:
        raise InvalidModificationError(
            f"Unknown filing status {mod.value!r}", modification_id=mod.id
        ) from exc


def _add_itemized_deduction(data: dict[str, Any], mod: Modification) -> None:
    field_name = mod.field_path or ""
    if field_name not in ItemizedDeductions.model_fields:
        raise InvalidModificationError(
            f"Unknown itemized deduction field {field_name!r}",
            modification_id=mod.id,
        )
    current = data.get("itemized_deductions") or ItemizedDeductions().model_dump()
    current[field_name] = mod.value
    data["itemized_deductions"] = current


_HANDLERS: dict[ModificationType, Callable[[dict[str, Any], Modification], None]] = {
    ModificationType.SET_FIELD: _set_field,
    ModificationType.ADJUST_FIELD: _adjust_field,
    ModificationType.ADD_INCOME: _add_income,
    ModificationType.MODIFY_INCOME: _modify_income,
    ModificationType.ADD_401K_CONTRIBUTION: _add_401k,
    ModificationType.ADD_HSA_CONTRIBUTION: _add_hsa,
    ModificationType.ADD_DEPENDENT: _add_dependent,
    ModificationType.ADD_SPOUSE: _add_spouse,
    ModificationType.CHANGE_FILING_STATUS: _change_filing_status,
    ModificationType.ADD_ITEMIZED_DEDUCTION: _add_itemized_deduction,
}


# =============================================================================
# Public API
# =============================================================================


def apply_modification(
    info: ValidatedInformation, modification: Modification
) -> ValidatedInformation:
    """Return a new snapshot with one modification applied.

    Args:
        info: Snapshot to derive from. Not modified.
        modification: Edit to apply.

    Returns:
        A new validated snapshot.

    Raises:
        InvalidModificationError: If the path does not resolve, the value has
            the wrong shape, or the edited data fails validation.
    """
    data = _thaw(info.model_dump())
    _HANDLERS[modification.kind](data, modification)
    try:
        return ValidatedInformation.model_validate(data)
    except ValidationError as exc:
        raise InvalidModificationError(
            f"Modification '{modification.id}' produced invalid information: "
            f"{exc.error_count()} validation error(s)",
            modification_id=modification.id,
        ) from exc


def apply_modifications(
    info: ValidatedInformation,
    modifications: Iterable[Modification],
    *,
    tax_year: int | None = None,
) -> ValidatedInformation:
    """Apply modifications in order, optionally moving the snapshot to another year.

    Args:
        info: Base snapshot.
        modifications: Edits, applied first to last.
        tax_year: Year override; ``None`` keeps the base snapshot's year.

    Returns:
        The derived snapshot.
    """
    derived = info
    if tax_year is not None and tax_year != info.tax_year:
        derived = info.model_copy(update={"tax_year": tax_year})
    for modification in modifications:
        derived = apply_modification(derived, modification)
    return derived
