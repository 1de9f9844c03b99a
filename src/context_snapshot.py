from typing import Any, Iterable, List, Mapping, Optional

from src.models import ContextSnapshot, GenerationContract, ValidationOptions


BUSINESS_DEFINITION_KEYS = (
    "audience.icpDescription",
    "brand.positioning",
    "brand.differentiators",
    "identity.businessModel",
)

GAP_BUSINESS_SUMMARY_KEY = "gap.businessSummary"
CONFIRMED_STATUS = "confirmed"


def _record_attr(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def create_snapshot_from_fields(records: Iterable[Any]) -> ContextSnapshot:
    """Build a snapshot from field records, keeping only confirmed values.

    Records are mappings or objects exposing ``key``, ``value`` and ``status``.
    """
    fields = {}
    for record in records or []:
        key = _record_attr(record, "key")
        if not key:
            continue
        if _record_attr(record, "status") != CONFIRMED_STATUS:
            continue
        fields[key] = _record_attr(record, "value")
    return ContextSnapshot(fields=fields)


def _string_leaves(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        leaves = []
        for item in value:
            if isinstance(item, str):
                leaves.append(item)
            elif isinstance(item, Mapping) and isinstance(item.get("name"), str):
                leaves.append(item["name"])
        return leaves
    return []


def flatten_context_values(snapshot: Optional[ContextSnapshot]) -> List[str]:
    """String leaves of the snapshot: plain strings, string lists and ``{name}`` lists."""
    if snapshot is None:
        return []
    values: List[str] = []
    for value in snapshot.fields.values():
        values.extend(_string_leaves(value))
    return values


def build_grounding_corpus(snapshot: Optional[ContextSnapshot]) -> str:
    return " ".join(flatten_context_values(snapshot)).lower()


def is_business_definition_missing(contract: GenerationContract, snapshot: Optional[ContextSnapshot]) -> bool:
    if not contract.require_business_definition:
        return False
    fields = snapshot.fields if snapshot is not None else {}
    return any(fields.get(key) is None for key in BUSINESS_DEFINITION_KEYS)


def has_gap_business_summary(fallback_inputs: Optional[Mapping[str, Any]]) -> bool:
    if not fallback_inputs:
        return False
    value = fallback_inputs.get(GAP_BUSINESS_SUMMARY_KEY)
    return isinstance(value, str) and bool(value.strip())


def build_validation_options(
    contract: GenerationContract,
    snapshot: Optional[ContextSnapshot],
    fallback_inputs: Optional[Mapping[str, Any]] = None,
) -> ValidationOptions:
    return ValidationOptions(
        business_definition_missing=is_business_definition_missing(contract, snapshot),
        has_gap_business_summary=has_gap_business_summary(fallback_inputs),
    )
