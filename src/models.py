"""Shared types for variant parsing, validation and repair."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WarningType(str, Enum):
    BANNED_PHRASE = "banned_phrase"
    INVENTED_CLAIM = "invented_claim"
    GENERIC_FLUFF = "generic_fluff"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CATEGORY_DRIFT = "category_drift"
    DOMAIN_MISMATCH = "domain_mismatch"
    QUALITY_TOO_SHORT = "quality_too_short"
    QUALITY_TOO_LONG = "quality_too_long"
    QUALITY_PLACEHOLDER = "quality_placeholder"


class FixAction(str, Enum):
    REMOVE_PHRASE = "remove_phrase"
    REWRITE_DEFENSIBLE = "rewrite_defensible"
    REWRITE_WITH_CONSTRAINTS = "rewrite_with_constraints"
    REGENERATE_STRICTER = "regenerate_stricter"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ParseMethod(str, Enum):
    JSON = "json"
    NUMBERED = "numbered"
    BULLETS = "bullets"
    PARAGRAPHS = "paragraphs"
    FALLBACK = "fallback"


WARNING_ACTION_MAP: Dict[WarningType, FixAction] = {
    WarningType.BANNED_PHRASE: FixAction.REMOVE_PHRASE,
    WarningType.INVENTED_CLAIM: FixAction.REWRITE_DEFENSIBLE,
    WarningType.GENERIC_FLUFF: FixAction.REGENERATE_STRICTER,
    WarningType.CONSTRAINT_VIOLATION: FixAction.REWRITE_WITH_CONSTRAINTS,
    WarningType.CATEGORY_DRIFT: FixAction.REWRITE_DEFENSIBLE,
    WarningType.DOMAIN_MISMATCH: FixAction.REWRITE_DEFENSIBLE,
    WarningType.QUALITY_TOO_SHORT: FixAction.REGENERATE_STRICTER,
    WarningType.QUALITY_TOO_LONG: FixAction.REGENERATE_STRICTER,
    WarningType.QUALITY_PLACEHOLDER: FixAction.REGENERATE_STRICTER,
}

ACTION_LABELS: Dict[FixAction, str] = {
    FixAction.REMOVE_PHRASE: "Remove phrase",
    FixAction.REWRITE_DEFENSIBLE: "Rewrite to be defensible",
    FixAction.REWRITE_WITH_CONSTRAINTS: "Rewrite to fit constraints",
    FixAction.REGENERATE_STRICTER: "Regenerate this variant",
}

# Lower value wins when picking the primary fix for a variant.
ACTION_PRIORITY: Dict[FixAction, int] = {
    FixAction.REMOVE_PHRASE: 0,
    FixAction.REWRITE_WITH_CONSTRAINTS: 1,
    FixAction.REWRITE_DEFENSIBLE: 2,
    FixAction.REGENERATE_STRICTER: 3,
}


class OutputSpec(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    variants: int = 3
    format: str = "paragraph"
    max_words: int = Field(default=50, alias="maxWords")


class GenerationContract(BaseModel):
    """Per-field generation rules: banned phrases plus the output shape."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = ""
    label: str = ""
    description: str = ""
    primary_inputs: List[str] = Field(default_factory=list, alias="primaryInputs")
    secondary_inputs: List[str] = Field(default_factory=list, alias="secondaryInputs")
    exclusions: List[str] = Field(default_factory=list)
    hard_constraints: List[str] = Field(default_factory=list, alias="hardConstraints")
    style_guidance: str = Field(default="", alias="styleGuidance")
    output_spec: OutputSpec = Field(default_factory=OutputSpec, alias="outputSpec")
    require_business_definition: bool = Field(default=False, alias="requireBusinessDefinition")
    require_goal_alignment: bool = Field(default=False, alias="requireGoalAlignment")
    allow_gap_fallback: bool = Field(default=False, alias="allowGapFallbackWhenBusinessDefinitionMissing")
    fallback_primary_inputs: List[str] = Field(default_factory=list, alias="fallbackPrimaryInputs")

    @field_validator(
        "exclusions", "primary_inputs", "secondary_inputs", "hard_constraints", "fallback_primary_inputs",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("style_guidance", mode="before")
    @classmethod
    def _strip_guidance(cls, value: Any) -> Any:
        return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class ContextSnapshot:
    """Confirmed business facts, keyed by dotted field name (``brand.positioning``)."""

    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)


@dataclass(frozen=True)
class ValidationOptions:
    business_definition_missing: bool = False
    has_gap_business_summary: bool = False

    @classmethod
    def from_value(cls, value: Any) -> "ValidationOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(
                business_definition_missing=bool(
                    value.get("business_definition_missing", value.get("businessDefinitionMissing", False))
                ),
                has_gap_business_summary=bool(
                    value.get("has_gap_business_summary", value.get("hasGapBusinessSummary", False))
                ),
            )
        return cls()


@dataclass(frozen=True)
class WarningMeta:
    phrases: Optional[List[str]] = None
    pattern: Optional[str] = None
    constraint: Optional[str] = None
    tags: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in {
            "phrases": self.phrases,
            "pattern": self.pattern,
            "constraint": self.constraint,
            "tags": self.tags,
        }.items() if v is not None}


@dataclass(frozen=True)
class VariantWarning:
    variant_index: int
    type: WarningType
    reason: str
    severity: Severity
    action: FixAction
    matched_phrase: Optional[str] = None
    meta: Optional[WarningMeta] = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "variant_index": self.variant_index,
            "type": self.type.value,
            "reason": self.reason,
            "severity": self.severity.value,
            "action": self.action.value,
        }
        if self.matched_phrase is not None:
            payload["matched_phrase"] = self.matched_phrase
        if self.meta is not None:
            payload["meta"] = self.meta.to_dict()
        return payload


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a batch of variants."""
    valid: bool
    warnings: List[VariantWarning]
    summary: Optional[str] = None

    def warnings_for(self, variant_index: int) -> List[VariantWarning]:
        return [w for w in self.warnings if w.variant_index == variant_index]

    @property
    def error_count(self) -> int:
        return sum(1 for w in self.warnings if w.is_error)

    @property
    def warning_count(self) -> int:
        return len(self.warnings) - self.error_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "warnings": [w.to_dict() for w in self.warnings],
            "summary": self.summary,
        }


@dataclass(frozen=True)
class RepairResult:
    text: str
    success: bool
    changes: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "success": self.success, "changes": list(self.changes)}


@dataclass(frozen=True)
class ParsedVariants:
    variants: List[str]
    parse_method: ParseMethod

    def to_dict(self) -> Dict[str, Any]:
        return {"variants": list(self.variants), "parse_method": self.parse_method.value}
