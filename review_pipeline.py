"""
Variant review pipeline.

parse -> validate -> primary fix per variant -> local phrase removal ->
re-validate the repaired batch. Anything that needs a rewrite is returned as a
RewriteRequest; nothing here calls a generator.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from diagnostics_logger import diagnostics
from logger_config import logger
from metrics import Timer
from repair import (
    RewriteRequest,
    build_rewrite_request,
    collect_phrases_to_remove,
    get_primary_fix_action,
    remove_phrases_from_text,
)
from rules.validators import validate_generated_variants
from src.context_snapshot import build_validation_options
from src.models import (
    ContextSnapshot,
    FixAction,
    GenerationContract,
    ParseMethod,
    RepairResult,
    ValidationOptions,
    ValidationResult,
    VariantWarning,
    WarningType,
)
from src.settings import AppSettings
from variant_parser import parse_variants_from_output


@dataclass
class VariantReview:
    index: int
    original: str
    text: str
    warnings: List[VariantWarning] = field(default_factory=list)
    primary_action: Optional[FixAction] = None
    repair: Optional[RepairResult] = None
    rewrite_request: Optional[RewriteRequest] = None

    @property
    def repaired(self) -> bool:
        return self.text != self.original

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "original": self.original,
            "text": self.text,
            "repaired": self.repaired,
            "warnings": [w.to_dict() for w in self.warnings],
            "primary_action": self.primary_action.value if self.primary_action else None,
            "repair": self.repair.to_dict() if self.repair else None,
            "rewrite_request": self.rewrite_request.to_dict() if self.rewrite_request else None,
        }


@dataclass
class ReviewReport:
    parse_method: Optional[ParseMethod]
    variants: List[VariantReview]
    validation: ValidationResult

    @property
    def valid(self) -> bool:
        return self.validation.valid

    @property
    def texts(self) -> List[str]:
        return [v.text for v in self.variants]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parse_method": self.parse_method.value if self.parse_method else None,
            "valid": self.valid,
            "summary": self.validation.summary,
            "variants": [v.to_dict() for v in self.variants],
        }


def _try_auto_repair(text: str, warnings: List[VariantWarning]) -> Optional[RepairResult]:
    phrases = collect_phrases_to_remove([w for w in warnings if w.action == FixAction.REMOVE_PHRASE])
    if not phrases:
        return None
    repair = remove_phrases_from_text(text, phrases)
    return repair if repair.success and repair.text else None


def _repair_holds(
    repaired: str,
    warnings: Sequence[VariantWarning],
    contract: GenerationContract,
    snapshot: Optional[ContextSnapshot],
    options: ValidationOptions,
    removed: Sequence[str],
) -> bool:
    """The removed phrases must stay gone and the repaired text must not pick up new errors."""
    recheck = validate_generated_variants([repaired], contract, snapshot, options)
    lowered = {p.lower() for p in removed}
    if any(
        w.type == WarningType.BANNED_PHRASE and (w.matched_phrase or "").lower() in lowered
        for w in recheck.warnings
    ):
        return False
    before = {w.type for w in warnings if w.is_error}
    return not any(w.is_error and w.type not in before for w in recheck.warnings)


def review_variants(
    variants: Sequence[str],
    contract: GenerationContract,
    snapshot: Optional[ContextSnapshot],
    *,
    fallback_inputs: Optional[Mapping[str, Any]] = None,
    auto_repair: Optional[bool] = None,
    parse_method: Optional[ParseMethod] = None,
) -> ReviewReport:
    """Validate already-split variants, auto-remove banned phrases, and report the rest."""
    settings = AppSettings.load()
    if auto_repair is None:
        auto_repair = settings.auto_repair
    options = build_validation_options(contract, snapshot, fallback_inputs)

    with Timer("variant_review_ms", {"field_key": contract.id, "variants": len(variants)}):
        first_pass = validate_generated_variants(variants, contract, snapshot, options)

        reviews: List[VariantReview] = []
        for index, text in enumerate(variants):
            warnings = first_pass.warnings_for(index)
            review = VariantReview(index=index, original=text, text=text, warnings=warnings)
            primary = get_primary_fix_action(warnings)
            review.primary_action = primary.action if primary else None

            if primary and primary.action == FixAction.REMOVE_PHRASE and auto_repair:
                repair = _try_auto_repair(text, warnings)
                removed = collect_phrases_to_remove(primary.warnings)
                if repair and _repair_holds(repair.text, warnings, contract, snapshot, options, removed):
                    review.repair = repair
                    review.text = repair.text
                    diagnostics.info("variant_auto_repair", {
                        "field_key": contract.id,
                        "variant_index": index,
                        "changes": repair.changes,
                    })
                else:
                    logger.info("Auto-repair skipped for variant %d: removal left banned phrases or added errors", index)

            review.rewrite_request = build_rewrite_request(review.text, warnings)
            reviews.append(review)

        final = first_pass
        if any(r.repaired for r in reviews):
            final = validate_generated_variants([r.text for r in reviews], contract, snapshot, options)
            for review in reviews:
                review.warnings = final.warnings_for(review.index)
                primary = get_primary_fix_action(review.warnings)
                review.primary_action = primary.action if primary else None
                review.rewrite_request = build_rewrite_request(review.text, review.warnings)

    if settings.log_validation_events:
        diagnostics.info("variant_review", {
            "field_key": contract.id,
            "parse_method": parse_method.value if parse_method else None,
            "variants": len(reviews),
            "repaired": sum(1 for r in reviews if r.repaired),
            "valid": final.valid,
            "summary": final.summary,
        })
    return ReviewReport(parse_method=parse_method, variants=reviews, validation=final)


def review_generation_output(
    output: str,
    contract: GenerationContract,
    snapshot: Optional[ContextSnapshot],
    *,
    expected_count: Optional[int] = None,
    fallback_inputs: Optional[Mapping[str, Any]] = None,
    auto_repair: Optional[bool] = None,
) -> ReviewReport:
    """Parse raw generator output and review every variant it contains."""
    count = expected_count if expected_count is not None else contract.output_spec.variants
    with Timer("variant_parse_ms", {"field_key": contract.id}):
        parsed = parse_variants_from_output(output, count)
    if not parsed.variants:
        logger.warning("Generator output for %s produced no variants", contract.id or "contract")
    return review_variants(
        parsed.variants,
        contract,
        snapshot,
        fallback_inputs=fallback_inputs,
        auto_repair=auto_repair,
        parse_method=parsed.parse_method,
    )
