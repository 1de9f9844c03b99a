"""
Contract-Based Variant Validators
Every check is lexical: pattern tables live in rules.patterns, the contract
supplies banned phrases and length limits, the snapshot supplies grounding.
"""
import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from diagnostics_logger import log_validation_summary
from logger_config import logger
from rules.patterns import (
    BUDGET_FIELD_KEYS,
    CATEGORY_DRIFT_REGEXES,
    CRO_INDICATOR_PATTERNS,
    DOMAIN_INDICATOR_PATTERNS,
    ENTERPRISE_MARKER,
    GENERIC_ENGAGEMENT_PATTERNS,
    GENERIC_ENGAGEMENT_TAG,
    GENERIC_FLUFF_PHRASES,
    INVENTED_CLAIM_PATTERNS,
    LARGE_SCALE_MARKERS,
    MAX_WORDS_TOLERANCE,
    MIN_VARIANT_CHARS,
    PLACEHOLDER_RE,
    PRODUCT_CATEGORY_DRIFT_RULES,
    RESOURCE_FIELD_KEY,
    SMALL_BUDGET_CEILING,
    SMALL_TEAM_MARKERS,
)
from src.context_snapshot import build_grounding_corpus
from src.models import (
    WARNING_ACTION_MAP,
    ContextSnapshot,
    GenerationContract,
    Severity,
    ValidationOptions,
    ValidationResult,
    VariantWarning,
    WarningMeta,
    WarningType,
)


_DOMAIN_KEYWORD_SPLIT_RE = re.compile(r"[\s/]+")
_BUDGET_NUMBER_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*([kK])?")


def _warning(
    index: int,
    wtype: WarningType,
    reason: str,
    severity: Severity = Severity.WARNING,
    matched_phrase: Optional[str] = None,
    meta: Optional[WarningMeta] = None,
) -> VariantWarning:
    return VariantWarning(
        variant_index=index,
        type=wtype,
        reason=reason,
        severity=severity,
        action=WARNING_ACTION_MAP[wtype],
        matched_phrase=matched_phrase,
        meta=meta,
    )


# ---------------------------------------------------------------------------
# Individual checks. Each returns the first offending phrase (or None) so it
# can be unit-tested without building warnings.
# ---------------------------------------------------------------------------

def check_banned_phrases(text: str, exclusions: Iterable[str]) -> Optional[str]:
    lower_text = text.lower()
    for phrase in exclusions:
        if not phrase or not phrase.strip():
            continue
        if phrase.lower() in lower_text:
            return phrase
    return None


def check_invented_claims(text: str) -> Optional[str]:
    for pattern in INVENTED_CLAIM_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def find_generic_fluff(text: str, corpus: str) -> List[str]:
    """All fluff phrases used in the text that the context never uses itself."""
    lower_text = text.lower()
    return [p for p in GENERIC_FLUFF_PHRASES if p in lower_text and p not in corpus]


def check_generic_engagement(text: str) -> Optional[re.Match]:
    for pattern in GENERIC_ENGAGEMENT_PATTERNS:
        match = pattern.search(text)
        if match:
            return match
    return None


def check_category_drift(text: str, corpus: str) -> Optional[str]:
    for entry in CATEGORY_DRIFT_REGEXES:
        if entry.pattern.search(text) and entry.label.lower() not in corpus:
            return entry.label
    return None


def check_cro_drift(text: str, corpus: str) -> Optional[Tuple[str, str]]:
    """Returns (matched_text, label) for the first ungrounded CRO term."""
    for entry in CRO_INDICATOR_PATTERNS:
        match = entry.pattern.search(text)
        if not match:
            continue
        phrase = match.group(0)
        if phrase.lower() not in corpus and entry.label.lower() not in corpus:
            return phrase, entry.label
    return None


def check_domain_mismatch(text: str, corpus: str) -> Optional[Tuple[str, str]]:
    """Returns (matched_text, domain) when the text leans on a domain the context never mentions."""
    for entry in DOMAIN_INDICATOR_PATTERNS:
        match = entry.pattern.search(text)
        if not match:
            continue
        phrase = match.group(0)
        if phrase.lower() in corpus:
            continue
        keywords = [kw for kw in _DOMAIN_KEYWORD_SPLIT_RE.split(entry.label.lower()) if kw]
        if not any(kw in corpus for kw in keywords):
            return phrase, entry.label
    return None


def check_product_category_drift(text: str, corpus: str) -> Optional[Tuple[str, str]]:
    """Returns (matched_text, mismatch_description) for the first applicable rule that fires."""
    for rule in PRODUCT_CATEGORY_DRIFT_RULES:
        if not any(indicator.search(corpus) for indicator in rule.context_indicators):
            continue
        for entry in rule.drift_patterns:
            match = entry.pattern.search(text)
            if match and match.group(0).lower() not in corpus:
                return match.group(0), rule.mismatch_description
    return None


def _numbers_in(value: Any) -> List[float]:
    if isinstance(value, bool):
        return []
    if isinstance(value, (int, float)):
        return [float(value)]
    if isinstance(value, str):
        numbers = []
        for raw, suffix in _BUDGET_NUMBER_RE.findall(value):
            try:
                number = float(raw.replace(",", ""))
            except ValueError:
                continue
            numbers.append(number * 1000 if suffix else number)
        return numbers
    if isinstance(value, dict):
        return [n for v in value.values() for n in _numbers_in(v)]
    if isinstance(value, (list, tuple)):
        return [n for v in value for n in _numbers_in(v)]
    return []


def is_small_budget(value: Any) -> bool:
    numbers = _numbers_in(value)
    return bool(numbers) and max(numbers) <= SMALL_BUDGET_CEILING


def check_constraint_violations(text: str, snapshot: Optional[ContextSnapshot]) -> Optional[str]:
    if snapshot is None:
        return None
    lower_text = text.lower()

    if ENTERPRISE_MARKER in lower_text:
        for key in BUDGET_FIELD_KEYS:
            budget = snapshot.get(key)
            if budget and is_small_budget(budget):
                return 'Claims "enterprise" but budget suggests smaller operation'

    resources = snapshot.get(RESOURCE_FIELD_KEY)
    if resources:
        resource_text = str(resources).lower()
        if any(m in resource_text for m in SMALL_TEAM_MARKERS) and any(
            m in lower_text for m in LARGE_SCALE_MARKERS
        ):
            return "Claims scale beyond stated resource constraints"
    return None


def check_quality(text: str, max_words: int) -> Optional[Tuple[WarningType, str]]:
    """Returns (warning_type, reason) for the first quality problem."""
    if len(text.strip()) < MIN_VARIANT_CHARS:
        return WarningType.QUALITY_TOO_SHORT, "Variant is too short"
    word_count = len(text.split())
    if word_count > max_words * MAX_WORDS_TOLERANCE:
        return WarningType.QUALITY_TOO_LONG, f"Variant exceeds {max_words} word limit (has {word_count})"
    if PLACEHOLDER_RE.search(text):
        return WarningType.QUALITY_PLACEHOLDER, "Variant contains unfilled placeholders"
    return None


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

def validate_variant(
    index: int,
    text: str,
    contract: GenerationContract,
    corpus: str,
    snapshot: Optional[ContextSnapshot],
    options: ValidationOptions,
) -> List[VariantWarning]:
    """Run every check against one variant. Checks never short-circuit each other."""
    warnings: List[VariantWarning] = []

    banned = check_banned_phrases(text, contract.exclusions)
    if banned:
        warnings.append(_warning(
            index, WarningType.BANNED_PHRASE, f'Contains banned phrase: "{banned}"',
            matched_phrase=banned, meta=WarningMeta(phrases=[banned]),
        ))

    claim = check_invented_claims(text)
    if claim:
        warnings.append(_warning(
            index, WarningType.INVENTED_CLAIM, f'May contain invented claim: "{claim}"',
            matched_phrase=claim, meta=WarningMeta(pattern=claim),
        ))

    for phrase in find_generic_fluff(text, corpus):
        warnings.append(_warning(
            index, WarningType.GENERIC_FLUFF, f'Contains generic phrase not in context: "{phrase}"',
            matched_phrase=phrase, meta=WarningMeta(phrases=[phrase]),
        ))

    if options.business_definition_missing and not options.has_gap_business_summary:
        engagement = check_generic_engagement(text)
        if engagement:
            phrase = engagement.group(0)
            warnings.append(_warning(
                index, WarningType.CATEGORY_DRIFT,
                f'Contains generic engagement claim without business definition: "{phrase}"',
                matched_phrase=phrase,
                meta=WarningMeta(pattern=engagement.re.pattern, tags=[GENERIC_ENGAGEMENT_TAG]),
            ))

    drift = check_category_drift(text, corpus)
    if drift:
        warnings.append(_warning(
            index, WarningType.CATEGORY_DRIFT, f'Contains mechanism/tool language not in context: "{drift}"',
            matched_phrase=drift, meta=WarningMeta(phrases=[drift]),
        ))

    cro = check_cro_drift(text, corpus)
    if cro:
        phrase, label = cro
        warnings.append(_warning(
            index, WarningType.CATEGORY_DRIFT,
            f'Contains CRO/website-audit language not in context: "{phrase}" ({label})',
            matched_phrase=phrase, meta=WarningMeta(phrases=[phrase]),
        ))

    domain = check_domain_mismatch(text, corpus)
    if domain:
        phrase, name = domain
        warnings.append(_warning(
            index, WarningType.DOMAIN_MISMATCH,
            f'References {name} domain not present in context: "{phrase}"',
            matched_phrase=phrase, meta=WarningMeta(phrases=[phrase]),
        ))

    product_drift = check_product_category_drift(text, corpus)
    if product_drift:
        phrase, description = product_drift
        warnings.append(_warning(
            index, WarningType.DOMAIN_MISMATCH, f'{description}: "{phrase}"',
            matched_phrase=phrase, meta=WarningMeta(phrases=[phrase]),
        ))

    constraint = check_constraint_violations(text, snapshot)
    if constraint:
        warnings.append(_warning(
            index, WarningType.CONSTRAINT_VIOLATION, constraint,
            severity=Severity.ERROR, meta=WarningMeta(constraint=constraint),
        ))

    quality = check_quality(text, contract.output_spec.max_words)
    if quality:
        wtype, reason = quality
        warnings.append(_warning(index, wtype, reason, severity=Severity.ERROR))

    return warnings


def build_summary(warnings: Sequence[VariantWarning]) -> Optional[str]:
    if not warnings:
        return None
    errors = sum(1 for w in warnings if w.is_error)
    soft = len(warnings) - errors
    parts = []
    if errors:
        parts.append(f"{errors} error{'s' if errors != 1 else ''}")
    if soft:
        parts.append(f"{soft} warning{'s' if soft != 1 else ''}")
    return ", ".join(parts)


def validate_generated_variants(
    variants: Sequence[str],
    contract: GenerationContract,
    context: Optional[ContextSnapshot],
    opts: Any = None,
) -> ValidationResult:
    """
    Validate generated variants against a contract and the confirmed context.

    Args:
        variants: Variant texts, identified by position.
        contract: Banned phrases and word limit.
        context: Confirmed facts used to decide what counts as grounded.
        opts: ValidationOptions or a dict with businessDefinitionMissing /
            hasGapBusinessSummary.

    Returns:
        ValidationResult; valid is False only when an error-severity warning exists.
    """
    options = ValidationOptions.from_value(opts)
    corpus = build_grounding_corpus(context)

    warnings: List[VariantWarning] = []
    for index, text in enumerate(variants):
        warnings.extend(validate_variant(index, text or "", contract, corpus, context, options))

    summary = build_summary(warnings)
    result = ValidationResult(
        valid=not any(w.is_error for w in warnings),
        warnings=warnings,
        summary=summary,
    )
    if warnings:
        logger.debug("Variant validation for %s: %s", contract.id or "contract", summary)
    log_validation_summary(
        contract.id or None,
        variant_count=len(variants),
        error_count=result.error_count,
        warning_count=result.warning_count,
        summary=summary,
        warning_types=sorted({w.type.value for w in warnings}) or None,
    )
    return result


def get_validation_summary(result: ValidationResult) -> str:
    """Human-readable report of a validation result."""
    if not result.warnings:
        return "✅ All variants passed"
    lines = [f"{'❌' if not result.valid else '⚠️'} {result.summary}"]
    for warning in result.warnings:
        marker = "ERROR" if warning.is_error else "WARN"
        lines.append(f"  [{warning.variant_index}] {marker} {warning.type.value}: {warning.reason}")
    return "\n".join(lines)
