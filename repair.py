"""
Repair engine for generated variants.

Only phrase removal is done locally. Every other fix action is handed back to
the caller as a RewriteRequest for the upstream generator.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from logger_config import logger
from src.models import (
    ACTION_LABELS,
    ACTION_PRIORITY,
    FixAction,
    RepairResult,
    Severity,
    VariantWarning,
)


_WHITESPACE_RE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,!?])")
_REPEATED_PUNCT_RE = re.compile(r"([.,!?])\s*([.,!?])")
_DOUBLE_COMMA_RE = re.compile(r"\s*,\s*,")
_LEADING_COMMA_RE = re.compile(r"^,\s*")
_TRAILING_COMMA_RE = re.compile(r"\s*,$")

REWRITE_MODES: Dict[FixAction, str] = {
    FixAction.REWRITE_DEFENSIBLE: "defensible",
    FixAction.REWRITE_WITH_CONSTRAINTS: "constraints",
    FixAction.REGENERATE_STRICTER: "regenerate",
}


@dataclass(frozen=True)
class PrimaryFix:
    action: FixAction
    warnings: List[VariantWarning]

    @property
    def label(self) -> str:
        return ACTION_LABELS[self.action]


@dataclass(frozen=True)
class RewriteRequest:
    """What the generator needs to rewrite one variant."""
    text: str
    action: FixAction
    mode: str
    avoid_types: List[str] = field(default_factory=list)
    avoid_phrases: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "action": self.action.value,
            "mode": self.mode,
            "avoid_types": list(self.avoid_types),
            "avoid_phrases": list(self.avoid_phrases),
            "constraints": list(self.constraints),
        }


def _removal_patterns(phrase: str) -> List[re.Pattern]:
    escaped = re.escape(phrase)
    return [
        re.compile(rf"\s*,\s*{escaped}", re.IGNORECASE),
        re.compile(rf"{escaped}\s*,\s*", re.IGNORECASE),
        re.compile(rf"\b{escaped}\b", re.IGNORECASE),
    ]


def _cleanup(text: str) -> str:
    cleaned = _WHITESPACE_RE.sub(" ", text)
    cleaned = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", cleaned)
    cleaned = _REPEATED_PUNCT_RE.sub(r"\1", cleaned)
    cleaned = cleaned.strip()
    cleaned = _DOUBLE_COMMA_RE.sub(",", cleaned)
    cleaned = _LEADING_COMMA_RE.sub("", cleaned)
    cleaned = _TRAILING_COMMA_RE.sub("", cleaned)
    if cleaned:
        cleaned = cleaned[0].upper() + cleaned[1:]
    return cleaned


def remove_phrases_from_text(text: str, phrases: Sequence[str]) -> RepairResult:
    """
    Remove phrases from a variant and tidy the punctuation they leave behind.

    For each phrase the comma-attached forms are tried before the bare word;
    the first form that changes the text is applied (all occurrences).
    """
    result = text or ""
    changes: List[str] = []

    for phrase in phrases:
        if not phrase or not phrase.strip():
            continue
        for pattern in _removal_patterns(phrase):
            updated = pattern.sub("", result)
            if updated != result:
                result = updated
                changes.append(f'Removed "{phrase}"')
                break

    result = _cleanup(result)
    if changes:
        logger.debug("Phrase removal applied: %s", "; ".join(changes))
    return RepairResult(text=result, success=bool(changes), changes=changes)


def _sort_key(warning: VariantWarning):
    return (0 if warning.severity is Severity.ERROR else 1, ACTION_PRIORITY[warning.action])


def get_primary_fix_action(warnings: Sequence[VariantWarning]) -> Optional[PrimaryFix]:
    """Pick the single fix to offer: errors first, then the cheapest action."""
    if not warnings:
        return None
    top = sorted(warnings, key=_sort_key)[0]
    return PrimaryFix(action=top.action, warnings=[w for w in warnings if w.action == top.action])


def collect_phrases_to_remove(warnings: Sequence[VariantWarning]) -> List[str]:
    phrases: List[str] = []
    seen = set()

    def _add(phrase: Optional[str]) -> None:
        if phrase and phrase not in seen:
            seen.add(phrase)
            phrases.append(phrase)

    for warning in warnings:
        if warning.action == FixAction.REMOVE_PHRASE and warning.meta and warning.meta.phrases:
            for phrase in warning.meta.phrases:
                _add(phrase)
        _add(warning.matched_phrase)
    return phrases


def build_rewrite_request(text: str, warnings: Sequence[VariantWarning]) -> Optional[RewriteRequest]:
    """Build the generator request for a variant whose primary fix needs a rewrite."""
    primary = get_primary_fix_action(warnings)
    if primary is None or primary.action == FixAction.REMOVE_PHRASE:
        return None

    avoid_types: List[str] = []
    constraints: List[str] = []
    for warning in warnings:
        if warning.type.value not in avoid_types:
            avoid_types.append(warning.type.value)
        if warning.meta and warning.meta.constraint and warning.meta.constraint not in constraints:
            constraints.append(warning.meta.constraint)

    return RewriteRequest(
        text=text,
        action=primary.action,
        mode=REWRITE_MODES[primary.action],
        avoid_types=avoid_types,
        avoid_phrases=collect_phrases_to_remove(warnings),
        constraints=constraints,
    )
