"""
Variant parser.

Turns raw generator output into an ordered list of variant texts. Formats are
tried in order (JSON, numbered list, bullet list, paragraphs) and the first
one that yields anything wins; otherwise the whole output is one variant.
"""
import json
import re
from typing import Any, Callable, List, Optional, Tuple

from logger_config import logger
from src.models import ParsedVariants, ParseMethod


_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_NUMBERED_RE = re.compile(r"^\s*\d+[.):\s]+(.+)$")
_BULLET_RE = re.compile(r"^\s*[-*•]\s+(.+)$")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n+")
_HEADING_RE = re.compile(r"^#+\s+", re.MULTILINE)
_LABEL_PREFIX_RE = re.compile(r"^(?:variant|option)\s*\d+\s*[:.)\-]?\s*", re.IGNORECASE)
_LEADING_MARKER_RE = re.compile(r"^\s*(?:\d+[.):]\s+|[-*•]\s+)")
_QUOTE_PAIRS = (('"', '"'), ("“", "”"))

MIN_PARAGRAPH_CHARS = 10


def clean_variant_text(text: str) -> str:
    """Strip headings, "Variant N:" labels, list markers and wrapping quotes."""
    cleaned = _HEADING_RE.sub("", (text or "").strip()).strip()
    cleaned = _LABEL_PREFIX_RE.sub("", cleaned)
    cleaned = _LEADING_MARKER_RE.sub("", cleaned).strip()
    for opening, closing in _QUOTE_PAIRS:
        if len(cleaned) >= 2 and cleaned.startswith(opening) and cleaned.endswith(closing):
            cleaned = cleaned[1:-1]
            break
    return cleaned.strip()


def _coerce_entry(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        value = entry.get("text")
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value)
    return ""


def _parse_json_robust(text: str) -> Optional[Any]:
    """Whole text first, then the outermost {...} span, then the outermost [...] span."""
    candidates = [text]
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])
    start, end = text.find("["), text.rfind("]")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError):
            continue
    return None


def try_parse_json(text: str) -> List[str]:
    fence = _FENCE_RE.search(text)
    payload = fence.group(1).strip() if fence else text
    parsed = _parse_json_robust(payload)
    if parsed is None:
        logger.debug("Variant output is not JSON; trying list formats.")
        return []

    if isinstance(parsed, dict) and isinstance(parsed.get("variants"), list):
        entries = parsed["variants"]
    elif isinstance(parsed, list):
        entries = parsed
    else:
        return []
    return [s.strip() for s in (_coerce_entry(e) for e in entries) if s.strip()]


def _collect_marked_items(text: str, marker_re: re.Pattern) -> List[str]:
    """Items start at a marker line and run until the next marker, a blank line or the end."""
    items: List[str] = []
    current: Optional[List[str]] = None
    for line in text.splitlines():
        match = marker_re.match(line)
        if match:
            if current is not None:
                items.append(" ".join(current))
            current = [match.group(1).strip()]
        elif not line.strip():
            if current is not None:
                items.append(" ".join(current))
                current = None
        elif current is not None:
            current.append(line.strip())
    if current is not None:
        items.append(" ".join(current))
    return [c for c in (clean_variant_text(i) for i in items) if c]


def try_parse_numbered(text: str) -> List[str]:
    return _collect_marked_items(text, _NUMBERED_RE)


def try_parse_bullets(text: str) -> List[str]:
    return _collect_marked_items(text, _BULLET_RE)


def try_parse_paragraphs(text: str) -> List[str]:
    blocks = _PARAGRAPH_SPLIT_RE.split(text)
    if len(blocks) < 2:
        return []
    return [c for c in (clean_variant_text(b) for b in blocks) if len(c) > MIN_PARAGRAPH_CHARS]


PARSE_STRATEGIES: Tuple[Tuple[ParseMethod, Callable[[str], List[str]]], ...] = (
    (ParseMethod.JSON, try_parse_json),
    (ParseMethod.NUMBERED, try_parse_numbered),
    (ParseMethod.BULLETS, try_parse_bullets),
    (ParseMethod.PARAGRAPHS, try_parse_paragraphs),
)


def normalize_variants(variants: List[str], expected_count: int) -> List[str]:
    kept = [v for v in variants if v and v.strip()]
    if expected_count > 0 and len(kept) > expected_count:
        return kept[:expected_count]
    return kept


def parse_variants_from_output(output: str, expected_count: int) -> ParsedVariants:
    """
    Parse raw generator output into variants.

    Never raises. Non-blank output always yields at least one variant;
    blank output yields none with parse_method FALLBACK.
    """
    text = (output or "").strip()
    if not text:
        return ParsedVariants(variants=[], parse_method=ParseMethod.FALLBACK)

    for method, strategy in PARSE_STRATEGIES:
        found = strategy(text)
        if found:
            variants = normalize_variants(found, expected_count)
            logger.debug("Parsed %d variant(s) via %s", len(variants), method.value)
            return ParsedVariants(variants=variants, parse_method=method)

    fallback = clean_variant_text(text) or text
    return ParsedVariants(variants=normalize_variants([fallback], expected_count), parse_method=ParseMethod.FALLBACK)
