#!/usr/bin/env python3
"""
Variant checker for raw generator output.

Usage:
  - cat output.txt | python -m tools.variant_check --contract valueProp
  - python -m tools.variant_check path/to/output.txt --context context.yaml
  - python -m tools.variant_check --text "Our seamless platform helps teams." --json

Context files (JSON or YAML) may be:
  - {"fields": {"brand.positioning": "...", ...}}
  - a flat mapping of field key -> value
  - a list of field records {key, value, status}; only confirmed ones are kept
A top-level "fallback_inputs" mapping (e.g. gap.businessSummary) is honored.

Exit code: 0 if every variant passes; 1 if an error remains; 2 on bad input/config.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from logger_config import logger, setup_diagnostics_logger
from review_pipeline import ReviewReport, review_generation_output
from rules.contract_loader import ContractNotFoundError, get_contract
from src.context_snapshot import create_snapshot_from_fields
from src.models import ACTION_LABELS, ContextSnapshot
from src.settings import AppSettings


def _read_output(path: Optional[str], single_text: Optional[str]) -> str:
    if single_text:
        return single_text
    if path:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    return sys.stdin.read()


def load_context_file(path: Optional[str]) -> Tuple[ContextSnapshot, Dict[str, Any]]:
    """Read a context file into a snapshot plus optional fallback inputs."""
    if not path:
        return ContextSnapshot(), {}
    with open(path, "r", encoding="utf-8") as fh:
        # YAML is a superset of JSON
        data = yaml.safe_load(fh) or {}

    if isinstance(data, list):
        return create_snapshot_from_fields(data), {}
    if not isinstance(data, dict):
        raise ValueError("Context file must hold a mapping or a list of field records")

    fallback = data.get("fallback_inputs") or {}
    if "fields" in data:
        fields = data["fields"]
        if isinstance(fields, list):
            return create_snapshot_from_fields(fields), dict(fallback)
        if not isinstance(fields, dict):
            raise ValueError("'fields' must be a mapping or a list of field records")
        return ContextSnapshot(fields=dict(fields)), dict(fallback)
    flat = {k: v for k, v in data.items() if k != "fallback_inputs"}
    return ContextSnapshot(fields=flat), dict(fallback)


def _print_report(report: ReviewReport) -> None:
    method = report.parse_method.value if report.parse_method else "n/a"
    print(f"Parsed {len(report.variants)} variant(s) via {method}")
    for review in report.variants:
        errors = [w for w in review.warnings if w.is_error]
        status = "FAIL" if errors else ("WARN" if review.warnings else "OK")
        print(f"[{review.index + 1}] {status}: {review.text}")
        if review.repair:
            for change in review.repair.changes:
                print(f"  ~ {change}")
        for warning in review.warnings:
            print(f"  - ({warning.severity.value}) {warning.reason}")
        if review.primary_action and review.warnings:
            print(f"  > {ACTION_LABELS[review.primary_action]}")
    if report.validation.summary:
        print(f"Summary: {report.validation.summary}")


def main(argv=None) -> int:
    load_dotenv()
    settings = AppSettings.load()

    ap = argparse.ArgumentParser(description="Validate and repair generated copy variants")
    ap.add_argument("path", nargs="?", help="File with raw generator output (defaults to stdin)")
    ap.add_argument("--text", dest="single_text", help="Raw output passed inline")
    ap.add_argument("--contract", default=settings.default_field_key, help="Contract field key")
    ap.add_argument("--contracts-file", dest="contracts_file", help="Alternative contracts YAML")
    ap.add_argument("--context", dest="context_path", help="Context snapshot file (JSON or YAML)")
    ap.add_argument("--count", type=int, help="Expected number of variants (defaults to the contract)")
    ap.add_argument("--json", dest="as_json", action="store_true", help="Print the report as JSON")
    ap.add_argument("--no-repair", dest="no_repair", action="store_true", help="Skip automatic phrase removal")
    args = ap.parse_args(argv)

    if settings.log_validation_events:
        setup_diagnostics_logger()
    if args.as_json:
        # keep stdout for the report only
        logger.setLevel(logging.WARNING)

    try:
        contract = get_contract(args.contract, args.contracts_file)
        snapshot, fallback_inputs = load_context_file(args.context_path)
        raw = _read_output(args.path, args.single_text)
    except ContractNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("variant_check: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    report = review_generation_output(
        raw,
        contract,
        snapshot,
        expected_count=args.count,
        fallback_inputs=fallback_inputs,
        auto_repair=False if args.no_repair else None,
    )

    if args.as_json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_report(report)
    return 0 if report.valid else 1


if __name__ == "__main__":
    raise SystemExit(main())
