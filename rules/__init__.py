"""
Rules Module - generation contracts and variant validators

Contracts live in generation_contracts.yaml; pattern libraries live in
rules.patterns. Everything that judges a variant goes through here.

Usage:
    from rules import get_contract, validate_generated_variants

    contract = get_contract("valueProp")
    result = validate_generated_variants(variants, contract, snapshot)
    if not result.valid:
        print(result.summary)
"""

from rules.contract_loader import (
    ContractNotFoundError,
    load_generation_contracts,
    get_contract,
    get_all_field_keys,
    has_contract,
    clear_contract_cache,
)

from rules.validators import (
    validate_generated_variants,
    validate_variant,
    check_banned_phrases,
    check_invented_claims,
    find_generic_fluff,
    check_category_drift,
    check_cro_drift,
    check_domain_mismatch,
    check_product_category_drift,
    check_constraint_violations,
    check_quality,
    build_summary,
    get_validation_summary,
)

__all__ = [
    # Contract loaders
    "ContractNotFoundError",
    "load_generation_contracts",
    "get_contract",
    "get_all_field_keys",
    "has_contract",
    "clear_contract_cache",
    # Validators
    "validate_generated_variants",
    "validate_variant",
    "check_banned_phrases",
    "check_invented_claims",
    "find_generic_fluff",
    "check_category_drift",
    "check_cro_drift",
    "check_domain_mismatch",
    "check_product_category_drift",
    "check_constraint_violations",
    "check_quality",
    "build_summary",
    "get_validation_summary",
]
