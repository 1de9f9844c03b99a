import pytest

from rules.validators import (
    build_summary,
    check_banned_phrases,
    get_validation_summary,
    is_small_budget,
    validate_generated_variants,
)
from src.models import (
    ContextSnapshot,
    FixAction,
    GenerationContract,
    OutputSpec,
    Severity,
    VariantWarning,
    WarningType,
)


BASE_CONTRACT = GenerationContract(
    id="valueProp",
    exclusions=["enterprise-grade", "cutting-edge", "revolutionary"],
    output_spec=OutputSpec(variants=3, max_words=50),
)

EMPTY = ContextSnapshot()

FULL_SNAPSHOT = ContextSnapshot(fields={
    "audience.icpDescription": "Small business owners looking to automate marketing",
    "brand.positioning": "Simple automation for growing teams",
    "operationalConstraints.budgetCapsFloors": {"min": 5000, "max": 10000},
    "operationalConstraints.resourceConstraints": "Small team of 2-3 people",
})


def _types(result, wtype):
    return [w for w in result.warnings if w.type == wtype]


def test_banned_phrase_is_reported_with_phrase_meta():
    result = validate_generated_variants(["Our enterprise-grade solution helps teams."], BASE_CONTRACT, EMPTY)
    banned = _types(result, WarningType.BANNED_PHRASE)
    assert len(banned) == 1
    assert banned[0].matched_phrase == "enterprise-grade"
    assert banned[0].meta.phrases == ["enterprise-grade"]
    assert banned[0].action == FixAction.REMOVE_PHRASE
    assert banned[0].severity == Severity.WARNING
    assert banned[0].reason == 'Contains banned phrase: "enterprise-grade"'


def test_banned_phrase_match_is_case_insensitive():
    assert check_banned_phrases("CUTTING-EDGE ideas", ["cutting-edge"]) == "cutting-edge"
    assert check_banned_phrases("plain copy", ["", "  "]) is None


def test_contract_accepts_camel_case_and_null_exclusions():
    contract = GenerationContract.model_validate({"exclusions": None, "outputSpec": {"maxWords": 20}})
    assert contract.exclusions == []
    assert contract.output_spec.max_words == 20


def test_hype_sentence_collects_independent_warnings():
    text = "This revolutionary, game-changing platform delivers guaranteed results."
    contract = GenerationContract(exclusions=[], output_spec=OutputSpec(max_words=50))
    result = validate_generated_variants([text], contract, EMPTY)

    fluff = [w.matched_phrase for w in _types(result, WarningType.GENERIC_FLUFF)]
    assert fluff == ["game-changing", "revolutionary"]
    assert [w.matched_phrase for w in _types(result, WarningType.CATEGORY_DRIFT)] == ["platform"]
    claims = _types(result, WarningType.INVENTED_CLAIM)
    assert [w.matched_phrase for w in claims] == ["guaranteed results"]
    assert claims[0].action == FixAction.REWRITE_DEFENSIBLE
    assert result.valid is True
    assert result.summary == "4 warnings"


def test_placeholder_is_an_error():
    result = validate_generated_variants(["[INSERT BENEFIT HERE]"], BASE_CONTRACT, EMPTY)
    assert [w.type for w in result.warnings] == [WarningType.QUALITY_PLACEHOLDER]
    assert result.warnings[0].severity == Severity.ERROR
    assert result.valid is False
    assert result.summary == "1 error"


def test_too_short_variant():
    result = validate_generated_variants(["Too short"], BASE_CONTRACT, EMPTY)
    assert [w.type for w in result.warnings] == [WarningType.QUALITY_TOO_SHORT]
    assert result.warnings[0].reason == "Variant is too short"


def test_ten_characters_is_long_enough():
    result = validate_generated_variants(["Ten chars!"], BASE_CONTRACT, EMPTY)
    assert _types(result, WarningType.QUALITY_TOO_SHORT) == []
    assert result.valid is True


def test_word_limit_allows_fifty_percent_slack():
    contract = GenerationContract(output_spec=OutputSpec(max_words=20))
    ok = validate_generated_variants([" ".join(["word"] * 30)], contract, EMPTY)
    assert ok.warnings == []
    too_long = validate_generated_variants([" ".join(["word"] * 31)], contract, EMPTY)
    assert [w.type for w in too_long.warnings] == [WarningType.QUALITY_TOO_LONG]
    assert too_long.warnings[0].reason == "Variant exceeds 20 word limit (has 31)"


def test_fluff_used_by_the_context_is_not_flagged():
    snapshot = ContextSnapshot(fields={"brand.positioning": "A seamless handoff"})
    result = validate_generated_variants(["Seamless handoffs for busy founders every week."], BASE_CONTRACT, snapshot)
    assert _types(result, WarningType.GENERIC_FLUFF) == []


def test_category_drift_respects_grounded_terms():
    text = "A simple platform for neighborhood bakeries."
    drifted = validate_generated_variants([text], BASE_CONTRACT, EMPTY)
    assert _types(drifted, WarningType.CATEGORY_DRIFT)[0].reason == (
        'Contains mechanism/tool language not in context: "platform"'
    )
    grounded = ContextSnapshot(fields={"identity.businessModel": "Ordering platform for bakeries"})
    assert _types(validate_generated_variants([text], BASE_CONTRACT, grounded), WarningType.CATEGORY_DRIFT) == []


def test_cro_language_is_flagged_unless_in_context():
    text = "Lower bounce rate for local bakeries."
    result = validate_generated_variants([text], BASE_CONTRACT, EMPTY)
    reasons = [w.reason for w in _types(result, WarningType.CATEGORY_DRIFT)]
    assert 'Contains CRO/website-audit language not in context: "bounce rate" (bounce rate)' in reasons

    snapshot = ContextSnapshot(fields={"brand.valueProps": ["We cut bounce rate"]})
    result = validate_generated_variants([text], BASE_CONTRACT, snapshot)
    assert not any("CRO/website-audit" in w.reason for w in result.warnings)


def test_web_vitals_acronyms_are_case_sensitive():
    upper = validate_generated_variants(["Improve LCP for every visitor."], BASE_CONTRACT, EMPTY)
    assert any("(web performance metrics)" in w.reason for w in upper.warnings)
    lower = validate_generated_variants(["Improve lcp for every visitor."], BASE_CONTRACT, EMPTY)
    assert not any("(web performance metrics)" in w.reason for w in lower.warnings)


def test_domain_keyword_in_context_grounds_specific_terms():
    text = "Better patient outcomes for small clinics."
    grounded = ContextSnapshot(fields={"identity.industry": "healthcare"})
    assert _types(validate_generated_variants([text], BASE_CONTRACT, grounded), WarningType.DOMAIN_MISMATCH) == []

    ungrounded = validate_generated_variants([text], BASE_CONTRACT, EMPTY)
    mismatch = _types(ungrounded, WarningType.DOMAIN_MISMATCH)
    assert mismatch[0].reason == 'References healthcare domain not present in context: "patient"'
    assert mismatch[0].action == FixAction.REWRITE_DEFENSIBLE
    assert mismatch[0].meta.phrases == ["patient"]


def test_marketplace_context_flags_cro_drift():
    snapshot = ContextSnapshot(fields={
        "identity.businessModel": "Marketplace connecting personal trainers with clients",
    })
    result = validate_generated_variants(["We fix your landing pages fast."], BASE_CONTRACT, snapshot)
    mismatch = _types(result, WarningType.DOMAIN_MISMATCH)
    assert [w.reason for w in mismatch] == [
        'CRO/website optimization language in marketplace context: "landing pages"'
    ]
    assert mismatch[0].meta.phrases == ["landing pages"]


def test_generic_engagement_needs_missing_business_definition():
    text = "We drive engagement for local shops."
    flagged = validate_generated_variants([text], BASE_CONTRACT, EMPTY, {"businessDefinitionMissing": True})
    engagement = [w for w in flagged.warnings if w.meta and w.meta.tags == ["generic_engagement"]]
    assert len(engagement) == 1
    assert engagement[0].type == WarningType.CATEGORY_DRIFT
    assert engagement[0].matched_phrase == "drive engagement"

    with_gap = validate_generated_variants(
        [text], BASE_CONTRACT, EMPTY,
        {"businessDefinitionMissing": True, "hasGapBusinessSummary": True},
    )
    assert not any(w.meta and w.meta.tags for w in with_gap.warnings)
    assert not any(w.meta and w.meta.tags for w in validate_generated_variants([text], BASE_CONTRACT, EMPTY).warnings)


def test_enterprise_claim_against_small_budget():
    result = validate_generated_variants(["Enterprise support for your company."], BASE_CONTRACT, FULL_SNAPSHOT)
    violations = _types(result, WarningType.CONSTRAINT_VIOLATION)
    assert len(violations) == 1
    assert violations[0].severity == Severity.ERROR
    assert violations[0].action == FixAction.REWRITE_WITH_CONSTRAINTS
    assert violations[0].meta.constraint == 'Claims "enterprise" but budget suggests smaller operation'
    assert violations[0].matched_phrase is None
    assert result.valid is False


def test_large_scale_claim_against_small_team():
    result = validate_generated_variants(["Large-scale campaigns across regions."], BASE_CONTRACT, FULL_SNAPSHOT)
    violations = _types(result, WarningType.CONSTRAINT_VIOLATION)
    assert [w.reason for w in violations] == ["Claims scale beyond stated resource constraints"]


@pytest.mark.parametrize("budget,expected", [
    ({"min": 5000, "max": 10000}, True),
    ("$5,000 per month", True),
    ("8k", True),
    ({"max": 250000}, False),
    ("no budget set", False),
])
def test_small_budget_detection(budget, expected):
    assert is_small_budget(budget) is expected


def test_empty_batch_is_valid_without_summary():
    result = validate_generated_variants([], BASE_CONTRACT, EMPTY)
    assert result.valid is True
    assert result.warnings == []
    assert result.summary is None


def test_summary_pluralization():
    def w(sev):
        return VariantWarning(0, WarningType.GENERIC_FLUFF, "x", sev, FixAction.REGENERATE_STRICTER)

    assert build_summary([w(Severity.ERROR)]) == "1 error"
    assert build_summary([w(Severity.ERROR), w(Severity.ERROR), w(Severity.WARNING)]) == "2 errors, 1 warning"
    assert build_summary([w(Severity.WARNING), w(Severity.WARNING)]) == "2 warnings"


def test_warnings_are_grouped_by_variant_index():
    result = validate_generated_variants(
        ["Plain copy for bakery owners.", "[TODO]"], BASE_CONTRACT, EMPTY
    )
    assert result.warnings_for(0) == []
    assert [w.type for w in result.warnings_for(1)] == [WarningType.QUALITY_TOO_SHORT]
    assert "ERROR quality_too_short" in get_validation_summary(result)


def test_validation_emits_diagnostics_event(caplog):
    with caplog.at_level("INFO", logger="diagnostics"):
        validate_generated_variants(["[INSERT BENEFIT HERE]"], BASE_CONTRACT, EMPTY)
    events = [r.msg for r in caplog.records if r.name == "diagnostics" and isinstance(r.msg, dict)]
    assert events and events[-1]["event"] == "variant_validation"
    assert events[-1]["error_count"] == 1
    assert events[-1]["valid"] is False


def test_drift_warnings_carry_the_matched_phrase():
    result = validate_generated_variants(["A simple platform for bakeries and bounce rate."], BASE_CONTRACT, EMPTY)
    drift = _types(result, WarningType.CATEGORY_DRIFT)
    assert [w.meta.phrases for w in drift] == [["platform"], ["bounce rate"]]
    assert drift[1].to_dict()["meta"] == {"phrases": ["bounce rate"]}


@pytest.mark.parametrize("opts", ["businessDefinitionMissing", 42, ["x"]])
def test_unknown_option_shapes_use_defaults(opts):
    result = validate_generated_variants(["We drive engagement for local shops."], BASE_CONTRACT, EMPTY, opts)
    assert result.valid is True
    assert not any(w.meta and w.meta.tags == ["generic_engagement"] for w in result.warnings)
