"""
Pattern libraries for variant validation.

Every table here is plain data. The check functions in rules.validators walk
these tables in order, so adding a phrase or a rule never touches control flow.
"""
import re
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LabeledPattern:
    """A compiled pattern plus the label reported when it matches."""
    pattern: re.Pattern
    label: str


@dataclass(frozen=True)
class DriftRule:
    """Product-category confusion: context looks like one category, output like another."""
    name: str
    context_indicators: Tuple[re.Pattern, ...]
    drift_patterns: Tuple[LabeledPattern, ...]
    mismatch_description: str


def _ci(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def _labeled(pattern: str, label: str, flags: int = re.IGNORECASE) -> LabeledPattern:
    return LabeledPattern(re.compile(pattern, flags), label)


# Unsupported claims (patents, guarantees, customer counts, money figures)
INVENTED_CLAIM_PATTERNS: Tuple[re.Pattern, ...] = (
    _ci(r"\b(?:proprietary|patented)\s+(?:technology|algorithm|process)"),
    _ci(r"\b(?:industry-first|first-of-its-kind|only\s+solution)"),
    _ci(r"\b(?:guaranteed|100%|proven)\s+(?:results|success|roi)"),
    _ci(r"\b(?:millions|thousands)\s+of\s+(?:customers|users|clients)"),
    _ci(r"\b(?:award-winning|best\s+in\s+class|market\s+leader)"),
    _ci(r"\$\d+[KMB]?\+?\s+(?:saved|generated|revenue)"),
)

GENERIC_FLUFF_PHRASES: Tuple[str, ...] = (
    "leverage",
    "synergy",
    "paradigm",
    "holistic",
    "best-in-class",
    "world-class",
    "cutting-edge",
    "bleeding-edge",
    "next-generation",
    "game-changing",
    "revolutionary",
    "disruptive",
    "innovative",
    "seamless",
    "robust",
    "scalable",
    "enterprise-grade",
    "turn-key",
    "end-to-end",
    "one-stop",
)

# Mechanism/tool vocabulary. Only acceptable when the context already uses it.
CATEGORY_DRIFT_PHRASES: Tuple[str, ...] = (
    # software / platform
    "platform",
    "software",
    "tool",
    "system",
    "dashboard",
    "app",
    "application",
    # analytics / data
    "analytics",
    "diagnostics",
    "metrics",
    "tracking",
    "insights",
    "reporting",
    "data-driven",
    # optimization
    "optimization",
    "optimize",
    "optimizing",
    "CRO",
    "conversion rate",
    "A/B test",
    "split test",
    # automation
    "automation",
    "automated",
    "automate",
    "workflow",
    "AI-powered",
    "machine learning",
    # integration
    "integration",
    "API",
    "sync",
    "connect",
)

CATEGORY_DRIFT_REGEXES: Tuple[LabeledPattern, ...] = tuple(
    _labeled(rf"\b{re.escape(phrase)}\b", phrase) for phrase in CATEGORY_DRIFT_PHRASES
)

CRO_INDICATOR_PATTERNS: Tuple[LabeledPattern, ...] = (
    _labeled(r"\bCRO\b", "CRO"),
    _labeled(r"\bconversion\s+rate\s+optimization", "conversion rate optimization"),
    _labeled(r"\blanding\s+page\s+(?:performance|optimization|testing)", "landing page optimization"),
    _labeled(r"\bconversion\s+funnel", "conversion funnel"),
    _labeled(r"\bconversion\s+lift", "conversion lift"),
    _labeled(r"\bscroll\s+depth", "scroll depth"),
    _labeled(r"\bbounce\s+rate", "bounce rate"),
    _labeled(r"\bexit\s+rate", "exit rate"),
    _labeled(r"\bpage\s+views?", "page views"),
    _labeled(r"\buser\s+behavior\s+(?:tracking|analytics|data)", "user behavior tracking"),
    _labeled(r"\bsession\s+(?:duration|recording|replay)", "session tracking"),
    _labeled(r"\bheatmaps?\b", "heatmaps"),
    _labeled(r"\bclick\s+tracking", "click tracking"),
    _labeled(r"\bwebsite\s+(?:audit|performance|optimization)", "website audit"),
    _labeled(r"\bUX\s+(?:audit|optimization|testing)", "UX audit"),
    _labeled(r"\bpage\s+speed", "page speed"),
    _labeled(r"\bcore\s+web\s+vitals", "core web vitals"),
    # acronyms only count in capitals
    _labeled(r"\b(?:LCP|FID|CLS)\b", "web performance metrics", flags=0),
    _labeled(r"\bA/B\s+test(?:ing)?", "A/B testing"),
    _labeled(r"\bsplit\s+test(?:ing)?", "split testing"),
    _labeled(r"\bmultivariate\s+test(?:ing)?", "multivariate testing"),
    _labeled(r"\bcheckout\s+optimization", "checkout optimization"),
    _labeled(r"\bcart\s+abandonment", "cart abandonment"),
    _labeled(r"\bform\s+optimization", "form optimization"),
)

# label = domain name; its words double as grounding keywords
DOMAIN_INDICATOR_PATTERNS: Tuple[LabeledPattern, ...] = (
    _labeled(r"\b(?:shopping\s+cart|checkout|add\s+to\s+cart|product\s+catalog)", "e-commerce"),
    _labeled(r"\b(?:inventory|SKU|fulfillment|warehouse)", "retail/logistics"),
    _labeled(r"\b(?:patient|HIPAA|medical|healthcare|clinical|diagnosis)", "healthcare"),
    _labeled(r"\b(?:pharmacy|prescription|treatment|therapy)", "healthcare"),
    _labeled(r"\b(?:banking|investment|portfolio|trading|securities)", "finance"),
    _labeled(r"\b(?:loan|mortgage|credit\s+score|APR|interest\s+rate)", "finance"),
    _labeled(r"\b(?:property|listing|MLS|realtor|real\s+estate|mortgage)", "real estate"),
    _labeled(r"\b(?:curriculum|student|enrollment|LMS|course|classroom)", "education"),
    _labeled(r"\b(?:applicant|hiring|onboarding|payroll|HR|recruiting)", "HR"),
    _labeled(r"\b(?:litigation|legal\s+counsel|attorney|court|lawsuit)", "legal"),
    _labeled(r"\b(?:manufacturing|production\s+line|assembly|factory|supply\s+chain)", "manufacturing"),
    _labeled(r"\b(?:MRR|ARR|churn\s+rate|LTV|CAC)", "SaaS metrics"),
)

PRODUCT_CATEGORY_DRIFT_RULES: Tuple[DriftRule, ...] = (
    DriftRule(
        name="marketplace_to_cro",
        context_indicators=(
            _ci(r"\b(?:marketplace|trainers?|coaches?|clients?|bookings?|sessions?)"),
            _ci(r"\b(?:connect(?:ing)?\s+(?:trainers?|coaches?|clients?))"),
            _ci(r"\b(?:fitness|personal\s+training|coaching\s+platform)"),
        ),
        drift_patterns=(
            _labeled(r"\b(?:CRO|conversion\s+rate\s+optimization)", "CRO"),
            _labeled(r"\b(?:website\s+visitors?|page\s+visitors?)", "website visitors"),
            _labeled(r"\b(?:landing\s+pages?|conversion\s+pages?)", "landing pages"),
            _labeled(r"\b(?:navigation\s+issues?|UX\s+optimization)", "navigation/UX"),
            _labeled(r"\b(?:bounce\s+rate|exit\s+rate|scroll\s+depth)", "web analytics"),
            _labeled(r"\b(?:A/B\s+test|split\s+test|multivariate)", "A/B testing"),
        ),
        mismatch_description="CRO/website optimization language in marketplace context",
    ),
    DriftRule(
        name="cro_to_marketplace",
        context_indicators=(
            _ci(r"\b(?:CRO|conversion\s+rate\s+optimization)"),
            _ci(r"\b(?:website\s+optimization|landing\s+page)"),
            _ci(r"\b(?:web\s+analytics|user\s+experience|UX)"),
        ),
        drift_patterns=(
            _labeled(r"\b(?:trainers?|personal\s+trainers?|fitness\s+coaches?)", "trainers"),
            _labeled(r"\b(?:marketplace|trainer\s+marketplace)", "marketplace"),
            _labeled(r"\b(?:bookings?|sessions?|appointments?)", "bookings"),
            _labeled(r"\b(?:clients?\s+(?:connect|find|match))", "client matching"),
        ),
        mismatch_description="Trainer/marketplace language in CRO context",
    ),
    DriftRule(
        name="agency_to_saas",
        context_indicators=(
            _ci(r"\b(?:marketing\s+agency|digital\s+agency|creative\s+agency)"),
            _ci(r"\b(?:consulting|consultancy|professional\s+services)"),
        ),
        drift_patterns=(
            _labeled(r"\b(?:self-serve|self-service|no-code)", "self-serve"),
            _labeled(r"\b(?:freemium|free\s+trial|subscription\s+tier)", "SaaS pricing"),
            _labeled(r"\b(?:onboarding\s+wizard|product\s+tour)", "product onboarding"),
        ),
        mismatch_description="SaaS product language in agency/services context",
    ),
)

# Engagement claims with no business behind them
GENERIC_ENGAGEMENT_PATTERNS: Tuple[re.Pattern, ...] = (
    _ci(r"\bcustomer\s+engagement\b"),
    _ci(r"\bclient\s+engagement\b"),
    _ci(r"\baudience\s+engagement\b"),
    _ci(r"\bengagement\s+rates?\b"),
    _ci(r"\boptimi[sz]e\s+engagement\b"),
    _ci(r"\bdrive\s+engagement\b"),
)
GENERIC_ENGAGEMENT_TAG = "generic_engagement"

BUDGET_FIELD_KEYS: Tuple[str, ...] = (
    "operationalConstraints.budgetCapsFloors",
    "operationalConstraints.maxBudget",
)
RESOURCE_FIELD_KEY = "operationalConstraints.resourceConstraints"
SMALL_BUDGET_CEILING = 10_000
SMALL_TEAM_MARKERS: Tuple[str, ...] = ("small", "2-3", "limited")
LARGE_SCALE_MARKERS: Tuple[str, ...] = ("large-scale", "global presence")
ENTERPRISE_MARKER = "enterprise"

MIN_VARIANT_CHARS = 10
MAX_WORDS_TOLERANCE = 1.5
PLACEHOLDER_RE = re.compile(r"\[[^\]]*\]")
