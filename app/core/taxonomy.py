"""Static industry taxonomy and keyword classifier.

Industries are matched in declaration order and the first hit wins. This is
not a best-match scorer: "Acme Bank Software" is technology because
technology is declared before financial_services.
"""

from app.core.schemas_entities import IndustryClassification

DEFAULT_INDUSTRY = "technology"

# Minimum keyword hits in free-text context before it overrides the name match
CONTEXT_OVERRIDE_THRESHOLD = 2

INDUSTRY_TAXONOMY: dict[str, dict[str, list[str]]] = {
    "technology": {
        "subcategories": ["enterprise_software", "consumer_software", "infrastructure", "ai_ml", "data_analytics"],
        "keywords": ["tech", "software", "digital", "cloud", "platform", "app", "saas", "ai", "machine learning"],
    },
    "financial_services": {
        "subcategories": ["banking", "insurance", "investment_management", "fintech", "payments"],
        "keywords": ["bank", "financial", "investment", "insurance", "capital", "fund", "payment", "fintech"],
    },
    "healthcare": {
        "subcategories": ["pharma", "biotech", "medical_devices", "health_insurance", "hospitals"],
        "keywords": ["health", "medical", "pharma", "bio", "clinical", "therapeutic", "hospital", "care"],
    },
    "energy": {
        "subcategories": ["oil_gas", "renewable", "utilities", "nuclear", "coal"],
        "keywords": ["energy", "oil", "gas", "solar", "wind", "renewable", "power", "electric", "utility"],
    },
    "retail": {
        "subcategories": ["ecommerce", "brick_mortar", "luxury", "discount", "specialty"],
        "keywords": ["retail", "store", "shop", "commerce", "consumer", "brand", "fashion", "market"],
    },
}

BASE_CRISIS_INDICATORS = [
    "breach", "lawsuit", "scandal", "investigation", "recall",
    "bankruptcy", "layoffs", "protest", "boycott",
]

INDUSTRY_CRISIS_INDICATORS: dict[str, list[str]] = {
    "technology": ["data breach", "hack", "privacy violation", "antitrust"],
    "financial_services": ["fraud", "regulatory fine", "market manipulation", "insider trading"],
    "healthcare": ["FDA warning", "clinical trial failure", "patient death", "contamination"],
    "energy": ["spill", "explosion", "environmental violation", "safety incident"],
    "retail": ["supply chain", "product recall", "labor dispute", "store closures"],
}


def _classify_name(name: str) -> IndustryClassification:
    tokens = name.lower().split()

    for industry, data in INDUSTRY_TAXONOMY.items():
        for token in tokens:
            if any(keyword in token for keyword in data["keywords"]):
                return IndustryClassification(
                    primary=industry,
                    secondary=[],
                    subcategories=data["subcategories"][:2],
                )

    return IndustryClassification(primary=DEFAULT_INDUSTRY, secondary=[], subcategories=[])


def classify_industry(name: str, context: str | None = None) -> IndustryClassification:
    """
    Classify an organization into the industry taxonomy.

    Args:
        name: Organization name
        context: Optional free text about the organization. An industry with
            more than two keyword hits in the context overrides the name match.

    Returns:
        Industry classification
    """
    classification = _classify_name(name)

    if context:
        context_lower = context.lower()
        for industry, data in INDUSTRY_TAXONOMY.items():
            match_count = sum(1 for keyword in data["keywords"] if keyword in context_lower)
            if match_count > CONTEXT_OVERRIDE_THRESHOLD:
                classification = IndustryClassification(
                    primary=industry,
                    secondary=[],
                    subcategories=list(data["subcategories"]),
                )
                break

    return classification


def define_crisis_indicators(industry: str) -> list[str]:
    """Base crisis terms plus the industry's own. Unknown industries get the base set."""
    return [*BASE_CRISIS_INDICATORS, *INDUSTRY_CRISIS_INDICATORS.get(industry, [])]
