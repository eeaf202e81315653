from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from catalys.db.enums import OnboardingVariantEnum

PLACEHOLDER_NAME = "Your Startup Name"
PLACEHOLDER_SHORT_DESCRIPTION = "A short description of your startup"
PLACEHOLDER_CATEGORY = "Category"

_APPLICATION_SECTIONS = (
    ("whatMaking", "What we're making"),
    ("techStack", "Tech stack"),
    ("whyThisIdea", "Why this idea"),
    ("monetization", "Monetization"),
    ("competitors", "Competitors"),
    ("howFarAlong", "Progress"),
)
_DASHBOARD_SECTIONS = (
    ("description", "About"),
    ("problemSolving", "Problem"),
    ("targetMarket", "Target market"),
    ("traction", "Traction"),
)
_FUNDING_STAGE_LABELS = {
    "PRE_SEED": "Pre-seed",
    "SEED": "Seed",
    "SERIES_A": "Series A",
    "SERIES_B": "Series B",
    "SERIES_C_PLUS": "Series C+",
    "BOOTSTRAPPED": "Bootstrapped",
}


class PreviewSection(BaseModel):
    label: str
    text: str


class StartupPreview(BaseModel):
    name: str
    short_description: str
    category: str
    website: Optional[str] = None
    location: Optional[str] = None
    badges: list[str] = Field(default_factory=list)
    sections: list[PreviewSection] = Field(default_factory=list)
    co_founder_count: int = 0
    is_empty: bool = True


def _text(values: dict[str, Any], key: str) -> str:
    value = values.get(key)
    return value.strip() if isinstance(value, str) else ""


def _co_founder_count(values: dict[str, Any]) -> int:
    co_founders = values.get("coFounders")
    if not isinstance(co_founders, list):
        return 0
    return sum(1 for entry in co_founders if isinstance(entry, dict))


def website_label(url: str) -> Optional[str]:
    """Hostname of ``url`` for display, or the raw text when it does not parse as a URL."""
    if not url:
        return None
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return url
    return hostname or url


def build_preview(variant: OnboardingVariantEnum, values: dict[str, Any]) -> StartupPreview:
    if variant == OnboardingVariantEnum.application:
        name = _text(values, "companyName")
        category = _text(values, "category")
        website = _text(values, "companyUrl")
        location = _text(values, "futureLocation")
        section_keys = _APPLICATION_SECTIONS
    else:
        name = _text(values, "name")
        category = _text(values, "industry")
        website = _text(values, "website")
        location = _text(values, "location")
        section_keys = _DASHBOARD_SECTIONS
    short_description = _text(values, "shortDescription")

    badges = []
    if values.get("peopleUsing") == "yes":
        badges.append("People using product")
    if values.get("hasRevenue") == "yes":
        badges.append("Has revenue")
    if values.get("currentlyFundraising") == "yes":
        badges.append("Currently fundraising")
    if variant == OnboardingVariantEnum.dashboard:
        stage = values.get("stage")
        if stage:
            badges.append(f"Stage: {str(stage).title()}")
        funding_stage = _FUNDING_STAGE_LABELS.get(values.get("fundingStage") or "")
        if funding_stage:
            badges.append(funding_stage)

    sections = [
        PreviewSection(label=label, text=_text(values, key))
        for key, label in section_keys
        if _text(values, key)
    ]

    return StartupPreview(
        name=name or PLACEHOLDER_NAME,
        short_description=short_description or PLACEHOLDER_SHORT_DESCRIPTION,
        category=category or PLACEHOLDER_CATEGORY,
        website=website_label(website),
        location=location or None,
        badges=badges,
        sections=sections,
        co_founder_count=_co_founder_count(values),
        is_empty=not name and not short_description,
    )
