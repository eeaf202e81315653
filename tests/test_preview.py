from catalys.db.enums import OnboardingVariantEnum
from catalys.onboarding.forms import DASHBOARD_FORM
from catalys.onboarding.preview import (
    PLACEHOLDER_CATEGORY,
    PLACEHOLDER_NAME,
    PLACEHOLDER_SHORT_DESCRIPTION,
    build_preview,
    website_label,
)


def test_empty_values_use_placeholders():
    preview = build_preview(OnboardingVariantEnum.dashboard, DASHBOARD_FORM.initial_values())

    assert preview.is_empty is True
    assert preview.name == PLACEHOLDER_NAME
    assert preview.short_description == PLACEHOLDER_SHORT_DESCRIPTION
    assert preview.category == PLACEHOLDER_CATEGORY
    assert preview.website is None
    assert preview.sections == []


def test_dashboard_preview(dashboard_values):
    preview = build_preview(OnboardingVariantEnum.dashboard, dashboard_values)

    assert preview.is_empty is False
    assert preview.name == "Acme! Inc."
    assert preview.category == "SaaS"
    assert preview.website == "acme.example.com"
    assert preview.location == "Berlin"
    assert preview.badges == ["Stage: Mvp", "Pre-seed"]
    assert [section.label for section in preview.sections] == ["About", "Problem", "Target market", "Traction"]
    assert preview.co_founder_count == 1


def test_application_preview_badges(application_values):
    preview = build_preview(OnboardingVariantEnum.application, application_values)

    assert preview.category == "Fintech"
    assert preview.badges == ["People using product", "Has revenue", "Currently fundraising"]
    assert preview.sections[0].label == "What we're making"


def test_name_alone_makes_preview_non_empty():
    preview = build_preview(OnboardingVariantEnum.application, {"companyName": "Acme"})
    assert preview.is_empty is False
    assert preview.short_description == PLACEHOLDER_SHORT_DESCRIPTION


def test_website_label():
    assert website_label("https://www.acme.example.com/about") == "www.acme.example.com"
    assert website_label("acme") == "acme"
    assert website_label("") is None


def test_co_founder_count_ignores_malformed_values():
    assert build_preview(OnboardingVariantEnum.dashboard, {"coFounders": 5}).co_founder_count == 0
    assert build_preview(OnboardingVariantEnum.dashboard, {"coFounders": [{}, "x", None]}).co_founder_count == 1
