import pytest

from catalys.db.enums import OnboardingVariantEnum
from catalys.onboarding.forms import APPLICATION_FORM, DASHBOARD_FORM, get_form
from catalys.onboarding.wizard import OnboardingWizard


def test_initial_state():
    wizard = OnboardingWizard(DASHBOARD_FORM)

    assert wizard.current_step == 1
    assert wizard.is_first_step
    assert wizard.values["stage"] == "IDEA"
    assert wizard.values["coFounders"] == []
    assert wizard.errors == {}


def test_get_form_accepts_variant_names():
    assert get_form("application") is APPLICATION_FORM
    assert get_form(OnboardingVariantEnum.dashboard) is DASHBOARD_FORM
    assert APPLICATION_FORM.step_count == DASHBOARD_FORM.step_count == 4


def test_next_step_validates_only_current_step():
    wizard = OnboardingWizard(DASHBOARD_FORM)

    assert wizard.next_step() is False
    assert wizard.current_step == 1
    assert wizard.errors["name"] == "Startup name must be at least 2 characters"
    assert wizard.errors["shortDescription"] == "Description must be at least 10 characters"
    assert wizard.errors["industry"] == "Please select an industry"
    assert set(wizard.errors) <= set(DASHBOARD_FORM.step(1).fields)


def test_next_step_advances_when_step_is_valid(dashboard_values):
    wizard = OnboardingWizard(DASHBOARD_FORM)
    wizard.update_values({key: dashboard_values[key] for key in ("name", "shortDescription", "industry")})

    assert wizard.next_step() is True
    assert wizard.current_step == 2
    assert wizard.errors == {}


def test_next_step_never_passes_last_step(dashboard_values):
    wizard = OnboardingWizard(DASHBOARD_FORM, current_step=4, values=dashboard_values)

    assert wizard.is_last_step
    assert wizard.next_step() is True
    assert wizard.current_step == 4


def test_prev_step_skips_validation_and_stops_at_first():
    wizard = OnboardingWizard(DASHBOARD_FORM, current_step=2)

    wizard.prev_step()
    assert wizard.current_step == 1
    assert wizard.errors == {}
    wizard.prev_step()
    assert wizard.current_step == 1


def test_update_values_clears_errors_of_changed_fields():
    wizard = OnboardingWizard(DASHBOARD_FORM)
    wizard.next_step()

    wizard.update_values({"name": "Acme"})
    assert "name" not in wizard.errors
    assert "industry" in wizard.errors


def test_short_description_length_limit(dashboard_values):
    wizard = OnboardingWizard(DASHBOARD_FORM, values=dashboard_values)
    wizard.update_values({"shortDescription": "x" * 101})

    assert wizard.next_step() is False
    assert wizard.errors == {"shortDescription": "Keep it under 100 characters"}


def test_invalid_website(dashboard_values):
    wizard = OnboardingWizard(DASHBOARD_FORM, values=dashboard_values)
    wizard.update_values({"website": "not a url"})

    assert wizard.next_step() is False
    assert wizard.errors == {"website": "Please enter a valid URL"}


def test_blank_website_is_allowed(dashboard_values):
    wizard = OnboardingWizard(DASHBOARD_FORM, values={**dashboard_values, "website": ""})
    assert wizard.next_step() is True


def test_version_timeline_required_only_without_users(application_values):
    wizard = OnboardingWizard(APPLICATION_FORM, current_step=3, values=application_values)
    assert "versionTimeline" not in wizard.visible_fields()
    assert wizard.validate_step() == {}

    wizard.update_values({"peopleUsing": "no"})
    assert "versionTimeline" in wizard.visible_fields()
    errors = wizard.validate_step()
    assert errors == {"versionTimeline": "Please tell us when you expect to have a version people can use"}

    wizard.update_values({"versionTimeline": "Beta in two months"})
    assert wizard.validate_step() == {}


def test_previous_application_notes_required_after_applying_before(application_values):
    wizard = OnboardingWizard(APPLICATION_FORM, current_step=3, values=application_values)
    wizard.update_values({"appliedBefore": "same_idea"})

    assert wizard.validate_step() == {"previousApplicationNotes": "Please tell us about your previous application"}


def test_legal_entities_required_with_legal_entity(application_values):
    wizard = OnboardingWizard(APPLICATION_FORM, current_step=4, values={**application_values, "legalEntities": ""})
    assert wizard.validate_step() == {"legalEntities": "Please list your legal entities"}

    wizard.update_values({"hasLegalEntity": "no"})
    assert wizard.validate_step() == {}


def test_validate_step_keeps_other_steps_errors():
    wizard = OnboardingWizard(APPLICATION_FORM)
    wizard.validate_step(1)
    wizard.validate_step(2)

    assert "companyName" in wizard.errors
    assert "whyThisIdea" in wizard.errors
    assert wizard.first_invalid_step() == 1


def test_validate_all(application_values, dashboard_values):
    assert OnboardingWizard(APPLICATION_FORM, values=application_values).validate_all() == {}
    assert OnboardingWizard(DASHBOARD_FORM, values=dashboard_values).validate_all() == {}

    wizard = OnboardingWizard(APPLICATION_FORM, values={**application_values, "monetization": "ads"})
    assert wizard.validate_all() == {"monetization": "Please explain how you'll make money"}
    assert wizard.first_invalid_step() == 2


def test_co_founder_list_add_and_remove():
    wizard = OnboardingWizard(DASHBOARD_FORM)
    wizard.add_co_founder()
    wizard.add_co_founder()

    assert wizard.values["coFounders"] == [
        {"name": "", "email": "", "role": "", "equityPercentage": 0},
        {"name": "", "email": "", "role": "", "equityPercentage": 0},
    ]
    wizard.remove_co_founder(0)
    assert len(wizard.values["coFounders"]) == 1

    with pytest.raises(IndexError):
        wizard.remove_co_founder(3)


def test_update_values_rejects_malformed_co_founder_list():
    wizard = OnboardingWizard(DASHBOARD_FORM)
    wizard.add_co_founder()

    for bad in (5, "ada@example.com", [1, 2]):
        with pytest.raises(ValueError, match="coFounders must be a list of objects"):
            wizard.update_values({"name": "Acme", "coFounders": bad})

    assert wizard.values["name"] == ""
    assert len(wizard.values["coFounders"]) == 1


def test_co_founder_list_recovers_from_stored_garbage():
    wizard = OnboardingWizard(DASHBOARD_FORM, values={"coFounders": 5})

    wizard.add_co_founder()
    assert len(wizard.values["coFounders"]) == 1


def test_co_founder_list_is_dashboard_only():
    with pytest.raises(ValueError):
        OnboardingWizard(APPLICATION_FORM).add_co_founder()


def test_co_founder_entries_validated_on_team_step(dashboard_values):
    co_founders = [
        {"name": "A", "email": "not-an-email", "role": "C", "equityPercentage": 150},
        {"name": "", "email": "grace@example.com", "role": "COO", "equityPercentage": 0},
    ]
    wizard = OnboardingWizard(DASHBOARD_FORM, current_step=4, values={**dashboard_values, "coFounders": co_founders})

    assert wizard.next_step() is False
    assert wizard.errors == {
        "coFounders.0.name": "Name must be at least 2 characters",
        "coFounders.0.email": "Please enter a valid email",
        "coFounders.0.role": "Role is required",
        "coFounders.0.equityPercentage": "Equity cannot exceed 100%",
    }

    wizard.remove_co_founder(0)
    assert wizard.errors == {}
    assert wizard.next_step() is True


def test_invalid_co_founders_do_not_block_earlier_steps(dashboard_values):
    values = {**dashboard_values, "coFounders": [{"name": "", "email": "bad", "role": "", "equityPercentage": 10}]}
    wizard = OnboardingWizard(DASHBOARD_FORM, values=values)

    assert wizard.next_step() is True
    assert wizard.next_step() is True
    assert wizard.next_step() is True
    assert wizard.current_step == 4
