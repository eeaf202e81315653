from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from catalys.onboarding.forms import BLANK_CO_FOUNDER, OnboardingForm, WizardStep
from catalys.onboarding.preview import StartupPreview, build_preview


def _error_key(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def _error_message(error: dict[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return str(error.get("msg") or "Invalid value")


def _belongs_to(key: str, field_name: str) -> bool:
    return key == field_name or key.startswith(f"{field_name}.")


class OnboardingWizard:
    """
    Step-by-step controller for an onboarding form.

    State is ``(current_step, values, errors)``. Leaving a step forward validates
    only that step's fields; going back never validates. The wizard never resets
    itself after a successful submission.
    """

    def __init__(
        self,
        form: OnboardingForm,
        *,
        current_step: int = 1,
        values: Optional[dict[str, Any]] = None,
        errors: Optional[dict[str, str]] = None,
    ) -> None:
        self.form = form
        self.current_step = min(max(current_step, 1), form.step_count)
        self.values = form.initial_values()
        if values:
            self.values.update(values)
        self.errors: dict[str, str] = dict(errors or {})

    @property
    def step(self) -> WizardStep:
        return self.form.step(self.current_step)

    @property
    def is_first_step(self) -> bool:
        return self.current_step == 1

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.form.step_count

    def update_values(self, changes: dict[str, Any]) -> None:
        """Merge ``changes`` into the values; raises ``ValueError`` for a malformed co-founder list."""
        if "coFounders" in changes:
            co_founders = changes["coFounders"]
            if not isinstance(co_founders, list) or not all(isinstance(entry, dict) for entry in co_founders):
                raise ValueError("coFounders must be a list of objects")
        for name, value in changes.items():
            self.values[name] = value
            self._clear_errors(name)

    def visible_fields(self, step: Optional[WizardStep] = None) -> tuple[str, ...]:
        step = step or self.step
        hidden = {
            conditional.name
            for conditional in step.conditional_fields
            if not conditional.is_visible(self.values)
        }
        return tuple(name for name in step.fields if name not in hidden)

    def validate_step(self, step_id: Optional[int] = None) -> dict[str, str]:
        """Validate one step's visible fields and replace that step's errors."""
        step = self.form.step(step_id or self.current_step)
        visible = self.visible_fields(step)
        payload = {name: self.values.get(name) for name in visible}

        errors: dict[str, str] = {}
        try:
            step.form.model_validate(payload)
        except ValidationError as exc:
            for error in exc.errors():
                key = _error_key(error["loc"])
                errors.setdefault(key, _error_message(error))

        for conditional in step.conditional_fields:
            if conditional.name not in visible or conditional.name in errors:
                continue
            value = self.values.get(conditional.name)
            if not isinstance(value, str) or not value.strip():
                errors[conditional.name] = conditional.message

        for name in step.fields:
            self._clear_errors(name)
        self.errors.update(errors)
        return errors

    def next_step(self) -> bool:
        """Advance when the current step is valid; returns whether it was valid."""
        if self.validate_step():
            return False
        if not self.is_last_step:
            self.current_step += 1
        return True

    def prev_step(self) -> None:
        if not self.is_first_step:
            self.current_step -= 1

    def validate_all(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        for step in self.form.steps:
            errors.update(self.validate_step(step.id))
        return errors

    def first_invalid_step(self) -> Optional[int]:
        for step in self.form.steps:
            if any(_belongs_to(key, name) for key in self.errors for name in step.fields):
                return step.id
        return None

    def add_co_founder(self) -> None:
        self._require_co_founder_list()
        co_founders = self._co_founders()
        co_founders.append(dict(BLANK_CO_FOUNDER))
        self.values["coFounders"] = co_founders

    def remove_co_founder(self, index: int) -> None:
        self._require_co_founder_list()
        co_founders = self._co_founders()
        if index < 0 or index >= len(co_founders):
            raise IndexError(f"No co-founder at position {index}")
        del co_founders[index]
        self.values["coFounders"] = co_founders
        # Entry errors are positional; they no longer line up after a removal.
        self._clear_errors("coFounders")

    def preview(self) -> StartupPreview:
        return build_preview(self.form.variant, self.values)

    def _require_co_founder_list(self) -> None:
        if "coFounders" not in self.form.defaults:
            raise ValueError(f"The {self.form.variant.value} form has no co-founder list")

    def _co_founders(self) -> list[dict[str, Any]]:
        co_founders = self.values.get("coFounders")
        return list(co_founders) if isinstance(co_founders, list) else []

    def _clear_errors(self, field_name: str) -> None:
        for key in [key for key in self.errors if _belongs_to(key, field_name)]:
            del self.errors[key]
