"""Form definitions for the two onboarding wizard variants.

Each variant is an ordered list of steps. A step owns a pydantic model holding
exactly the fields validated when the founder leaves that step, plus any
conditional fields that only count while their trigger answer is selected.
"""
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Literal, Optional

from pydantic import AfterValidator, AnyHttpUrl, BaseModel, BeforeValidator, EmailStr, TypeAdapter, ValidationError

from catalys.db.enums import OnboardingVariantEnum
from catalys.db.repositories.co_founders import CoFounderEntry

_URL_ADAPTER = TypeAdapter(AnyHttpUrl)
_EMAIL_ADAPTER = TypeAdapter(EmailStr)

APPLICATION_CATEGORIES = (
    "B2B",
    "Education",
    "Fintech",
    "Healthcare",
    "Consumer",
    "Enterprise",
    "Developer Tools",
    "Climate",
    "Biotech",
    "Hardware",
    "Government",
    "Industrials",
    "Real Estate and Construction",
    "Other",
)

DASHBOARD_INDUSTRIES = (
    "Artificial Intelligence",
    "B2B Software",
    "Biotech",
    "Consumer",
    "Developer Tools",
    "Education",
    "Enterprise",
    "Fintech",
    "Healthcare",
    "Infrastructure",
    "Marketplace",
    "Real Estate",
    "SaaS",
    "Other",
)


def _coerce_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _min_length(length: int, message: str) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) < length:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def _max_length(length: int, message: str) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) > length:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def _optional_url(value: str) -> str:
    if not value:
        return value
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError as exc:
        raise ValueError("Please enter a valid URL") from exc
    return value


def _email(value: str) -> str:
    try:
        _EMAIL_ADAPTER.validate_python(value)
    except ValidationError as exc:
        raise ValueError("Please enter a valid email") from exc
    return value


def _equity_bounds(value: float) -> float:
    if value < 0:
        raise ValueError("Equity must be at least 0%")
    if value > 100:
        raise ValueError("Equity cannot exceed 100%")
    return value


def _optional_name(value: Optional[str]) -> Optional[str]:
    # Blank names are allowed; a typed one must be a real name.
    if value is not None and len(value.strip()) < 2:
        raise ValueError("Name must be at least 2 characters")
    return value


def _team_size(value: Optional[int]) -> Optional[int]:
    if value is not None and value < 1:
        raise ValueError("Team size must be at least 1")
    return value


def required_text(length: int, message: str):
    return Annotated[str, BeforeValidator(_coerce_text), _min_length(length, message)]


OptionalText = Annotated[Optional[str], BeforeValidator(_coerce_text)]
OptionalUrl = Annotated[str, BeforeValidator(_coerce_text), AfterValidator(_optional_url)]
YesNo = Literal["yes", "no"]


@dataclass(frozen=True)
class ConditionalField:
    """A field shown, and required, only while ``visible_when`` holds for the form values."""

    name: str
    visible_when: Callable[[dict[str, Any]], bool]
    message: str

    def is_visible(self, values: dict[str, Any]) -> bool:
        return self.visible_when(values)


@dataclass(frozen=True)
class WizardStep:
    id: int
    title: str
    description: str
    form: type[BaseModel]
    conditional_fields: tuple[ConditionalField, ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.form.model_fields)


@dataclass(frozen=True)
class StartupSubmission:
    """What a completed form contributes to the startup record and the invitations."""

    name: str
    fields: dict[str, Any]
    co_founders: list[CoFounderEntry] = field(default_factory=list)


@dataclass(frozen=True)
class OnboardingForm:
    variant: OnboardingVariantEnum
    steps: tuple[WizardStep, ...]
    defaults: dict[str, Any]
    to_submission: Callable[[dict[str, Any]], StartupSubmission]
    # Client-side route transition is not enough after joining a new organization.
    full_page_reload: bool = False

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def step(self, step_id: int) -> WizardStep:
        return self.steps[step_id - 1]

    def initial_values(self) -> dict[str, Any]:
        return {key: (list(value) if isinstance(value, list) else value) for key, value in self.defaults.items()}


# Application variant: Startup, Idea, Progress, Equity.


class StartupStepForm(BaseModel):
    companyName: required_text(2, "Startup name is required")
    shortDescription: Annotated[
        str,
        BeforeValidator(_coerce_text),
        _min_length(1, "Description is required"),
        _max_length(50, "Must be 50 characters or less"),
    ]
    whatMaking: required_text(20, "Please describe what you're making")
    futureLocation: required_text(2, "Please enter where startup would be based")
    locationExplanation: required_text(10, "Please explain your location decision")


class IdeaStepForm(BaseModel):
    whyThisIdea: required_text(20, "Please explain why you picked this idea")
    customerNeed: required_text(20, "Please explain how you know people need this")
    competitors: required_text(10, "Please list your competitors")
    monetization: required_text(20, "Please explain how you'll make money")
    category: required_text(1, "Please select a category")


class ProgressStepForm(BaseModel):
    companyUrl: OptionalUrl = ""
    demoVideo: OptionalUrl = ""
    howFarAlong: required_text(20, "Please describe your progress")
    workingTime: required_text(10, "Please describe working time")
    techStack: required_text(10, "Please list your tech stack")
    peopleUsing: YesNo
    versionTimeline: OptionalText = None
    hasRevenue: YesNo
    appliedBefore: Literal["same_idea", "different_idea", "first_time"]
    previousApplicationNotes: OptionalText = None
    incubatorInfo: OptionalText = None


class EquityStepForm(BaseModel):
    hasLegalEntity: YesNo
    legalEntities: OptionalText = None
    equityBreakdown: OptionalText = None
    investmentTaken: YesNo
    currentlyFundraising: YesNo


def _yes(value: Any) -> bool:
    return value == "yes"


def _optional(value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
    return value or None


def _application_submission(values: dict[str, Any]) -> StartupSubmission:
    applied_before = values.get("appliedBefore") or "first_time"
    return StartupSubmission(
        name=values["companyName"].strip(),
        fields={
            "short_description": values["shortDescription"].strip(),
            "description": values["whatMaking"].strip(),
            "website": _optional(values.get("companyUrl")),
            "demo_video": _optional(values.get("demoVideo")),
            "future_location": values["futureLocation"].strip(),
            "location_explanation": values["locationExplanation"].strip(),
            "how_far_along": values["howFarAlong"].strip(),
            "working_time": values["workingTime"].strip(),
            "tech_stack": values["techStack"].strip(),
            "people_using": _yes(values.get("peopleUsing")),
            "version_timeline": (
                _optional(values.get("versionTimeline")) if values.get("peopleUsing") == "no" else None
            ),
            "has_revenue": _yes(values.get("hasRevenue")),
            "applied_before": applied_before,
            "previous_application_notes": (
                _optional(values.get("previousApplicationNotes")) if applied_before != "first_time" else None
            ),
            "incubator_info": _optional(values.get("incubatorInfo")),
            "why_this_idea": values["whyThisIdea"].strip(),
            "customer_need": values["customerNeed"].strip(),
            "competitors": values["competitors"].strip(),
            "monetization": values["monetization"].strip(),
            "category": values["category"].strip(),
            "industry": values["category"].strip(),
            "has_legal_entity": _yes(values.get("hasLegalEntity")),
            "legal_entities": (
                _optional(values.get("legalEntities")) if values.get("hasLegalEntity") == "yes" else None
            ),
            "equity_breakdown": _optional(values.get("equityBreakdown")),
            "investment_taken": _yes(values.get("investmentTaken")),
            "currently_fundraising": _yes(values.get("currentlyFundraising")),
        },
    )


APPLICATION_FORM = OnboardingForm(
    variant=OnboardingVariantEnum.application,
    steps=(
        WizardStep(1, "Startup", "Startup information", StartupStepForm),
        WizardStep(2, "Idea", "Vision & strategy", IdeaStepForm),
        WizardStep(
            3,
            "Progress",
            "Development & traction",
            ProgressStepForm,
            conditional_fields=(
                ConditionalField(
                    "versionTimeline",
                    lambda values: values.get("peopleUsing") == "no",
                    "Please tell us when you expect to have a version people can use",
                ),
                ConditionalField(
                    "previousApplicationNotes",
                    lambda values: values.get("appliedBefore", "first_time") != "first_time",
                    "Please tell us about your previous application",
                ),
            ),
        ),
        WizardStep(
            4,
            "Equity",
            "Legal & funding",
            EquityStepForm,
            conditional_fields=(
                ConditionalField(
                    "legalEntities",
                    lambda values: values.get("hasLegalEntity") == "yes",
                    "Please list your legal entities",
                ),
            ),
        ),
    ),
    defaults={
        "companyName": "",
        "shortDescription": "",
        "companyUrl": "",
        "demoVideo": "",
        "whatMaking": "",
        "futureLocation": "",
        "locationExplanation": "",
        "howFarAlong": "",
        "workingTime": "",
        "techStack": "",
        "peopleUsing": "no",
        "versionTimeline": "",
        "hasRevenue": "no",
        "appliedBefore": "first_time",
        "previousApplicationNotes": "",
        "incubatorInfo": "",
        "whyThisIdea": "",
        "customerNeed": "",
        "competitors": "",
        "monetization": "",
        "category": "",
        "hasLegalEntity": "no",
        "legalEntities": "",
        "equityBreakdown": "",
        "investmentTaken": "no",
        "currentlyFundraising": "no",
    },
    to_submission=_application_submission,
    full_page_reload=True,
)


# Dashboard variant: Basic Info, Details, Traction, Team.


class CoFounderForm(BaseModel):
    name: Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_optional_name)] = None
    email: Annotated[str, BeforeValidator(_coerce_text), AfterValidator(_email)]
    role: required_text(2, "Role is required")
    equityPercentage: Annotated[float, AfterValidator(_equity_bounds)]


class BasicInfoStepForm(BaseModel):
    name: required_text(2, "Startup name must be at least 2 characters")
    shortDescription: Annotated[
        str,
        BeforeValidator(_coerce_text),
        _min_length(10, "Description must be at least 10 characters"),
        _max_length(100, "Keep it under 100 characters"),
    ]
    industry: required_text(1, "Please select an industry")
    location: OptionalText = None
    website: OptionalUrl = ""


class DetailsStepForm(BaseModel):
    description: required_text(50, "Please provide a detailed description (at least 50 characters)")
    problemSolving: required_text(20, "Please describe the problem you're solving")
    targetMarket: required_text(20, "Please describe your target market")
    stage: Literal["IDEA", "MVP", "LAUNCHED", "GROWTH", "SCALING"]
    foundedDate: OptionalText = None


class TractionStepForm(BaseModel):
    traction: OptionalText = None
    fundingStage: Annotated[
        Optional[Literal["PRE_SEED", "SEED", "SERIES_A", "SERIES_B", "SERIES_C_PLUS", "BOOTSTRAPPED"]],
        BeforeValidator(_blank_to_none),
    ] = None
    teamSize: Annotated[Optional[int], BeforeValidator(_blank_to_none), AfterValidator(_team_size)] = None


class TeamStepForm(BaseModel):
    coFounders: list[CoFounderForm] = []


def _dashboard_submission(values: dict[str, Any]) -> StartupSubmission:
    team_size = values.get("teamSize")
    co_founders = [
        CoFounderEntry(
            name=_optional(entry.get("name")),
            email=entry["email"].strip(),
            role=entry["role"].strip(),
            equity_percentage=float(entry.get("equityPercentage") or 0),
        )
        for entry in values.get("coFounders") or []
    ]
    return StartupSubmission(
        name=values["name"].strip(),
        fields={
            "short_description": values["shortDescription"].strip(),
            "description": values["description"].strip(),
            "website": _optional(values.get("website")),
            "industry": values["industry"].strip(),
            "stage": values.get("stage") or "IDEA",
            "founded_date": _optional(values.get("foundedDate")),
            "location": _optional(values.get("location")),
            "problem_solving": values["problemSolving"].strip(),
            "target_market": values["targetMarket"].strip(),
            "traction": _optional(values.get("traction")),
            "funding_stage": values.get("fundingStage") or None,
            "team_size": int(team_size) if team_size not in (None, "") else None,
        },
        co_founders=co_founders,
    )


DASHBOARD_FORM = OnboardingForm(
    variant=OnboardingVariantEnum.dashboard,
    steps=(
        WizardStep(1, "Basic Info", "Tell us about your startup", BasicInfoStepForm),
        WizardStep(2, "Details", "Share your vision", DetailsStepForm),
        WizardStep(3, "Traction", "Current progress & funding", TractionStepForm),
        WizardStep(4, "Team", "Invite co-founders", TeamStepForm),
    ),
    defaults={
        "name": "",
        "shortDescription": "",
        "industry": "",
        "location": "",
        "website": "",
        "description": "",
        "problemSolving": "",
        "targetMarket": "",
        "stage": "IDEA",
        "foundedDate": "",
        "traction": "",
        "teamSize": 1,
        "coFounders": [],
    },
    to_submission=_dashboard_submission,
)

BLANK_CO_FOUNDER = {"name": "", "email": "", "role": "", "equityPercentage": 0}

FORMS = {
    OnboardingVariantEnum.application: APPLICATION_FORM,
    OnboardingVariantEnum.dashboard: DASHBOARD_FORM,
}


def get_form(variant: OnboardingVariantEnum | str) -> OnboardingForm:
    return FORMS[OnboardingVariantEnum(variant)]
