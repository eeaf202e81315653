from enum import Enum


class UserTypeEnum(str, Enum):
    FOUNDER = "FOUNDER"
    INVESTOR = "INVESTOR"


class StartupStageEnum(str, Enum):
    IDEA = "IDEA"
    MVP = "MVP"
    LAUNCHED = "LAUNCHED"
    GROWTH = "GROWTH"
    SCALING = "SCALING"


class FundingStageEnum(str, Enum):
    PRE_SEED = "PRE_SEED"
    SEED = "SEED"
    SERIES_A = "SERIES_A"
    SERIES_B = "SERIES_B"
    SERIES_C_PLUS = "SERIES_C_PLUS"
    BOOTSTRAPPED = "BOOTSTRAPPED"


class AppliedBeforeEnum(str, Enum):
    first_time = "first_time"
    same_idea = "same_idea"
    different_idea = "different_idea"


class InvitationStatusEnum(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class OnboardingVariantEnum(str, Enum):
    application = "application"
    dashboard = "dashboard"


class OnboardingSubmissionStatusEnum(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
