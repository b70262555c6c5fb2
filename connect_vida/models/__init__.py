from .subscription import SubscriptionPlan
from .church import Church, ChurchStatus, PaymentRecordStatus
from .member import Member, MemberRole, MemberStatus
from .finance import (
    FinancialTransaction,
    TransactionType,
    TransactionStatus,
    Budget,
    BudgetStatus,
    CONTRIBUTION_CATEGORIES,
    CONTRIBUTION_METHODS
)
from .event import Event, EventParticipant
from .devotional import Devotional, DevotionalLike, DevotionalComment, DevotionalStatus
from .journey import GrowthTrack, JourneyStage, JourneyStep, MemberProgress, StepType, ProgressStatus
from .vocational import VocationalTest
from .ministry import Ministry, MinistryVolunteer

__all__ = [
    "SubscriptionPlan",
    "Church",
    "ChurchStatus",
    "PaymentRecordStatus",
    "Member",
    "MemberRole",
    "MemberStatus",
    "FinancialTransaction",
    "TransactionType",
    "TransactionStatus",
    "Budget",
    "BudgetStatus",
    "CONTRIBUTION_CATEGORIES",
    "CONTRIBUTION_METHODS",
    "Event",
    "EventParticipant",
    "Devotional",
    "DevotionalLike",
    "DevotionalComment",
    "DevotionalStatus",
    "GrowthTrack",
    "JourneyStage",
    "JourneyStep",
    "MemberProgress",
    "StepType",
    "ProgressStatus",
    "VocationalTest",
    "Ministry",
    "MinistryVolunteer"
]
