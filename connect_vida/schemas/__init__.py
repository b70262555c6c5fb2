from .church import (
    ChurchRegisterRequest,
    ChurchUpdate,
    ChildChurchCreate,
    MasterChurchCreate,
    SubscriptionUpdate,
    PlanCreate,
    PlanUpdate
)
from .payment import PaymentRecordCreate, PaymentRecordUpdate, PixCustomer, PixChargeRequest
from .member import (
    MemberCreate,
    MemberUpdate,
    MemberSelfUpdate,
    MemberJoinRequest,
    RoleUpdate,
    PermissionsUpdate
)
from .finance import (
    TransactionCreate,
    TransactionUpdate,
    TransactionStatusUpdate,
    BudgetCreate,
    BudgetUpdate,
    ContributionCreate
)
from .event import EventCreate, EventUpdate, RegistrationToggle, AttendanceUpdate
from .devotional import DevotionalCreate, DevotionalUpdate, DevotionalStatusUpdate, CommentCreate
from .ministry import MinistryCreate, MinistryUpdate, VolunteerAdd
from .journey import (
    TrackCreate,
    TrackUpdate,
    StageCreate,
    StageUpdate,
    QuizQuestion,
    StepCreate,
    StepUpdate,
    OrderUpdate,
    QuizSubmission,
    VocationalSubmission
)

__all__ = [
    "MinistryCreate",
    "MinistryUpdate",
    "VolunteerAdd",
    "ChurchRegisterRequest",
    "ChurchUpdate",
    "ChildChurchCreate",
    "MasterChurchCreate",
    "SubscriptionUpdate",
    "PlanCreate",
    "PlanUpdate",
    "PaymentRecordCreate",
    "PaymentRecordUpdate",
    "PixCustomer",
    "PixChargeRequest",
    "MemberCreate",
    "MemberUpdate",
    "MemberSelfUpdate",
    "MemberJoinRequest",
    "RoleUpdate",
    "PermissionsUpdate",
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionStatusUpdate",
    "BudgetCreate",
    "BudgetUpdate",
    "ContributionCreate",
    "EventCreate",
    "EventUpdate",
    "RegistrationToggle",
    "AttendanceUpdate",
    "DevotionalCreate",
    "DevotionalUpdate",
    "DevotionalStatusUpdate",
    "CommentCreate",
    "TrackCreate",
    "TrackUpdate",
    "StageCreate",
    "StageUpdate",
    "QuizQuestion",
    "StepCreate",
    "StepUpdate",
    "OrderUpdate",
    "QuizSubmission",
    "VocationalSubmission"
]
