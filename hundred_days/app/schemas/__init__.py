from .auth import LoginResponse, LogoutResponse, RefreshResponse, SessionInfo, SignupResponse
from .challenges import ChallengeCreate, ChallengeOut, ChallengeUpdate, StreakRefreshResponse
from .checkins import (
    CheckInCreate,
    CheckInOut,
    CheckInPage,
    CheckInResult,
    CheckInUpdate,
    PendingCheckIn,
    PendingCheckInBatch,
    PendingCheckInOutcome,
    PendingCheckInSyncResponse,
    TodayStatus,
)
from .milestones import MilestoneEvaluation, MilestoneOut, SeenMilestones
from .progress import BadgeOut, ChallengeProgressOut, HeatmapDay, ProgressOverview, UserStats
from .quotes import QuoteOut
from .user import (
    PasswordChange,
    PasswordChangeResponse,
    ProfileUpdate,
    ProStatusUpdate,
    UserCreate,
    UserLogin,
    UserPublic,
    UsernameAvailability,
    UsernameUpdate,
)

__all__ = [
    "LoginResponse",
    "LogoutResponse",
    "RefreshResponse",
    "SessionInfo",
    "SignupResponse",
    "ChallengeCreate",
    "ChallengeOut",
    "ChallengeUpdate",
    "StreakRefreshResponse",
    "CheckInCreate",
    "CheckInOut",
    "CheckInPage",
    "CheckInResult",
    "CheckInUpdate",
    "PendingCheckIn",
    "PendingCheckInBatch",
    "PendingCheckInOutcome",
    "PendingCheckInSyncResponse",
    "TodayStatus",
    "MilestoneEvaluation",
    "MilestoneOut",
    "SeenMilestones",
    "BadgeOut",
    "ChallengeProgressOut",
    "HeatmapDay",
    "ProgressOverview",
    "UserStats",
    "QuoteOut",
    "PasswordChange",
    "PasswordChangeResponse",
    "ProfileUpdate",
    "ProStatusUpdate",
    "UserCreate",
    "UserLogin",
    "UserPublic",
    "UsernameAvailability",
    "UsernameUpdate",
]
