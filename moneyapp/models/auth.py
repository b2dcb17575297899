"""
Authentication and Onboarding Models

Request bodies sent to ``/api/auth/*`` and the records decoded from the
responses. Field names are snake_case, which is also the wire format.

CRITICAL: Passwords and tokens must never reach a log line. ``__repr__``
of the request models hides them.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# REQUESTS
# =============================================================================

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, repr=False)


class RegisterRequest(BaseModel):
    """New-account payload."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=8, repr=False)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    accepted_terms: bool


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, repr=False)


class DeviceTokenRequest(BaseModel):
    device_token: str = Field(..., min_length=1)


# =============================================================================
# RESPONSES
# =============================================================================

class User(BaseModel):
    """The signed-in user."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    email: str
    first_name: str
    last_name: str
    is_active: bool = True
    created_at: datetime
    device_token: Optional[str] = None
    has_completed_onboarding: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()

    @property
    def needs_onboarding(self) -> bool:
        return not self.has_completed_onboarding


class AuthResult(BaseModel):
    """
    A successful login/registration.

    The tokens are persisted by the auth service before this is
    returned to the caller.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(..., min_length=1, repr=False)
    refresh_token: Optional[str] = Field(default=None, repr=False)
    user: User
    is_first_login: bool = False


class RegistrationResponse(BaseModel):
    """
    Body returned by ``/api/auth/register``.

    Some backend versions return a full session, others only the created
    user. When no access token is present the auth service logs in with
    the new credentials to obtain one.
    """
    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = Field(default=None, repr=False)
    refresh_token: Optional[str] = Field(default=None, repr=False)
    user: Optional[User] = None
    is_first_login: bool = True

    def to_auth_result(self) -> Optional[AuthResult]:
        if not self.access_token or self.user is None:
            return None
        return AuthResult(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            user=self.user,
            is_first_login=self.is_first_login,
        )


class SuccessResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = ""
    success: bool = True


# =============================================================================
# ONBOARDING
# =============================================================================

class OnboardingCompletion(BaseModel):
    user_id: int
    completed_steps: list[str] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=datetime.utcnow)


class OnboardingStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    is_completed: bool = False


ONBOARDING_STEPS: tuple[OnboardingStep, ...] = (
    OnboardingStep(
        id="welcome",
        title="Welcome to Money App",
        description="Take control of your finances with smart budgeting and expense tracking.",
    ),
    OnboardingStep(
        id="connect_accounts",
        title="Connect Your Accounts",
        description="Securely link your bank accounts to automatically track your spending.",
    ),
    OnboardingStep(
        id="set_goals",
        title="Set Financial Goals",
        description="Create savings goals and budgets to reach your financial targets.",
    ),
    OnboardingStep(
        id="notifications",
        title="Stay Informed",
        description="Get notified about spending patterns and important account activity.",
    ),
)
