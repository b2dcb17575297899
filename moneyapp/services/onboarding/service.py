"""
Onboarding Service

Post-signup steps: registering the device for notifications and telling
the backend the onboarding flow is done.
"""

from typing import Iterable

from moneyapp.models.auth import (
    ONBOARDING_STEPS,
    DeviceTokenRequest,
    OnboardingCompletion,
    OnboardingStep,
    SuccessResponse,
)
from moneyapp.services.api import AuthEndpoints, UserEndpoints
from moneyapp.services.base import DomainService


class OnboardingService(DomainService):
    """Onboarding operations for the signed-in user."""

    async def update_device_token(self, device_token: str) -> SuccessResponse:
        """Register this device's push-notification token."""
        return await self._request(
            AuthEndpoints.DEVICE_TOKEN,
            SuccessResponse,
            body=DeviceTokenRequest(device_token=device_token),
        )

    async def complete_onboarding(self, completion: OnboardingCompletion) -> SuccessResponse:
        response: SuccessResponse = await self._request(
            UserEndpoints.COMPLETE_ONBOARDING, SuccessResponse, body=completion
        )
        self._activity.log_info(
            "onboarding_completed",
            category="Onboarding",
            user_id=completion.user_id,
            completed_steps=list(completion.completed_steps),
        )
        return response

    def steps(self, completed: Iterable[str] = ()) -> list[OnboardingStep]:
        """
        The fixed onboarding steps, in order.

        Args:
            completed: Ids of steps the user has already finished
        """
        done = set(completed)
        return [
            step.model_copy(update={"is_completed": step.id in done})
            for step in ONBOARDING_STEPS
        ]
