"""Onboarding service package."""

from moneyapp.services.onboarding.service import OnboardingService

__all__ = ["OnboardingService"]
