"""Состояния анкеты."""
from .user_states import OnboardingState, ONBOARDING_ORDER, next_state

__all__ = [
    "OnboardingState",
    "ONBOARDING_ORDER",
    "next_state",
]
