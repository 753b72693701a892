"""Identity domain services and models."""

from .models import DEFAULT_PREFERENCES, UNSET, Challenge, Identity, ProfileUpdateInput
from .repository import IdentityRepository
from .service import ChallengeService, ProfileService

__all__ = [
    "Challenge",
    "ChallengeService",
    "DEFAULT_PREFERENCES",
    "Identity",
    "IdentityRepository",
    "ProfileService",
    "ProfileUpdateInput",
    "UNSET",
]
