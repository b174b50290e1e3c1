"""
Service Models Package

This package contains the Pydantic models used throughout the service:
domain records, email intake input and response bodies.
"""

from .input import EmailData
from .output import (
    ChangePasswordOutput,
    ConfirmOutput,
    DeleteSubscriptionOutput,
    EmailProcessingOutput,
    LoginOutput,
    ProfileOutput,
    ProfileUser,
    ResendCodeOutput,
    SignupOutput,
    UpdateProfileOutput,
    VerifiedEmailOutput,
    VerifiedUser,
)
from .subscription import PriceChange, Subscription
from .user import User

__all__ = [
    # Domain models
    "User",
    "Subscription",
    "PriceChange",
    # Input models
    "EmailData",
    # Output models
    "SignupOutput",
    "ConfirmOutput",
    "VerifiedUser",
    "VerifiedEmailOutput",
    "ResendCodeOutput",
    "LoginOutput",
    "ChangePasswordOutput",
    "ProfileOutput",
    "ProfileUser",
    "UpdateProfileOutput",
    "DeleteSubscriptionOutput",
    "EmailProcessingOutput",
]
