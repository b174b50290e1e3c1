"""
Output models for API responses using Pydantic.

Authentication responses keep the camelCase keys the web client reads
(``emailVerified``, ``idToken``...). Render them with
``model_dump(by_alias=True)``.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelCaseOutput(BaseModel):
    """Base for responses serialized with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


class SignupOutput(BaseModel):
    """Response model for a successful signup."""

    id: Annotated[str, Field(description='Record store identifier of the new user')]

    email: Annotated[str, Field(
        description='Registered email address',
        examples=['ann@example.com']
    )]

    name: Annotated[str, Field(
        description='Display name',
        examples=['Ann']
    )]

    message: Annotated[str, Field(
        description='Next step for the caller',
        examples=['User created successfully. Please check your email for verification code.']
    )]


class VerifiedUser(CamelCaseOutput):
    id: Optional[str] = None
    email: str
    name: Optional[str] = None
    email_verified: Annotated[bool, Field(serialization_alias='emailVerified')] = True


class ConfirmOutput(BaseModel):
    """Response model for a successful email confirmation."""

    message: str
    user: VerifiedUser


class VerifiedEmailOutput(CamelCaseOutput):
    """Confirmation response when the users table has no record for the email."""

    message: str
    email: str
    email_verified: Annotated[bool, Field(serialization_alias='emailVerified')] = True


class ResendCodeOutput(BaseModel):
    message: str


class LoginOutput(CamelCaseOutput):
    """Response model for a successful login."""

    id: str
    email: str
    name: Optional[str] = None
    email_verified: Annotated[bool, Field(serialization_alias='emailVerified')]

    token: Annotated[str, Field(description='Cognito access token')]

    id_token: Annotated[str, Field(
        serialization_alias='idToken',
        description='Cognito id token, sent as the API authorizer credential'
    )]

    refresh_token: Annotated[Optional[str], Field(
        serialization_alias='refreshToken',
        description='Cognito refresh token'
    )] = None


class ChangePasswordOutput(BaseModel):
    message: str
    success: bool = True


class ProfileOutput(CamelCaseOutput):
    """Response model for the caller's own profile."""

    id: str
    email: str
    name: Optional[str] = None
    created_at: Annotated[Optional[str], Field(serialization_alias='createdAt')] = None


class ProfileUser(CamelCaseOutput):
    id: str
    email: str
    name: str
    updated_at: Annotated[Optional[str], Field(serialization_alias='updatedAt')] = None


class UpdateProfileOutput(BaseModel):
    message: str
    user: ProfileUser


class DeleteSubscriptionOutput(BaseModel):
    message: Annotated[str, Field(examples=['Subscription deleted successfully'])]
    id: Annotated[str, Field(description='Identifier of the deleted subscription')]


class EmailProcessingOutput(BaseModel):
    message: Annotated[str, Field(examples=['Email processing completed'])]
