"""
User domain model.

The users table is keyed by email, the canonical join key with the identity
provider. The record store owns the profile fields; Cognito owns credentials
and the verification state, which is mirrored here as ``email_verified``.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class User(BaseModel):
    """User profile record."""

    id: Annotated[str, Field(
        description='Record store identifier of the user',
        examples=['7d0b7f9e-8a8e-4f0c-9a43-6a2c9f3f5a11']
    )]

    email: Annotated[str, Field(
        description='Email address, the users table partition key',
        examples=['ann@example.com']
    )]

    name: Annotated[Optional[str], Field(
        description='Display name',
        examples=['Ann']
    )] = None

    cognito_sub: Annotated[Optional[str], Field(
        description='Identity provider subject id'
    )] = None

    email_verified: Annotated[bool, Field(
        description='Whether the email address has been confirmed'
    )] = False

    created_at: Annotated[Optional[str], Field(
        description='ISO timestamp when the user was created'
    )] = None

    updated_at: Annotated[Optional[str], Field(
        description='ISO timestamp when the user was last updated'
    )] = None

    @classmethod
    def create(
        cls,
        email: str,
        name: str,
        cognito_sub: Optional[str] = None,
        email_verified: bool = False,
    ) -> 'User':
        """Create a new user record with generated id and timestamps."""
        now = datetime.now(timezone.utc).isoformat()
        return cls(
            id=str(uuid4()),
            email=email,
            name=name,
            cognito_sub=cognito_sub,
            email_verified=email_verified,
            created_at=now,
            updated_at=now,
        )

    def to_item(self) -> Dict[str, Any]:
        return self.model_dump()

    @staticmethod
    def key_for(email: str) -> Dict[str, str]:
        return {'email': email}
