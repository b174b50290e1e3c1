"""
Input models for request validation using Pydantic.

Auth and subscription handlers validate their bodies field by field so each
rule can report its own message; only the email intake path has a
structured input model.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, Field


class EmailData(BaseModel):
    """Billing details extracted from a subscription email."""

    user_id: Annotated[str, Field(
        min_length=1,
        description='Owner of the subscription the email refers to'
    )]

    merchant: Annotated[str, Field(
        min_length=1,
        description='Merchant name, matched as a substring of the subscription name',
        examples=['Netflix', 'Spotify']
    )]

    amount: Annotated[float, Field(
        description='Charged amount found in the email',
        examples=[15.49]
    )]

    billing_date: Annotated[Optional[str], Field(
        description='Billing date found in the email, as written'
    )] = None
