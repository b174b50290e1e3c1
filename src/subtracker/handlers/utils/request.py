"""
Request normalization for API Gateway REST proxy events.

Handlers read the raw event through ``ApiRequest`` and ``extract_claims`` so
that a missing body, an absent authorizer or an unexpected header casing
never raises ``KeyError`` deep inside a pipeline.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from subtracker.handlers.utils.errors import AuthenticationError, ValidationError

INVALID_JSON = 'Invalid JSON in request body'
UNAUTHORIZED = 'Unauthorized'

BEARER_PREFIX = re.compile(r'^Bearer\s+', re.IGNORECASE)


def parse_body(raw_body: Any) -> Dict[str, Any]:
    """
    Decode a proxy event body into a JSON object.

    A missing or empty body is an empty object. Invalid JSON, or JSON that is
    not an object, raises ``ValidationError``.
    """
    if raw_body is None or raw_body == '':
        return {}
    if isinstance(raw_body, dict):
        return raw_body

    try:
        body = json.loads(raw_body)
    except (TypeError, ValueError) as e:
        raise ValidationError(error=INVALID_JSON, reason='INVALID_JSON') from e

    if not isinstance(body, dict):
        raise ValidationError(error=INVALID_JSON, reason='INVALID_JSON')
    return body


class ApiRequest(BaseModel):
    """The parts of a proxy event the handlers consume."""

    body: Dict[str, Any] = Field(default_factory=dict)
    path_parameters: Dict[str, str] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)
    request_id: Optional[str] = None

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> 'ApiRequest':
        request_context = event.get('requestContext') or {}
        return cls(
            body=parse_body(event.get('body')),
            path_parameters=event.get('pathParameters') or {},
            headers=event.get('headers') or {},
            request_id=request_context.get('requestId'),
        )

    def path_parameter(self, name: str) -> Optional[str]:
        return self.path_parameters.get(name) or None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def bearer_token(self) -> Optional[str]:
        return strip_bearer(self.header('Authorization'))


def strip_bearer(authorization: Optional[str]) -> Optional[str]:
    """Remove a leading ``Bearer`` scheme; returns None for a blank header."""
    if not authorization:
        return None
    token = BEARER_PREFIX.sub('', authorization, count=1).strip()
    return token or None


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, as asserted by the API Gateway Cognito authorizer."""

    user_id: str
    email: str


def extract_claims(event: Dict[str, Any]) -> Principal:
    """
    Read the caller identity from ``requestContext.authorizer.claims``.

    The authorizer has already verified the token; no signature check is
    done here.

    Raises:
        AuthenticationError: The authorizer context, ``sub`` or ``email`` is missing
    """
    authorizer = (event.get('requestContext') or {}).get('authorizer')
    if not authorizer:
        raise AuthenticationError(error=UNAUTHORIZED, detail='No authorizer context')

    claims = authorizer.get('claims') or {}
    user_id = claims.get('sub')
    if not user_id:
        raise AuthenticationError(error=UNAUTHORIZED, detail='No user ID in token claims')

    email = claims.get('email')
    if not email:
        raise AuthenticationError(error=UNAUTHORIZED, detail='No email in token claims')

    return Principal(user_id=user_id, email=email)
