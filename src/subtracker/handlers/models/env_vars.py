"""
Environment variable models for type-safe configuration.

The model is parsed once per process with ``aws_lambda_env_modeler`` (the
result is cached) and used to build the service dependencies.
"""

from typing import Annotated, Optional

from aws_lambda_env_modeler import get_environment_variables
from pydantic import BaseModel, Field


class ServiceEnvVars(BaseModel):
    """Environment variables shared by the subscription tracker Lambda functions."""

    # Cognito user pool
    USER_POOL_ID: Annotated[str, Field(
        description='Cognito user pool identifier',
        min_length=1
    )]

    USER_POOL_CLIENT_ID: Annotated[str, Field(
        description='Cognito user pool app client identifier',
        min_length=1
    )]

    AWS_REGION: Annotated[str, Field(
        description='AWS region for service deployment'
    )] = 'us-east-1'

    # DynamoDB tables
    USERS_TABLE: Annotated[str, Field(
        description='DynamoDB table holding user profiles, keyed by email',
        min_length=1
    )]

    SUBSCRIPTIONS_TABLE: Annotated[str, Field(
        description='DynamoDB table holding subscriptions, keyed by id and user_id',
        min_length=1
    )]

    DYNAMODB_ENDPOINT: Annotated[Optional[str], Field(
        description='DynamoDB endpoint override for local testing'
    )] = None

    ENVIRONMENT: Annotated[str, Field(
        description='Deployment environment name',
        pattern=r'^(dev|test|staging|prod)$'
    )] = 'prod'

    POWERTOOLS_SERVICE_NAME: Annotated[str, Field(
        description='Service name for AWS Powertools'
    )] = 'subscription-tracker'

    LOG_LEVEL: Annotated[str, Field(
        description='Log level for application logging',
        pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$'
    )] = 'INFO'

    @property
    def changes_table(self) -> str:
        """Name of the price change log table derived from the subscriptions table."""
        return f'{self.SUBSCRIPTIONS_TABLE}-changes'

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == 'dev'

    @property
    def auto_confirm_signups(self) -> bool:
        """New accounts skip email confirmation outside production-like stages."""
        return self.is_development


def get_service_env_vars() -> ServiceEnvVars:
    """
    Get typed environment variables for the Lambda handlers.

    Returns:
        Validated environment variables model instance
    """
    return get_environment_variables(model=ServiceEnvVars)
