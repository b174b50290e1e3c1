"""
Process-wide dependencies of the Lambda handlers.

Adapters are built once per execution environment from the typed
environment variables and handed to each invocation. Tests build a
``Dependencies`` directly with fakes instead of calling ``get_dependencies``.
"""

from dataclasses import dataclass
from functools import lru_cache

from subtracker.dal import IdentityHandler, RecordStore
from subtracker.dal.cognito_handler import CognitoIdentityHandler
from subtracker.dal.dynamodb_handler import DynamoDBHandler
from subtracker.handlers.models.env_vars import ServiceEnvVars, get_service_env_vars
from subtracker.handlers.utils.observability import logger


@dataclass
class Dependencies:
    """Adapters and settings injected into every handler pipeline."""

    identity: IdentityHandler
    users: RecordStore
    subscriptions: RecordStore
    price_changes: RecordStore
    auto_confirm_signups: bool = False


def build_dependencies(env: ServiceEnvVars) -> Dependencies:
    def table(name: str) -> DynamoDBHandler:
        return DynamoDBHandler(table_name=name, region_name=env.AWS_REGION, endpoint_url=env.DYNAMODB_ENDPOINT)

    logger.debug("Building handler dependencies", extra={
        "environment": env.ENVIRONMENT,
        "users_table": env.USERS_TABLE,
        "subscriptions_table": env.SUBSCRIPTIONS_TABLE,
    })
    return Dependencies(
        identity=CognitoIdentityHandler(
            user_pool_id=env.USER_POOL_ID,
            client_id=env.USER_POOL_CLIENT_ID,
            region_name=env.AWS_REGION,
        ),
        users=table(env.USERS_TABLE),
        subscriptions=table(env.SUBSCRIPTIONS_TABLE),
        price_changes=table(env.changes_table),
        auto_confirm_signups=env.auto_confirm_signups,
    )


@lru_cache(maxsize=1)
def get_dependencies() -> Dependencies:
    return build_dependencies(get_service_env_vars())
