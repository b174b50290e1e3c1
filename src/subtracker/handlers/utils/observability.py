"""
Shared observability instances for the subscription tracker handlers.

Every handler, service and adapter logs, traces and emits metrics through the
Powertools instances defined here so that correlation ids, the cold start
metric and the metric namespace are consistent across all Lambda functions.
"""

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.metrics import MetricUnit, Metrics
from aws_lambda_powertools.tracing import Tracer

METRICS_NAMESPACE = 'SubscriptionTracker'

# Service name comes from POWERTOOLS_SERVICE_NAME, level from LOG_LEVEL
logger: Logger = Logger()

# Disabled outside Lambda or with POWERTOOLS_TRACE_DISABLED=true
tracer: Tracer = Tracer()

metrics: Metrics = Metrics(namespace=METRICS_NAMESPACE)


def count_metric(name: str, value: float = 1) -> None:
    """Add a Count metric to the current invocation's metric set."""
    metrics.add_metric(name=name, unit=MetricUnit.Count, value=value)


def mask_email(email: str) -> str:
    """Mask the local part of an email address for log output."""
    if not email or '@' not in email:
        return '***'
    local, domain = email.split('@', 1)
    return f'{local[:1]}***@{domain}'
