"""
Subscription Tracker Service Module.

This package contains the serverless backend of the subscription tracker,
following the three-layer architecture pattern:

- handlers: Lambda entry points, request parsing and response shaping
- logic: Validation rules, error translation and business pipelines
- dal: Amazon Cognito and Amazon DynamoDB adapters
- models: Pydantic domain and response models
"""

__version__ = "1.0.0"
__description__ = "Subscription tracker serverless backend"

from subtracker.handlers.utils.observability import logger, metrics, tracer

__all__ = [
    "logger",
    "tracer",
    "metrics",
]
