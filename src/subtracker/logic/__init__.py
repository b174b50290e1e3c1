"""
Business Logic Layer Module.

Validation rules, the identity provider error translator and the services
that coordinate the Cognito and DynamoDB adapters for each use case. The
services receive their adapters through the constructor so tests can
substitute fakes.
"""
