"""
AWS Lambda Handlers Module.

One Lambda entry point per use case. Each entry point is a thin shell around a
``handle_*`` pipeline that receives the raw API Gateway proxy event and the
process-wide ``Dependencies``:

- auth_handler: signup, confirmation, login, password and profile operations
- subscriptions_handler: subscription CRUD scoped to the authenticated user
- email_processor_handler: price change intake from billing emails
"""
