"""
Feature modules live under this package.

Each module owns its models, service (schemas, filters, repository) and
routes, while reusing platform primitives (auth, RBAC, validation, audit,
storage, DB session).
"""
