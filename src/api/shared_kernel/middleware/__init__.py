"""Shared middleware for cross-cutting concerns.

``tenant_context`` holds the request-scoped tenant binding used by the
storage interceptor; ``tenant_resolution`` binds it for each HTTP request
from the host or path.
"""
