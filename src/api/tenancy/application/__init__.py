"""Tenancy application layer: use cases orchestrating the domain and ports."""
