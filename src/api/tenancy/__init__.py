"""Tenancy bounded context.

Owns the tenant registry (storefront records, activation, settings) and
the provisioning saga that creates a tenant across the identity provider
and local storage.
"""
