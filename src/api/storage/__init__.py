"""Storage bounded context.

Generic record access over named collections, and the tenant-scoping
interceptor that every data-access call passes through.
"""
