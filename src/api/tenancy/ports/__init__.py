"""Ports (interfaces) for the Tenancy bounded context.

Ports define the contracts for repositories and external collaborators
without specifying implementation details. Import from the submodules
(``tenancy.ports.repositories``, ``tenancy.ports.identity``, ...): the
domain layer depends on ``tenancy.ports.exceptions``, so this package
stays free of eager imports.
"""
