# Services package init
"""
Gestor de Expedientes Backend: Services Layer
==============================================

What:  Business logic between routes (HTTP) and repositories (persistence).

Service Inventory:
    - CaseService: role-scoped listing/search and the case-number
      uniqueness rules for create/update

Services receive their repositories in the constructor, so they are
unit-tested against in-memory stores without HTTP or a database.
"""
