# Repositories package init
"""
Gestor de Expedientes Backend: Repositories Layer
==================================================

What:  Persistence contracts used by CaseService, and their SQLAlchemy
       implementations.

Inventory:
    - CaseStore (abstract): query/save/delete contract for case records
    - UserDirectory (abstract): resolves usernames to users
    - SqlAlchemyCaseStore / SqlAlchemyUserDirectory: async SQLAlchemy backed
"""

from gestor_expedientes.repositories.base import CaseStore, UserDirectory
from gestor_expedientes.repositories.case_repository import SqlAlchemyCaseStore
from gestor_expedientes.repositories.user_repository import SqlAlchemyUserDirectory

__all__ = [
    "CaseStore",
    "UserDirectory",
    "SqlAlchemyCaseStore",
    "SqlAlchemyUserDirectory",
]
