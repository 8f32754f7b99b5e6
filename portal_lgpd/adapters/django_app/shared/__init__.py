"""
Componentes Django compartilhados (Unit of Work).
"""

from .unit_of_work import DjangoUnitOfWork, InMemoryUnitOfWork

__all__ = ["DjangoUnitOfWork", "InMemoryUnitOfWork"]
