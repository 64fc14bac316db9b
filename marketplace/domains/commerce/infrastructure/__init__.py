"""
Commerce Infrastructure Layer
"""

from .unit_of_work import SQLAlchemyUnitOfWork

__all__ = ["SQLAlchemyUnitOfWork"]
