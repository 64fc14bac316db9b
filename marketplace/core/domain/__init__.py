"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Exceptions: Domain-specific error handling
"""

from marketplace.core.domain.entities import (
    AggregateRoot,
    Entity,
    generate_uuid,
    utcnow,
)
from marketplace.core.domain.exceptions import (
    AuthenticationRequiredException,
    AuthorizationException,
    ConcurrencyException,
    DomainException,
    EntityNotFoundException,
    InsufficientStockException,
    InvalidStateTransitionException,
    ProductGoneException,
    UpstreamGatewayException,
    ValidationException,
)
from marketplace.core.domain.value_objects import (
    Money,
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "generate_uuid",
    "utcnow",
    # Value Objects
    "ValueObject",
    "Money",
    "StatusEnum",
    # Exceptions
    "DomainException",
    "ValidationException",
    "AuthenticationRequiredException",
    "AuthorizationException",
    "EntityNotFoundException",
    "ProductGoneException",
    "InsufficientStockException",
    "InvalidStateTransitionException",
    "ConcurrencyException",
    "UpstreamGatewayException",
]
