"""
Commerce Domain Layer

Entities, value objects and pure domain services for carts, orders and payments.
"""
