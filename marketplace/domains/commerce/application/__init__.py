"""
Commerce Application Layer

Ports and use cases for checkout, order lifecycle and payments.
"""
