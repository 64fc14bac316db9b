"""
Commerce Domain

Cart checkout, order lifecycle, stock reservation and payment-gateway reconciliation.
"""
