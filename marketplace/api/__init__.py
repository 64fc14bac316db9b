"""
HTTP layer: exception handlers, security, middleware and cross-domain routes.
"""
