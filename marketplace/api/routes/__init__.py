"""
Cross-domain API routes.
"""
