"""
Commerce API Layer
"""
