"""
Dependency Injection Container.

Wires concrete infrastructure to the application ports. One container is
built per process by the application lifespan and kept on ``app.state``.
"""

from .commerce import CommerceContainer

__all__ = ["CommerceContainer"]
