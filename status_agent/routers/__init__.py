"""
Host Status Agent - API Routers
"""

from . import status

__all__ = ["status"]
