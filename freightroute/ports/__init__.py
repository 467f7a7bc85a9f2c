"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the routing core and the code that
drives it, keeping the registry independent of concrete networks.
"""

from .network import NetworkPort

__all__ = ["NetworkPort"]
