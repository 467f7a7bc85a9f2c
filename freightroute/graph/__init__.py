"""Directed graphs and path-finding for the transport networks.

DirectedGraph stores weighted edges with attributes. TransportGraph adds
traffic counts, congestion and k-shortest paths on top of it.
"""

from .directed_graph import DirectedGraph
from .transport_graph import TransportGraph

__all__ = ["DirectedGraph", "TransportGraph"]
