"""Safe geometry: metric and fault-tolerant operations on geographic shapes.

Projection-aware buffering and measurement for WGS 84 geometries,
topology diagnosis and repair, boolean set operations that survive
kernel failures, and Lloyd relaxation for evenly spaced point fills.
"""

__version__ = "0.1.0"
