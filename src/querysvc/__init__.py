"""querysvc — Authorized resource discovery and organization search.

Compiles client filters into search criteria, pages through large result
sets with encrypted cursor tokens, filters results through an access-control
check and classifies every failure into a small, stable set of client-facing
error categories.
"""

__version__ = "0.1.0"
