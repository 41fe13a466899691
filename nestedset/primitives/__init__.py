"""
Primitive values used throughout the tree store.

This module has no dependencies on other parts of the system, avoiding
circular imports.
"""

# parent id carried by every root node
NO_PARENT = 0

__all__ = ["NO_PARENT"]
