"""
Interfaces for the storage system.

This module contains the interface the tree code is written against,
which abstracts the underlying storage implementation.
"""

from .store import Store, Row

__all__ = ['Store', 'Row']
