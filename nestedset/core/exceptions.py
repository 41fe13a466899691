"""Custom exceptions for the tree store."""


class DbException(Exception):
    """Base exception for store and transaction errors."""
    pass


class NotFoundError(DbException):
    """Raised when a node id is not present in the store."""

    def __init__(self, node_id):
        super().__init__(f"Node {node_id} not found")
        self.node_id = node_id


class TreeException(DbException):
    """Base exception for structural tree errors."""
    pass


class CyclicReparentError(TreeException):
    """Raised when a node would be attached underneath its own subtree."""

    def __init__(self, message: str, parent_id: int = None, child_id: int = None):
        super().__init__(message)
        self.parent_id = parent_id
        self.child_id = child_id
