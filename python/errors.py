"""
Custom exception types for the object pool

Provides typed exceptions so callers can tell pool contract violations apart
from failures raised by their own factory/activate/deactivate callables.
"""

from typing import Any, Optional


class PoolError(Exception):
    """Base exception for all object pool errors"""

    def __init__(self, message: str, pool_name: Optional[str] = None):
        self.message = message
        self.pool_name = pool_name
        super().__init__(message)


class InvalidPoolState(PoolError):
    """Raised when releasing an instance that is not currently active"""

    def __init__(self, instance: Any, pool_name: Optional[str] = None):
        label = f" '{pool_name}'" if pool_name else ""
        super().__init__(
            f"Instance is not active in pool{label}: {type(instance).__name__} at {id(instance):#x}",
            pool_name,
        )
        self.instance = instance


# Stable error codes for callers that surface pool errors over an RPC boundary
ERROR_CODE_MAP = {
    InvalidPoolState: -32101,
    PoolError: -32199,  # Generic pool error
}
