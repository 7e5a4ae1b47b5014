"""
Execution management for the dfsmonitor package.

This module provides the bounded thread pool the collectors use to run
blocking topology provider calls from asyncio code.
"""

from .thread_pool import ManagedThreadPoolExecutor, ThreadPoolConfig

__all__ = [
    "ManagedThreadPoolExecutor",
    "ThreadPoolConfig",
]
