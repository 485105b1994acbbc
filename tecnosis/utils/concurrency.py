"""
Concurrency utilities.

Flask serves requests on threads and the auto-close timer fires on its own
thread, so services that own shared state guard it with an instance lock.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable


def synchronized(func: Callable) -> Callable:
    """Decorator that acquires `self._lock` if present on the instance.

    If no `_lock` attribute exists on `self`, the function is executed without
    locking. Methods that call each other under the lock need an ``RLock``.
    """

    @wraps(func)
    def _wrapped(self, *args, **kwargs):
        lock = getattr(self, "_lock", None)
        if lock is None:
            return func(self, *args, **kwargs)
        with lock:
            return func(self, *args, **kwargs)

    return _wrapped
