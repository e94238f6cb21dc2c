"""Per-vault mutual exclusion for mutating ledger calls."""

import logging
from contextlib import contextmanager
from functools import wraps
from threading import Lock, get_ident
from typing import Callable, Dict, Iterator, TypeVar

from vault_ledger.exceptions import ReentrancyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class VaultGuard:
    """
    One lock per vault id.

    Calls on different vaults proceed independently; a second call on
    the same vault from another thread waits. A call that re-enters the
    vault it already holds (e.g. from a strategy or token callback) is
    rejected instead of deadlocking.
    """

    def __init__(self):
        self._locks: Dict[int, Lock] = {}
        self._holders: Dict[int, int] = {}
        self._locks_lock = Lock()

    def _lock_for(self, vault_id: int) -> Lock:
        with self._locks_lock:
            return self._locks.setdefault(vault_id, Lock())

    def is_held(self, vault_id: int) -> bool:
        return vault_id in self._holders

    @contextmanager
    def hold(self, vault_id: int) -> Iterator[None]:
        """
        Hold the vault for the duration of the block.

        Raises:
            ReentrancyError: If this thread already holds the vault
        """
        ident = get_ident()
        if self._holders.get(vault_id) == ident:
            logger.warning(f"Rejected re-entrant call on vault {vault_id}")
            raise ReentrancyError(vault_id)

        lock = self._lock_for(vault_id)
        lock.acquire()
        self._holders[vault_id] = ident
        try:
            yield
        finally:
            del self._holders[vault_id]
            lock.release()


def nonreentrant(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator serializing a method on its vault.

    The wrapped method's first argument after self must be the vault id,
    and the instance must expose a `guard` VaultGuard.

    Usage:
        @nonreentrant
        def deposit(self, vault_id, amount, account):
            ...
    """

    @wraps(func)
    def wrapper(self, vault_id: int, *args, **kwargs) -> T:
        with self.guard.hold(vault_id):
            return func(self, vault_id, *args, **kwargs)

    return wrapper
