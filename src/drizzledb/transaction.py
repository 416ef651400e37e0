"""
Transaction handling for connections.
"""
import logging
import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from drizzledb.connection import Connection
    from drizzledb.statement import Statement

logger = logging.getLogger(__name__)


_local = threading.local()


class Transaction:
    """Context manager for running multiple commands in a transaction.

    Begin, commit and rollback are forwarded to the server as plain
    commands. Thread-local bookkeeping rejects nested transactions on the
    same connection within one thread.

    Examples
        with Transaction(cn) as tx:
            tx.execute('delete from ...', args)
            tx.execute('update from ...', args)
    """

    def __init__(self, cn: 'Connection') -> None:
        self.connection = cn

        if not hasattr(_local, 'active_transactions'):
            _local.active_transactions = {}

        if id(cn) in _local.active_transactions:
            raise RuntimeError('Nested transactions are not supported')

    def __enter__(self):
        _local.active_transactions[id(self.connection)] = True
        try:
            self.connection.begin_transaction()
        except Exception:
            _local.active_transactions.pop(id(self.connection), None)
            raise
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        try:
            if exc_type is not None:
                self.connection.rollback()
                logger.warning('Rolling back the current transaction')
            else:
                self.connection.commit()
        finally:
            _local.active_transactions.pop(id(self.connection), None)
            logger.debug(f'Transaction cleanup complete for connection {id(self.connection)}')

    def execute(self, sql: str, *args: Any) -> int:
        """Execute SQL within transaction context"""
        return self.connection.execute(sql, *args)

    def query(self, sql: str, *args: Any) -> 'Statement':
        """Execute SQL within transaction context and return the statement"""
        return self.connection.query(sql, *args)

    def select(self, sql: str, *args: Any, **kwargs: Any) -> Any:
        """Execute SELECT within transaction context"""
        return self.connection.select(sql, *args, **kwargs)
