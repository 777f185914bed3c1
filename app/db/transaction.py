"""Transaction helpers for service functions."""

from functools import wraps

from sqlalchemy.orm import Session

# Connection option read by the SQLite begin listener in app.db.session
IMMEDIATE = "sqlite_immediate"


def begin_write(db: Session) -> None:
    """
    Start a write transaction on the session.

    A read transaction left open by the caller is committed first, so the new
    transaction starts on a fresh connection checkout. On SQLite it then
    begins with BEGIN IMMEDIATE and holds the write lock until it ends; other
    databases ignore the option.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options={IMMEDIATE: True})


def unit_of_work(func):
    """
    Run the wrapped service call as one write transaction.

    Service functions take the session as their first argument and commit
    themselves on success; any failure rolls back and leaves nothing behind.
    """

    @wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        begin_write(db)
        try:
            return func(db, *args, **kwargs)
        except Exception:
            db.rollback()
            raise

    return wrapper
