"""Transaction boundary shared by the public operations"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


@contextmanager
def unit_of_work(
    db: Session,
    operation: str,
    person_id: Optional[str] = None,
    commit: bool = True,
) -> Iterator[Session]:
    """
    Run a block as one atomic unit against the record store.

    Commits on success when commit is set, rolls back on any failure.
    Store errors are logged with their context and re-raised unchanged.
    """
    try:
        yield db
        if commit:
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(
            f"Store failure during {operation}: {e}",
            extra={"operation": operation, "person_id": person_id},
        )
        raise
    except Exception:
        db.rollback()
        raise
