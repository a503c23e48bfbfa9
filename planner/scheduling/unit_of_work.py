"""Caller-owned transaction boundary for engine operations."""

import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def transaction(session):
    """
    Run engine operations as one atomic unit.

    Engine functions only flush; this commits when the block finishes and
    rolls everything back when any exception escapes it.

    Examples:
        >>> with transaction(db.session) as session:
        ...     bump_single(session, lesson_id, config)
    """
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.warning(f"Rolling back scheduling transaction: {e}")
        session.rollback()
        raise
