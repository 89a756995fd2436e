"""Base class shared by services that work on the request session."""

from abc import ABC

from sqlalchemy.orm import Session


class BaseService(ABC):
    """Abstract base for services bound to one database session.

    The session belongs to the caller: services flush and open savepoints,
    but committing or rolling back the outer transaction is left to the
    request teardown (or the CLI command) that owns it.
    """

    def __init__(self, db: Session):
        self.db = db
