"""
Primary-store transaction scope.

A ``UnitOfWork`` is one transaction. Repositories taken from it share its
session, so a conditional report update and the event row documenting it
are committed together or not at all.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dormtrack.core.exceptions import StorageError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class UnitOfWork:
    """
    Usage:
        >>> with UnitOfWork(database.session_factory) as uow:
        ...     reports = uow.get_repo(ReportRepository)
        ...     events = uow.get_repo(ReportEventRepository)
        ...     if reports.compare_and_set(...):
        ...         events.append(...)

    Leaving the block normally commits. Any exception rolls back; storage
    exceptions (including a failed commit) surface as ``StorageError`` so
    callers never see driver details, while application errors such as
    ``InvalidStateTransitionError`` propagate unchanged.
    """

    def __init__(self, session_factory: Callable[[], Session], *, auto_commit: bool = True) -> None:
        self._session_factory = session_factory
        self._auto_commit = auto_commit
        self._repos: Dict[type, Any] = {}
        self.session: Optional[Session] = None
        self.finished = False

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork is not reentrant")
        self.session = self._session_factory()
        self.finished = False
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        session = self._require_session()
        try:
            if exc_type is None:
                if self._auto_commit and not self.finished:
                    self.commit()
                return False

            if not self.finished:
                session.rollback()
                self.finished = True
            if issubclass(exc_type, SQLAlchemyError):
                logger.error("Transaction aborted by storage failure", exc_info=(exc_type, exc_val, exc_tb))
                raise StorageError(original_error=exc_val) from exc_val
            return False
        finally:
            session.close()
            self.session = None
            self._repos.clear()

    def _require_session(self) -> Session:
        if self.session is None:
            raise RuntimeError("UnitOfWork used outside its with-block")
        return self.session

    def commit(self) -> None:
        session = self._require_session()
        if self.finished:
            return
        try:
            session.commit()
        except SQLAlchemyError as exc:
            logger.error("Commit failed: %s", exc, exc_info=True)
            session.rollback()
            raise StorageError(original_error=exc) from exc
        finally:
            self.finished = True

    def rollback(self) -> None:
        session = self._require_session()
        if not self.finished:
            session.rollback()
            self.finished = True

    def get_repo(self, repo_cls: Type[R]) -> R:
        """One repository instance per class, bound to this transaction's session."""
        session = self._require_session()
        repo = self._repos.get(repo_cls)
        if repo is None:
            repo = self._repos[repo_cls] = repo_cls(session)  # type: ignore[call-arg]
        return repo
