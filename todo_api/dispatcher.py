import logging
from typing import Any, NamedTuple, Optional

from fastapi import status
from pydantic import ValidationError as SchemaError

from .errors import (
    ErrorKind,
    NotFoundError,
    TodoApiError,
    UnsupportedOperationError,
    ValidationError,
)
from .schemas.task import Envelope, TaskCreate, TaskUpdate
from .store import TaskStore

logger = logging.getLogger(__name__)


class DispatchResult(NamedTuple):
    status_code: int
    envelope: Envelope


def _failure(kind: ErrorKind, message: str) -> DispatchResult:
    return DispatchResult(kind.status_code, Envelope(success=False, message=message, error=kind.value))


def _require_id(task_id: Optional[str]) -> str:
    if not task_id:
        raise ValidationError("Task ID not provided")
    return task_id


class RequestDispatcher:
    """Maps one task operation (verb, optional id, optional body) onto a TaskStore call.

    ``dispatch`` never raises: every outcome, including unexpected faults, is
    returned as a status code plus an :class:`Envelope`.
    """

    def __init__(self, store: TaskStore):
        self.store = store
        self._handlers = {
            "GET": self._list,
            "POST": self._create,
            "PUT": self._update,
            "DELETE": self._delete,
        }

    def dispatch(self, method: str, task_id: Optional[str] = None, body: Any = None) -> DispatchResult:
        verb = (method or "").upper()
        try:
            handler = self._handlers.get(verb)
            if handler is None:
                raise UnsupportedOperationError("Method not allowed")
            return handler(task_id, body)
        except TodoApiError as e:
            if e.kind in (ErrorKind.PERSISTENCE, ErrorKind.INTERNAL):
                logger.error("%s %s failed: %s", verb, task_id or "", e.message)
            else:
                logger.info("%s %s rejected (%s): %s", verb, task_id or "", e.kind.value, e.message)
            return _failure(e.kind, e.message)
        except Exception as e:
            logger.exception("Unhandled error while dispatching %s %s", verb, task_id or "")
            return _failure(ErrorKind.INTERNAL, f"Server error: {e}")

    # ---- operations ----

    def _list(self, task_id: Optional[str], body: Any) -> DispatchResult:
        return DispatchResult(status.HTTP_200_OK, Envelope(success=True, data=self.store.list_all()))

    def _create(self, task_id: Optional[str], body: Any) -> DispatchResult:
        if not isinstance(body, dict):
            raise ValidationError("Title is required")
        try:
            payload = TaskCreate.model_validate(body)
        except SchemaError as e:
            raise ValidationError("Title is required") from e
        if not payload.title.strip():
            raise ValidationError("Title is required")

        task = self.store.create(payload.title)
        return DispatchResult(status.HTTP_201_CREATED, Envelope(success=True, data=task))

    def _update(self, task_id: Optional[str], body: Any) -> DispatchResult:
        task_id = _require_id(task_id)
        if not isinstance(body, dict):
            body = {}
        try:
            patch = TaskUpdate.model_validate(body)
        except SchemaError as e:
            raise ValidationError(_describe(e)) from e
        if patch.title is not None and not patch.title.strip():
            raise ValidationError("Title cannot be empty")

        task = self.store.update(task_id, patch)
        if task is None:
            raise NotFoundError("Task not found")
        return DispatchResult(status.HTTP_200_OK, Envelope(success=True, data=task))

    def _delete(self, task_id: Optional[str], body: Any) -> DispatchResult:
        task_id = _require_id(task_id)
        if not self.store.delete(task_id):
            raise NotFoundError("Task not found")
        return DispatchResult(status.HTTP_200_OK, Envelope(success=True, message="Task removed"))


def _describe(error: SchemaError) -> str:
    fields = sorted({str(err["loc"][0]) for err in error.errors() if err.get("loc")})
    if not fields:
        return "Invalid task fields"
    return "Invalid value for: " + ", ".join(fields)
