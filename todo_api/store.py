import contextlib
import json
import logging
import os
import stat
from pathlib import Path
from typing import List, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ValidationError as SchemaError

from .errors import PersistenceError, ValidationError
from .models import Task
from .schemas.task import TaskUpdate

logger = logging.getLogger(__name__)


class TaskStore:
    """JSON-document task store.

    The whole collection lives in one JSON array on disk. Every mutation is a
    full read-modify-write: load the array, change one task, write the array
    back. Writes go to a temp file in the same directory and are moved into
    place with ``os.replace``, so a reader never sees a half-written document.

    There is no locking. Two overlapping mutations race and the last writer
    wins; the earlier change is lost.
    """

    def __init__(self, path: Union[str, Path] = "tasks.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def ensure_document(self) -> None:
        """Create an empty document if none exists yet."""
        if self._path.exists():
            logger.info("TaskStore ready path=%s total=%s", self._path, len(self.list_all()))
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._write([])
        logger.info("TaskStore created empty document path=%s", self._path)

    # ---- low-level helpers ----

    def _read(self) -> List[Task]:
        try:
            raw = self._path.read_text("utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Failed to read %s, treating as empty: %r", self._path, e)
            return []

        try:
            items = json.loads(raw)
        except ValueError as e:
            logger.warning("Task document %s is not valid JSON, treating as empty: %s", self._path, e)
            return []

        if not isinstance(items, list):
            logger.warning("Task document %s is not a JSON array, treating as empty", self._path)
            return []

        try:
            return [Task.model_validate(item) for item in items]
        except SchemaError as e:
            logger.warning("Task document %s holds malformed tasks, treating as empty: %s", self._path, e)
            return []

    def _write(self, tasks: List[Task]) -> None:
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=4)
        # One temp file per write; concurrent writers must not share it.
        tmp = self._path.with_name(f".{self._path.name}.{uuid4().hex}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, "utf-8")
            if self._path.exists():
                os.chmod(tmp, stat.S_IMODE(self._path.stat().st_mode))
            os.replace(tmp, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            logger.error("Failed to write task document %s: %r", self._path, e)
            raise PersistenceError(f"Could not save tasks: {e}") from e
        logger.debug("Wrote %d tasks to %s", len(tasks), self._path)

    @staticmethod
    def _check_title(title) -> str:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required")
        return title

    # ---- public API ----

    def list_all(self) -> List[Task]:
        """Return every task in stored order. Never raises on a bad document."""
        return self._read()

    def create(self, title: str) -> Task:
        title = self._check_title(title)
        tasks = self._read()
        task = Task(title=title)
        tasks.append(task)
        self._write(tasks)
        logger.info("Created task id=%s", task.id)
        return task

    def update(self, task_id: str, patch: Union[TaskUpdate, Mapping]) -> Optional[Task]:
        """Apply a partial update. Returns None if no task has ``task_id``."""
        if not isinstance(patch, TaskUpdate):
            try:
                patch = TaskUpdate.model_validate(dict(patch))
            except SchemaError as e:
                raise ValidationError("Invalid task fields") from e
        changes = patch.changes()
        if "title" in changes:
            self._check_title(changes["title"])

        tasks = self._read()
        for index, task in enumerate(tasks):
            if task.id == task_id:
                updated = task.model_copy(update=changes)
                tasks[index] = updated
                self._write(tasks)
                logger.info("Updated task id=%s fields=%s", task_id, sorted(changes))
                return updated
        return None

    def delete(self, task_id: str) -> bool:
        tasks = self._read()
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) == len(tasks):
            return False
        self._write(remaining)
        logger.info("Deleted task id=%s", task_id)
        return True
