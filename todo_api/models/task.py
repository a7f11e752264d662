from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

CREATED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"


def new_task_id() -> str:
    return uuid4().hex


def created_at_now() -> str:
    return datetime.now().strftime(CREATED_AT_FORMAT)


class Task(BaseModel):
    """A single todo item, as stored in the task document.

    ``created_at`` is serialized as ``createdAt`` both on disk and on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_task_id)
    title: str
    completed: bool = False
    created_at: str = Field(default_factory=created_at_now, alias="createdAt")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
