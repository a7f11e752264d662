from typing import List, Optional, Union

from pydantic import BaseModel, StrictBool, StrictStr

from ..models import Task


class TaskCreate(BaseModel):
    """Body of ``POST /tasks``."""
    title: StrictStr


class TaskUpdate(BaseModel):
    """Body of ``PUT /tasks/{id}``. Fields left out (or null) are not touched."""
    title: Optional[StrictStr] = None
    completed: Optional[StrictBool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class Envelope(BaseModel):
    """Uniform response body for every task operation."""
    success: bool
    data: Optional[Union[Task, List[Task]]] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
