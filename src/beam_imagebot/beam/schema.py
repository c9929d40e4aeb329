"""Pydantic schemas for Beam task payloads.

Defines SubmitResponse, TaskOutput and TaskStatusResponse models.
"""

from enum import Enum
from pydantic import BaseModel
from typing import Dict, Optional

OUTPUT_FILE_KEY = "./output.png"

class TaskState(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

IN_PROGRESS_STATES = frozenset({TaskState.PENDING.value, TaskState.RUNNING.value})

class SubmitResponse(BaseModel):
    task_id: str

class TaskOutput(BaseModel):
    url: str

class TaskStatusResponse(BaseModel):
    # Kept as a plain string: Beam may report terminal states we don't enumerate.
    status: str
    task_id: Optional[str] = None
    outputs: Optional[Dict[str, TaskOutput]] = None

    @property
    def in_progress(self) -> bool:
        return self.status in IN_PROGRESS_STATES

    @property
    def is_complete(self) -> bool:
        return self.status == TaskState.COMPLETE.value

    @property
    def output_url(self) -> Optional[str]:
        output = (self.outputs or {}).get(OUTPUT_FILE_KEY)
        return output.url if output else None
