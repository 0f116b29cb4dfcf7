from datetime import date
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field

Category = Literal["work", "personal", "shopping", "health", "learning", "other"]
Priority = Literal["low", "medium", "high"]

CATEGORIES: tuple[str, ...] = ("work", "personal", "shopping", "health", "learning", "other")
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")


def _strip_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("text must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_strip_text)]


class Task(BaseModel):
    id: str
    text: str
    completed: bool = False
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    owner_id: Optional[str] = None
    created_at: str  # ISO format datetime string
    updated_at: str
    scheduled_date: Optional[str] = None  # ISO format: YYYY-MM-DD
    scheduled_time: Optional[str] = None  # free-form, e.g. "09:00"

class TaskCreate(BaseModel):
    text: NonBlankStr
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = None
    category: Optional[Category] = None  # explicit values skip AI inference
    priority: Optional[Priority] = None

class TaskUpdate(BaseModel):
    text: Optional[NonBlankStr] = None
    completed: Optional[bool] = None
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = None

class CategorizeRequest(BaseModel):
    text: NonBlankStr

class ScheduleItem(BaseModel):
    title: NonBlankStr
    day: int = Field(ge=1)
    time: Optional[str] = None

class ScheduleRequest(BaseModel):
    description: NonBlankStr
    days: int = Field(ge=1)

class ScheduleApplyRequest(BaseModel):
    items: list[ScheduleItem]
    start_date: date

class BreakdownRequest(BaseModel):
    text: NonBlankStr

class BreakdownDraftRequest(BaseModel):
    text: str = ""

class BreakdownApplyRequest(BaseModel):
    items: list[NonBlankStr]
    category: Optional[Category] = None

class ApplyRunStatus(BaseModel):
    run_id: str
    state: Literal["idle", "running", "completed", "aborted"]
    committed: int
    total: int
    failed_index: Optional[int] = None
    error: Optional[str] = None
