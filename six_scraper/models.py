"""
Data structures shared by the parser, the cache and the API layer.
Wire names follow what the SIX portal clients already consume, so a few
fields carry an alias (sks, class_no, schedules) next to a readable attribute name.
"""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ScheduleSlot(BaseModel):
    """
    One weekly meeting of a class. Two slots are the same slot when all five
    fields match, no matter which source line they came from.
    """
    model_config = ConfigDict(frozen=True)

    day: str
    time: str
    room: str
    activity: str
    method: str

    @property
    def identity(self) -> tuple[str, str, str, str, str]:
        return (self.day, self.time, self.room, self.activity, self.method)


class CourseClass(BaseModel):
    # Frozen with tuple fields so a cached class can be handed to many callers safely
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # A row without a course code is not a class, so it can never be built
    code: str = Field(min_length=1)
    name: str = ""
    credit_units: int = Field(default=0, alias="sks")
    class_number: str = Field(default="", alias="class_no")
    quota: int = 0
    lecturers: tuple[str, ...] = ()
    notes: str = ""
    slots: tuple[ScheduleSlot, ...] = Field(default=(), alias="schedules")


class UserIdentity(BaseModel):
    student_id: str
    semester: str = Field(pattern=r"^\d{4}-\d$")


class Meta(BaseModel):
    fetched_at: datetime
    cached: bool


class APIResponse(BaseModel):
    """
    The envelope every endpoint answers with. Exactly one of data/error is set,
    depending on success; members that are None are left out of the JSON.
    """
    success: bool
    data: Any = None
    meta: Meta | None = None
    error: str | None = None
