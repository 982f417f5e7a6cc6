# models.py
import uuid
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from househeroes.db_models.enums import UserRole


class Family(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class User(BaseModel):
    id: uuid.UUID
    external_id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.CHILD
    family_id: Optional[uuid.UUID] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Task(BaseModel):
    id: uuid.UUID
    family_id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_by_id: uuid.UUID
    due_date: Optional[datetime] = None
    created_at: datetime
    is_completed: bool = False
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TaskAssignment(BaseModel):
    task_id: uuid.UUID
    user_id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)


# --- Inputs ---

class FamilyCreate(BaseModel):
    name: str = Field(max_length=200)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Family name cannot be empty.")
        return value.strip()


class UserCreate(BaseModel):
    external_id: str = Field(min_length=1, max_length=256)
    email: EmailStr = Field(max_length=256)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    role: UserRole = UserRole.CHILD
    family_id: Optional[uuid.UUID] = None


class TaskCreate(BaseModel):
    family_id: uuid.UUID
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    created_by_id: uuid.UUID
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Task title cannot be empty.")
        return value


class TaskAssignmentCreate(BaseModel):
    task_id: uuid.UUID
    user_id: uuid.UUID


class TaskFilter(BaseModel):
    """Supported task filters. Unset fields do not filter."""
    is_completed: Optional[bool] = None
    assigned_to_user_id: Optional[uuid.UUID] = None
    title_contains: Optional[str] = None
    due_before: Optional[datetime] = None
    due_after: Optional[datetime] = None


class TaskSort(BaseModel):
    field: str
    descending: bool = False


class RegistrationRequest(BaseModel):
    create_new_family: bool = False
    family_name: Optional[str] = Field(default=None, max_length=200)
    existing_family_id: Optional[uuid.UUID] = None

    @model_validator(mode="after")
    def blank_name_is_unset(self):
        if self.family_name is not None and not self.family_name.strip():
            self.family_name = None
        return self


class RegistrationResult(BaseModel):
    success: bool
    message: str
    user: Optional[User] = None
    family: Optional[Family] = None


# --- REST projections (/api/tasks) ---

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class FamilySummary(CamelModel):
    id: uuid.UUID
    name: str


class UserSummary(CamelModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole


class TaskDetail(CamelModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    created_at: datetime
    is_completed: bool
    completed_at: Optional[datetime] = None
    family: Optional[FamilySummary] = None
    created_by: Optional[UserSummary] = None
    assignees: List[UserSummary] = Field(default_factory=list)
