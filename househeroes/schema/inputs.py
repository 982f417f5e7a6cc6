import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

import strawberry

from househeroes.db_models.enums import UserRole
from househeroes.models import RegistrationRequest, TaskFilter, TaskSort
from househeroes.services import validate_input


@strawberry.input
class CreateFamilyInput:
    name: str


@strawberry.input
class CreateUserInput:
    external_id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.CHILD
    family_id: Optional[uuid.UUID] = None


@strawberry.input
class CreateTaskInput:
    family_id: uuid.UUID
    title: str
    created_by_id: uuid.UUID
    description: Optional[str] = None
    due_date: Optional[datetime] = None


@strawberry.input
class AssignTaskInput:
    task_id: uuid.UUID
    user_id: uuid.UUID


@strawberry.input
class RegisterNewUserInput:
    create_new_family: bool = False
    family_name: Optional[str] = None
    existing_family_id: Optional[uuid.UUID] = None

    def to_request(self) -> RegistrationRequest:
        return validate_input(
            RegistrationRequest,
            create_new_family=self.create_new_family,
            family_name=self.family_name,
            existing_family_id=self.existing_family_id,
        )


@strawberry.input
class TaskFilterInput:
    is_completed: Optional[bool] = None
    assigned_to_user_id: Optional[uuid.UUID] = None
    title_contains: Optional[str] = None
    due_before: Optional[datetime] = None
    due_after: Optional[datetime] = None

    def to_filter(self) -> TaskFilter:
        return TaskFilter(
            is_completed=self.is_completed,
            assigned_to_user_id=self.assigned_to_user_id,
            title_contains=self.title_contains,
            due_before=self.due_before,
            due_after=self.due_after,
        )


@strawberry.enum
class TaskSortField(Enum):
    TITLE = "title"
    DUE_DATE = "due_date"
    CREATED_AT = "created_at"
    COMPLETED_AT = "completed_at"
    IS_COMPLETED = "is_completed"


@strawberry.enum
class SortDirection(Enum):
    ASC = "ASC"
    DESC = "DESC"


@strawberry.input
class TaskSortInput:
    field: TaskSortField
    direction: SortDirection = SortDirection.ASC


def to_task_sort(order: Optional[List[TaskSortInput]]) -> List[TaskSort]:
    return [
        TaskSort(field=item.field.value, descending=item.direction is SortDirection.DESC)
        for item in order or []
    ]
