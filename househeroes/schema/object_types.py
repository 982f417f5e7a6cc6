import uuid
from datetime import datetime
from typing import List, Optional

import strawberry
from strawberry.types import Info

from househeroes.db_models.enums import UserRole
from househeroes.models import Family, RegistrationResult, Task, TaskAssignment, User

strawberry.enum(UserRole, name="UserRole")


@strawberry.type(name="Family")
class FamilyType:
    id: uuid.UUID
    name: str
    created_at: datetime

    @strawberry.field
    async def members(self, info: Info) -> List["UserType"]:
        users = await info.context.repository.list_users(family_id=self.id)
        return [UserType.from_model(user) for user in users]

    @strawberry.field
    async def tasks(self, info: Info) -> List["TaskType"]:
        tasks = await info.context.repository.list_tasks(family_id=self.id)
        return [TaskType.from_model(task) for task in tasks]

    @classmethod
    def from_model(cls, family: Family) -> "FamilyType":
        return cls(**family.model_dump())


@strawberry.type(name="User")
class UserType:
    id: uuid.UUID
    external_id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    family_id: Optional[uuid.UUID]
    created_at: datetime
    last_login_at: Optional[datetime]

    @strawberry.field
    async def family(self, info: Info) -> Optional[FamilyType]:
        if self.family_id is None:
            return None
        family = await info.context.repository.get_family(self.family_id)
        return FamilyType.from_model(family) if family else None

    @strawberry.field
    async def task_assignments(self, info: Info) -> List["TaskAssignmentType"]:
        assignments = await info.context.repository.list_assignments(user_id=self.id)
        return [TaskAssignmentType.from_model(assignment) for assignment in assignments]

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(**user.model_dump())


@strawberry.type(name="Task")
class TaskType:
    id: uuid.UUID
    family_id: uuid.UUID
    title: str
    description: Optional[str]
    created_by_id: uuid.UUID
    due_date: Optional[datetime]
    created_at: datetime
    is_completed: bool
    completed_at: Optional[datetime]

    @strawberry.field
    async def family(self, info: Info) -> Optional[FamilyType]:
        family = await info.context.repository.get_family(self.family_id)
        return FamilyType.from_model(family) if family else None

    @strawberry.field
    async def created_by(self, info: Info) -> Optional[UserType]:
        user = await info.context.repository.get_user(self.created_by_id)
        return UserType.from_model(user) if user else None

    @strawberry.field
    async def task_assignments(self, info: Info) -> List["TaskAssignmentType"]:
        assignments = await info.context.repository.list_assignments(task_id=self.id)
        return [TaskAssignmentType.from_model(assignment) for assignment in assignments]

    @strawberry.field
    async def assignees(self, info: Info) -> List[UserType]:
        users = await info.context.repository.list_assignees(self.id)
        return [UserType.from_model(user) for user in users]

    @classmethod
    def from_model(cls, task: Task) -> "TaskType":
        return cls(**task.model_dump())


@strawberry.type(name="TaskAssignment")
class TaskAssignmentType:
    task_id: uuid.UUID
    user_id: uuid.UUID

    @strawberry.field
    async def task(self, info: Info) -> Optional[TaskType]:
        task = await info.context.repository.get_task(self.task_id)
        return TaskType.from_model(task) if task else None

    @strawberry.field
    async def user(self, info: Info) -> Optional[UserType]:
        user = await info.context.repository.get_user(self.user_id)
        return UserType.from_model(user) if user else None

    @classmethod
    def from_model(cls, assignment: TaskAssignment) -> "TaskAssignmentType":
        return cls(task_id=assignment.task_id, user_id=assignment.user_id)


@strawberry.type
class RegisterUserPayload:
    success: bool
    message: str
    user: Optional[UserType] = None
    family: Optional[FamilyType] = None

    @classmethod
    def from_result(cls, result: RegistrationResult) -> "RegisterUserPayload":
        return cls(
            success=result.success,
            message=result.message,
            user=UserType.from_model(result.user) if result.user else None,
            family=FamilyType.from_model(result.family) if result.family else None,
        )
