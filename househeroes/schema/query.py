import uuid
from typing import Annotated, List, Optional

import strawberry
from strawberry.types import Info

from househeroes.schema.inputs import TaskFilterInput, TaskSortInput, to_task_sort
from househeroes.schema.object_types import FamilyType, TaskAssignmentType, TaskType, UserType
from househeroes.schema.permissions import IsAuthenticated

FilterArgument = Annotated[Optional[TaskFilterInput], strawberry.argument(name="filter")]


@strawberry.type
class Query:
    # --- Open CRUD surface ---

    @strawberry.field
    async def families(self, info: Info) -> List[FamilyType]:
        families = await info.context.household_service.list_families()
        return [FamilyType.from_model(family) for family in families]

    @strawberry.field
    async def users(self, info: Info) -> List[UserType]:
        users = await info.context.household_service.list_users()
        return [UserType.from_model(user) for user in users]

    @strawberry.field
    async def tasks(self, info: Info, task_filter: FilterArgument = None,
                    order: Optional[List[TaskSortInput]] = None) -> List[TaskType]:
        tasks = await info.context.household_service.list_tasks(
            task_filter=task_filter.to_filter() if task_filter else None,
            sort=to_task_sort(order),
        )
        return [TaskType.from_model(task) for task in tasks]

    @strawberry.field
    async def task_assignments(self, info: Info) -> List[TaskAssignmentType]:
        assignments = await info.context.household_service.list_task_assignments()
        return [TaskAssignmentType.from_model(assignment) for assignment in assignments]

    # --- Caller-scoped surface ---

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def my_family(self, info: Info) -> Optional[FamilyType]:
        caller = await info.context.current_user()
        family = await info.context.household_service.get_my_family(caller)
        return FamilyType.from_model(family) if family else None

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def family_members(self, info: Info) -> List[UserType]:
        caller = await info.context.current_user()
        members = await info.context.household_service.get_family_members(caller)
        return [UserType.from_model(member) for member in members]

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def my_tasks(self, info: Info, task_filter: FilterArgument = None,
                       order: Optional[List[TaskSortInput]] = None) -> List[TaskType]:
        caller = await info.context.current_user()
        tasks = await info.context.household_service.get_my_tasks(
            caller,
            task_filter=task_filter.to_filter() if task_filter else None,
            sort=to_task_sort(order),
        )
        return [TaskType.from_model(task) for task in tasks]

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def current_user(self, info: Info) -> Optional[UserType]:
        caller = await info.context.current_user()
        return UserType.from_model(caller) if caller else None

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def task_by_id(self, info: Info, id: uuid.UUID) -> Optional[TaskType]:
        caller = await info.context.current_user()
        task = await info.context.household_service.get_task_by_id(caller, id)
        return TaskType.from_model(task) if task else None
