import uuid

import strawberry
from strawberry.types import Info

from househeroes.schema.inputs import (
    AssignTaskInput,
    CreateFamilyInput,
    CreateTaskInput,
    CreateUserInput,
    RegisterNewUserInput,
)
from househeroes.schema.object_types import (
    FamilyType,
    RegisterUserPayload,
    TaskAssignmentType,
    TaskType,
    UserType,
)
from househeroes.schema.permissions import IsAuthenticated


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_family(self, info: Info, input: CreateFamilyInput) -> FamilyType:
        family = await info.context.household_service.create_family(input.name)
        return FamilyType.from_model(family)

    @strawberry.mutation
    async def create_user(self, info: Info, input: CreateUserInput) -> UserType:
        user = await info.context.household_service.create_user(
            external_id=input.external_id,
            email=input.email,
            first_name=input.first_name,
            last_name=input.last_name,
            role=input.role,
            family_id=input.family_id,
        )
        return UserType.from_model(user)

    @strawberry.mutation
    async def create_task(self, info: Info, input: CreateTaskInput) -> TaskType:
        task = await info.context.household_service.create_task(
            family_id=input.family_id,
            title=input.title,
            description=input.description,
            created_by_id=input.created_by_id,
            due_date=input.due_date,
        )
        return TaskType.from_model(task)

    @strawberry.mutation
    async def assign_task(self, info: Info, input: AssignTaskInput) -> TaskAssignmentType:
        assignment = await info.context.household_service.assign_task(input.task_id, input.user_id)
        return TaskAssignmentType.from_model(assignment)

    @strawberry.mutation
    async def complete_task(self, info: Info, task_id: uuid.UUID) -> TaskType:
        task = await info.context.household_service.complete_task(task_id)
        return TaskType.from_model(task)

    @strawberry.mutation
    async def delete_task(self, info: Info, task_id: uuid.UUID) -> bool:
        return await info.context.household_service.delete_task(task_id)

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def sign_in(self, info: Info) -> UserType:
        """Provision the caller on first sight and record the login time."""
        user = await info.context.user_service.get_or_create_user(info.context.claims)
        return UserType.from_model(user)

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def register_new_user(self, info: Info, input: RegisterNewUserInput) -> RegisterUserPayload:
        result = await info.context.registration_service.register_new_user(
            info.context.claims, input.to_request()
        )
        return RegisterUserPayload.from_result(result)
