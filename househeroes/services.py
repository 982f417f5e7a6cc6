# services.py
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence
from uuid import UUID

from pydantic import ValidationError

from househeroes.core.security import IdentityClaims
from househeroes.db_models.base import utc_now
from househeroes.db_models.enums import UserRole
from househeroes.exceptions import (
    FamilyNotFoundError,
    InvalidInputError,
    TaskNotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from househeroes.models import (
    Family,
    FamilyCreate,
    FamilySummary,
    RegistrationRequest,
    RegistrationResult,
    Task,
    TaskAssignment,
    TaskAssignmentCreate,
    TaskCreate,
    TaskDetail,
    TaskFilter,
    TaskSort,
    User,
    UserCreate,
    UserSummary,
)
from househeroes.repository import FamilyRepository, TaskRepository, UserRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

ALREADY_REGISTERED = "User already registered"
FAMILY_NOT_FOUND = "Family not found"
MUST_CREATE_OR_JOIN = "Must either create a new family or join an existing family"


def validate_input(model, **data):
    """Build a pydantic input model, reporting failures as InvalidInputError."""
    try:
        return model(**data)
    except ValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'input'}: {error['msg']}"
            for error in e.errors()
        )
        raise InvalidInputError(messages) from e


class UserService:
    """Resolves identity-provider claims to application users."""

    def __init__(self, user_repo: UserRepository, clock: Clock = utc_now):
        self.user_repo = user_repo
        self.clock = clock

    async def get_current_user(self, claims: Optional[IdentityClaims]) -> Optional[User]:
        if claims is None or not claims.is_authenticated:
            return None
        return await self.user_repo.get_user_by_external_id(claims.external_user_id)

    async def get_or_create_user(self, claims: IdentityClaims) -> User:
        existing_user = await self.get_current_user(claims)
        if existing_user:
            updated = await self.update_last_login(existing_user.external_id)
            return updated or existing_user

        now = self.clock()
        # New users get a family when they register
        user_data = validate_input(
            UserCreate,
            external_id=claims.external_user_id,
            email=claims.required_email,
            first_name=claims.first_name,
            last_name=claims.last_name,
            role=UserRole.CHILD,
            family_id=None,
        )
        user = await self.user_repo.create_user(user_data, created_at=now, last_login_at=now)
        logger.info("Provisioned user %s for identity %s", user.id, user.external_id)
        return user

    async def get_user_family_id(self, user_id: UUID) -> Optional[UUID]:
        user = await self.user_repo.get_user(user_id)
        return user.family_id if user else None

    async def update_last_login(self, external_id: str) -> Optional[User]:
        return await self.user_repo.set_last_login(external_id, self.clock())


class RegistrationService:
    """Links a signed-in caller to a new or existing family."""

    def __init__(self, family_repo: FamilyRepository, user_repo: UserRepository, clock: Clock = utc_now):
        self.family_repo = family_repo
        self.user_repo = user_repo
        self.clock = clock

    async def register_new_user(self, claims: Optional[IdentityClaims],
                                request: RegistrationRequest) -> RegistrationResult:
        if claims is None or not claims.is_authenticated:
            raise UnauthorizedError("Authentication required")

        external_id = claims.external_user_id
        existing_user = await self.user_repo.get_user_by_external_id(external_id)
        if existing_user and existing_user.family_id is not None:
            return RegistrationResult(success=False, message=ALREADY_REGISTERED)

        if not request.create_new_family and request.existing_family_id is None:
            return RegistrationResult(success=False, message=MUST_CREATE_OR_JOIN)

        # Claims are checked before anything is written
        new_user = None
        if not existing_user:
            new_user = validate_input(
                UserCreate,
                external_id=external_id,
                email=claims.required_email,
                first_name=claims.first_name,
                last_name=claims.last_name,
            )
        now = self.clock()

        if request.create_new_family:
            role = UserRole.GUARDIAN
            family_data = validate_input(FamilyCreate, name=request.family_name or default_family_name(claims))
            # A caller who signed in first keeps their row; no second user is added
            family, user = await self.family_repo.create_family_with_member(
                family_data,
                created_at=now,
                role=role,
                existing_user_id=existing_user.id if existing_user else None,
                new_user=new_user,
            )
        else:
            role = UserRole.CHILD
            family = await self.family_repo.get_family(request.existing_family_id)
            if not family:
                return RegistrationResult(success=False, message=FAMILY_NOT_FOUND)
            if existing_user:
                user = await self.user_repo.join_family(existing_user.id, family.id, role)
            else:
                user_data = new_user.model_copy(update={"family_id": family.id, "role": role})
                user = await self.user_repo.create_user(user_data, created_at=now, last_login_at=now)

        logger.info("Registered user %s in family %s as %s", user.id, family.id, role.value)
        return RegistrationResult(
            success=True,
            message="User registered successfully",
            user=user,
            family=family,
        )


def default_family_name(claims: IdentityClaims) -> str:
    if claims.last_name:
        return f"The {claims.last_name} Family"
    return "My Family"


class HouseholdService:
    """Families, users, tasks and assignments, open and caller-scoped."""

    def __init__(self, family_repo: FamilyRepository, user_repo: UserRepository,
                 task_repo: TaskRepository, clock: Clock = utc_now):
        self.family_repo = family_repo
        self.user_repo = user_repo
        self.task_repo = task_repo
        self.clock = clock

    # --- Open surface ---

    async def list_families(self) -> List[Family]:
        return await self.family_repo.list_families()

    async def list_users(self) -> List[User]:
        return await self.user_repo.list_users()

    async def list_tasks(self, task_filter: Optional[TaskFilter] = None,
                         sort: Optional[Sequence[TaskSort]] = None) -> List[Task]:
        return await self.task_repo.list_tasks(task_filter=task_filter, sort=sort)

    async def list_task_assignments(self) -> List[TaskAssignment]:
        return await self.task_repo.list_assignments()

    async def create_family(self, name: str) -> Family:
        family_data = validate_input(FamilyCreate, name=name)
        return await self.family_repo.create_family(family_data, created_at=self.clock())

    async def create_user(self, **user_fields) -> User:
        user_data = validate_input(UserCreate, **user_fields)
        if user_data.family_id is not None and not await self.family_repo.get_family(user_data.family_id):
            raise FamilyNotFoundError(user_data.family_id)
        return await self.user_repo.create_user(user_data, created_at=self.clock())

    async def create_task(self, **task_fields) -> Task:
        task_data = validate_input(TaskCreate, **task_fields)
        if not await self.family_repo.get_family(task_data.family_id):
            raise FamilyNotFoundError(task_data.family_id)
        if not await self.user_repo.get_user(task_data.created_by_id):
            raise UserNotFoundError(task_data.created_by_id)
        return await self.task_repo.create_task(task_data, created_at=self.clock())

    async def assign_task(self, task_id: UUID, user_id: UUID) -> TaskAssignment:
        return await self.task_repo.create_assignment(TaskAssignmentCreate(task_id=task_id, user_id=user_id))

    async def complete_task(self, task_id: UUID) -> Task:
        # Completing an already completed task stamps completed_at again
        task = await self.task_repo.complete_task(task_id, completed_at=self.clock())
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    async def delete_task(self, task_id: UUID) -> bool:
        return await self.task_repo.delete_task(task_id)

    async def list_task_details(self) -> List[TaskDetail]:
        details = []
        families = {family.id: family for family in await self.family_repo.list_families()}
        users = {user.id: user for user in await self.user_repo.list_users()}
        for task in await self.task_repo.list_tasks():
            family = families.get(task.family_id)
            creator = users.get(task.created_by_id)
            assignments = await self.task_repo.list_assignments(task_id=task.id)
            details.append(TaskDetail(
                **task.model_dump(exclude={"family_id", "created_by_id"}),
                family=FamilySummary.model_validate(family) if family else None,
                created_by=UserSummary.model_validate(creator) if creator else None,
                assignees=[UserSummary.model_validate(users[a.user_id]) for a in assignments if a.user_id in users],
            ))
        return details

    # --- Caller-scoped surface ---

    @staticmethod
    def _caller_family_id(caller: Optional[User]) -> Optional[UUID]:
        return caller.family_id if caller else None

    async def get_my_family(self, caller: Optional[User]) -> Optional[Family]:
        family_id = self._caller_family_id(caller)
        if family_id is None:
            return None
        return await self.family_repo.get_family(family_id)

    async def get_family_members(self, caller: Optional[User]) -> List[User]:
        family_id = self._caller_family_id(caller)
        if family_id is None:
            return []
        return await self.user_repo.list_users(family_id=family_id)

    async def get_my_tasks(self, caller: Optional[User], task_filter: Optional[TaskFilter] = None,
                           sort: Optional[Sequence[TaskSort]] = None) -> List[Task]:
        family_id = self._caller_family_id(caller)
        if family_id is None:
            return []
        return await self.task_repo.list_tasks(family_id=family_id, task_filter=task_filter, sort=sort)

    async def get_task_by_id(self, caller: Optional[User], task_id: UUID) -> Optional[Task]:
        family_id = self._caller_family_id(caller)
        if family_id is None:
            return None
        return await self.task_repo.get_task(task_id, family_id=family_id)
