# repository.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from househeroes.db_models import Family as FamilyORM
from househeroes.db_models import Task as TaskORM
from househeroes.db_models import TaskAssignment as TaskAssignmentORM
from househeroes.db_models import User as UserORM
from househeroes.db_models.enums import UserRole
from househeroes.exceptions import (
    DuplicateAssignmentError,
    DuplicateUserError,
    InvalidQueryError,
    TaskNotFoundError,
    UserNotFoundError,
)
from househeroes.models import (
    Family,
    FamilyCreate,
    Task,
    TaskAssignment,
    TaskAssignmentCreate,
    TaskCreate,
    TaskFilter,
    TaskSort,
    User,
    UserCreate,
)

# Columns a caller may sort tasks by. Anything else is rejected.
TASK_SORT_FIELDS = {
    "title": TaskORM.title,
    "due_date": TaskORM.due_date,
    "created_at": TaskORM.created_at,
    "completed_at": TaskORM.completed_at,
    "is_completed": TaskORM.is_completed,
}
TASK_FILTER_FIELDS = frozenset(TaskFilter.model_fields)


class FamilyRepository(ABC):
    @abstractmethod
    async def list_families(self) -> List[Family]:
        pass

    @abstractmethod
    async def get_family(self, family_id: UUID) -> Optional[Family]:
        pass

    @abstractmethod
    async def create_family(self, family_data: FamilyCreate, created_at: datetime) -> Family:
        pass

    @abstractmethod
    async def create_family_with_member(self, family_data: FamilyCreate, created_at: datetime, role: UserRole,
                                        existing_user_id: Optional[UUID] = None,
                                        new_user: Optional[UserCreate] = None) -> Tuple[Family, User]:
        pass


class UserRepository(ABC):
    @abstractmethod
    async def list_users(self, family_id: Optional[UUID] = None) -> List[User]:
        pass

    @abstractmethod
    async def get_user(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_external_id(self, external_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create_user(self, user_data: UserCreate, created_at: datetime,
                          last_login_at: Optional[datetime] = None) -> User:
        pass

    @abstractmethod
    async def set_last_login(self, external_id: str, last_login_at: datetime) -> Optional[User]:
        pass

    @abstractmethod
    async def join_family(self, user_id: UUID, family_id: UUID, role: UserRole) -> User:
        pass


class TaskRepository(ABC):
    @abstractmethod
    async def list_tasks(self, family_id: Optional[UUID] = None,
                         task_filter: Union[TaskFilter, Dict, None] = None,
                         sort: Optional[Sequence[TaskSort]] = None) -> List[Task]:
        pass

    @abstractmethod
    async def get_task(self, task_id: UUID, family_id: Optional[UUID] = None) -> Optional[Task]:
        pass

    @abstractmethod
    async def create_task(self, task_data: TaskCreate, created_at: datetime) -> Task:
        pass

    @abstractmethod
    async def complete_task(self, task_id: UUID, completed_at: datetime) -> Optional[Task]:
        pass

    @abstractmethod
    async def delete_task(self, task_id: UUID) -> bool:
        pass

    @abstractmethod
    async def list_assignments(self, task_id: Optional[UUID] = None,
                               user_id: Optional[UUID] = None) -> List[TaskAssignment]:
        pass

    @abstractmethod
    async def create_assignment(self, assignment_data: TaskAssignmentCreate) -> TaskAssignment:
        pass

    @abstractmethod
    async def list_assignees(self, task_id: UUID) -> List[User]:
        pass


class SQLHouseholdRepository(FamilyRepository, UserRepository, TaskRepository):
    """Household storage over a SQLAlchemy session.

    Rows are returned as id-keyed pydantic models; related records are
    fetched through the lookups below rather than through ORM relationships.
    """

    def __init__(self, db_session):
        self.db_session = db_session

    # --- Families ---

    async def list_families(self) -> List[Family]:
        families = self.db_session.query(FamilyORM).order_by(FamilyORM.created_at, FamilyORM.name).all()
        return [Family.model_validate(family) for family in families]

    async def get_family(self, family_id: UUID) -> Optional[Family]:
        family = self.db_session.get(FamilyORM, family_id)
        return Family.model_validate(family) if family else None

    async def create_family(self, family_data: FamilyCreate, created_at: datetime) -> Family:
        family = FamilyORM(name=family_data.name, created_at=created_at)
        self.db_session.add(family)
        self.db_session.commit()
        self.db_session.refresh(family)
        return Family.model_validate(family)

    async def create_family_with_member(self, family_data: FamilyCreate, created_at: datetime, role: UserRole,
                                        existing_user_id: Optional[UUID] = None,
                                        new_user: Optional[UserCreate] = None) -> Tuple[Family, User]:
        """Create a family and link its first member in a single commit.

        Links ``existing_user_id`` when given, otherwise inserts ``new_user``.
        Nothing is stored if the member cannot be linked.
        """
        family = FamilyORM(name=family_data.name, created_at=created_at)
        self.db_session.add(family)
        self.db_session.flush()

        if existing_user_id is not None:
            user = self.db_session.get(UserORM, existing_user_id)
            if not user:
                self.db_session.rollback()
                raise UserNotFoundError(existing_user_id)
            user.family_id = family.id
            user.role = role
        else:
            user_data = new_user.model_copy(update={"family_id": family.id, "role": role})
            user = self._user_row(user_data, created_at, last_login_at=created_at)
            self.db_session.add(user)

        try:
            self.db_session.commit()
        except IntegrityError as e:
            self._raise_user_conflict(new_user.external_id if new_user else None, e)
        self.db_session.refresh(family)
        self.db_session.refresh(user)
        return Family.model_validate(family), User.model_validate(user)

    # --- Users ---

    async def list_users(self, family_id: Optional[UUID] = None) -> List[User]:
        query = self.db_session.query(UserORM)
        if family_id is not None:
            query = query.filter(UserORM.family_id == family_id)
        users = query.order_by(UserORM.last_name, UserORM.first_name).all()
        return [User.model_validate(user) for user in users]

    async def get_user(self, user_id: UUID) -> Optional[User]:
        user = self.db_session.get(UserORM, user_id)
        return User.model_validate(user) if user else None

    async def get_user_by_external_id(self, external_id: str) -> Optional[User]:
        user = self.db_session.query(UserORM).filter(UserORM.external_id == external_id).first()
        return User.model_validate(user) if user else None

    async def create_user(self, user_data: UserCreate, created_at: datetime,
                          last_login_at: Optional[datetime] = None) -> User:
        user = self._user_row(user_data, created_at, last_login_at)
        self.db_session.add(user)
        try:
            self.db_session.commit()
        except IntegrityError as e:
            self._raise_user_conflict(user_data.external_id, e)
        self.db_session.refresh(user)
        return User.model_validate(user)

    @staticmethod
    def _user_row(user_data: UserCreate, created_at: datetime, last_login_at: Optional[datetime]) -> UserORM:
        return UserORM(
            external_id=user_data.external_id,
            email=str(user_data.email),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            role=user_data.role,
            family_id=user_data.family_id,
            created_at=created_at,
            last_login_at=last_login_at,
        )

    def _raise_user_conflict(self, external_id: Optional[str], error: IntegrityError):
        # Only a clash on external_id is a duplicate user; other constraint
        # failures (a missing family, for one) propagate unchanged.
        self.db_session.rollback()
        if external_id is not None and self.db_session.query(UserORM.id).filter(
                UserORM.external_id == external_id).first() is not None:
            raise DuplicateUserError(external_id) from error
        raise error

    async def set_last_login(self, external_id: str, last_login_at: datetime) -> Optional[User]:
        user = self.db_session.query(UserORM).filter(UserORM.external_id == external_id).first()
        if not user:
            return None
        user.last_login_at = last_login_at
        self.db_session.commit()
        self.db_session.refresh(user)
        return User.model_validate(user)

    async def join_family(self, user_id: UUID, family_id: UUID, role: UserRole) -> User:
        user = self.db_session.get(UserORM, user_id)
        if not user:
            raise UserNotFoundError(user_id)
        user.family_id = family_id
        user.role = role
        self.db_session.commit()
        self.db_session.refresh(user)
        return User.model_validate(user)

    # --- Tasks ---

    async def list_tasks(self, family_id: Optional[UUID] = None,
                         task_filter: Union[TaskFilter, Dict, None] = None,
                         sort: Optional[Sequence[TaskSort]] = None) -> List[Task]:
        query = self.db_session.query(TaskORM)
        if family_id is not None:
            query = query.filter(TaskORM.family_id == family_id)
        query = self._apply_task_filter(query, task_filter)
        query = query.order_by(*self._task_ordering(sort))
        return [Task.model_validate(task) for task in query.all()]

    async def get_task(self, task_id: UUID, family_id: Optional[UUID] = None) -> Optional[Task]:
        query = self.db_session.query(TaskORM).filter(TaskORM.id == task_id)
        if family_id is not None:
            query = query.filter(TaskORM.family_id == family_id)
        task = query.first()
        return Task.model_validate(task) if task else None

    async def create_task(self, task_data: TaskCreate, created_at: datetime) -> Task:
        task = TaskORM(
            family_id=task_data.family_id,
            title=task_data.title,
            description=task_data.description,
            created_by_id=task_data.created_by_id,
            due_date=task_data.due_date,
            created_at=created_at,
            is_completed=False,
        )
        self.db_session.add(task)
        self.db_session.commit()
        self.db_session.refresh(task)
        return Task.model_validate(task)

    async def complete_task(self, task_id: UUID, completed_at: datetime) -> Optional[Task]:
        task = self.db_session.get(TaskORM, task_id)
        if not task:
            return None
        task.is_completed = True
        task.completed_at = completed_at
        self.db_session.commit()
        self.db_session.refresh(task)
        return Task.model_validate(task)

    async def delete_task(self, task_id: UUID) -> bool:
        task = self.db_session.get(TaskORM, task_id)
        if not task:
            return False
        self.db_session.query(TaskAssignmentORM).filter(
            TaskAssignmentORM.task_id == task_id
        ).delete(synchronize_session=False)
        self.db_session.delete(task)
        self.db_session.commit()
        return True

    # --- Assignments ---

    async def list_assignments(self, task_id: Optional[UUID] = None,
                               user_id: Optional[UUID] = None) -> List[TaskAssignment]:
        query = self.db_session.query(TaskAssignmentORM)
        if task_id is not None:
            query = query.filter(TaskAssignmentORM.task_id == task_id)
        if user_id is not None:
            query = query.filter(TaskAssignmentORM.user_id == user_id)
        assignments = query.order_by(TaskAssignmentORM.task_id, TaskAssignmentORM.user_id).all()
        return [TaskAssignment.model_validate(assignment) for assignment in assignments]

    async def create_assignment(self, assignment_data: TaskAssignmentCreate) -> TaskAssignment:
        if self.db_session.get(TaskORM, assignment_data.task_id) is None:
            raise TaskNotFoundError(assignment_data.task_id)
        if self.db_session.get(UserORM, assignment_data.user_id) is None:
            raise UserNotFoundError(assignment_data.user_id)

        assignment = TaskAssignmentORM(task_id=assignment_data.task_id, user_id=assignment_data.user_id)
        self.db_session.add(assignment)
        try:
            self.db_session.commit()
        except IntegrityError as e:
            self.db_session.rollback()
            raise DuplicateAssignmentError(assignment_data.task_id, assignment_data.user_id) from e
        return TaskAssignment(task_id=assignment_data.task_id, user_id=assignment_data.user_id)

    async def list_assignees(self, task_id: UUID) -> List[User]:
        users = (
            self.db_session.query(UserORM)
            .join(TaskAssignmentORM, TaskAssignmentORM.user_id == UserORM.id)
            .filter(TaskAssignmentORM.task_id == task_id)
            .order_by(UserORM.first_name)
            .all()
        )
        return [User.model_validate(user) for user in users]

    # --- Query shaping ---

    @staticmethod
    def _apply_task_filter(query, task_filter: Union[TaskFilter, Dict, None]):
        if task_filter is None:
            return query
        if isinstance(task_filter, dict):
            unknown = set(task_filter) - TASK_FILTER_FIELDS
            if unknown:
                raise InvalidQueryError(
                    f"Unsupported task filter field(s): {', '.join(sorted(unknown))}",
                    details={"allowed": sorted(TASK_FILTER_FIELDS)},
                )
            task_filter = TaskFilter(**task_filter)

        if task_filter.is_completed is not None:
            query = query.filter(TaskORM.is_completed == task_filter.is_completed)
        if task_filter.assigned_to_user_id is not None:
            assigned = select(TaskAssignmentORM.task_id).where(
                TaskAssignmentORM.user_id == task_filter.assigned_to_user_id
            )
            query = query.filter(TaskORM.id.in_(assigned))
        if task_filter.title_contains:
            # Matched literally: % and _ in the search text are not wildcards
            query = query.filter(TaskORM.title.icontains(task_filter.title_contains, autoescape=True))
        if task_filter.due_before is not None:
            query = query.filter(TaskORM.due_date < task_filter.due_before)
        if task_filter.due_after is not None:
            query = query.filter(TaskORM.due_date > task_filter.due_after)
        return query

    @staticmethod
    def _task_ordering(sort: Optional[Sequence[TaskSort]]):
        ordering = []
        for item in sort or []:
            column = TASK_SORT_FIELDS.get(item.field)
            if column is None:
                raise InvalidQueryError(
                    f"Unsupported task sort field: {item.field}",
                    details={"allowed": sorted(TASK_SORT_FIELDS)},
                )
            ordering.append(column.desc() if item.descending else column.asc())
        # Stable tail so equal keys come back in a predictable order
        ordering.extend([TaskORM.created_at.asc(), TaskORM.id.asc()])
        return ordering
