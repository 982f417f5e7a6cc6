import uuid
from datetime import timedelta

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

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
from househeroes.tests.conftest import FIXED_NOW


async def make_family(repo, name="The Test Family"):
    return await repo.create_family(FamilyCreate(name=name), created_at=FIXED_NOW)


async def make_user(repo, family_id=None, first_name="Pat", last_name="Test", role=UserRole.GUARDIAN):
    email = f"{first_name.lower()}.{last_name.lower()}@example.com"
    return await repo.create_user(
        UserCreate(
            external_id=f"ext|{email}",
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            family_id=family_id,
        ),
        created_at=FIXED_NOW,
    )


async def make_task(repo, family_id, created_by_id, title="Chore", due_in_hours=None, created_offset=0):
    due_date = FIXED_NOW + timedelta(hours=due_in_hours) if due_in_hours is not None else None
    return await repo.create_task(
        TaskCreate(family_id=family_id, title=title, created_by_id=created_by_id, due_date=due_date),
        created_at=FIXED_NOW + timedelta(minutes=created_offset),
    )


@pytest.mark.parametrize("model", [Family, User, Task, TaskAssignment])
def test_models_read_rows_through_config_dict(model):
    assert model.model_config["from_attributes"] is True
    assert "Config" not in vars(model)


@pytest.mark.asyncio
async def test_create_and_get_family(repo):
    # Act
    family = await make_family(repo)
    fetched = await repo.get_family(family.id)

    # Assert
    assert fetched == family
    assert fetched.created_at == FIXED_NOW
    assert await repo.get_family(uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_create_user_rejects_duplicate_external_id(repo):
    # Arrange
    family = await make_family(repo)
    await make_user(repo, family.id)

    # Act / Assert
    with pytest.raises(DuplicateUserError):
        await make_user(repo, family.id)

    # The session is still usable after the rollback
    assert len(await repo.list_users()) == 1


@pytest.mark.asyncio
async def test_create_user_with_missing_family_is_not_reported_as_duplicate(repo):
    with pytest.raises(IntegrityError):
        await make_user(repo, family_id=uuid.uuid4())

    assert await repo.list_users() == []


@pytest.mark.asyncio
async def test_create_family_with_new_member(repo):
    # Act
    family, user = await repo.create_family_with_member(
        FamilyCreate(name="The Quinns"),
        created_at=FIXED_NOW,
        role=UserRole.GUARDIAN,
        new_user=UserCreate(external_id="ext-nora", email="nora.quinn@example.com", first_name="Nora"),
    )

    # Assert
    assert user.family_id == family.id
    assert user.role == UserRole.GUARDIAN
    assert user.last_login_at == FIXED_NOW
    assert await repo.list_families() == [family]


@pytest.mark.asyncio
async def test_create_family_with_unknown_member_stores_nothing(repo):
    with pytest.raises(UserNotFoundError):
        await repo.create_family_with_member(
            FamilyCreate(name="The Quinns"), created_at=FIXED_NOW, role=UserRole.GUARDIAN,
            existing_user_id=uuid.uuid4(),
        )

    assert await repo.list_families() == []


@pytest.mark.asyncio
async def test_get_user_by_external_id(repo):
    user = await make_user(repo)

    assert (await repo.get_user_by_external_id("ext|pat.test@example.com")).id == user.id
    assert await repo.get_user_by_external_id("ext|nobody@example.com") is None


@pytest.mark.asyncio
async def test_list_users_filters_by_family_and_orders_by_name(repo):
    # Arrange
    first = await make_family(repo, "First")
    second = await make_family(repo, "Second")
    await make_user(repo, first.id, "Zoe", "Adams")
    await make_user(repo, first.id, "Amy", "Baker")
    await make_user(repo, first.id, "Ben", "Adams")
    await make_user(repo, second.id, "Carl", "Other")

    # Act
    members = await repo.list_users(family_id=first.id)

    # Assert
    assert [(u.first_name, u.last_name) for u in members] == [("Ben", "Adams"), ("Zoe", "Adams"), ("Amy", "Baker")]


@pytest.mark.asyncio
async def test_join_family_sets_family_and_role(repo):
    family = await make_family(repo)
    user = await make_user(repo, role=UserRole.CHILD)

    joined = await repo.join_family(user.id, family.id, UserRole.GUARDIAN)

    assert joined.id == user.id
    assert joined.family_id == family.id
    assert joined.role == UserRole.GUARDIAN
    with pytest.raises(UserNotFoundError):
        await repo.join_family(uuid.uuid4(), family.id, UserRole.CHILD)


@pytest.mark.asyncio
async def test_set_last_login(repo):
    user = await make_user(repo)
    later = FIXED_NOW + timedelta(days=1)

    updated = await repo.set_last_login(user.external_id, later)

    assert updated.last_login_at == later
    assert await repo.set_last_login("ext|missing", later) is None


@pytest.mark.asyncio
async def test_complete_task_stamps_completion(repo):
    family = await make_family(repo)
    user = await make_user(repo, family.id)
    task = await make_task(repo, family.id, user.id)
    done_at = FIXED_NOW + timedelta(hours=3)

    completed = await repo.complete_task(task.id, completed_at=done_at)

    assert completed.is_completed is True
    assert completed.completed_at == done_at
    assert await repo.complete_task(uuid.uuid4(), completed_at=done_at) is None


@pytest.mark.asyncio
async def test_list_tasks_filters(repo):
    # Arrange
    family = await make_family(repo)
    parent = await make_user(repo, family.id, "Dana", "Parent")
    kid = await make_user(repo, family.id, "Kim", "Parent", role=UserRole.CHILD)
    dishes = await make_task(repo, family.id, parent.id, "Wash dishes", due_in_hours=2)
    laundry = await make_task(repo, family.id, parent.id, "Fold laundry", due_in_hours=30, created_offset=1)
    await make_task(repo, family.id, parent.id, "Walk dog", due_in_hours=-5, created_offset=2)
    await repo.create_assignment(TaskAssignmentCreate(task_id=laundry.id, user_id=kid.id))
    await repo.complete_task(dishes.id, completed_at=FIXED_NOW)

    # Act
    open_tasks = await repo.list_tasks(task_filter=TaskFilter(is_completed=False))
    kids_tasks = await repo.list_tasks(task_filter=TaskFilter(assigned_to_user_id=kid.id))
    by_title = await repo.list_tasks(task_filter={"title_contains": "DISH"})
    due_soon = await repo.list_tasks(task_filter=TaskFilter(due_after=FIXED_NOW, due_before=FIXED_NOW + timedelta(days=1)))

    # Assert
    assert [t.title for t in open_tasks] == ["Fold laundry", "Walk dog"]
    assert [t.id for t in kids_tasks] == [laundry.id]
    assert [t.id for t in by_title] == [dishes.id]
    assert [t.id for t in due_soon] == [dishes.id]


@pytest.mark.asyncio
async def test_list_tasks_title_filter_treats_wildcards_literally(repo):
    family = await make_family(repo)
    guardian = await make_user(repo, family.id)
    done = await make_task(repo, family.id, guardian.id, title="100% done")
    await make_task(repo, family.id, guardian.id, title="1000 things", created_offset=1)
    snake = await make_task(repo, family.id, guardian.id, title="rename a_b", created_offset=2)
    await make_task(repo, family.id, guardian.id, title="rename axb", created_offset=3)

    assert [t.id for t in await repo.list_tasks(task_filter={"title_contains": "100%"})] == [done.id]
    assert [t.id for t in await repo.list_tasks(task_filter={"title_contains": "a_b"})] == [snake.id]


@pytest.mark.asyncio
async def test_list_tasks_sorting(repo):
    family = await make_family(repo)
    user = await make_user(repo, family.id)
    await make_task(repo, family.id, user.id, "Bravo", created_offset=0)
    await make_task(repo, family.id, user.id, "Alpha", created_offset=1)
    await make_task(repo, family.id, user.id, "Charlie", created_offset=2)

    default_order = await repo.list_tasks()
    descending = await repo.list_tasks(sort=[TaskSort(field="title", descending=True)])

    assert [t.title for t in default_order] == ["Bravo", "Alpha", "Charlie"]
    assert [t.title for t in descending] == ["Charlie", "Bravo", "Alpha"]


@pytest.mark.asyncio
async def test_list_tasks_rejects_unknown_sort_and_filter_fields(repo):
    with pytest.raises(InvalidQueryError) as sort_error:
        await repo.list_tasks(sort=[TaskSort(field="created_by_id")])
    with pytest.raises(InvalidQueryError) as filter_error:
        await repo.list_tasks(task_filter={"family_id": uuid.uuid4()})

    assert "created_by_id" in str(sort_error.value)
    assert "title" in sort_error.value.details["allowed"]
    assert "family_id" in str(filter_error.value)


@pytest.mark.asyncio
async def test_get_task_scoped_to_family(repo):
    family = await make_family(repo, "Mine")
    other = await make_family(repo, "Theirs")
    user = await make_user(repo, family.id)
    task = await make_task(repo, family.id, user.id)

    assert (await repo.get_task(task.id, family_id=family.id)).id == task.id
    assert await repo.get_task(task.id, family_id=other.id) is None


@pytest.mark.asyncio
async def test_create_assignment_rejects_duplicates_and_missing_rows(repo):
    # Arrange
    family = await make_family(repo)
    user = await make_user(repo, family.id)
    task = await make_task(repo, family.id, user.id)
    assignment = TaskAssignmentCreate(task_id=task.id, user_id=user.id)
    await repo.create_assignment(assignment)

    # Act / Assert
    with pytest.raises(DuplicateAssignmentError):
        await repo.create_assignment(assignment)
    with pytest.raises(TaskNotFoundError):
        await repo.create_assignment(TaskAssignmentCreate(task_id=uuid.uuid4(), user_id=user.id))
    with pytest.raises(UserNotFoundError):
        await repo.create_assignment(TaskAssignmentCreate(task_id=task.id, user_id=uuid.uuid4()))
    assert len(await repo.list_assignments(task_id=task.id)) == 1


@pytest.mark.asyncio
async def test_list_assignees_orders_by_first_name(repo):
    family = await make_family(repo)
    parent = await make_user(repo, family.id, "Pat", "Doe")
    zed = await make_user(repo, family.id, "Zed", "Doe", role=UserRole.CHILD)
    amy = await make_user(repo, family.id, "Amy", "Doe", role=UserRole.CHILD)
    task = await make_task(repo, family.id, parent.id)
    for user in (zed, amy):
        await repo.create_assignment(TaskAssignmentCreate(task_id=task.id, user_id=user.id))

    assignees = await repo.list_assignees(task.id)

    assert [u.first_name for u in assignees] == ["Amy", "Zed"]


@pytest.mark.asyncio
async def test_delete_task_removes_its_assignments(repo):
    family = await make_family(repo)
    user = await make_user(repo, family.id)
    task = await make_task(repo, family.id, user.id)
    await repo.create_assignment(TaskAssignmentCreate(task_id=task.id, user_id=user.id))

    assert await repo.delete_task(task.id) is True
    assert await repo.get_task(task.id) is None
    assert await repo.list_assignments() == []
    assert await repo.delete_task(task.id) is False


@pytest.mark.asyncio
async def test_deleting_user_cascades_to_assignments(repo, db_session):
    # Arrange
    family = await make_family(repo)
    parent = await make_user(repo, family.id, "Pat", "Doe")
    kid = await make_user(repo, family.id, "Kid", "Doe", role=UserRole.CHILD)
    task = await make_task(repo, family.id, parent.id)
    await repo.create_assignment(TaskAssignmentCreate(task_id=task.id, user_id=kid.id))

    # Act
    db_session.execute(delete(UserORM).where(UserORM.id == kid.id))
    db_session.commit()

    # Assert
    assert db_session.query(TaskAssignmentORM).count() == 0
    assert await repo.get_task(task.id) is not None
