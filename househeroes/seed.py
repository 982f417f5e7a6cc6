"""Sample households loaded into an empty development database."""
import logging
import uuid
from datetime import timedelta

from househeroes.db_models import Family, Task, TaskAssignment, User
from househeroes.db_models.base import utc_now
from househeroes.db_models.enums import UserRole

logger = logging.getLogger(__name__)

SEED_NAMESPACE = uuid.UUID("5b0c3f8e-6a43-4e0b-9a57-1f3f6c2d8e10")


def seed_id(key: str) -> uuid.UUID:
    return uuid.uuid5(SEED_NAMESPACE, key)


FAMILIES = [
    # key, name, age in days
    ("paquin", "The Paquin Family", 30),
    ("johnson", "The Johnson Family", 45),
]

USERS = [
    # first name, last name, role, family key
    ("Sarah", "Paquin", UserRole.GUARDIAN, "paquin"),
    ("Mike", "Paquin", UserRole.GUARDIAN, "paquin"),
    ("Emma", "Paquin", UserRole.CHILD, "paquin"),
    ("Lucas", "Paquin", UserRole.CHILD, "paquin"),
    ("Marc", "Johnson", UserRole.GUARDIAN, "johnson"),
    ("Jessica", "Johnson", UserRole.GUARDIAN, "johnson"),
    ("Alex", "Johnson", UserRole.CHILD, "johnson"),
    ("Sophia", "Johnson", UserRole.CHILD, "johnson"),
    ("Ethan", "Johnson", UserRole.CHILD, "johnson"),
    ("Mia", "Johnson", UserRole.CHILD, "johnson"),
]

# key, family, title, description, creator, created (hours ago), due (hours from now),
# completed (hours ago or None)
TASKS = [
    ("trash", "paquin", "Take out trash", "Put trash bins on the curb every Tuesday evening",
     "sarah", 7 * 24, 24, None),
    ("bedroom", "paquin", "Clean bedroom", "Make bed, organize toys, vacuum floor",
     "sarah", 5 * 24, 0, 2),
    ("dishwasher", "paquin", "Load dishwasher", "After dinner, load and start the dishwasher",
     "mike", 3 * 24, 2, None),
    ("dog", "paquin", "Feed the dog", "Give Rex his morning and evening meals",
     "sarah", 10 * 24, -8, 8),
    ("homework", "paquin", "Homework time", "Complete math and reading assignments",
     "mike", 24, 4, None),
    ("lawn", "johnson", "Mow the lawn", "Cut grass in front and back yard, edge walkways",
     "marc", 4 * 24, 2 * 24, None),
    ("groceries", "johnson", "Grocery shopping", "Buy items from the weekly grocery list",
     "jessica", 2 * 24, 24, None),
    ("soccer", "johnson", "Soccer practice pickup", "Pick up kids from soccer practice at 6 PM",
     "marc", 6, -1, 1),
    ("bathroom", "johnson", "Clean bathroom", "Scrub toilet, clean shower, mop floor",
     "jessica", 6 * 24, 24, None),
    ("piano", "johnson", "Piano practice", "Practice piano for 30 minutes",
     "jessica", 8 * 24, 0, None),
    ("table", "johnson", "Set table for dinner", "Put out plates, silverware, and napkins",
     "marc", 4, 1, None),
]

ASSIGNMENTS = [
    ("trash", "lucas"),
    ("bedroom", "emma"),
    ("dishwasher", "emma"),
    ("dishwasher", "lucas"),
    ("dog", "emma"),
    ("homework", "emma"),
    ("homework", "lucas"),
    ("lawn", "alex"),
    ("lawn", "ethan"),
    ("groceries", "jessica"),
    ("soccer", "marc"),
    ("bathroom", "sophia"),
    ("bathroom", "mia"),
    ("piano", "sophia"),
    ("table", "alex"),
]


def seed_database(db_session) -> bool:
    """Insert the sample households unless any family already exists.

    Returns True when rows were inserted.
    """
    if db_session.query(Family.id).first() is not None:
        logger.info("Database already has families, skipping seed")
        return False

    now = utc_now()

    families = {
        key: Family(id=seed_id(f"family:{key}"), name=name, created_at=now - timedelta(days=age))
        for key, name, age in FAMILIES
    }
    db_session.add_all(families.values())
    db_session.flush()

    users = {}
    for first_name, last_name, role, family_key in USERS:
        email = f"{first_name.lower()}.{last_name.lower()}@email.com"
        users[first_name.lower()] = User(
            id=seed_id(f"user:{email}"),
            external_id=f"seed|{email}",
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            family_id=families[family_key].id,
            created_at=now - timedelta(days=30),
        )
    db_session.add_all(users.values())
    db_session.flush()

    tasks = {}
    for key, family_key, title, description, creator, created_ago, due_in, completed_ago in TASKS:
        tasks[key] = Task(
            id=seed_id(f"task:{key}"),
            family_id=families[family_key].id,
            title=title,
            description=description,
            created_by_id=users[creator].id,
            created_at=now - timedelta(hours=created_ago),
            due_date=now + timedelta(hours=due_in),
            is_completed=completed_ago is not None,
            completed_at=now - timedelta(hours=completed_ago) if completed_ago is not None else None,
        )
    db_session.add_all(tasks.values())
    db_session.flush()

    db_session.add_all(
        TaskAssignment(task_id=tasks[task_key].id, user_id=users[user_key].id)
        for task_key, user_key in ASSIGNMENTS
    )
    db_session.commit()

    logger.info(
        "Seeded %d families, %d users, %d tasks and %d assignments",
        len(families), len(users), len(tasks), len(ASSIGNMENTS),
    )
    return True
