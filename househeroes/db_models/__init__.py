from househeroes.db_models.base import Base
from househeroes.db_models.family import Family
from househeroes.db_models.task import Task, TaskAssignment
from househeroes.db_models.user import User

__all__ = ["Base", "Family", "User", "Task", "TaskAssignment"]
