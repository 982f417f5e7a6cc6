from enum import Enum


class UserRole(str, Enum):
    GUARDIAN = "Guardian"
    CHILD = "Child"
