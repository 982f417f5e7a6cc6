from typing import Any, Dict, Optional
from uuid import UUID


class HouseHeroesError(Exception):
    """Base class for errors raised by the services and the repository.

    ``code`` is a stable machine-readable identifier that is copied into the
    ``extensions`` of GraphQL errors.
    """

    code = "HOUSEHEROES_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        # Picked up by graphql-core as the GraphQL error "extensions"
        self.extensions = {"code": self.code, **self.details}


# --- Not found ---

class NotFoundError(HouseHeroesError):
    code = "NOT_FOUND"


class TaskNotFoundError(NotFoundError):
    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: UUID):
        super().__init__("Task not found", details={"task_id": str(task_id)})


class FamilyNotFoundError(NotFoundError):
    code = "FAMILY_NOT_FOUND"

    def __init__(self, family_id: UUID):
        super().__init__("Family not found", details={"family_id": str(family_id)})


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: UUID):
        super().__init__("User not found", details={"user_id": str(user_id)})


# --- Validation ---

class MissingClaimError(HouseHeroesError):
    code = "MISSING_CLAIM"

    def __init__(self, claim: str):
        super().__init__(f"{claim} not found in claims", details={"claim": claim})


class InvalidInputError(HouseHeroesError):
    code = "INVALID_INPUT"


class InvalidQueryError(HouseHeroesError):
    code = "INVALID_QUERY"


# --- Conflict ---

class DuplicateUserError(HouseHeroesError):
    code = "DUPLICATE_USER"

    def __init__(self, external_id: str):
        super().__init__(
            "A user with this identity already exists",
            details={"external_id": external_id},
        )


class DuplicateAssignmentError(HouseHeroesError):
    code = "DUPLICATE_ASSIGNMENT"

    def __init__(self, task_id: UUID, user_id: UUID):
        super().__init__(
            "User is already assigned to this task",
            details={"task_id": str(task_id), "user_id": str(user_id)},
        )


# --- Authorization ---

class UnauthorizedError(HouseHeroesError):
    code = "UNAUTHORIZED"
