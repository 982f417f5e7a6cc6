import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from househeroes.client import operations
from househeroes.client.config import ApiSettings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class GraphQLClientError(Exception):
    """The server answered with GraphQL errors."""

    def __init__(self, operation_name: str, errors: List[Dict[str, Any]]):
        messages = "; ".join(error.get("message", "Unknown error") for error in errors)
        super().__init__(f"{operation_name} failed: {messages}")
        self.operation_name = operation_name
        self.errors = errors


class ClientModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FamilyResult(ClientModel):
    id: uuid.UUID
    name: str
    created_at: Optional[datetime] = None


class UserResult(ClientModel):
    id: uuid.UUID
    email: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    role: Optional[str] = None
    family_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class FamilyWithMembers(FamilyResult):
    members: List[UserResult] = Field(default_factory=list)


class TaskResult(ClientModel):
    id: uuid.UUID
    family_id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_by_id: uuid.UUID
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    assignees: List[UserResult] = Field(default_factory=list)


class TaskAssignmentResult(ClientModel):
    task_id: uuid.UUID
    user_id: uuid.UUID


class RegisterUserResult(ClientModel):
    success: bool
    message: str
    user: Optional[UserResult] = None
    family: Optional[FamilyResult] = None


class HouseHeroesClient:
    """Typed wrappers around the HouseHeroes GraphQL operations."""

    def __init__(self, settings: Optional[ApiSettings] = None, token_provider: Optional[TokenProvider] = None,
                 session: Optional[requests.Session] = None):
        self.settings = settings or ApiSettings()
        self.token_provider = token_provider
        self.session = session or requests.Session()

    def execute(self, operation_name: str, document: str,
                variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = self.session.post(
            self.settings.graphql_endpoint,
            json={"operationName": operation_name, "query": document, "variables": variables or {}},
            headers=headers,
            timeout=self.settings.timeout_seconds,
        )
        response.raise_for_status()
        body = response.json()
        if body.get("errors"):
            logger.warning("%s returned errors: %s", operation_name, body["errors"])
            raise GraphQLClientError(operation_name, body["errors"])
        return body.get("data") or {}

    # --- Queries ---

    def get_families(self) -> List[FamilyResult]:
        data = self.execute("GetFamilies", operations.GET_FAMILIES)
        return [FamilyResult.model_validate(family) for family in data.get("families") or []]

    def get_users(self) -> List[UserResult]:
        data = self.execute("GetUsers", operations.GET_USERS)
        return [UserResult.model_validate(user) for user in data.get("users") or []]

    def get_tasks(self, task_filter: Optional[Dict[str, Any]] = None,
                  order: Optional[List[Dict[str, str]]] = None) -> List[TaskResult]:
        data = self.execute("GetTasks", operations.GET_TASKS, {"filter": task_filter, "order": order})
        return [TaskResult.model_validate(task) for task in data.get("tasks") or []]

    def get_task_assignments(self) -> List[TaskAssignmentResult]:
        data = self.execute("GetTaskAssignments", operations.GET_TASK_ASSIGNMENTS)
        return [TaskAssignmentResult.model_validate(item) for item in data.get("taskAssignments") or []]

    def get_my_family(self) -> Optional[FamilyWithMembers]:
        data = self.execute("GetMyFamily", operations.GET_MY_FAMILY)
        family = data.get("myFamily")
        return FamilyWithMembers.model_validate(family) if family else None

    def get_my_tasks(self, task_filter: Optional[Dict[str, Any]] = None,
                     order: Optional[List[Dict[str, str]]] = None) -> List[TaskResult]:
        data = self.execute("GetMyTasks", operations.GET_MY_TASKS, {"filter": task_filter, "order": order})
        return [TaskResult.model_validate(task) for task in data.get("myTasks") or []]

    def get_family_members(self) -> List[UserResult]:
        data = self.execute("GetFamilyMembers", operations.GET_FAMILY_MEMBERS)
        return [UserResult.model_validate(user) for user in data.get("familyMembers") or []]

    def get_current_user(self) -> Optional[UserResult]:
        data = self.execute("GetCurrentUser", operations.GET_CURRENT_USER)
        user = data.get("currentUser")
        return UserResult.model_validate(user) if user else None

    def get_task_by_id(self, task_id: uuid.UUID) -> Optional[TaskResult]:
        data = self.execute("GetTaskById", operations.GET_TASK_BY_ID, {"id": str(task_id)})
        task = data.get("taskById")
        return TaskResult.model_validate(task) if task else None

    # --- Mutations ---

    def create_family(self, name: str) -> FamilyResult:
        data = self.execute("CreateFamily", operations.CREATE_FAMILY, {"input": {"name": name}})
        return FamilyResult.model_validate(data["createFamily"])

    def create_user(self, external_id: str, email: str, first_name: str = "", last_name: str = "",
                    role: str = "CHILD", family_id: Optional[uuid.UUID] = None) -> UserResult:
        variables = {"input": {
            "externalId": external_id,
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "role": role,
            "familyId": str(family_id) if family_id else None,
        }}
        data = self.execute("CreateUser", operations.CREATE_USER, variables)
        return UserResult.model_validate(data["createUser"])

    def create_task(self, family_id: uuid.UUID, title: str, created_by_id: uuid.UUID,
                    description: Optional[str] = None, due_date: Optional[datetime] = None) -> TaskResult:
        variables = {"input": {
            "familyId": str(family_id),
            "title": title,
            "createdById": str(created_by_id),
            "description": description,
            "dueDate": due_date.isoformat() if due_date else None,
        }}
        data = self.execute("CreateTask", operations.CREATE_TASK, variables)
        return TaskResult.model_validate(data["createTask"])

    def assign_task(self, task_id: uuid.UUID, user_id: uuid.UUID) -> TaskAssignmentResult:
        variables = {"input": {"taskId": str(task_id), "userId": str(user_id)}}
        data = self.execute("AssignTask", operations.ASSIGN_TASK, variables)
        return TaskAssignmentResult.model_validate(data["assignTask"])

    def complete_task(self, task_id: uuid.UUID) -> TaskResult:
        data = self.execute("CompleteTask", operations.COMPLETE_TASK, {"taskId": str(task_id)})
        return TaskResult.model_validate(data["completeTask"])

    def delete_task(self, task_id: uuid.UUID) -> bool:
        data = self.execute("DeleteTask", operations.DELETE_TASK, {"taskId": str(task_id)})
        return bool(data.get("deleteTask"))

    def sign_in(self) -> UserResult:
        data = self.execute("SignIn", operations.SIGN_IN)
        return UserResult.model_validate(data["signIn"])

    def register_new_user(self, create_new_family: bool = False, family_name: Optional[str] = None,
                          existing_family_id: Optional[uuid.UUID] = None) -> RegisterUserResult:
        variables = {"input": {
            "createNewFamily": create_new_family,
            "familyName": family_name,
            "existingFamilyId": str(existing_family_id) if existing_family_id else None,
        }}
        data = self.execute("RegisterNewUser", operations.REGISTER_NEW_USER, variables)
        return RegisterUserResult.model_validate(data["registerNewUser"])
