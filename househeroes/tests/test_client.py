import uuid
from unittest.mock import MagicMock

import pytest
import requests

from househeroes import config
from househeroes.client.api import GraphQLClientError, HouseHeroesClient, RegisterUserResult, TaskResult, UserResult
from househeroes.client.auth import AuthenticationService
from househeroes.client.config import ApiSettings, AuthenticationConfig
from househeroes.client.viewmodels import (
    MAIN_ROUTE,
    WELCOME_ROUTE,
    FamiliesViewModel,
    LoginViewModel,
    TasksViewModel,
    WelcomeViewModel,
)

FAMILY_ID = uuid.uuid4()
AUTH_CONFIG = AuthenticationConfig(client_id="client-id", authority="https://login.example.test/tenant", scopes=["api.read"])
TOKEN_RESULT = {
    "access_token": "token-123",
    "id_token_claims": {"name": "Alice Smith", "emails": ["alice.smith@example.com"]},
}


def graphql_response(data=None, errors=None):
    response = MagicMock()
    response.json.return_value = {"data": data, "errors": errors} if errors else {"data": data}
    return response


def make_task_result(title="Dishes", completed=False):
    return TaskResult(
        id=uuid.uuid4(),
        family_id=FAMILY_ID,
        title=title,
        created_by_id=uuid.uuid4(),
        is_completed=completed,
    )


@pytest.fixture
def msal_app():
    app = MagicMock()
    app.get_accounts.return_value = []
    app.acquire_token_interactive.return_value = TOKEN_RESULT
    return app


@pytest.fixture
def auth_service(msal_app):
    return AuthenticationService(AUTH_CONFIG, app=msal_app)


# --- HouseHeroesClient ---

def test_execute_sends_bearer_token_and_operation():
    session = MagicMock()
    session.post.return_value = graphql_response({"families": []})
    client = HouseHeroesClient(ApiSettings(graphql_endpoint="http://api.test/graphql"), lambda: "token-123", session)

    assert client.get_families() == []

    args, kwargs = session.post.call_args
    assert args == ("http://api.test/graphql",)
    assert kwargs["headers"]["Authorization"] == "Bearer token-123"
    assert kwargs["json"]["operationName"] == "GetFamilies"
    assert "families" in kwargs["json"]["query"]


def test_execute_without_token_sends_no_authorization_header():
    session = MagicMock()
    session.post.return_value = graphql_response({"families": []})

    HouseHeroesClient(session=session).get_families()

    assert "Authorization" not in session.post.call_args.kwargs["headers"]


def test_execute_raises_on_graphql_errors():
    session = MagicMock()
    session.post.return_value = graphql_response(errors=[{"message": "Task not found"}])
    client = HouseHeroesClient(session=session)

    with pytest.raises(GraphQLClientError) as exc_info:
        client.complete_task(uuid.uuid4())

    assert "Task not found" in str(exc_info.value)


def test_execute_raises_on_http_errors():
    session = MagicMock()
    session.post.return_value.raise_for_status.side_effect = requests.HTTPError("500 Server Error")

    with pytest.raises(requests.HTTPError):
        HouseHeroesClient(session=session).get_users()


def test_results_are_parsed_from_camel_case():
    user_id = str(uuid.uuid4())
    session = MagicMock()
    session.post.return_value = graphql_response({"registerNewUser": {
        "success": True,
        "message": "User registered successfully",
        "user": {"id": user_id, "firstName": "Alice", "lastName": "Smith", "role": "GUARDIAN",
                 "familyId": str(FAMILY_ID)},
        "family": {"id": str(FAMILY_ID), "name": "Smith Crew"},
    }})
    client = HouseHeroesClient(session=session)

    result = client.register_new_user(create_new_family=True, family_name="Smith Crew")

    assert result.user.display_name == "Alice Smith"
    assert result.user.family_id == FAMILY_ID
    variables = session.post.call_args.kwargs["json"]["variables"]
    assert variables == {"input": {"createNewFamily": True, "familyName": "Smith Crew", "existingFamilyId": None}}


# --- AuthenticationService ---

def test_sign_in_interactive(auth_service, msal_app):
    states = []
    auth_service.add_state_listener(states.append)

    result = auth_service.sign_in()

    assert result == TOKEN_RESULT
    assert auth_service.is_user_authenticated is True
    assert auth_service.get_user_display_name() == "Alice Smith"
    assert auth_service.get_user_email() == "alice.smith@example.com"
    msal_app.acquire_token_interactive.assert_called_once_with(["api.read"], prompt="select_account")
    assert states[-1].is_authenticated is True


def test_sign_in_uses_cached_account_first(auth_service, msal_app):
    msal_app.get_accounts.return_value = [{"username": "alice"}]
    msal_app.acquire_token_silent.return_value = TOKEN_RESULT

    assert auth_service.sign_in() == TOKEN_RESULT
    msal_app.acquire_token_interactive.assert_not_called()


def test_sign_in_cancelled(auth_service, msal_app):
    msal_app.acquire_token_interactive.return_value = {"error": "access_denied"}

    assert auth_service.sign_in() is None
    assert auth_service.is_user_authenticated is False
    assert auth_service.get_user_display_name() is None


def test_sign_out_removes_accounts(auth_service, msal_app):
    auth_service.sign_in()
    msal_app.get_accounts.return_value = [{"username": "alice"}, {"username": "alice-work"}]

    auth_service.sign_out()

    assert msal_app.remove_account.call_count == 2
    assert auth_service.is_user_authenticated is False


def test_get_access_token_prefers_silent_refresh(auth_service, msal_app):
    auth_service.sign_in()
    msal_app.get_accounts.return_value = [{"username": "alice"}]
    msal_app.acquire_token_silent.return_value = {"access_token": "refreshed"}

    assert auth_service.get_access_token() == "refreshed"


# --- View-models ---

def test_families_view_model_loads_families():
    client = MagicMock()
    client.get_families.return_value = ["family"]
    changes = []
    view_model = FamiliesViewModel(client)
    view_model.add_observer(lambda name, value: changes.append(name))

    view_model.refresh()

    assert view_model.families == ["family"]
    assert view_model.is_refreshing is False
    assert view_model.is_not_busy is True
    assert "families" in changes


def test_families_view_model_alerts_on_failure():
    client = MagicMock()
    client.get_families.side_effect = requests.ConnectionError("offline")
    alert = MagicMock()
    view_model = FamiliesViewModel(client, alert)

    view_model.get_families()

    alert.assert_called_once()
    assert "offline" in alert.call_args.args[1]
    assert view_model.is_busy is False


def test_tasks_view_model_filters_to_family_and_reloads_after_completion():
    # Arrange
    dishes = make_task_result("Dishes")
    elsewhere = make_task_result("Other family chore").model_copy(update={"family_id": uuid.uuid4()})
    client = MagicMock()
    client.get_tasks.side_effect = [[dishes, elsewhere], [dishes.model_copy(update={"is_completed": True})]]
    view_model = TasksViewModel(client)
    view_model.family_id = FAMILY_ID

    # Act
    view_model.get_tasks()
    view_model.complete_task(dishes.id)

    # Assert
    client.complete_task.assert_called_once_with(dishes.id)
    assert client.get_tasks.call_count == 2
    assert [t.is_completed for t in view_model.tasks] == [True]
    assert view_model.is_busy is False


def test_tasks_view_model_ignores_commands_while_busy():
    client = MagicMock()
    view_model = TasksViewModel(client)
    view_model.is_busy = True

    view_model.get_tasks()
    view_model.complete_task(uuid.uuid4())

    client.get_tasks.assert_not_called()
    client.complete_task.assert_not_called()


def test_login_navigates_new_user_to_welcome(auth_service):
    client = MagicMock()
    client.sign_in.return_value = UserResult(id=uuid.uuid4(), first_name="Alice", family_id=None)
    navigate = MagicMock()
    view_model = LoginViewModel(auth_service, client, navigate)

    view_model.sign_in()

    navigate.assert_called_once_with(WELCOME_ROUTE)
    assert view_model.is_signed_in is True
    assert view_model.user_display_name == "Alice Smith"
    assert view_model.is_signing_in is False


def test_login_navigates_family_member_to_main(auth_service):
    client = MagicMock()
    client.sign_in.return_value = UserResult(id=uuid.uuid4(), family_id=FAMILY_ID)
    navigate = MagicMock()

    LoginViewModel(auth_service, client, navigate).sign_in()

    navigate.assert_called_once_with(MAIN_ROUTE)


def test_login_cancelled_does_not_navigate(auth_service, msal_app):
    msal_app.acquire_token_interactive.return_value = {"error": "authentication_canceled"}
    client = MagicMock()
    navigate = MagicMock()
    view_model = LoginViewModel(auth_service, client, navigate)

    view_model.sign_in()

    navigate.assert_not_called()
    client.sign_in.assert_not_called()
    assert view_model.status_message == "Sign in was cancelled or failed."


def test_login_sign_out(auth_service):
    view_model = LoginViewModel(auth_service, MagicMock())
    view_model.sign_in()

    view_model.sign_out()

    assert view_model.is_signed_in is False
    assert view_model.status_message == "Signed out successfully."


def test_welcome_create_family(auth_service):
    client = MagicMock()
    client.register_new_user.return_value = RegisterUserResult(success=True, message="User registered successfully")
    navigate = MagicMock()
    view_model = WelcomeViewModel(auth_service, client, navigate)
    view_model.family_name = "  Smith Crew "

    view_model.create_family()

    client.register_new_user.assert_called_once_with(create_new_family=True, family_name="Smith Crew")
    navigate.assert_called_once_with(MAIN_ROUTE)
    assert view_model.status_message == "Family created successfully!"
    assert view_model.is_processing is False


def test_welcome_requires_family_name(auth_service):
    client = MagicMock()
    view_model = WelcomeViewModel(auth_service, client)

    view_model.create_family()

    client.register_new_user.assert_not_called()
    assert view_model.status_message == "Please enter a family name."


def test_welcome_join_family_rejects_invalid_code(auth_service):
    client = MagicMock()
    view_model = WelcomeViewModel(auth_service, client)
    view_model.family_code = "not-a-code"

    view_model.join_family()

    client.register_new_user.assert_not_called()
    assert view_model.status_message == "Please enter a valid family invitation code."


def test_welcome_join_family_shows_server_message(auth_service):
    client = MagicMock()
    client.register_new_user.return_value = RegisterUserResult(success=False, message="Family not found")
    navigate = MagicMock()
    view_model = WelcomeViewModel(auth_service, client, navigate)
    view_model.family_code = str(FAMILY_ID)

    view_model.join_family()

    client.register_new_user.assert_called_once_with(existing_family_id=FAMILY_ID)
    navigate.assert_not_called()
    assert view_model.status_message == "Family not found"


def test_welcome_skip_setup(auth_service):
    navigate = MagicMock()

    WelcomeViewModel(auth_service, MagicMock(), navigate).skip_setup()

    navigate.assert_called_once_with(MAIN_ROUTE)


def test_restore_session_from_cached_account(auth_service, msal_app):
    msal_app.get_accounts.return_value = [{"username": "alice"}]
    msal_app.acquire_token_silent.return_value = TOKEN_RESULT

    assert auth_service.restore_session() is True
    assert auth_service.get_access_token() == "token-123"


def test_restore_session_without_accounts(auth_service):
    assert auth_service.restore_session() is False
    assert auth_service.get_access_token() is None


def test_authentication_config_from_env(monkeypatch):
    monkeypatch.setattr(config, "ENTRA_ID_CLIENT_ID", "mobile-client")
    monkeypatch.setattr(config, "ENTRA_ID_SCOPES", ["api://househeroes/tasks.read"])

    auth_config = AuthenticationConfig.from_env()

    assert auth_config.client_id == "mobile-client"
    assert auth_config.scopes == ["api://househeroes/tasks.read"]
