"""Screen state for the HouseHeroes client.

View-models hold state and expose commands; rendering is left to whatever
toolkit binds to them. Observers registered with ``add_observer`` are called
as ``observer(name, value)`` whenever a public attribute changes.
"""
import logging
import uuid
from typing import Any, Callable, List, Optional

from househeroes.client.api import FamilyResult, HouseHeroesClient, TaskResult
from househeroes.client.auth import AuthenticationService, AuthenticationState

logger = logging.getLogger(__name__)

Alert = Callable[[str, str], None]
Navigator = Callable[[str], None]
Observer = Callable[[str, Any], None]

MAIN_ROUTE = "//main"
WELCOME_ROUTE = "//welcome"

_MISSING = object()


def log_alert(title: str, message: str) -> None:
    logger.warning("%s: %s", title, message)


def no_navigation(route: str) -> None:
    logger.debug("Navigation to %s requested", route)


class ObservableObject:
    def __init__(self):
        self._observers: List[Observer] = []

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def __setattr__(self, name: str, value: Any) -> None:
        previous = getattr(self, name, _MISSING)
        super().__setattr__(name, value)
        if name.startswith("_") or previous == value:
            return
        for observer in list(getattr(self, "_observers", [])):
            observer(name, value)


class BaseViewModel(ObservableObject):
    def __init__(self, title: str = ""):
        super().__init__()
        self.is_busy = False
        self.title = title

    @property
    def is_not_busy(self) -> bool:
        return not self.is_busy


class FamiliesViewModel(BaseViewModel):
    def __init__(self, client: HouseHeroesClient, alert: Alert = log_alert):
        super().__init__(title="Families")
        self._client = client
        self._alert = alert
        self.families: List[FamilyResult] = []
        self.is_refreshing = False

    def get_families(self) -> None:
        if self.is_busy:
            return
        try:
            self.is_busy = True
            self.families = self._client.get_families()
        except Exception as e:
            self._alert("Error", f"Unable to get families: {e}")
        finally:
            self.is_busy = False
            self.is_refreshing = False

    def refresh(self) -> None:
        self.is_refreshing = True
        self.get_families()


class TasksViewModel(BaseViewModel):
    def __init__(self, client: HouseHeroesClient, alert: Alert = log_alert):
        super().__init__(title="Tasks")
        self._client = client
        self._alert = alert
        self.tasks: List[TaskResult] = []
        self.is_refreshing = False
        self.family_id: Optional[uuid.UUID] = None

    def get_tasks(self) -> None:
        if self.is_busy:
            return
        try:
            self.is_busy = True
            self._load_tasks()
        except Exception as e:
            self._alert("Error", f"Unable to get tasks: {e}")
        finally:
            self.is_busy = False
            self.is_refreshing = False

    def refresh(self) -> None:
        self.is_refreshing = True
        self.get_tasks()

    def complete_task(self, task_id: uuid.UUID) -> None:
        if self.is_busy:
            return
        try:
            self.is_busy = True
            self._client.complete_task(task_id)
            self._load_tasks()
        except Exception as e:
            self._alert("Error", f"Unable to complete task: {e}")
        finally:
            self.is_busy = False

    def _load_tasks(self) -> None:
        tasks = self._client.get_tasks()
        if self.family_id is not None:
            tasks = [task for task in tasks if task.family_id == self.family_id]
        self.tasks = tasks


class LoginViewModel(ObservableObject):
    def __init__(self, auth_service: AuthenticationService, client: HouseHeroesClient,
                 navigate: Navigator = no_navigation):
        super().__init__()
        self._auth_service = auth_service
        self._client = client
        self._navigate = navigate
        self.is_signing_in = False
        self.status_message = ""
        self.is_signed_in = False
        self.user_display_name = ""
        auth_service.add_state_listener(self._on_authentication_state_changed)
        self._update_authentication_state()

    def sign_in(self) -> None:
        self.is_signing_in = True
        self.status_message = "Signing in..."
        try:
            result = self._auth_service.sign_in()
            if result is None:
                self.status_message = "Sign in was cancelled or failed."
                return
            self.status_message = "Signed in successfully!"
            self._update_authentication_state()
            user = self._client.sign_in()
            # First-time users pick or create a family before seeing tasks
            self._navigate(MAIN_ROUTE if user.family_id else WELCOME_ROUTE)
        except Exception as e:
            logger.exception("Sign in error")
            self.status_message = f"Sign in failed: {e}"
        finally:
            self.is_signing_in = False

    def sign_out(self) -> None:
        try:
            self._auth_service.sign_out()
            self.status_message = "Signed out successfully."
            self._update_authentication_state()
        except Exception as e:
            logger.exception("Sign out error")
            self.status_message = f"Sign out failed: {e}"

    def _on_authentication_state_changed(self, state: AuthenticationState) -> None:
        self._update_authentication_state()

    def _update_authentication_state(self) -> None:
        self.is_signed_in = self._auth_service.is_user_authenticated
        self.user_display_name = self._auth_service.get_user_display_name() or "Unknown User"
        if self.is_signed_in:
            self.status_message = f"Welcome, {self.user_display_name}!"


class WelcomeViewModel(ObservableObject):
    def __init__(self, auth_service: AuthenticationService, client: HouseHeroesClient,
                 navigate: Navigator = no_navigation):
        super().__init__()
        self._client = client
        self._navigate = navigate
        display_name = auth_service.get_user_display_name() or "there"
        self.welcome_message = f"Hi {display_name}! Let's get you set up with your family's task management."
        self.family_name = ""
        self.family_code = ""
        self.is_processing = False
        self.status_message = ""

    def create_family(self) -> None:
        if not self.family_name.strip():
            self.status_message = "Please enter a family name."
            return
        self._register(
            "Creating your family...",
            "Family created successfully!",
            "Error creating family",
            create_new_family=True,
            family_name=self.family_name.strip(),
        )

    def join_family(self) -> None:
        if not self.family_code.strip():
            self.status_message = "Please enter a family invitation code."
            return
        try:
            family_id = uuid.UUID(self.family_code.strip())
        except ValueError:
            self.status_message = "Please enter a valid family invitation code."
            return
        self._register(
            "Joining family...",
            "Successfully joined family!",
            "Error joining family",
            existing_family_id=family_id,
        )

    def skip_setup(self) -> None:
        # The user row already exists from sign in; a family can be joined later
        self._navigate(MAIN_ROUTE)

    def _register(self, progress: str, done: str, failure: str, **registration) -> None:
        self.is_processing = True
        self.status_message = progress
        try:
            result = self._client.register_new_user(**registration)
            if not result.success:
                self.status_message = result.message
                return
            self.status_message = done
            self._navigate(MAIN_ROUTE)
        except Exception as e:
            logger.exception(failure)
            self.status_message = f"{failure}: {e}"
        finally:
            self.is_processing = False
