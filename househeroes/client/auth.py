import logging
from typing import Any, Callable, Dict, List, Optional

import msal
from pydantic import BaseModel

from househeroes.client.config import AuthenticationConfig

logger = logging.getLogger(__name__)


class AuthenticationState(BaseModel):
    is_authenticated: bool
    user_display_name: Optional[str] = None
    user_email: Optional[str] = None


StateListener = Callable[[AuthenticationState], None]


class AuthenticationService:
    """Signs the user in against Entra ID with MSAL and hands out access tokens."""

    def __init__(self, auth_config: AuthenticationConfig, app: Optional[msal.PublicClientApplication] = None):
        self.config = auth_config
        self.scopes = list(auth_config.scopes)
        self._app = app or msal.PublicClientApplication(
            auth_config.client_id,
            authority=auth_config.authority,
        )
        self._last_result: Optional[Dict[str, Any]] = None
        self._listeners: List[StateListener] = []

    @property
    def is_user_authenticated(self) -> bool:
        return bool(self._last_result and self._last_result.get("access_token"))

    def add_state_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def restore_session(self) -> bool:
        """Pick up a cached account from a previous run, if any."""
        result = self.acquire_token_silent()
        if result:
            self._on_state_changed(True)
        return result is not None

    def sign_in(self) -> Optional[Dict[str, Any]]:
        if self._app.get_accounts():
            silent_result = self.acquire_token_silent()
            if silent_result:
                self._on_state_changed(True)
                return silent_result

        # Interactive flow covers both sign-in and sign-up
        result = self._app.acquire_token_interactive(self.scopes, prompt="select_account")
        if not result or "access_token" not in result:
            error = (result or {}).get("error")
            if error in ("access_denied", "authentication_canceled"):
                logger.info("User cancelled authentication")
            else:
                logger.warning("Interactive sign in failed: %s", (result or {}).get("error_description", error))
            return None

        self._last_result = result
        self._on_state_changed(True)
        return result

    def sign_out(self) -> None:
        for account in self._app.get_accounts():
            self._app.remove_account(account)
        self._last_result = None
        self._on_state_changed(False)

    def acquire_token_silent(self) -> Optional[Dict[str, Any]]:
        accounts = self._app.get_accounts()
        if not accounts:
            return None

        result = self._app.acquire_token_silent(self.scopes, account=accounts[0])
        if not result or "access_token" not in result:
            # Interaction required
            return None
        self._last_result = result
        return result

    def get_access_token(self) -> Optional[str]:
        result = self.acquire_token_silent()
        if result:
            return result["access_token"]
        # The cached token may still be valid for a short while
        return self._last_result.get("access_token") if self._last_result else None

    def _claims(self) -> Dict[str, Any]:
        return (self._last_result or {}).get("id_token_claims") or {}

    def get_user_display_name(self) -> Optional[str]:
        if not self._last_result:
            return None
        claims = self._claims()
        username = claims.get("preferred_username") or claims.get("name")
        if username:
            return username
        full_name = f"{claims.get('given_name', '')} {claims.get('family_name', '')}".strip()
        return full_name or None

    def get_user_email(self) -> Optional[str]:
        claims = self._claims()
        emails = claims.get("emails") or []
        return claims.get("preferred_username") or claims.get("email") or (emails[0] if emails else None)

    def _on_state_changed(self, is_authenticated: bool) -> None:
        state = AuthenticationState(
            is_authenticated=is_authenticated,
            user_display_name=self.get_user_display_name() if is_authenticated else None,
            user_email=self.get_user_email() if is_authenticated else None,
        )
        for listener in list(self._listeners):
            listener(state)
