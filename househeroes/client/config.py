from typing import List

from pydantic import BaseModel, Field

from househeroes import config


class AuthenticationConfig(BaseModel):
    """Entra ID settings for the public (interactive) client."""
    tenant_id: str = ""
    client_id: str = ""
    user_flow: str = "B2C_1_signup_signin"
    authority: str = ""
    scopes: List[str] = Field(default_factory=list)

    @classmethod
    def from_env(cls) -> "AuthenticationConfig":
        return cls(
            tenant_id=config.ENTRA_ID_TENANT_ID,
            client_id=config.ENTRA_ID_CLIENT_ID,
            user_flow=config.ENTRA_ID_USER_FLOW,
            authority=config.ENTRA_ID_AUTHORITY,
            scopes=config.ENTRA_ID_SCOPES,
        )


class ApiSettings(BaseModel):
    graphql_endpoint: str = config.HOUSEHEROES_GRAPHQL_ENDPOINT
    timeout_seconds: float = 10.0
