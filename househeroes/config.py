import os
from dotenv import load_dotenv

load_dotenv()

# Database configuration
DB_USER = os.getenv("DB_USER", "user")
DB_PASS = os.getenv("DB_PASS", "password")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "househeroes")
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")

# "Development" creates the schema and loads the sample families at startup
ENVIRONMENT = os.getenv("ENVIRONMENT", "Development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Entra ID configuration
ENTRA_ID_TENANT_ID = os.getenv("ENTRA_ID_TENANT_ID", "")
ENTRA_ID_AUTHORITY = os.getenv(
    "ENTRA_ID_AUTHORITY",
    f"https://login.microsoftonline.com/{ENTRA_ID_TENANT_ID or 'common'}/v2.0",
)
ENTRA_ID_CLIENT_ID = os.getenv("ENTRA_ID_CLIENT_ID", "")
ENTRA_ID_ISSUER = os.getenv("ENTRA_ID_ISSUER", "")
ENTRA_ID_JWKS_URL = os.getenv("ENTRA_ID_JWKS_URL", "")
ENTRA_ID_USER_FLOW = os.getenv("ENTRA_ID_USER_FLOW", "B2C_1_signup_signin")
ENTRA_ID_SCOPES = os.getenv("ENTRA_ID_SCOPES", "").split()
JWT_CLOCK_SKEW_SECONDS = int(os.getenv("JWT_CLOCK_SKEW_SECONDS", "300"))
JWKS_CACHE_TTL_SECONDS = int(os.getenv("JWKS_CACHE_TTL_SECONDS", "3600"))

# Client configuration
HOUSEHEROES_GRAPHQL_ENDPOINT = os.getenv("HOUSEHEROES_GRAPHQL_ENDPOINT", "http://localhost:8000/graphql")


def is_development() -> bool:
    return ENVIRONMENT.lower() == "development"
