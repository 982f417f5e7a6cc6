import logging
import time
from typing import Annotated, Any, Dict, List, Optional

import jwt
import requests
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.algorithms import RSAAlgorithm
from pydantic import BaseModel

from househeroes import config
from househeroes.exceptions import MissingClaimError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_discovery_cache: Dict[str, Any] = {}
_jwks_cache: Dict[str, Any] = {}
_jwks_cache_time: float = 0


class IdentityClaims(BaseModel):
    """Claims asserted by the identity provider in a verified access token."""
    sub: Optional[str] = None
    oid: Optional[str] = None
    email: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    name: Optional[str] = None
    is_authenticated: bool = True

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IdentityClaims":
        email = payload.get("email")
        if not email and payload.get("emails"):
            # B2C user flows put the sign-in address in an "emails" array
            email = payload["emails"][0]
        return cls(
            sub=payload.get("sub"),
            oid=payload.get("oid"),
            email=email,
            given_name=payload.get("given_name"),
            family_name=payload.get("family_name"),
            name=payload.get("name"),
        )

    @property
    def external_user_id(self) -> str:
        user_id = self.sub or self.oid
        if not user_id:
            raise MissingClaimError("User ID")
        return user_id

    @property
    def required_email(self) -> str:
        if not self.email:
            raise MissingClaimError("Email")
        return self.email

    @property
    def first_name(self) -> str:
        return self.given_name or ""

    @property
    def last_name(self) -> str:
        return self.family_name or ""


def _openid_configuration() -> Dict[str, Any]:
    if not _discovery_cache:
        url = f"{config.ENTRA_ID_AUTHORITY.rstrip('/')}/.well-known/openid-configuration"
        logger.info("Fetching OpenID configuration from %s", url)
        response = requests.get(url, timeout=10)
        response.raise_for_status()
        _discovery_cache.update(response.json())
    return _discovery_cache


def get_expected_issuer() -> str:
    return config.ENTRA_ID_ISSUER or _openid_configuration()["issuer"]


def get_signing_keys() -> List[Dict[str, Any]]:
    """Fetch the provider's JWKS, cached for JWKS_CACHE_TTL_SECONDS."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < config.JWKS_CACHE_TTL_SECONDS:
        return _jwks_cache.get("keys", [])

    jwks_url = config.ENTRA_ID_JWKS_URL or _openid_configuration()["jwks_uri"]
    logger.info("Fetching signing keys from %s", jwks_url)
    response = requests.get(jwks_url, timeout=10)
    response.raise_for_status()
    _jwks_cache = response.json()
    _jwks_cache_time = now
    return _jwks_cache.get("keys", [])


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature, issuer, audience and lifetime; return the payload.

    Raises ``jwt.InvalidTokenError`` (or a subclass) when the token is
    rejected.
    """
    keys = get_signing_keys()
    if not keys:
        raise jwt.InvalidTokenError("No signing keys available")

    token_kid = jwt.get_unverified_header(token).get("kid")
    candidates = [key for key in keys if key.get("kid") == token_kid] or keys

    last_exception: Optional[jwt.InvalidTokenError] = None
    for key_data in candidates:
        try:
            public_key = RSAAlgorithm.from_jwk(key_data)
        except jwt.PyJWTError as e:
            logger.warning("Skipping unusable signing key %s: %s", key_data.get("kid"), e)
            continue
        try:
            return jwt.decode(
                token,
                public_key,
                algorithms=["RS256"],
                audience=config.ENTRA_ID_CLIENT_ID,
                issuer=get_expected_issuer(),
                leeway=config.JWT_CLOCK_SKEW_SECONDS,
                options={"require": ["exp", "iss", "aud"]},
            )
        except jwt.InvalidSignatureError as e:
            last_exception = e
            continue
    raise last_exception or jwt.InvalidTokenError("Token could not be verified")


async def get_current_claims(
        credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]
) -> Optional[IdentityClaims]:
    """Claims for the request's bearer token, or None for anonymous callers.

    An invalid token is treated like a missing one; fields that need a
    caller reject the request later.
    """
    if credentials is None or not credentials.credentials:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.warning("Rejected bearer token: %s", e)
        return None
    except requests.RequestException as e:
        logger.error("Could not fetch signing keys: %s", e)
        return None
    return IdentityClaims.from_payload(payload)
