from typing import Optional

from fastapi import Depends
from strawberry.fastapi import BaseContext

from househeroes.core.security import IdentityClaims, get_current_claims
from househeroes.dependencies import (
    get_household_service,
    get_registration_service,
    get_repository,
    get_user_service,
)
from househeroes.models import User
from househeroes.repository import SQLHouseholdRepository
from househeroes.services import HouseholdService, RegistrationService, UserService


class GraphQLContext(BaseContext):
    """Per-request state handed to every resolver.

    ``claims`` is None for anonymous callers.
    """

    def __init__(self, repository: SQLHouseholdRepository, household_service: HouseholdService,
                 user_service: UserService, registration_service: RegistrationService,
                 claims: Optional[IdentityClaims]):
        super().__init__()
        self.repository = repository
        self.household_service = household_service
        self.user_service = user_service
        self.registration_service = registration_service
        self.claims = claims
        self._caller: Optional[User] = None
        self._caller_loaded = False

    async def current_user(self) -> Optional[User]:
        if not self._caller_loaded:
            self._caller = await self.user_service.get_current_user(self.claims)
            self._caller_loaded = True
        return self._caller


async def get_context(
        repository: SQLHouseholdRepository = Depends(get_repository),
        household_service: HouseholdService = Depends(get_household_service),
        user_service: UserService = Depends(get_user_service),
        registration_service: RegistrationService = Depends(get_registration_service),
        claims: Optional[IdentityClaims] = Depends(get_current_claims),
) -> GraphQLContext:
    return GraphQLContext(
        repository=repository,
        household_service=household_service,
        user_service=user_service,
        registration_service=registration_service,
        claims=claims,
    )
