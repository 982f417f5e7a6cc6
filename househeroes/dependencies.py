from fastapi import Depends

from househeroes.database import get_db
from househeroes.repository import SQLHouseholdRepository
from househeroes.services import HouseholdService, RegistrationService, UserService


# --- Dependencies ---
def get_repository(db=Depends(get_db)) -> SQLHouseholdRepository:
    """Provides the household repository bound to the request's session."""
    return SQLHouseholdRepository(db)


def get_user_service(repo: SQLHouseholdRepository = Depends(get_repository)) -> UserService:
    return UserService(user_repo=repo)


def get_registration_service(repo: SQLHouseholdRepository = Depends(get_repository)) -> RegistrationService:
    return RegistrationService(family_repo=repo, user_repo=repo)


def get_household_service(repo: SQLHouseholdRepository = Depends(get_repository)) -> HouseholdService:
    """Provides the HouseholdService, injecting the repository for all three roles."""
    return HouseholdService(family_repo=repo, user_repo=repo, task_repo=repo)
