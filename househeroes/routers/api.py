from typing import List

from fastapi import APIRouter, Depends

from househeroes.dependencies import get_household_service
from househeroes.models import TaskDetail
from househeroes.services import HouseholdService

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/tasks", response_model=List[TaskDetail])
async def list_tasks(
        service: HouseholdService = Depends(get_household_service)
):
    """All tasks with their family, creator and assignees. Development aid, no auth."""
    return await service.list_task_details()
