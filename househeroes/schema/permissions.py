from typing import Any

from strawberry.permission import BasePermission
from strawberry.types import Info


class IsAuthenticated(BasePermission):
    message = "The current user is not authorized to access this resource."

    def has_permission(self, source: Any, info: Info, **kwargs) -> bool:
        claims = info.context.claims
        return claims is not None and claims.is_authenticated
