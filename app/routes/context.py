"""
GraphQL request context
Loads the session named by the cookie and writes cookie changes back
"""

from typing import Any

from fastapi import Request
from strawberry.fastapi import BaseContext
from strawberry.permission import BasePermission
from strawberry.types import Info

from app.utils.dependencies import ServiceContainer
from app.utils.redis_session import RequestSession


class ReadItContext(BaseContext):
    """Per-request context handed to every resolver"""

    def __init__(self, container: ServiceContainer, session: RequestSession):
        super().__init__()
        self.container = container
        self.session = session

    @property
    def auth_service(self):
        return self.container.auth_service

    @property
    def post_service(self):
        return self.container.post_service

    def clear_session_cookie(self):
        config = self.container.config
        self.response.delete_cookie(
            config.cookie_name,
            httponly=True,
            samesite="lax",
            secure=config.is_production()
        )

    def sync_session_cookie(self):
        """Mirror the session's state onto the outgoing cookie"""
        config = self.container.config
        if self.session.destroyed:
            self.clear_session_cookie()
        elif self.session.issued and self.session.session_id:
            self.response.set_cookie(
                config.cookie_name,
                self.session.session_id,
                max_age=config.session_ttl_seconds,
                httponly=True,
                samesite="lax",
                secure=config.is_production()
            )


async def get_context(request: Request) -> ReadItContext:
    """Context getter for the GraphQL router"""
    container: ServiceContainer = request.app.state.container
    session_id = request.cookies.get(container.config.cookie_name)
    session = await container.sessions.load(session_id)
    return ReadItContext(container, session)


class IsAuthenticated(BasePermission):
    message = "not authenticated"

    def has_permission(self, source: Any, info: Info, **kwargs) -> bool:
        return info.context.session.is_authenticated
