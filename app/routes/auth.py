"""
Authentication Resolvers
Current user, registration, login, logout and password reset
"""

from typing import Optional
import logging

import strawberry
from strawberry.types import Info

from shared.schemas.user import UserRegisterSchema

from app.routes.types import EmailUsernamePasswordInput, User, UserResponse

logger = logging.getLogger(__name__)


@strawberry.type
class UserQuery:

    @strawberry.field
    async def me(self, info: Info) -> Optional[User]:
        """The logged-in user, or null"""
        user = await info.context.auth_service.me(info.context.session)
        if not user:
            return None
        return User.from_model(user)


@strawberry.type
class UserMutation:

    @strawberry.mutation
    async def register(self, options: EmailUsernamePasswordInput, info: Info) -> UserResponse:
        """Create an account and start a session for it"""
        result = await info.context.auth_service.register(
            UserRegisterSchema(
                email=options.email,
                username=options.username,
                password=options.password
            ),
            info.context.session
        )
        info.context.sync_session_cookie()
        return UserResponse.from_result(result)

    @strawberry.mutation
    async def login(self, username_or_email: str, password: str, info: Info) -> UserResponse:
        result = await info.context.auth_service.login(
            username_or_email, password, info.context.session
        )
        info.context.sync_session_cookie()
        return UserResponse.from_result(result)

    @strawberry.mutation
    async def logout(self, info: Info) -> bool:
        """Destroy the session; the cookie is cleared even if that fails"""
        success = await info.context.auth_service.logout(info.context.session)
        info.context.clear_session_cookie()
        return success

    @strawberry.mutation
    async def forgot_password(self, email: str, info: Info) -> bool:
        return await info.context.auth_service.forgot_password(
            email, background_tasks=info.context.background_tasks
        )

    @strawberry.mutation
    async def change_password(self, token: str, new_password: str, info: Info) -> UserResponse:
        result = await info.context.auth_service.change_password(
            token, new_password, info.context.session
        )
        info.context.sync_session_cookie()
        return UserResponse.from_result(result)
