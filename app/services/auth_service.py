"""
Authentication Service
Registration, login, logout and password recovery

Every operation answers with an AuthResultSchema: either the user or a list of
field errors the client can render next to its form inputs. Store failures
are not caught here and reach the GraphQL error boundary.
"""

import logging
from typing import Optional

from fastapi import BackgroundTasks
from redis.exceptions import RedisError

from shared.schemas.user import AuthResultSchema, UserRegisterSchema
from shared.utils.security import (
    DEFAULT_BCRYPT_ROUNDS,
    generate_reset_token,
    hash_password,
    validate_email,
    verify_password,
)

from app.models.user import User
from app.utils.database import UserDatabase
from app.utils.exceptions import DuplicateUserError, NotifierError
from app.utils.redis_session import RequestSession, ResetTokenStore

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 3

DUPLICATE_MESSAGES = {
    'email': "email already in use",
    'username': "username not available",
}


class AuthService:
    """User authentication service"""

    def __init__(
        self,
        users: UserDatabase,
        reset_tokens: ResetTokenStore,
        notifier,
        frontend_url: str,
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    ):
        self.users = users
        self.reset_tokens = reset_tokens
        self.notifier = notifier
        self.frontend_url = frontend_url.rstrip('/')
        self.bcrypt_rounds = bcrypt_rounds

    def build_reset_link(self, token: str) -> str:
        return f"{self.frontend_url}/changePassword/{token}"

    async def me(self, session: RequestSession) -> Optional[User]:
        """Get the user bound to the current session, if any"""
        if not session.is_authenticated:
            return None
        return await self.users.find_by_id(session.user_id)

    async def register(self, options: UserRegisterSchema, session: RequestSession) -> AuthResultSchema:
        """
        Register new user and log them in

        Checks run in a fixed order and the first failure is returned.

        Args:
            options: Email, username and password
            session: Session of the current request

        Returns:
            AuthResultSchema: The new user, or a single field error
        """
        if not validate_email(options.email):
            return AuthResultSchema.failure("email", "invalid email format")

        if await self.users.find_by_email(options.email):
            return AuthResultSchema.failure("email", DUPLICATE_MESSAGES['email'])

        if "@" in options.username:
            return AuthResultSchema.failure("username", "username cannot contain '@' sign")

        if await self.users.find_by_username(options.username):
            return AuthResultSchema.failure("username", DUPLICATE_MESSAGES['username'])

        if len(options.username) < MIN_USERNAME_LENGTH:
            return AuthResultSchema.failure(
                "username", f"username must be at least {MIN_USERNAME_LENGTH} characters long"
            )

        if len(options.password) < MIN_PASSWORD_LENGTH:
            return AuthResultSchema.failure(
                "password", f"password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        password_hash = await hash_password(options.password, self.bcrypt_rounds)

        try:
            user = await self.users.create(options.email, options.username, password_hash)
        except DuplicateUserError as e:
            # Lost a race with a concurrent registration
            logger.info(f"Registration rejected by unique constraint on {e.field}")
            return AuthResultSchema.failure(e.field, DUPLICATE_MESSAGES[e.field])

        await session.bind(user.id)

        logger.info(f"User registered successfully: {user.id}")
        return AuthResultSchema.ok(user)

    async def login(self, username_or_email: str, password: str, session: RequestSession) -> AuthResultSchema:
        """
        Authenticate user by username or email

        Args:
            username_or_email: Looked up as an email when it parses as one
            password: Plain text password
            session: Session of the current request

        Returns:
            AuthResultSchema: The user, or a field error
        """
        if validate_email(username_or_email):
            user = await self.users.find_by_email(username_or_email)
        else:
            user = await self.users.find_by_username(username_or_email)

        if not user:
            return AuthResultSchema.failure("usernameOrEmail", "username/email not found")

        if not await verify_password(password, user.password_hash):
            return AuthResultSchema.failure("password", "incorrect password")

        await session.bind(user.id)

        logger.info(f"User logged in: {user.id}")
        return AuthResultSchema.ok(user)

    async def logout(self, session: RequestSession) -> bool:
        """
        Destroy the current session

        Returns:
            bool: False if the session store could not be reached
        """
        user_id = session.user_id
        try:
            await session.destroy()
        except RedisError as e:
            logger.error(f"Unable to logout/destroy session: {e}")
            return False

        logger.info(f"User logged out: {user_id}")
        return True

    async def send_password_reset_email(self, email: str, user_id: int, token: str):
        """
        Deliver the reset link

        Delivery problems are logged and never raised; the token stays valid.
        """
        html_message = f'<a href="{self.build_reset_link(token)}">reset password here</a>'
        try:
            await self.notifier.send(email, html_message)
            logger.info(f"Password reset email sent to user: {user_id}")
        except NotifierError as e:
            logger.error(f"Failed to send password reset email to user {user_id}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error sending password reset email to user {user_id}: {e}")

    async def forgot_password(self, email: str, background_tasks: Optional[BackgroundTasks] = None) -> bool:
        """
        Issue a password reset token and email the reset link

        Always returns True so the response never reveals whether an account
        exists for the address, and never reflects delivery problems.

        Args:
            email: Address the reset was requested for
            background_tasks: When given, the email is sent after the
                response instead of inline
        """
        user = await self.users.find_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email")
            return True

        token = generate_reset_token()
        await self.reset_tokens.issue(token, user.id)

        if background_tasks is not None:
            background_tasks.add_task(self.send_password_reset_email, email, user.id, token)
        else:
            await self.send_password_reset_email(email, user.id, token)

        logger.info(f"Password reset requested for user: {user.id}")
        return True

    async def change_password(self, token: str, new_password: str, session: RequestSession) -> AuthResultSchema:
        """
        Reset password using a reset token and log the user in

        Args:
            token: Token from the reset link
            new_password: New password to set
            session: Session of the current request

        Returns:
            AuthResultSchema: The updated user, or a field error
        """
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return AuthResultSchema.failure(
                "newPassword", f"password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        user_id = await self.reset_tokens.resolve(token)
        if user_id is None:
            return AuthResultSchema.failure("token", "token expired")

        user = await self.users.find_by_id(user_id)
        if not user:
            return AuthResultSchema.failure("token", "user no longer exists")

        new_password_hash = await hash_password(new_password, self.bcrypt_rounds)
        updated = await self.users.update_password(user.id, new_password_hash)
        if not updated:
            # Deleted between the lookup and the update
            return AuthResultSchema.failure("token", "user no longer exists")

        await self.reset_tokens.consume(token)
        await session.bind(updated.id)

        logger.info(f"Password reset successful for user: {updated.id}")
        return AuthResultSchema.ok(updated)
