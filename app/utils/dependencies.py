"""
Service Container
Builds the store clients once per process and injects them into the services
"""

from dataclasses import dataclass
from typing import Any, Optional
import logging

from app.services.auth_service import AuthService
from app.services.post_service import PostService
from app.utils.config import AppConfig, get_app_config, get_db_config, get_redis_config, get_smtp_config
from app.utils.database import (
    DatabaseManager,
    PostDatabase,
    UserDatabase,
    close_database,
    init_database,
    init_schema,
)
from app.utils.notification_client import build_notifier
from app.utils.redis_session import ResetTokenStore, SessionStore, close_redis_client, init_redis_client

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request needs, constructed at startup"""
    config: AppConfig
    sessions: SessionStore
    auth_service: AuthService
    post_service: PostService
    db_pool: Optional[Any] = None
    redis_client: Optional[Any] = None

    async def close(self):
        """Release pooled connections"""
        try:
            await close_database(self.db_pool)
        finally:
            await close_redis_client(self.redis_client)


def create_container(
    config: AppConfig,
    users: UserDatabase,
    posts: PostDatabase,
    redis_client,
    notifier,
    db_pool=None
) -> ServiceContainer:
    """Assemble services around already-open clients"""
    sessions = SessionStore(redis_client, ttl=config.session_ttl_seconds)
    reset_tokens = ResetTokenStore(redis_client)

    auth_service = AuthService(
        users=users,
        reset_tokens=reset_tokens,
        notifier=notifier,
        frontend_url=config.frontend_url,
        bcrypt_rounds=config.bcrypt_rounds
    )

    return ServiceContainer(
        config=config,
        sessions=sessions,
        auth_service=auth_service,
        post_service=PostService(posts),
        db_pool=db_pool,
        redis_client=redis_client
    )


async def build_container() -> ServiceContainer:
    """Open the database pool and Redis client from configuration"""
    config = get_app_config()

    pool = await init_database(get_db_config())
    try:
        await init_schema(pool)
        redis_client = await init_redis_client(get_redis_config())
    except Exception:
        await close_database(pool)
        raise

    db = DatabaseManager(pool)
    container = create_container(
        config=config,
        users=UserDatabase(db),
        posts=PostDatabase(db),
        redis_client=redis_client,
        notifier=build_notifier(get_smtp_config()),
        db_pool=pool
    )
    logger.info("Service container ready")
    return container
