"""
Redis Session Manager
Manages user sessions and password reset tokens using Redis

Uses async Redis (redis.asyncio) to avoid blocking the event loop. Expiry is
left to Redis: every key is written with a TTL.
"""

import json
import logging
from typing import Any, Dict, Optional
import redis.asyncio as aioredis
from redis.asyncio.sentinel import Sentinel

from app.utils.config import RedisConfig
from shared.utils.security import generate_session_id

logger = logging.getLogger(__name__)

# Password reset tokens live exactly one day
FORGOT_PASSWORD_TTL_SECONDS = 60 * 60 * 24


async def init_redis_client(config: RedisConfig) -> aioredis.Redis:
    """Initialize async Redis client, optionally through Sentinel"""
    if config.redis_sentinel_enabled:
        sentinel_hosts = config.get_sentinel_hosts()
        logger.info(f"Initializing async Redis with Sentinel: hosts={sentinel_hosts}, master={config.redis_sentinel_master}")

        sentinel = Sentinel(
            sentinel_hosts,
            socket_timeout=config.socket_timeout,
            socket_connect_timeout=config.socket_timeout,
            socket_keepalive=True,
            retry_on_timeout=True
        )

        client = sentinel.master_for(
            config.redis_sentinel_master,
            socket_timeout=config.socket_timeout,
            password=config.redis_password or None,
            db=config.redis_db,
            decode_responses=True,
            retry_on_timeout=True
        )
    else:
        client = aioredis.Redis(
            host=config.redis_host,
            port=config.redis_port,
            password=config.redis_password or None,
            db=config.redis_db,
            decode_responses=True,
            socket_timeout=config.socket_timeout,
            socket_keepalive=True,
            health_check_interval=30
        )

    # Test connection
    await client.ping()
    logger.info("Async Redis client initialized successfully")
    return client


async def close_redis_client(client: Optional[aioredis.Redis]):
    """Close async Redis client connection"""
    if client is not None:
        await client.aclose()
        logger.info("Async Redis client closed")


class RedisStore:
    """Key-value store with per-key TTL under a fixed key prefix"""

    prefix = ""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @staticmethod
    def _serialize(value: Any) -> str:
        return json.dumps(value)

    @staticmethod
    def _deserialize(data: Optional[str]) -> Any:
        if data is None:
            return None
        try:
            return json.loads(data)
        except (json.JSONDecodeError, TypeError):
            return data

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Store a value that Redis will expire after ``ttl`` seconds

        Args:
            key: Key without prefix
            value: JSON-serializable value
            ttl: Time to live in seconds
        """
        if ttl <= 0:
            raise ValueError(f"Invalid TTL: {ttl}")
        await self.client.set(self._key(key), self._serialize(value), ex=ttl)

    async def get(self, key: str) -> Any:
        """Get a value, or None if missing or expired"""
        raw = await self.client.get(self._key(key))
        return self._deserialize(raw)

    async def delete(self, key: str) -> bool:
        """Delete a key; returns whether it existed"""
        deleted = await self.client.delete(self._key(key))
        return deleted > 0


class SessionStore(RedisStore):
    """Server-side session data keyed by the session cookie value"""

    prefix = "sess:"

    def __init__(self, client: aioredis.Redis, ttl: int):
        super().__init__(client)
        self.ttl = ttl

    async def load(self, session_id: Optional[str]) -> "RequestSession":
        """
        Load the session referenced by a cookie

        An unknown or expired id yields an empty session that will be issued
        a fresh id when something is bound to it.
        """
        if not session_id:
            return RequestSession(self)

        data = await self.get(session_id)
        if not isinstance(data, dict):
            logger.debug(f"Session not found or expired for token {session_id[:10]}...")
            return RequestSession(self)

        return RequestSession(self, session_id, data)


class ResetTokenStore(RedisStore):
    """Single-use password reset tokens mapping to a user id"""

    prefix = "forget-password:"

    async def issue(self, token: str, user_id: int) -> None:
        await self.set(token, user_id, FORGOT_PASSWORD_TTL_SECONDS)
        logger.info(f"Password reset token created for user {user_id} with TTL {FORGOT_PASSWORD_TTL_SECONDS}s")

    async def resolve(self, token: str) -> Optional[int]:
        user_id = await self.get(token)
        if user_id is None:
            logger.info(f"Reset token not found or expired for token {token[:10]}...")
            return None
        try:
            return int(user_id)
        except (TypeError, ValueError):
            logger.warning(f"Reset token {token[:10]}... holds a malformed user id")
            return None

    async def consume(self, token: str) -> bool:
        deleted = await self.delete(token)
        if deleted:
            logger.info(f"Reset token deleted: {token[:10]}...")
        else:
            logger.warning(f"Reset token not found for deletion: {token[:10]}...")
        return deleted


class RequestSession:
    """
    The session attached to one request

    ``issued`` and ``destroyed`` tell the HTTP layer whether the session
    cookie has to be set or cleared on the way out.
    """

    def __init__(self, store: SessionStore, session_id: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        self.store = store
        self.session_id = session_id
        self.data: Dict[str, Any] = dict(data or {})
        self.issued = False
        self.destroyed = False

    @property
    def user_id(self) -> Optional[int]:
        return self.data.get('user_id')

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    async def bind(self, user_id: int) -> str:
        """
        Attach a user to this session and persist it

        Returns:
            str: The session id to send back as the cookie value
        """
        if not self.session_id:
            self.session_id = generate_session_id()
        self.data['user_id'] = user_id
        await self.store.set(self.session_id, self.data, self.store.ttl)
        self.issued = True
        self.destroyed = False
        logger.info(f"Session bound to user {user_id} with TTL {self.store.ttl}s")
        return self.session_id

    async def destroy(self) -> bool:
        """
        Remove this session from the store

        Store failures propagate; the caller decides how to report them.
        """
        session_id = self.session_id
        self.session_id = None
        self.data = {}
        self.issued = False
        self.destroyed = True

        if not session_id:
            return False

        deleted = await self.store.delete(session_id)
        if deleted:
            logger.info(f"Session deleted: {session_id[:10]}...")
        else:
            logger.warning(f"Session not found for deletion: {session_id[:10]}...")
        return deleted
