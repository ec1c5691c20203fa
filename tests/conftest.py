"""
Pytest fixtures for ReadIt service tests
"""

import itertools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.models.post import Post
from app.models.user import User
from app.utils.config import AppConfig
from app.utils.dependencies import create_container
from app.utils.exceptions import DuplicateUserError, NotifierError
from app.utils.redis_session import RequestSession


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeRedis:
    """Dict-backed stand-in for redis.asyncio.Redis with decode_responses=True"""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, Optional[int]] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("redis unavailable")

    async def set(self, name, value, ex=None):
        self._check()
        self.data[name] = value
        self.ttls[name] = ex
        return True

    async def get(self, name):
        self._check()
        return self.data.get(name)

    async def delete(self, *names):
        self._check()
        count = 0
        for name in names:
            if name in self.data:
                del self.data[name]
                self.ttls.pop(name, None)
                count += 1
        return count

    async def ping(self):
        self._check()
        return True

    async def aclose(self):
        pass

    def expire_now(self, name):
        """Simulate Redis expiring a key"""
        self.data.pop(name, None)
        self.ttls.pop(name, None)

    def keys_with_prefix(self, prefix) -> List[str]:
        return [key for key in self.data if key.startswith(prefix)]


class InMemoryUserDatabase:
    """Credential store double with the same unique constraints as the users table"""

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.lookups: List[tuple] = []
        self.fail = False
        self._ids = itertools.count(1)

    def _check(self):
        if self.fail:
            raise ConnectionError("database unavailable")

    async def find_by_email(self, email: str) -> Optional[User]:
        self._check()
        self.lookups.append(("email", email))
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_username(self, username: str) -> Optional[User]:
        self._check()
        self.lookups.append(("username", username))
        return next((u for u in self.users.values() if u.username == username), None)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        self._check()
        self.lookups.append(("id", user_id))
        return self.users.get(user_id)

    async def create(self, email: str, username: str, password_hash: str) -> User:
        self._check()
        for user in self.users.values():
            if user.email == email:
                raise DuplicateUserError("email")
            if user.username == username:
                raise DuplicateUserError("username")
        now = _now()
        user = User(
            id=next(self._ids),
            email=email,
            username=username,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user

    async def update_password(self, user_id: int, password_hash: str) -> Optional[User]:
        self._check()
        user = self.users.get(user_id)
        if not user:
            return None
        user.password_hash = password_hash
        user.updated_at = _now()
        return user


class InMemoryPostDatabase:

    def __init__(self):
        self.posts: Dict[int, Post] = {}
        self._ids = itertools.count(1)

    async def list_all(self) -> List[Post]:
        return sorted(self.posts.values(), key=lambda p: p.id, reverse=True)

    async def find_by_id(self, post_id: int) -> Optional[Post]:
        return self.posts.get(post_id)

    async def create(self, title: str, text: str, creator_id: Optional[int] = None) -> Post:
        now = _now()
        post = Post(id=next(self._ids), title=title, text=text, creator_id=creator_id, created_at=now, updated_at=now)
        self.posts[post.id] = post
        return post

    async def update_title(self, post_id: int, title: str) -> Optional[Post]:
        post = self.posts.get(post_id)
        if not post:
            return None
        post.title = title
        post.updated_at = _now()
        return post

    async def delete(self, post_id: int) -> bool:
        return self.posts.pop(post_id, None) is not None


class RecordingNotifier:
    """Notifier double that keeps every message it was asked to deliver"""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    async def send(self, to_email: str, html_content: str) -> Dict[str, Any]:
        if self.error:
            raise self.error
        self.sent.append({"to": to_email, "html": html_content})
        return {"success": True, "message_id": f"<{len(self.sent)}@test>"}


@pytest.fixture
def app_config():
    """Application configuration with a cheap bcrypt cost"""
    return AppConfig(
        frontend_url="http://localhost:3000",
        bcrypt_rounds=4,
        session_ttl_seconds=3600,
        environment="testing"
    )


@pytest.fixture
def redis_client():
    return FakeRedis()


@pytest.fixture
def users():
    return InMemoryUserDatabase()


@pytest.fixture
def posts():
    return InMemoryPostDatabase()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    notifier = RecordingNotifier()
    notifier.error = NotifierError("smtp down")
    return notifier


@pytest.fixture
def container(app_config, users, posts, redis_client, notifier):
    return create_container(
        config=app_config,
        users=users,
        posts=posts,
        redis_client=redis_client,
        notifier=notifier
    )


@pytest.fixture
def auth_service(container):
    return container.auth_service


@pytest.fixture
def post_service(container):
    return container.post_service


@pytest.fixture
def new_session(container):
    """Factory for empty request sessions"""
    def _new_session() -> RequestSession:
        return RequestSession(container.sessions)
    return _new_session
