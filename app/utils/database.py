"""
Database Connection Utilities
Connection pool, schema bootstrap and table operations for users and posts
"""

import asyncpg
from typing import List, Optional
import logging
from contextlib import asynccontextmanager

from app.models.post import Post
from app.models.user import User
from app.utils.config import DatabaseConfig
from app.utils.exceptions import DuplicateUserError

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        email TEXT NOT NULL,
        username TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT users_email_key UNIQUE (email),
        CONSTRAINT users_username_key UNIQUE (username)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id SERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        text TEXT NOT NULL DEFAULT '',
        creator_id INTEGER REFERENCES users (id) ON DELETE SET NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS posts_creator_id_idx ON posts (creator_id)",
)

# Unique constraint name -> user field it protects
USER_UNIQUE_CONSTRAINTS = {
    'users_email_key': 'email',
    'users_username_key': 'username',
}

USER_COLUMNS = "id, email, username, password_hash, created_at, updated_at"
POST_COLUMNS = "id, title, text, creator_id, created_at, updated_at"


async def init_database(config: DatabaseConfig) -> asyncpg.Pool:
    """Initialize database connection pool"""
    try:
        pool = await asyncpg.create_pool(
            config.get_database_url(),
            min_size=config.pool_min_size,
            max_size=config.pool_max_size,
            command_timeout=config.command_timeout
        )
        logger.info("Database connection pool initialized successfully")

        # Test connection
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
            logger.info("Database connection test successful")

        return pool

    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Failed to initialize database pool: {e}")
        raise


async def init_schema(pool: asyncpg.Pool):
    """Create tables and indexes if they do not exist"""
    async with pool.acquire() as conn:
        async with conn.transaction():
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)
    logger.info("Database schema is up to date")


async def close_database(pool: Optional[asyncpg.Pool]):
    """Close database connection pool"""
    if pool is not None:
        await pool.close()
        logger.info("Database connection pool closed")


class DatabaseManager:
    """Thin query helper over an asyncpg pool"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    @asynccontextmanager
    async def connection(self):
        """Get database connection from pool"""
        async with self.pool.acquire() as connection:
            yield connection

    async def execute_query(self, query: str, *args):
        """Execute a query and return results"""
        async with self.connection() as conn:
            return await conn.fetch(query, *args)

    async def execute_single(self, query: str, *args):
        """Execute a query and return single result"""
        async with self.connection() as conn:
            return await conn.fetchrow(query, *args)

    async def execute_command(self, query: str, *args):
        """Execute a command (INSERT, UPDATE, DELETE)"""
        async with self.connection() as conn:
            return await conn.execute(query, *args)


class UserDatabase:
    """Credential store: operations on the users table"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def _fetch_user(self, query: str, *args) -> Optional[User]:
        record = await self.db.execute_single(query, *args)
        if record:
            return User.from_record(record)
        return None

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address

        Args:
            email: User email

        Returns:
            User or None
        """
        return await self._fetch_user(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = $1", email
        )

    async def find_by_username(self, username: str) -> Optional[User]:
        """
        Get user by username

        Args:
            username: Username

        Returns:
            User or None
        """
        return await self._fetch_user(
            f"SELECT {USER_COLUMNS} FROM users WHERE username = $1", username
        )

    async def find_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID

        Args:
            user_id: User ID

        Returns:
            User or None
        """
        return await self._fetch_user(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_id
        )

    async def create(self, email: str, username: str, password_hash: str) -> User:
        """
        Create new user

        Args:
            email: Unique email address
            username: Unique username
            password_hash: bcrypt hash of the password

        Returns:
            User: The stored record

        Raises:
            DuplicateUserError: If email or username is already taken
        """
        query = f"""
        INSERT INTO users (email, username, password_hash, created_at, updated_at)
        VALUES ($1, $2, $3, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
        RETURNING {USER_COLUMNS}
        """

        try:
            record = await self.db.execute_single(query, email, username, password_hash)
        except asyncpg.UniqueViolationError as e:
            field = USER_UNIQUE_CONSTRAINTS.get(e.constraint_name)
            if field is None:
                raise
            raise DuplicateUserError(field) from e

        user = User.from_record(record)
        logger.info(f"User created with ID: {user.id}")
        return user

    async def update_password(self, user_id: int, password_hash: str) -> Optional[User]:
        """
        Replace a user's password hash

        Args:
            user_id: User ID
            password_hash: New bcrypt hash

        Returns:
            User: Updated record, or None if the user does not exist
        """
        query = f"""
        UPDATE users
        SET password_hash = $1, updated_at = CURRENT_TIMESTAMP
        WHERE id = $2
        RETURNING {USER_COLUMNS}
        """
        return await self._fetch_user(query, password_hash, user_id)


class PostDatabase:
    """Operations on the posts table"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    async def list_all(self) -> List[Post]:
        records = await self.db.execute_query(
            f"SELECT {POST_COLUMNS} FROM posts ORDER BY created_at DESC, id DESC"
        )
        return [Post.from_record(record) for record in records]

    async def find_by_id(self, post_id: int) -> Optional[Post]:
        record = await self.db.execute_single(
            f"SELECT {POST_COLUMNS} FROM posts WHERE id = $1", post_id
        )
        if record:
            return Post.from_record(record)
        return None

    async def create(self, title: str, text: str, creator_id: Optional[int] = None) -> Post:
        query = f"""
        INSERT INTO posts (title, text, creator_id, created_at, updated_at)
        VALUES ($1, $2, $3, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
        RETURNING {POST_COLUMNS}
        """
        record = await self.db.execute_single(query, title, text, creator_id)
        post = Post.from_record(record)
        logger.info(f"Post created with ID: {post.id}")
        return post

    async def update_title(self, post_id: int, title: str) -> Optional[Post]:
        """Update a post's title and return the updated row"""
        query = f"""
        UPDATE posts
        SET title = $1, updated_at = CURRENT_TIMESTAMP
        WHERE id = $2
        RETURNING {POST_COLUMNS}
        """
        record = await self.db.execute_single(query, title, post_id)
        if record:
            return Post.from_record(record)
        return None

    async def delete(self, post_id: int) -> bool:
        """Delete a post; returns whether a row was removed"""
        result = await self.db.execute_command("DELETE FROM posts WHERE id = $1", post_id)
        return result == "DELETE 1"
