"""
Service container tests
"""

from unittest.mock import AsyncMock, patch

import pytest


class TestServiceContainer:

    @pytest.mark.asyncio
    async def test_close_releases_both_clients(self, container):
        with patch("app.utils.dependencies.close_database", new=AsyncMock()) as close_db, \
                patch("app.utils.dependencies.close_redis_client", new=AsyncMock()) as close_redis:
            await container.close()

        close_db.assert_awaited_once_with(container.db_pool)
        close_redis.assert_awaited_once_with(container.redis_client)

    @pytest.mark.asyncio
    async def test_redis_closed_when_pool_close_fails(self, container):
        close_db = AsyncMock(side_effect=OSError("pool already gone"))

        with patch("app.utils.dependencies.close_database", new=close_db), \
                patch("app.utils.dependencies.close_redis_client", new=AsyncMock()) as close_redis:
            with pytest.raises(OSError):
                await container.close()

        close_redis.assert_awaited_once_with(container.redis_client)
