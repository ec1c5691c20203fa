"""
Post Service Tests
"""

import pytest


class TestPostService:

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, post_service):
        post = await post_service.create_post("hello", "world", creator_id=3)

        fetched = await post_service.get_post(post.id)

        assert fetched.title == "hello"
        assert fetched.text == "world"
        assert fetched.creator_id == 3

    @pytest.mark.asyncio
    async def test_list_posts_newest_first(self, post_service):
        first = await post_service.create_post("one", "")
        second = await post_service.create_post("two", "")

        posts = await post_service.list_posts()

        assert [p.id for p in posts] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_get_missing_post(self, post_service):
        assert await post_service.get_post(404) is None

    @pytest.mark.asyncio
    async def test_update_post(self, post_service):
        post = await post_service.create_post("old", "text")

        updated = await post_service.update_post(post.id, "new")

        assert updated.id == post.id
        assert updated.title == "new"
        assert (await post_service.get_post(post.id)).title == "new"

    @pytest.mark.asyncio
    async def test_update_missing_post(self, post_service):
        assert await post_service.update_post(404, "new") is None

    @pytest.mark.asyncio
    async def test_delete_post(self, post_service):
        post = await post_service.create_post("bye", "")

        assert await post_service.delete_post(post.id) is True
        assert await post_service.get_post(post.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_post_still_true(self, post_service):
        assert await post_service.delete_post(404) is True
