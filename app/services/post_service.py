"""
Post Service
"""

from typing import List, Optional
import logging

from app.models.post import Post
from app.utils.database import PostDatabase

logger = logging.getLogger(__name__)


class PostService:
    """CRUD operations on posts"""

    def __init__(self, posts: PostDatabase):
        self.posts = posts

    async def list_posts(self) -> List[Post]:
        return await self.posts.list_all()

    async def get_post(self, post_id: int) -> Optional[Post]:
        return await self.posts.find_by_id(post_id)

    async def create_post(self, title: str, text: str, creator_id: Optional[int] = None) -> Post:
        return await self.posts.create(title, text, creator_id)

    async def update_post(self, post_id: int, title: str) -> Optional[Post]:
        """
        Change a post's title

        Returns:
            Post: The row as stored after the update, or None if the post
            does not exist
        """
        post = await self.posts.find_by_id(post_id)
        if not post:
            return None

        return await self.posts.update_title(post_id, title)

    async def delete_post(self, post_id: int) -> bool:
        deleted = await self.posts.delete(post_id)
        if not deleted:
            logger.info(f"Delete requested for missing post {post_id}")
        return True
