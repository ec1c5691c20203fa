"""
Post Resolvers
"""

from typing import List, Optional

import strawberry
from strawberry.types import Info

from app.routes.context import IsAuthenticated
from app.routes.types import Post


@strawberry.type
class PostQuery:

    @strawberry.field
    async def posts(self, info: Info) -> List[Post]:
        posts = await info.context.post_service.list_posts()
        return [Post.from_model(post) for post in posts]

    @strawberry.field
    async def post(self, id: int, info: Info) -> Optional[Post]:
        post = await info.context.post_service.get_post(id)
        if not post:
            return None
        return Post.from_model(post)


@strawberry.type
class PostMutation:

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def create_post(self, title: str, text: str, info: Info) -> Post:
        """Create a post owned by the logged-in user"""
        post = await info.context.post_service.create_post(
            title, text, creator_id=info.context.session.user_id
        )
        return Post.from_model(post)

    @strawberry.mutation
    async def update_post(self, id: int, title: str, info: Info) -> Optional[Post]:
        post = await info.context.post_service.update_post(id, title)
        if not post:
            return None
        return Post.from_model(post)

    @strawberry.mutation
    async def delete_post(self, id: int, info: Info) -> bool:
        return await info.context.post_service.delete_post(id)
