"""
GraphQL Schema
Combines the resolver groups and mounts them on a FastAPI router
"""

import logging

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter

from app.routes.auth import UserMutation, UserQuery
from app.routes.context import get_context
from app.routes.posts import PostMutation, PostQuery
from app.utils.exceptions import ReadItError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Unexpected error."


def should_mask_error(error: GraphQLError) -> bool:
    """
    Hide infrastructure failures from clients

    Errors raised as GraphQLError (parse errors, permission denials) and
    ReadItError subclasses keep their message.
    """
    original = error.original_error
    if original is None or isinstance(original, (GraphQLError, ReadItError)):
        return False
    logger.error(f"Unexpected error resolving {error.path}: {original!r}")
    return True


@strawberry.type
class Query(UserQuery, PostQuery):
    pass


@strawberry.type
class Mutation(UserMutation, PostMutation):
    pass


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[
        lambda: MaskErrors(should_mask_error=should_mask_error, error_message=GENERIC_ERROR_MESSAGE)
    ],
)


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
