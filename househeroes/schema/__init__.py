import strawberry
from strawberry.fastapi import GraphQLRouter

from househeroes.schema.context import GraphQLContext, get_context
from househeroes.schema.mutation import Mutation
from househeroes.schema.query import Query

schema = strawberry.Schema(query=Query, mutation=Mutation)


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)


__all__ = ["schema", "create_graphql_router", "GraphQLContext"]
