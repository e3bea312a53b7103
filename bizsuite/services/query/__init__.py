from bizsuite.services.query.client import Mutation, QueryClient, QueryObserver, QueryResult, QueryState
from bizsuite.services.query.keys import FrozenParams, QueryKeys, freeze, is_prefix

__all__ = [
    "FrozenParams",
    "Mutation",
    "QueryClient",
    "QueryKeys",
    "QueryObserver",
    "QueryResult",
    "QueryState",
    "freeze",
    "is_prefix",
]
