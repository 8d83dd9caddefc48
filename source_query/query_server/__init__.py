# source_query/query_server/__init__.py
from source_query.query_server.query_server import QueryServer, ServerMode

__all__ = ["QueryServer", "ServerMode"]
