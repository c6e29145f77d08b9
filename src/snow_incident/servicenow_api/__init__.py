from .client import ServiceNowClient
from .query import TableQueryFilter, encode_query

__all__ = ["ServiceNowClient", "TableQueryFilter", "encode_query"]
