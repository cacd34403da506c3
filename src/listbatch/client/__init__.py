"""
Module: client
Description: Remote list client protocols and the HTTP implementation.
"""

from .base import BatchTransaction, ListClient, RequestCallback
from .rest import RestBatchTransaction, RestListClient, extract_error_message

__all__ = [
    "BatchTransaction",
    "ListClient",
    "RequestCallback",
    "RestBatchTransaction",
    "RestListClient",
    "extract_error_message",
]
