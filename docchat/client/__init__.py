"""Backend access for the document-chat client.

Responsibilities:
    - Environment-driven client configuration
    - Async HTTP calls to the document, history, chat and stats endpoints
    - Translation of transport and status failures into BackendError
"""

from docchat.client.backend import BackendClient, BackendError
from docchat.client.config import MAX_UPLOAD_BYTES, ClientConfig, get_client_config

__all__ = [
    "MAX_UPLOAD_BYTES",
    "BackendClient",
    "BackendError",
    "ClientConfig",
    "get_client_config",
]
