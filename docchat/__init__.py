"""DocChat - browser client for chatting with uploaded documents.

Combines NiceGUI for the interface, httpx for backend access, Pydantic for
data validation and FastAPI as the host the interface is mounted on.

Components:
    - client: Backend configuration and HTTP access
    - models: Request/response schemas
    - state: Document registry, selection, chat sessions and pane routing
    - ui: Web interface panes and host application
"""

__version__ = "0.1.0"
