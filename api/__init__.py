# API module - Bolide web API and Composio integration
# One client per service, bearer token from config

from .client import WebAPIClient, UploadFile
from .composio import ComposioService, ComposioResult

__all__ = ["WebAPIClient", "UploadFile", "ComposioService", "ComposioResult"]
