"""Application context shared by every blueprint in this process."""
from tvtantrum_catalog_service.app_context import create_app_context

app_context = create_app_context()
