"""
Spectree configuration with Pydantic v2 compatibility.
"""
from flask import Flask
from spectree import SpecTree

# Global Spectree instance that can be imported by API modules
# This will be initialized by configure_spectree() before any imports of the API modules
api: SpecTree = None  # type: ignore


def configure_spectree(app: Flask) -> SpecTree:
    """
    Configure Spectree for the inventory API.

    Returns:
        SpecTree: Configured Spectree instance
    """
    global api

    api = SpecTree(
        backend_name="flask",
        app=app,
        title="Assembly Inventory API",
        version="1.0.0",
        description="Inventory of raw parts and assemblies built from them",
        path="api/docs",  # OpenAPI docs available at /api/docs
        validation_error_status=400,
    )

    return api
