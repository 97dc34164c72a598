"""Route dependencies and helpers"""
from fastapi import Request

from app_state import AppState


def get_app_state(request: Request) -> AppState:
    """Get the AppState that create_app() attached to the application

    Route handlers reach search pipelines, config and storage health only
    through this object.
    """
    return request.app.state.app_state
