"""
Shared dependency injection functions for API endpoints.
"""

from fastapi import Request

from jokebox.services.joke_service import JokeService


def get_joke_service(request: Request) -> JokeService:
    """Return the JokeService owned by the running application."""
    return request.app.state.joke_service
