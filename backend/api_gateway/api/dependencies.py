"""FastAPI dependencies — explicit access to process-wide collaborators.

Invariants:
    - The ContentService is created once in create_app and read from app.state;
      handlers never import a module-level provider
"""

from fastapi import Request

from api_gateway.services.content_service import ContentService


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service
