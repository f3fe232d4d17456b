"""FastAPI dependency utilities."""

from fastapi import HTTPException, Request, WebSocket, status

from app.domain.exceptions import NotFoundError, ValidationError
from app.services import NotificationServices


def get_services(request: Request) -> NotificationServices:
    """Return the notification services built by the application lifespan."""

    return request.app.state.services


def get_websocket_services(websocket: WebSocket) -> NotificationServices:
    return websocket.app.state.services


def to_http_error(exc: ValidationError | NotFoundError) -> HTTPException:
    """Map notification errors onto the HTTP status the client receives."""

    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
