"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream
from fastapi import APIRouter, Depends, Query, Response, WebSocket, WebSocketDisconnect, status

from app.domain.exceptions import NotFoundError, ValidationError
from app.infrastructure.notifications import notification_event, serialize_notification_detail
from app.interfaces.api.dependencies import get_services, get_websocket_services, to_http_error
from app.interfaces.api.routes_helpers import build_pagination, notification_to_schema
from app.interfaces.api.schemas import (
    DeletedCountRead,
    NotificationPage,
    NotificationRead,
    NotificationStatsRead,
    UnreadCountRead,
    UpdatedCountRead,
)
from app.services import NotificationServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/stats", response_model=NotificationStatsRead)
async def notification_stats(
    services: NotificationServices = Depends(get_services),
) -> NotificationStatsRead:
    stats = await services.store.stats()
    return NotificationStatsRead(
        total=stats.total,
        unread=stats.unread,
        by_type=stats.by_type,
        last_24_hours=stats.last_24_hours,
    )


@router.get("/user/{user_id}", response_model=NotificationPage)
async def list_user_notifications(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    services: NotificationServices = Depends(get_services),
) -> NotificationPage:
    """Return one page of the user's notifications, newest first."""

    items, total = await services.store.list_for_user(user_id, page, limit)
    return NotificationPage(
        data=[notification_to_schema(item) for item in items],
        pagination=build_pagination(total=total, page=page, limit=limit),
    )


@router.get("/user/{user_id}/unread-count", response_model=UnreadCountRead)
async def unread_count(
    user_id: str,
    services: NotificationServices = Depends(get_services),
) -> UnreadCountRead:
    return UnreadCountRead(unread_count=await services.store.unread_count(user_id))


@router.get("/user/{user_id}/type/{notification_type}", response_model=list[NotificationRead])
async def list_notifications_by_type(
    user_id: str,
    notification_type: str,
    services: NotificationServices = Depends(get_services),
) -> list[NotificationRead]:
    try:
        items = await services.store.list_by_type(user_id, notification_type)
    except ValidationError as exc:
        raise to_http_error(exc) from exc
    return [notification_to_schema(item) for item in items]


@router.put("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: str,
    services: NotificationServices = Depends(get_services),
) -> NotificationRead:
    try:
        notification = await services.store.mark_read(notification_id)
    except NotFoundError as exc:
        raise to_http_error(exc) from exc
    return notification_to_schema(notification)


@router.put("/user/{user_id}/mark-all-read", response_model=UpdatedCountRead)
async def mark_all_notifications_read(
    user_id: str,
    services: NotificationServices = Depends(get_services),
) -> UpdatedCountRead:
    return UpdatedCountRead(updated=await services.store.mark_all_read(user_id))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    services: NotificationServices = Depends(get_services),
) -> Response:
    try:
        await services.store.delete(notification_id)
    except NotFoundError as exc:
        raise to_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/user/{user_id}/clear-all", response_model=DeletedCountRead)
async def clear_all_notifications(
    user_id: str,
    services: NotificationServices = Depends(get_services),
) -> DeletedCountRead:
    return DeletedCountRead(deleted=await services.store.delete_all_for_user(user_id))


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to one user's session."""

    user_id = (websocket.query_params.get("user_id") or "").strip()
    if not user_id:
        await websocket.close(code=1008)
        return

    services = get_websocket_services(websocket)
    try:
        pending = await services.store.list_unread_for_user(user_id)
    except Exception:
        logger.exception("Could not load pending notifications for user %s", user_id)
        await websocket.close(code=1011)
        return

    await websocket.accept()
    session_id = uuid4().hex
    receive_stream = services.push_channel.subscribe(session_id, user_id)
    logger.info("User %s joined notifications with session %s", user_id, session_id)
    try:
        await websocket.send_json(
            {"event": "init", "data": [serialize_notification_detail(n) for n in pending]}
        )
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(_forward_notifications, websocket, receive_stream)
            try:
                await _handle_client_messages(websocket, services, user_id)
            except WebSocketDisconnect:
                pass
            finally:
                task_group.cancel_scope.cancel()
    except WebSocketDisconnect:
        pass
    finally:
        services.push_channel.unsubscribe(session_id, user_id)
        receive_stream.close()
        logger.info("Session %s of user %s disconnected", session_id, user_id)


async def _forward_notifications(
    websocket: WebSocket, receive_stream: MemoryObjectReceiveStream[dict[str, Any]]
) -> None:
    try:
        async for payload in receive_stream:
            await websocket.send_json(notification_event(payload))
    except (WebSocketDisconnect, RuntimeError, anyio.ClosedResourceError):
        logger.debug("Stopped forwarding notifications to a closed websocket")


async def _handle_client_messages(
    websocket: WebSocket, services: NotificationServices, user_id: str
) -> None:
    while True:
        try:
            message = await websocket.receive_json()
        except WebSocketDisconnect:
            raise
        except ValueError:
            continue

        if not isinstance(message, dict):
            continue

        message_type = message.get("type")
        if message_type == "ping":
            await websocket.send_json({"type": "pong"})
            continue

        if message_type == "ack":
            ids = message.get("ids", [])
            if not isinstance(ids, list):
                continue
            for notification_id in ids:
                await _acknowledge(services, user_id, str(notification_id))


async def _acknowledge(services: NotificationServices, user_id: str, notification_id: str) -> None:
    """Mark ``notification_id`` read if it belongs to the session's user."""

    try:
        notification = await services.store.get(notification_id)
        if notification.user_id != user_id:
            logger.warning(
                "Ignoring ack from user %s for notification %s of another user",
                user_id,
                notification_id,
            )
            return
        await services.store.mark_read(notification_id)
    except NotFoundError:
        logger.debug("Ignoring ack for unknown notification %s", notification_id)


__all__ = ["router"]
