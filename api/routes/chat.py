"""
聊天记录API路由 - 持久化消息历史（与 WebSocket 实时转发相互独立）
"""
from fastapi import APIRouter, Depends
from typing import Any, List

from application.services.chat_service import ChatApplicationService
from application.dto import (
    SendMessageDTO, EditMessageDTO, MessageDTO, ConversationDTO, MarkReadResultDTO,
)
from api.dependencies import get_current_user_id, get_chat_service
from core.response import success_response, Response as ApiResponse

router = APIRouter(
    prefix="/chat",
    tags=["聊天"]
)


@router.post("/send", summary="发送消息", response_model=ApiResponse[MessageDTO])
async def send_message(
    body: SendMessageDTO,
    user_id: int = Depends(get_current_user_id),
    service: ChatApplicationService = Depends(get_chat_service),
):
    """
    保存一条消息

    客户端同时通过 WebSocket 发送 `sendMessage` 实现实时投递，
    两条写入路径之间没有事务保证。
    """
    message = await service.send(user_id, body.receiver_id, body.message)
    return success_response(data=message, message="Message sent")


@router.get("/", summary="会话列表", response_model=ApiResponse[List[ConversationDTO]])
async def list_conversations(
    user_id: int = Depends(get_current_user_id),
    service: ChatApplicationService = Depends(get_chat_service),
):
    """当前用户的会话列表（含未读数），按最近消息倒序"""
    chats = await service.list_conversations(user_id)
    return success_response(data=chats)


@router.put("/read/{other_id}", summary="标记已读", response_model=ApiResponse[MarkReadResultDTO])
async def mark_read(
    other_id: int,
    user_id: int = Depends(get_current_user_id),
    service: ChatApplicationService = Depends(get_chat_service),
):
    updated = await service.mark_read(user_id, other_id)
    return success_response(data=MarkReadResultDTO(updated=updated))


@router.get("/{other_id}", summary="聊天记录", response_model=ApiResponse[List[MessageDTO]])
async def history(
    other_id: int,
    user_id: int = Depends(get_current_user_id),
    service: ChatApplicationService = Depends(get_chat_service),
):
    """与指定用户的聊天记录，按时间正序"""
    messages = await service.history(user_id, other_id)
    return success_response(data=messages)


@router.put("/{message_id}", summary="编辑消息", response_model=ApiResponse[MessageDTO])
async def edit_message(
    message_id: int,
    body: EditMessageDTO,
    user_id: int = Depends(get_current_user_id),
    service: ChatApplicationService = Depends(get_chat_service),
):
    message = await service.edit(user_id, message_id, body.message)
    return success_response(data=message, message="Message updated")


@router.delete("/{message_id}", summary="删除消息", response_model=ApiResponse[Any])
async def delete_message(
    message_id: int,
    user_id: int = Depends(get_current_user_id),
    service: ChatApplicationService = Depends(get_chat_service),
):
    await service.delete(user_id, message_id)
    return success_response(data=None, message="Message deleted")
