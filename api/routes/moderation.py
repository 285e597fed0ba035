"""
屏蔽/举报API路由
"""
from fastapi import APIRouter, Depends

from application.services.moderation_service import ModerationApplicationService
from application.dto import BlockUserDTO, ReportUserDTO, BlockRecordDTO, ReportDTO
from api.dependencies import get_current_user_id, get_moderation_service
from core.response import success_response, Response as ApiResponse

router = APIRouter(
    prefix="/users",
    tags=["屏蔽与举报"]
)


@router.post("/block", summary="屏蔽用户", response_model=ApiResponse[BlockRecordDTO])
async def block_user(
    body: BlockUserDTO,
    user_id: int = Depends(get_current_user_id),
    service: ModerationApplicationService = Depends(get_moderation_service),
):
    """
    屏蔽用户

    - 双方在线连接收到 `userBlocked`
    - 双方之间的聊天记录被清除
    - 之后双方的实时消息会被拦截（`messageBlocked`）
    """
    record = await service.block_user(user_id, body.target_id)
    return success_response(data=record, message="User blocked")


@router.post("/report", summary="举报用户", response_model=ApiResponse[ReportDTO])
async def report_user(
    body: ReportUserDTO,
    user_id: int = Depends(get_current_user_id),
    service: ModerationApplicationService = Depends(get_moderation_service),
):
    """举报用户；双方收到 `userReported`，聊天记录被清除"""
    report = await service.report_user(user_id, body.target_id, body.reason)
    return success_response(data=report, message="User reported")
