"""
用户资料API路由 - KYC 审核
"""
from fastapi import APIRouter, Depends

from application.services.profile_service import ProfileApplicationService
from application.dto import KycStatusDTO, UserProfileDTO
from api.dependencies import get_current_user_id, get_current_admin_id, get_profile_service
from core.response import success_response, Response as ApiResponse

router = APIRouter(
    prefix="/profile",
    tags=["用户资料"]
)


@router.get("/me", summary="当前用户资料", response_model=ApiResponse[UserProfileDTO])
async def get_my_profile(
    user_id: int = Depends(get_current_user_id),
    service: ProfileApplicationService = Depends(get_profile_service),
):
    return success_response(data=await service.get_profile(user_id))


@router.post("/{user_id}/kyc", summary="更新KYC状态", response_model=ApiResponse[UserProfileDTO])
async def set_kyc_status(
    user_id: int,
    body: KycStatusDTO,
    _admin_id: int = Depends(get_current_admin_id),
    service: ProfileApplicationService = Depends(get_profile_service),
):
    """管理员审核 KYC；用户在线时收到 `kycVerified`"""
    profile = await service.set_kyc_status(user_id, body.status)
    return success_response(data=profile, message="KYC status updated")
