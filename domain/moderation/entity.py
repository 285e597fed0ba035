"""
屏蔽/举报领域实体
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.common.exceptions import (
    ModerationTargetRequiredException,
    ModerationSelfTargetException,
)


def _validate_pair(user_id: Optional[int], target_id: Optional[int]) -> None:
    if not user_id or not target_id:
        raise ModerationTargetRequiredException()
    if user_id == target_id:
        raise ModerationSelfTargetException(user_id)


@dataclass
class BlockRecord:
    """`user_id` has blocked `target_id`.

    Stored with a direction, but a record in either direction stops
    messaging between the pair.
    """

    id: Optional[int]
    user_id: int
    target_id: int
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        _validate_pair(self.user_id, self.target_id)

    def involves(self, a: int, b: int) -> bool:
        return {self.user_id, self.target_id} == {a, b}


@dataclass
class Report:
    id: Optional[int]
    reporter_id: int
    target_id: int
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        _validate_pair(self.reporter_id, self.target_id)
