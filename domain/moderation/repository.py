"""
屏蔽/举报仓储接口
"""
from abc import ABC, abstractmethod

from .entity import BlockRecord, Report


class BlockRepository(ABC):
    """屏蔽记录仓储"""

    @abstractmethod
    async def create(self, record: BlockRecord) -> BlockRecord:
        """保存屏蔽记录"""

    @abstractmethod
    async def exists_between(self, a: int, b: int) -> bool:
        """任一方向存在屏蔽记录即返回 True"""


class ReportRepository(ABC):
    """举报记录仓储"""

    @abstractmethod
    async def create(self, report: Report) -> Report:
        """保存举报记录"""
