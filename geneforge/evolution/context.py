"""
演化上下文 (Evolution Context)

集中管理亂數來源，並明確傳入每個需要隨機性的操作（選擇、突變、交叉）。
"""

from random import Random
from dataclasses import dataclass, field
from typing import List, Optional

# 適應度相等比較的預設容差
DEFAULT_TOLERANCE = 1e-9


@dataclass
class EvolutionContext:
    """演化上下文

    同一次演化只應由單一邏輯執行緒存取亂數來源，以確保固定種子下
    的結果可逐代重現。

    Attributes:
        random: 亂數來源
    """
    random: Random = field(default_factory=Random)

    @classmethod
    def seeded(cls, seed: int) -> "EvolutionContext":
        """以固定種子建立上下文"""
        return cls(random=Random(seed))

    def indices(self, probability: float, size: int) -> List[int]:
        """以機率 probability 對每個索引進行獨立的伯努利試驗

        Args:
            probability: 每個索引被選中的機率
            size: 索引範圍 [0, size)

        Returns:
            被選中的索引（遞增排序）
        """
        return [i for i in range(size) if self.random.random() < probability]


def resolve_context(context: Optional[EvolutionContext]) -> EvolutionContext:
    """若未提供上下文，建立一個以系統亂數初始化的預設上下文"""
    return context if context is not None else EvolutionContext()
