"""
排序器 (Individual Rankers)

定義個體之間依適應度的全序關係（最大化或最小化），並提供穩定排序。
"""

import functools
import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from .context import DEFAULT_TOLERANCE
from .models import Individual


class IndividualRanker(ABC):
    """排序器介面

    compare 回傳 1 表示第一個個體較佳、-1 表示較差、0 表示相等。
    適應度差異在容差內視為相等；NaN 與 NaN 相等，且 NaN 劣於任何數值。

    Attributes:
        tolerance: 適應度相等比較容差
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        self.tolerance = tolerance

    def compare_fitness(self, first: float, second: float) -> int:
        """比較兩個適應度值"""
        first_nan = math.isnan(first)
        second_nan = math.isnan(second)
        if first_nan or second_nan:
            if first_nan and second_nan:
                return 0
            return -1 if first_nan else 1
        if first == second or abs(first - second) <= self.tolerance:
            return 0
        return self._order(first, second)

    @abstractmethod
    def _order(self, first: float, second: float) -> int:
        """比較兩個不相等的有限適應度值"""

    def compare(self, first: Individual, second: Individual) -> int:
        """比較兩個個體"""
        return self.compare_fitness(first.fitness, second.fitness)

    def sort(self, population: Sequence[Individual]) -> List[Individual]:
        """依適應度由佳至劣排序（穩定排序，相等者維持原順序）"""
        return sorted(population, key=functools.cmp_to_key(self.compare), reverse=True)

    def best(self, population: Sequence[Individual]) -> Optional[Individual]:
        """回傳最佳個體；若有多個並列，回傳最先出現者"""
        best: Optional[Individual] = None
        for individual in population:
            if best is None or self.compare(individual, best) > 0:
                best = individual
        return best

    def fitness_transform(self, fitness: Sequence[float]) -> List[float]:
        """將適應度轉換為「越大越好」的權重（供比例選擇使用）"""
        return list(fitness)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.tolerance == other.tolerance

    def __hash__(self) -> int:
        return hash((type(self), self.tolerance))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tolerance={self.tolerance})"


class FitnessMaxRanker(IndividualRanker):
    """最大化適應度：適應度越高越好"""

    def _order(self, first: float, second: float) -> int:
        return 1 if first > second else -1


class FitnessMinRanker(IndividualRanker):
    """最小化適應度：適應度越低越好"""

    def _order(self, first: float, second: float) -> int:
        return 1 if first < second else -1

    def fitness_transform(self, fitness: Sequence[float]) -> List[float]:
        return [-value for value in fitness]


def update_steady(
    ranker: IndividualRanker,
    best_fitness: float,
    current_fitness: float,
    steady: int,
) -> Tuple[float, int]:
    """更新最佳適應度與停滯世代計數

    若目前適應度嚴格優於歷史最佳，停滯計數歸零；否則加一。

    Args:
        ranker: 排序器
        best_fitness: 歷史最佳適應度（NaN 表示尚無紀錄）
        current_fitness: 本世代最佳適應度
        steady: 目前的停滯世代計數

    Returns:
        (新的歷史最佳適應度, 新的停滯世代計數)
    """
    if math.isnan(best_fitness):
        return current_fitness, 0
    if ranker.compare_fitness(current_fitness, best_fitness) > 0:
        return current_fitness, 0
    return best_fitness, steady + 1
