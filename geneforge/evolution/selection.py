"""
選擇算子 (Selection Operators)

負責從種群中抽取個體作為親代或倖存者。所有選擇器皆為放回抽樣，
在固定種子的上下文下結果可重現。
"""

import math
from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np

from .context import EvolutionContext
from .exceptions import SelectionError, constraints, validate_positive
from .models import Individual, population_fitness
from .ranking import IndividualRanker

# 輪盤權重平移量，確保所有權重嚴格為正
ROULETTE_EPSILON = 1e-6


class Selector(ABC):
    """選擇器介面"""

    def select(
        self,
        population: Sequence[Individual],
        count: int,
        ranker: IndividualRanker,
        context: EvolutionContext,
    ) -> List[Individual]:
        """從種群中選出恰好 count 個個體

        Args:
            population: 種群列表
            count: 需要選出的個體數量
            ranker: 排序器
            context: 演化上下文

        Returns:
            選中的個體列表

        Raises:
            SelectionError: 若種群為空、count 為負，或選出數量不符
        """
        with constraints(SelectionError) as c:
            c.require(len(population) > 0, "Population must not be empty")
            c.require(count >= 0, f"Selection count ({count}) must not be negative")

        selected = self._select(population, count, ranker, context)

        with constraints(SelectionError) as c:
            c.require(
                len(selected) == count,
                f"Expected output size ({count}) must be equal to actual output size ({len(selected)})",
            )
        return selected

    @abstractmethod
    def _select(
        self,
        population: Sequence[Individual],
        count: int,
        ranker: IndividualRanker,
        context: EvolutionContext,
    ) -> List[Individual]:
        """實際的選擇邏輯（參數已驗證）"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RandomSelector(Selector):
    """隨機選擇：均勻抽樣，忽略適應度"""

    def _select(self, population, count, ranker, context):
        return [context.random.choice(population) for _ in range(count)]


class TournamentSelector(Selector):
    """競賽選擇 (Tournament Selection)

    每次隨機抽出 k 個參與者，回傳其中最佳者；並列時保留最先抽到者。

    Attributes:
        tournament_size: 競賽選擇的參與者數量 (k)
    """

    DEFAULT_SIZE = 3

    def __init__(self, tournament_size: int = DEFAULT_SIZE):
        """初始化競賽選擇器

        Args:
            tournament_size: 競賽參與者數量，預設為 3

        Raises:
            SelectionError: 若 tournament_size < 1
        """
        with constraints(SelectionError) as c:
            validate_positive(c, "tournament size", tournament_size)
        self.tournament_size = tournament_size

    def tournament_select(
        self,
        population: Sequence[Individual],
        ranker: IndividualRanker,
        context: EvolutionContext,
    ) -> Individual:
        """執行一次競賽，回傳勝出的個體"""
        winner = population[context.random.randrange(len(population))]
        for _ in range(self.tournament_size - 1):
            challenger = population[context.random.randrange(len(population))]
            if ranker.compare(challenger, winner) > 0:
                winner = challenger
        return winner

    def _select(self, population, count, ranker, context):
        return [self.tournament_select(population, ranker, context) for _ in range(count)]

    def __repr__(self) -> str:
        return f"TournamentSelector(tournament_size={self.tournament_size})"


class RouletteWheelSelector(Selector):
    """輪盤選擇 (Roulette Wheel / Fitness-Proportional Selection)

    依適應度比例建立累積機率陣列，再以二分搜尋對應每次抽樣。
    適應度先經排序器轉換為「越大越好」的權重；若最小權重不為正，
    所有權重平移 (最小值 - ε)，使權重嚴格為正。

    Attributes:
        sorted: 是否先依排序器排序種群
    """

    def __init__(self, sorted: bool = False):
        self.sorted = sorted

    def probabilities(
        self,
        population: Sequence[Individual],
        ranker: IndividualRanker,
    ) -> np.ndarray:
        """計算每個個體被選中的機率"""
        weights = np.asarray(
            ranker.fitness_transform(population_fitness(population)), dtype=float
        )
        if not np.all(np.isfinite(weights)):
            return np.full(len(weights), 1.0 / len(weights))

        minimum = weights.min()
        if minimum <= 0:
            weights = weights - (minimum - ROULETTE_EPSILON)

        total = weights.sum()
        if not math.isfinite(total) or total <= 0:
            return np.full(len(weights), 1.0 / len(weights))
        return weights / total

    def _select(self, population, count, ranker, context):
        candidates = ranker.sort(population) if self.sorted else list(population)
        cumulative = np.cumsum(self.probabilities(candidates, ranker))
        # 修正浮點誤差，確保最後一格涵蓋 [0, 1)
        cumulative[-1] = 1.0
        draws = np.array([context.random.random() for _ in range(count)], dtype=float)
        # 第一個累積機率嚴格大於抽樣值的位置
        indices = np.searchsorted(cumulative, draws, side="right")
        last = len(candidates) - 1
        return [candidates[min(int(index), last)] for index in indices]

    def __repr__(self) -> str:
        return f"RouletteWheelSelector(sorted={self.sorted})"
