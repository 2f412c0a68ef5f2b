"""
終止條件 (Limits)

每個 Limit 是一個對演化狀態的述詞，回傳 True 表示「繼續演化」。
引擎每個世代評估所有 Limit，只要其中一個回傳 False 即停止。
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional

from .exceptions import LimitConfigurationError, constraints, validate_positive
from .generation import EvolutionState
from .listeners import EvolutionListener, EvolutionRecorder

if TYPE_CHECKING:
    from .engine import EvolutionaryEngine


class Limit(ABC):
    """終止條件介面

    Attributes:
        engine: 所屬引擎，由引擎在建立時指派
    """

    engine: Optional["EvolutionaryEngine"] = None

    @property
    def listeners(self) -> List[EvolutionListener]:
        """需要註冊到引擎的監聽器"""
        return []

    @abstractmethod
    def __call__(self, state: EvolutionState) -> bool:
        """回傳 True 表示演化應繼續"""


class MaxGenerations(Limit):
    """最大世代數：世代編號不超過 generations 時繼續"""

    def __init__(self, generations: int):
        """
        Raises:
            LimitConfigurationError: 若 generations 不是正整數
        """
        with constraints(LimitConfigurationError) as c:
            validate_positive(c, "maximum number of generations", generations)
        self.generations = generations

    def __call__(self, state):
        return state.generation <= self.generations

    def __repr__(self) -> str:
        return f"MaxGenerations({self.generations})"


class TargetFitness(Limit):
    """目標適應度

    在排序器的方向下，只要沒有任何個體的適應度達到 target 就繼續。
    最大化時「達到」代表 fitness >= target，最小化時代表 fitness <= target；
    容差內的差異視為相等。
    """

    def __init__(self, target: float):
        self.target = target

    def __call__(self, state):
        return not any(
            state.ranker.compare_fitness(individual.fitness, self.target) >= 0
            for individual in state.population
        )

    def __repr__(self) -> str:
        return f"TargetFitness({self.target})"


class ListenLimit(Limit):
    """由監聽器驅動的終止條件

    監聽器隨引擎註冊並收集所需資訊，predicate 以 (listener, state) 判斷是否繼續。

    Attributes:
        listener: 收集資訊的監聽器
        predicate: 繼續條件
    """

    def __init__(
        self,
        listener: EvolutionListener,
        predicate: Callable[[EvolutionListener, EvolutionState], bool],
    ):
        self.listener = listener
        self.predicate = predicate

    @property
    def listeners(self):
        return [self.listener]

    def __call__(self, state):
        return bool(self.predicate(self.listener, state))


class SteadyGenerations(ListenLimit):
    """停滯世代數：最佳適應度連續未改善的世代數小於 generations 時繼續"""

    def __init__(self, generations: int):
        with constraints(LimitConfigurationError) as c:
            validate_positive(c, "number of steady generations", generations)
        super().__init__(EvolutionRecorder(), lambda listener, state: listener.steady < generations)
        self.generations = generations

    def __repr__(self) -> str:
        return f"SteadyGenerations({self.generations})"


class MaxTime(ListenLimit):
    """最長執行時間：自演化開始經過的秒數小於 seconds 時繼續"""

    def __init__(self, seconds: float):
        with constraints(LimitConfigurationError) as c:
            validate_positive(c, "time limit in seconds", seconds)
        super().__init__(EvolutionRecorder(), self._within_budget)
        self.seconds = seconds

    def _within_budget(self, listener: EvolutionRecorder, state: EvolutionState) -> bool:
        record = listener.record
        return not record.is_started or record.elapsed() < self.seconds

    def __repr__(self) -> str:
        return f"MaxTime({self.seconds})"
