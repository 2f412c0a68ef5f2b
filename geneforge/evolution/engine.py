"""
演化引擎 (Evolutionary Engine)

整合所有演化組件的主引擎，以狀態機驅動世代迴圈：
初始化 → 評估 → 選擇 → 變異 → 替換 →（回到評估）→ 終止。
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .alteration import Alterer, AltererPipeline
from .context import EvolutionContext, resolve_context
from .exceptions import (
    EngineConfigurationError,
    EvolutionStateError,
    constraints,
    validate_positive,
    validate_probability,
)
from .fitness import FitnessEvaluator, FitnessFunction
from .generation import EvolutionState
from .limits import Limit
from .listeners import EvolutionListener
from .models import GenotypeFactory, Individual
from .population import PopulationGenerator
from .ranking import FitnessMaxRanker, IndividualRanker, update_steady
from .selection import Selector, TournamentSelector

logger = logging.getLogger(__name__)

# 計算倖存者數量時吸收浮點誤差（例如 0.29 * 100）
_SURVIVOR_EPSILON = 1e-9


@dataclass
class EvolutionConfig:
    """演化配置

    控制演化引擎的所有可配置參數。

    Attributes:
        population_size: 種群大小
        survival_rate: 每世代直接保留的個體比例 [0, 1]
        ranker: 排序器（最大化或最小化適應度）
        parent_selector: 親代選擇器
        survivor_selector: 倖存者選擇器
        alterers: 依序套用的變異算子
        limits: 終止條件（AND 組合）
        listeners: 監聽器
        evaluation_workers: 適應度評估的執行緒數量
    """
    population_size: int = 50
    survival_rate: float = 0.4
    ranker: IndividualRanker = field(default_factory=FitnessMaxRanker)
    parent_selector: Selector = field(default_factory=TournamentSelector)
    survivor_selector: Selector = field(default_factory=TournamentSelector)
    alterers: List[Alterer] = field(default_factory=list)
    limits: List[Limit] = field(default_factory=list)
    listeners: List[EvolutionListener] = field(default_factory=list)
    evaluation_workers: int = 1

    def validate(self) -> None:
        """驗證配置，一次回報所有違規項目

        Raises:
            EngineConfigurationError: 若任一參數無效
        """
        with constraints(EngineConfigurationError) as c:
            validate_positive(c, "population size", self.population_size)
            validate_probability(c, "survival rate", self.survival_rate)
            c.require(self.ranker is not None, "A ranker is required")
            c.require(self.parent_selector is not None, "A parent selector is required")
            c.require(self.survivor_selector is not None, "A survivor selector is required")
            c.require(len(self.alterers) > 0, "The alterer pipeline must not be empty")
            c.require(len(self.limits) > 0, "At least one limit is required")
            validate_positive(c, "number of evaluation workers", self.evaluation_workers)

    @property
    def survivor_count(self) -> int:
        return int(math.floor(self.survival_rate * self.population_size + _SURVIVOR_EPSILON))

    @property
    def offspring_count(self) -> int:
        return self.population_size - self.survivor_count


class EngineStatus(Enum):
    """引擎狀態"""
    CREATED = "created"
    INITIALIZING = "initializing"
    EVALUATING = "evaluating"
    SELECTING = "selecting"
    ALTERING = "altering"
    REPLACING = "replacing"
    TERMINATED = "terminated"


class EvolutionaryEngine:
    """演化引擎

    一個引擎實例同一時間只持有一個演化狀態，世代迴圈嚴格循序執行；
    只有適應度評估可以平行化。適應度函數拋出的例外會直接中止演化。

    Attributes:
        config: 演化配置
        context: 演化上下文（亂數來源與容差）
        status: 目前的狀態機狀態
        listeners: 所有已註冊的監聽器（包含 Limit 所需的監聽器）
    """

    def __init__(
        self,
        fitness_function: FitnessFunction,
        genotype_factory: GenotypeFactory,
        config: Optional[EvolutionConfig] = None,
        context: Optional[EvolutionContext] = None,
    ):
        """初始化演化引擎

        Args:
            fitness_function: 適應度函數，接收基因型並回傳數值
            genotype_factory: 基因型工廠
            config: 演化配置，預設使用 EvolutionConfig()
            context: 演化上下文，預設以系統亂數建立

        Raises:
            EngineConfigurationError: 若配置無效
        """
        self.config = config or EvolutionConfig()
        self.config.validate()
        self.context = resolve_context(context)

        self._population_generator = PopulationGenerator(
            genotype_factory=genotype_factory,
            population_size=self.config.population_size,
        )
        self._fitness_evaluator = FitnessEvaluator(
            fitness_function,
            max_workers=self.config.evaluation_workers,
        )
        self._alterer = AltererPipeline(self.config.alterers)

        self.listeners: List[EvolutionListener] = list(self.config.listeners)
        for limit in self.config.limits:
            limit.engine = self
            self.listeners.extend(limit.listeners)
        for listener in self.listeners:
            listener.ranker = self.config.ranker

        self.status = EngineStatus.CREATED
        self._best_fitness = math.nan
        self._steady_generations = 0

    @property
    def ranker(self) -> IndividualRanker:
        return self.config.ranker

    @property
    def limits(self) -> List[Limit]:
        return self.config.limits

    @property
    def best_fitness(self) -> float:
        """目前為止的最佳適應度（尚未評估時為 NaN）"""
        return self._best_fitness

    @property
    def steady_generations(self) -> int:
        """最佳適應度連續未改善的世代數"""
        return self._steady_generations

    def evolve(self) -> EvolutionState:
        """執行演化直到任一終止條件不再成立

        Returns:
            最終的演化狀態（已評估）
        """
        logger.info(
            "Starting evolution: population size %d, survivors %d, %d limit(s)",
            self.config.population_size, self.config.survivor_count, len(self.limits),
        )
        self._best_fitness = math.nan
        self._steady_generations = 0

        state = EvolutionState.empty(self.ranker)
        self._notify("on_evolution_started", state)
        while True:
            state = self.iterate_generation(state)
            if not self._should_continue(state):
                break

        self.status = EngineStatus.TERMINATED
        self._notify("on_evolution_ended", state)
        logger.info(
            "Evolution finished at generation %d, best fitness %s",
            state.generation, self._best_fitness,
        )
        return state

    def iterate_generation(self, state: EvolutionState) -> EvolutionState:
        """執行單一世代

        Args:
            state: 目前的演化狀態；若為空則先初始化種群

        Returns:
            下一世代已評估的演化狀態
        """
        self._notify("on_generation_started", state)

        if state.is_empty():
            state = self._initialize(state)
        state = self._evaluate(state)

        survivors, parents = self._select(state)
        offspring = self._alter(state, parents)
        next_state = self._replace(state, survivors, offspring)
        next_state = self._evaluate(next_state)

        self._update_steady(next_state)
        logger.debug(
            "Generation %d: best fitness %s, steady for %d generation(s)",
            next_state.generation, self._best_fitness, self._steady_generations,
        )
        self._notify("on_generation_ended", next_state)
        return next_state

    def _initialize(self, state: EvolutionState) -> EvolutionState:
        self.status = EngineStatus.INITIALIZING
        self._notify("on_initialization_started", state)
        population = self._population_generator.generate_population(self.context)
        initialized = state.replace(population=population, generation=0)
        self._notify("on_initialization_ended", initialized)
        return initialized

    def _evaluate(self, state: EvolutionState) -> EvolutionState:
        self.status = EngineStatus.EVALUATING
        self._notify("on_evaluation_started", state)
        evaluated = state.replace(population=self._fitness_evaluator.evaluate(state.population))
        self._notify("on_evaluation_ended", evaluated)
        return evaluated

    def _select(self, state: EvolutionState):
        self.status = EngineStatus.SELECTING
        self._notify("on_selection_started", state)

        self._notify("on_survivor_selection_started", state)
        survivors = self.config.survivor_selector.select(
            state.population, self.config.survivor_count, self.ranker, self.context
        )
        self._check_size(survivors, self.config.survivor_count, "survivor selection")
        self._notify("on_survivor_selection_ended", state)

        self._notify("on_parent_selection_started", state)
        parents = self.config.parent_selector.select(
            state.population, self.config.offspring_count, self.ranker, self.context
        )
        self._check_size(parents, self.config.offspring_count, "parent selection")
        self._notify("on_parent_selection_ended", state)

        self._notify("on_selection_ended", state)
        return survivors, parents

    def _alter(self, state: EvolutionState, parents: List[Individual]) -> List[Individual]:
        self.status = EngineStatus.ALTERING
        self._notify("on_alteration_started", state)
        offspring = self._alterer(parents, self.context)
        self._notify("on_alteration_ended", state)
        return offspring

    def _replace(
        self,
        state: EvolutionState,
        survivors: List[Individual],
        offspring: List[Individual],
    ) -> EvolutionState:
        """以倖存者與子代組成下一世代，數量不足時以目前最佳個體補齊，過多時截斷"""
        self.status = EngineStatus.REPLACING
        size = self.config.population_size
        population = list(survivors) + list(offspring)
        if len(population) != size:
            logger.warning(
                "Alterers produced %d offspring, expected %d; reconciling population",
                len(offspring), self.config.offspring_count,
            )
            best = state.best
            population = population[:size]
            population.extend([best] * (size - len(population)))
        return state.replace(population=population, generation=state.generation + 1)

    def _update_steady(self, state: EvolutionState) -> None:
        best = state.best
        if best is None:
            return
        self._best_fitness, self._steady_generations = update_steady(
            self.ranker, self._best_fitness, best.fitness, self._steady_generations
        )

    def _should_continue(self, state: EvolutionState) -> bool:
        for limit in self.limits:
            if not limit(state):
                logger.debug("Limit %r reached at generation %d", limit, state.generation)
                return False
        return True

    @staticmethod
    def _check_size(individuals: List[Individual], expected: int, phase: str) -> None:
        if len(individuals) != expected:
            raise EvolutionStateError(expected, len(individuals), phase)

    def _notify(self, hook: str, state: EvolutionState) -> None:
        for listener in self.listeners:
            getattr(listener, hook)(state)
