"""
演化狀態與世代紀錄 (Evolution State & Generation Records)

EvolutionState 是引擎在世代之間傳遞的不可變快照；各種紀錄類別則由
監聽器在演化過程中建立，用於統計、報告與終止條件判斷。
"""

import math
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import (
    ConstraintViolationError,
    RecordTimingError,
    constraints,
    validate_non_negative,
)
from .models import Genotype, Individual, population_fitness
from .ranking import IndividualRanker


@dataclass(frozen=True)
class EvolutionState:
    """演化狀態

    Attributes:
        population: 當前種群（不可變序列）
        ranker: 排序器
        generation: 世代編號（非負）
    """
    population: Tuple[Individual, ...]
    ranker: IndividualRanker
    generation: int = 0

    def __post_init__(self):
        object.__setattr__(self, "population", tuple(self.population))
        with constraints(ConstraintViolationError) as c:
            validate_non_negative(c, "generation number", self.generation)

    @classmethod
    def empty(cls, ranker: IndividualRanker) -> "EvolutionState":
        """建立空種群、第 0 代的初始狀態"""
        return cls(population=(), ranker=ranker, generation=0)

    def is_empty(self) -> bool:
        return len(self.population) == 0

    @property
    def size(self) -> int:
        return len(self.population)

    @property
    def best(self) -> Optional[Individual]:
        """依排序器回傳最佳個體（空種群回傳 None）"""
        return self.ranker.best(self.population)

    def replace(self, **changes: Any) -> "EvolutionState":
        return replace(self, **changes)


class TimedRecord:
    """計時紀錄

    start_time 在 start() 之前、duration 在 stop() 之前皆不可讀取。
    """

    def __init__(self):
        self._start_time: Optional[float] = None
        self._duration: Optional[float] = None

    def start(self) -> None:
        self._start_time = time.perf_counter()
        self._duration = None

    def stop(self) -> None:
        self._duration = time.perf_counter() - self.start_time

    @property
    def start_time(self) -> float:
        if self._start_time is None:
            raise RecordTimingError("start_time", type(self).__name__)
        return self._start_time

    @property
    def duration(self) -> float:
        """階段耗時（秒）"""
        if self._duration is None:
            raise RecordTimingError("duration", type(self).__name__)
        return self._duration

    @property
    def is_started(self) -> bool:
        return self._start_time is not None

    @property
    def is_finished(self) -> bool:
        return self._duration is not None

    def elapsed(self) -> float:
        """自 start() 起經過的時間（秒）"""
        return time.perf_counter() - self.start_time


class InitializationRecord(TimedRecord):
    """初始化階段紀錄"""


class EvaluationRecord(TimedRecord):
    """評估階段紀錄"""


class SelectionRecord(TimedRecord):
    """選擇階段紀錄"""


class AlterationRecord(TimedRecord):
    """變異階段紀錄"""


@dataclass(frozen=True)
class IndividualRecord:
    """個體紀錄：基因型、適應度與評估狀態的快照"""
    genotype: Genotype
    fitness: float = math.nan
    evaluated: bool = False

    @classmethod
    def from_individual(cls, individual: Individual) -> "IndividualRecord":
        return cls(
            genotype=individual.genotype,
            fitness=individual.fitness,
            evaluated=individual.is_evaluated(),
        )

    def to_individual(self) -> Individual:
        return Individual(genotype=self.genotype, fitness=self.fitness, evaluated=self.evaluated)


@dataclass
class PopulationRecord:
    """世代開始時（parents）與結束時（offspring）的種群紀錄"""
    parents: List[IndividualRecord] = field(default_factory=list)
    offspring: List[IndividualRecord] = field(default_factory=list)


@dataclass
class GenerationStats:
    """世代統計

    記錄單一世代的統計資訊。

    Attributes:
        generation: 世代編號
        best_fitness: 最佳適應度
        average_fitness: 平均適應度
        worst_fitness: 最差適應度
        best_genotype: 最佳個體的基因型
    """
    generation: int
    best_fitness: float
    average_fitness: float
    worst_fitness: float
    best_genotype: Optional[Genotype] = None

    @classmethod
    def from_population(
        cls,
        generation: int,
        population: Sequence[Individual],
        ranker: IndividualRanker,
    ) -> "GenerationStats":
        """由種群計算統計值，最佳/最差依排序器的方向判斷，適應度為 NaN 的個體不計入

        Args:
            generation: 世代編號
            population: 種群列表
            ranker: 排序器

        Returns:
            世代統計；若沒有任何數值適應度，所有數值皆為 NaN
        """
        fitness = np.asarray(population_fitness(population), dtype=float)
        scored = ~np.isnan(fitness)
        if not scored.any():
            return cls(generation, math.nan, math.nan, math.nan)

        transformed = np.asarray(ranker.fitness_transform(fitness.tolist()), dtype=float)
        best_index = int(np.nanargmax(transformed))
        worst_index = int(np.nanargmin(transformed))
        return cls(
            generation=generation,
            best_fitness=float(fitness[best_index]),
            average_fitness=float(np.mean(fitness[scored])),
            worst_fitness=float(fitness[worst_index]),
            best_genotype=population[best_index].genotype,
        )


class GenerationRecord(TimedRecord):
    """世代紀錄

    Attributes:
        generation: 世代編號（非負）
        population: 世代開始與結束時的種群
        evaluation: 選擇前對目前種群的評估紀錄
        offspring_evaluation: 取代後對新種群的評估紀錄
        parent_selection: 親代選擇階段紀錄
        survivor_selection: 倖存者選擇階段紀錄
        alteration: 變異階段紀錄
        stats: 世代結束時的統計（由紀錄器填入）
    """

    def __init__(self, generation: int):
        with constraints(ConstraintViolationError) as c:
            validate_non_negative(c, "generation number", generation)
        super().__init__()
        self.generation = generation
        self.population = PopulationRecord()
        self.evaluation = EvaluationRecord()
        self.offspring_evaluation = EvaluationRecord()
        self.parent_selection = SelectionRecord()
        self.survivor_selection = SelectionRecord()
        self.alteration = AlterationRecord()
        self.stats: Optional[GenerationStats] = None
        self._steady = 0

    @property
    def steady(self) -> int:
        """連續未改善的世代數"""
        return self._steady

    @steady.setter
    def steady(self, value: int) -> None:
        with constraints(ConstraintViolationError) as c:
            validate_non_negative(c, "steady counter", value)
        self._steady = value

    @property
    def evaluation_duration(self) -> float:
        """本世代所有已完成評估階段的總耗時（秒）"""
        return sum(
            record.duration
            for record in (self.evaluation, self.offspring_evaluation)
            if record.is_finished
        )

    def compute_stats(self, ranker: IndividualRanker) -> GenerationStats:
        """以世代結束時的種群計算統計"""
        offspring = [record.to_individual() for record in self.population.offspring]
        return GenerationStats.from_population(self.generation, offspring, ranker)

    def __repr__(self) -> str:
        return f"GenerationRecord(generation={self.generation}, steady={self.steady})"


class EvolutionRecord(TimedRecord):
    """整次演化的紀錄

    Attributes:
        initialization: 初始化階段紀錄
        generations: 依序排列的世代紀錄
    """

    COLUMNS = (
        "generation",
        "steady",
        "best_fitness",
        "average_fitness",
        "worst_fitness",
        "evaluation_duration",
        "duration",
    )

    def __init__(self):
        super().__init__()
        self.initialization = InitializationRecord()
        self.generations: List[GenerationRecord] = []

    @property
    def last_generation(self) -> Optional[GenerationRecord]:
        return self.generations[-1] if self.generations else None

    def to_dataframe(self) -> pd.DataFrame:
        """轉換為每世代一列的 DataFrame

        未計算統計或尚未結束的世代以 NaN 表示。
        """
        rows: List[Dict[str, Any]] = []
        for record in self.generations:
            stats = record.stats
            rows.append({
                "generation": record.generation,
                "steady": record.steady,
                "best_fitness": stats.best_fitness if stats else math.nan,
                "average_fitness": stats.average_fitness if stats else math.nan,
                "worst_fitness": stats.worst_fitness if stats else math.nan,
                "evaluation_duration": record.evaluation_duration,
                "duration": record.duration if record.is_finished else math.nan,
            })
        return pd.DataFrame(rows, columns=list(self.COLUMNS))
