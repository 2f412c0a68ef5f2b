"""
演化監聽器 (Evolution Listeners)

引擎在每個階段的開始與結束通知所有監聽器。所有掛鉤預設為空操作，
子類別只需覆寫關心的階段。
"""

import logging
import math
from typing import Callable, Optional

from .generation import (
    EvaluationRecord,
    EvolutionRecord,
    EvolutionState,
    GenerationRecord,
    GenerationStats,
    IndividualRecord,
)
from .ranking import FitnessMaxRanker, IndividualRanker, update_steady

logger = logging.getLogger(__name__)


class EvolutionListener:
    """監聽器基底

    Attributes:
        ranker: 排序器，由引擎在建立時指派
    """

    def __init__(self):
        self.ranker: IndividualRanker = FitnessMaxRanker()

    def on_evolution_started(self, state: EvolutionState) -> None:
        pass

    def on_evolution_ended(self, state: EvolutionState) -> None:
        pass

    def on_initialization_started(self, state: EvolutionState) -> None:
        pass

    def on_initialization_ended(self, state: EvolutionState) -> None:
        pass

    def on_generation_started(self, state: EvolutionState) -> None:
        pass

    def on_generation_ended(self, state: EvolutionState) -> None:
        pass

    def on_evaluation_started(self, state: EvolutionState) -> None:
        pass

    def on_evaluation_ended(self, state: EvolutionState) -> None:
        pass

    def on_selection_started(self, state: EvolutionState) -> None:
        pass

    def on_selection_ended(self, state: EvolutionState) -> None:
        pass

    def on_parent_selection_started(self, state: EvolutionState) -> None:
        pass

    def on_parent_selection_ended(self, state: EvolutionState) -> None:
        pass

    def on_survivor_selection_started(self, state: EvolutionState) -> None:
        pass

    def on_survivor_selection_ended(self, state: EvolutionState) -> None:
        pass

    def on_alteration_started(self, state: EvolutionState) -> None:
        pass

    def on_alteration_ended(self, state: EvolutionState) -> None:
        pass


class EvolutionRecorder(EvolutionListener):
    """演化紀錄器

    在演化過程中建立 EvolutionRecord：每個世代記錄開始與結束時的種群、
    各階段耗時、統計值與停滯世代計數。

    Attributes:
        record: 演化紀錄
    """

    def __init__(self):
        super().__init__()
        self.record = EvolutionRecord()
        self._best_fitness = math.nan

    @property
    def current(self) -> Optional[GenerationRecord]:
        return self.record.last_generation

    @property
    def steady(self) -> int:
        """最近一個世代的停滯世代計數"""
        current = self.current
        return current.steady if current is not None else 0

    def on_evolution_started(self, state):
        self.record = EvolutionRecord()
        self._best_fitness = math.nan
        self.record.start()

    def on_evolution_ended(self, state):
        self.record.stop()

    def on_initialization_started(self, state):
        self.record.initialization.start()

    def on_initialization_ended(self, state):
        self.record.initialization.stop()

    def on_generation_started(self, state):
        generation = GenerationRecord(state.generation)
        generation.start()
        generation.population.parents = [
            IndividualRecord.from_individual(individual) for individual in state.population
        ]
        self.record.generations.append(generation)

    def on_generation_ended(self, state):
        generation = self.current
        generation.population.offspring = [
            IndividualRecord.from_individual(individual) for individual in state.population
        ]
        generation.stats = generation.compute_stats(self.ranker)
        previous_steady = self.record.generations[-2].steady if len(self.record.generations) > 1 else 0
        self._best_fitness, generation.steady = update_steady(
            self.ranker, self._best_fitness, generation.stats.best_fitness, previous_steady
        )
        generation.stop()

    def _evaluation_record(self) -> Optional[EvaluationRecord]:
        # 每個世代有兩次評估：選擇前與取代後
        current = self.current
        if current is None:
            return None
        if current.evaluation.is_finished:
            return current.offspring_evaluation
        return current.evaluation

    def on_evaluation_started(self, state):
        record = self._evaluation_record()
        if record is not None:
            record.start()

    def on_evaluation_ended(self, state):
        current = self.current
        if current is None:
            return
        if current.offspring_evaluation.is_started:
            current.offspring_evaluation.stop()
        else:
            current.evaluation.stop()

    def on_parent_selection_started(self, state):
        self.current.parent_selection.start()

    def on_parent_selection_ended(self, state):
        self.current.parent_selection.stop()

    def on_survivor_selection_started(self, state):
        self.current.survivor_selection.start()

    def on_survivor_selection_ended(self, state):
        self.current.survivor_selection.stop()

    def on_alteration_started(self, state):
        self.current.alteration.start()

    def on_alteration_ended(self, state):
        self.current.alteration.stop()


class LoggingListener(EvolutionListener):
    """以 logging 輸出每個世代的統計值

    Attributes:
        level: 日誌等級
        log: 使用的 logger
    """

    def __init__(self, level: int = logging.INFO, log: Optional[logging.Logger] = None):
        super().__init__()
        self.level = level
        self.log = log or logger

    def on_generation_ended(self, state):
        stats = GenerationStats.from_population(state.generation, state.population, self.ranker)
        self.log.log(
            self.level,
            "Generation %d: best=%.6g average=%.6g worst=%.6g",
            stats.generation, stats.best_fitness, stats.average_fitness, stats.worst_fitness,
        )

    def on_evolution_ended(self, state):
        best = state.best
        self.log.log(
            self.level,
            "Evolution ended at generation %d with best fitness %s",
            state.generation, best.fitness if best is not None else math.nan,
        )


class CallbackListener(EvolutionListener):
    """進度回調監聽器

    每個世代結束時以 (generation, stats) 呼叫回調函數。

    Attributes:
        callback: 進度回調函數
    """

    def __init__(self, callback: Callable[[int, GenerationStats], None]):
        super().__init__()
        self.callback = callback

    def on_generation_ended(self, state):
        stats = GenerationStats.from_population(state.generation, state.population, self.ranker)
        self.callback(state.generation, stats)
