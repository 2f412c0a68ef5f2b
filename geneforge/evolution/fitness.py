"""
適應度評估器 (Fitness Evaluator)

負責以使用者提供的適應度函數評估種群中尚未評估的個體。
評估是對獨立個體的純映射，可選擇以執行緒池平行處理。
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence

from .exceptions import EngineConfigurationError, constraints, validate_positive
from .models import Genotype, Individual

logger = logging.getLogger(__name__)

FitnessFunction = Callable[[Genotype], float]


class FitnessEvaluator:
    """適應度評估器

    適應度函數拋出的例外不會被捕捉或重試，會直接中止評估。

    Attributes:
        fitness_function: 適應度函數，接收基因型並回傳數值
        max_workers: 平行評估的執行緒數量，1 表示循序評估
    """

    def __init__(self, fitness_function: FitnessFunction, max_workers: int = 1):
        """初始化適應度評估器

        Args:
            fitness_function: 適應度函數
            max_workers: 執行緒數量，預設為 1

        Raises:
            EngineConfigurationError: 若 max_workers < 1
        """
        with constraints(EngineConfigurationError) as c:
            c.require(callable(fitness_function), "The fitness function must be callable")
            validate_positive(c, "number of evaluation workers", max_workers)
        self.fitness_function = fitness_function
        self.max_workers = max_workers

    def evaluate_genotype(self, genotype: Genotype) -> float:
        """評估單一基因型"""
        return float(self.fitness_function(genotype))

    def evaluate(self, population: Sequence[Individual], force: bool = False) -> List[Individual]:
        """評估整個種群的適應度

        Args:
            population: 種群列表
            force: 是否重新評估已有適應度的個體

        Returns:
            順序不變、所有個體皆已評估的新種群列表
        """
        pending = [
            index for index, individual in enumerate(population)
            if force or not individual.is_evaluated()
        ]
        if not pending:
            return list(population)

        genotypes = [population[index].genotype for index in pending]
        parallel = self.max_workers > 1 and len(pending) > 1
        if parallel:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                scores = list(executor.map(self.evaluate_genotype, genotypes))
        else:
            scores = [self.evaluate_genotype(genotype) for genotype in genotypes]

        logger.debug(
            "Evaluated %d of %d individuals (worker pool: %s)",
            len(pending), len(population), parallel,
        )

        evaluated = list(population)
        for index, score in zip(pending, scores):
            evaluated[index] = evaluated[index].with_fitness(score)
        return evaluated
