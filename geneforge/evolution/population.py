"""
種群生成器 (Population Generator)

負責透過基因型工廠生成初始種群，並提供種群多樣性與合法性檢查。
"""

from typing import List, Sequence

from .context import EvolutionContext
from .exceptions import EngineConfigurationError, constraints, validate_positive
from .models import GenotypeFactory, Individual


class PopulationGenerator:
    """種群生成器

    Attributes:
        genotype_factory: 基因型工廠
        population_size: 種群大小
    """

    def __init__(
        self,
        genotype_factory: GenotypeFactory,
        population_size: int = 50,
    ):
        """初始化種群生成器

        Args:
            genotype_factory: 基因型工廠
            population_size: 種群大小，預設 50

        Raises:
            EngineConfigurationError: 若 population_size 不是正整數
        """
        with constraints(EngineConfigurationError) as c:
            validate_positive(c, "population size", population_size)

        self.genotype_factory = genotype_factory
        self.population_size = population_size

    def generate_random_individual(self, context: EvolutionContext) -> Individual:
        """生成一個尚未評估的隨機個體"""
        return Individual(genotype=self.genotype_factory.make(context))

    def generate_population(self, context: EvolutionContext) -> List[Individual]:
        """生成初始種群

        Args:
            context: 演化上下文

        Returns:
            長度為 population_size 的種群列表
        """
        return [
            self.generate_random_individual(context)
            for _ in range(self.population_size)
        ]


def diversity(population: Sequence[Individual]) -> float:
    """計算種群多樣性指標

    以相異基因型（攤平後）所佔比例衡量，範圍為 [0, 1]。
    """
    if not population:
        return 0.0
    distinct = {tuple(individual.flatten()) for individual in population}
    return len(distinct) / len(population)


def validate_population(population: Sequence[Individual]) -> bool:
    """驗證種群中所有個體的基因型是否合法"""
    return all(individual.verify() for individual in population)
