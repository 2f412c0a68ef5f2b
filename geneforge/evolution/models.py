"""
基因型與個體資料模型 (Genotype & Individual Data Models)

定義演化引擎的核心資料結構：基因型（染色體序列）與個體（基因型 + 適應度）。
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .chromosomes import Chromosome, ChromosomeFactory
from .context import EvolutionContext
from .exceptions import (
    ChromosomeConfigurationError,
    InvalidIndexError,
    constraints,
)


@dataclass(frozen=True)
class Genotype:
    """基因型

    完整的解編碼，由一條或多條（可為不同種類的）染色體組成。

    Attributes:
        chromosomes: 染色體序列
    """
    chromosomes: Tuple[Chromosome, ...]

    def __post_init__(self):
        object.__setattr__(self, "chromosomes", tuple(self.chromosomes))

    @property
    def size(self) -> int:
        return len(self.chromosomes)

    def __len__(self) -> int:
        return len(self.chromosomes)

    def __iter__(self) -> Iterator[Chromosome]:
        return iter(self.chromosomes)

    def __getitem__(self, index: int) -> Chromosome:
        if not 0 <= index < len(self.chromosomes):
            raise InvalidIndexError(index, len(self.chromosomes), "genotype")
        return self.chromosomes[index]

    def flatten(self) -> List[Any]:
        """將所有染色體的基因值串接為單一序列（供適應度函數使用）"""
        values: List[Any] = []
        for chromosome in self.chromosomes:
            values.extend(chromosome.flatten())
        return values

    def verify(self) -> bool:
        return all(chromosome.verify() for chromosome in self.chromosomes)

    def duplicate_with_chromosomes(self, chromosomes: Iterable[Chromosome]) -> "Genotype":
        return replace(self, chromosomes=tuple(chromosomes))


@dataclass
class GenotypeFactory:
    """基因型工廠

    依序使用每個染色體工廠生成一個隨機基因型。

    Attributes:
        chromosomes: 染色體工廠列表
    """
    chromosomes: List[ChromosomeFactory] = field(default_factory=list)

    def __post_init__(self):
        with constraints(ChromosomeConfigurationError) as c:
            c.require(len(self.chromosomes) > 0, "A genotype factory needs at least one chromosome factory")

    def make(self, context: EvolutionContext) -> Genotype:
        return Genotype(tuple(factory.make(context) for factory in self.chromosomes))


@dataclass(frozen=True)
class Individual:
    """演化個體

    代表種群中的一個個體，包含基因型與適應度。評估狀態以 evaluated 旗標
    記錄，與適應度值無關：適應度函數回傳 NaN 的個體仍視為已評估，
    不會被重新評估。一旦評估，該個體的適應度即固定不變。

    Attributes:
        genotype: 個體的基因型
        fitness: 適應度分數（預設為 NaN）
        evaluated: 是否已評估；未指定時由適應度是否為 NaN 推得
    """
    genotype: Genotype
    fitness: float = math.nan
    evaluated: Optional[bool] = field(default=None, compare=False)

    def __post_init__(self):
        if self.evaluated is None:
            object.__setattr__(self, "evaluated", not math.isnan(self.fitness))

    def is_evaluated(self) -> bool:
        return self.evaluated

    def with_fitness(self, fitness: float) -> "Individual":
        """建立持有指定適應度、標記為已評估的新個體"""
        return Individual(genotype=self.genotype, fitness=float(fitness), evaluated=True)

    def verify(self) -> bool:
        return self.genotype.verify()

    def flatten(self) -> List[Any]:
        return self.genotype.flatten()

    def to_dict(self) -> Dict[str, Any]:
        """轉換為字典格式"""
        return {
            "genotype": [chromosome.flatten() for chromosome in self.genotype],
            "fitness": self.fitness,
        }


# 種群為個體的有序序列
Population = List[Individual]


def population_fitness(population: Sequence[Individual]) -> List[float]:
    """取得種群中每個個體的適應度"""
    return [individual.fitness for individual in population]
