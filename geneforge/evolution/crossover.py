"""
交叉算子 (Crossover Operators)

負責執行基因重組：依序將輸入種群分組為固定數量的親代，
以交叉機率決定是否重組，否則親代原樣傳遞。
"""

from abc import abstractmethod
from typing import Callable, List, Optional, Sequence

from .alteration import Alterer
from .chromosomes import Chromosome
from .context import EvolutionContext
from .exceptions import (
    Constraints,
    CrossoverConfigurationError,
    constraints,
    validate_probability,
)
from .genes import Gene, NumberGene
from .models import Genotype, Individual


class Crossover(Alterer):
    """交叉算子基底

    Attributes:
        probability: 每組親代執行交叉的機率
        num_parents: 每次交叉所需的親代數量（同時也是子代數量）
        chromosome_rate: 每條染色體參與交叉的機率
    """

    def __init__(
        self,
        probability: float = 0.8,
        num_parents: int = 2,
        chromosome_rate: float = 1.0,
    ):
        """初始化交叉算子

        Raises:
            CrossoverConfigurationError: 若機率不在 [0, 1] 或 num_parents < 2
        """
        self.probability = probability
        self.num_parents = num_parents
        self.chromosome_rate = chromosome_rate
        with constraints(CrossoverConfigurationError) as c:
            validate_probability(c, "crossover probability", probability)
            validate_probability(c, "chromosome rate", chromosome_rate)
            c.require(
                num_parents >= 2,
                f"There should be at least 2 parents to perform a crossover, got {num_parents}",
            )
            self._validate(c)

    def _validate(self, c: Constraints) -> None:
        """子類別的額外檢查，與基底檢查在同一次驗證中回報"""

    def __call__(self, population, context):
        offspring: List[Individual] = []
        for start in range(0, len(population), self.num_parents):
            parents = list(population[start:start + self.num_parents])
            # 不足一組的剩餘個體直接傳遞
            if len(parents) < self.num_parents or context.random.random() >= self.probability:
                offspring.extend(parents)
                continue
            genotypes = self.crossover([parent.genotype for parent in parents], context)
            # 基因型未改變的子代沿用親代，保留已評估的適應度
            offspring.extend(
                parent if genotype == parent.genotype else Individual(genotype=genotype)
                for parent, genotype in zip(parents, genotypes)
            )
        return offspring

    def crossover(self, genotypes: Sequence[Genotype], context: EvolutionContext) -> List[Genotype]:
        """對一組親代基因型執行交叉

        Args:
            genotypes: 親代基因型，數量必須等於 num_parents
            context: 演化上下文

        Returns:
            與親代數量相同的子代基因型

        Raises:
            CrossoverConfigurationError: 若親代數量不符或基因型長度不一致
        """
        with constraints(CrossoverConfigurationError) as c:
            c.require(
                len(genotypes) == self.num_parents,
                f"Input count [{len(genotypes)}] must match the configured parent count [{self.num_parents}]",
            )
            c.require(
                len({genotype.size for genotype in genotypes}) <= 1,
                "All inputs must have the same genotype length",
            )

        size = genotypes[0].size
        selected = set(context.indices(self.chromosome_rate, size))
        if not selected:
            return list(genotypes)
        children = [list(genotype.chromosomes) for genotype in genotypes]
        for index in sorted(selected):
            recombined = self.crossover_chromosomes([genotype[index] for genotype in genotypes], context)
            for child, chromosome in zip(children, recombined):
                child[index] = chromosome
        return [
            genotype.duplicate_with_chromosomes(child)
            for genotype, child in zip(genotypes, children)
        ]

    @abstractmethod
    def crossover_chromosomes(
        self,
        chromosomes: List[Chromosome],
        context: EvolutionContext,
    ) -> List[Chromosome]:
        """重組同一位置上的染色體，回傳相同數量的染色體"""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(probability={self.probability}, "
            f"num_parents={self.num_parents}, chromosome_rate={self.chromosome_rate})"
        )


def _require_equal_lengths(chromosomes: Sequence[Chromosome]) -> None:
    with constraints(CrossoverConfigurationError) as c:
        c.require(
            len({len(chromosome) for chromosome in chromosomes}) == 1,
            "All chromosomes must have the same length",
        )


class SinglePointCrossover(Crossover):
    """單點交叉 (Single-Point Crossover)

    在 [1, 長度-1] 中均勻選擇一個切點：
    子代 1 = 親代 1 切點前 + 親代 2 切點後；子代 2 為其互補。
    長度為 1 的染色體無法切割，原樣傳遞。
    """

    def __init__(self, probability: float = 0.8, chromosome_rate: float = 1.0):
        super().__init__(probability, num_parents=2, chromosome_rate=chromosome_rate)

    def crossover_chromosomes(self, chromosomes, context):
        _require_equal_lengths(chromosomes)
        first, second = chromosomes
        length = len(first)
        if length < 2:
            return [first, second]
        cut = context.random.randint(1, length - 1)
        return list(self.crossover_at(cut, first, second))

    @staticmethod
    def crossover_at(cut: int, first: Chromosome, second: Chromosome):
        """在指定切點交換兩條染色體的尾段"""
        return (
            first.duplicate_with_genes(first.genes[:cut] + second.genes[cut:]),
            second.duplicate_with_genes(second.genes[:cut] + first.genes[cut:]),
        )


class UniformCrossover(Crossover):
    """均勻交叉：每個位置以 swap_probability 的機率交換兩個親代的基因

    Attributes:
        swap_probability: 每個位置的交換機率
    """

    def __init__(self, probability: float = 0.8, swap_probability: float = 0.5, chromosome_rate: float = 1.0):
        self.swap_probability = swap_probability
        super().__init__(probability, num_parents=2, chromosome_rate=chromosome_rate)

    def _validate(self, c):
        validate_probability(c, "swap probability", self.swap_probability)

    def crossover_chromosomes(self, chromosomes, context):
        _require_equal_lengths(chromosomes)
        first, second = chromosomes
        genes1, genes2 = list(first.genes), list(second.genes)
        for i in context.indices(self.swap_probability, len(genes1)):
            genes1[i], genes2[i] = genes2[i], genes1[i]
        return [first.duplicate_with_genes(genes1), second.duplicate_with_genes(genes2)]


class CombineCrossover(Crossover):
    """組合交叉

    第 j 個子代在每個位置以 gene_rate 的機率取所有親代基因的組合值，
    否則保留第 j 個親代的基因。

    Attributes:
        combiner: 將同一位置的基因組合為一個基因的函數
        gene_rate: 每個位置進行組合的機率
    """

    def __init__(
        self,
        combiner: Callable[[List[Gene]], Gene],
        probability: float = 0.8,
        num_parents: int = 2,
        gene_rate: float = 1.0,
        chromosome_rate: float = 1.0,
    ):
        self.combiner = combiner
        self.gene_rate = gene_rate
        super().__init__(probability, num_parents=num_parents, chromosome_rate=chromosome_rate)

    def _validate(self, c):
        validate_probability(c, "gene rate", self.gene_rate)

    def crossover_chromosomes(self, chromosomes, context):
        _require_equal_lengths(chromosomes)
        children = []
        for own in chromosomes:
            genes = []
            for i in range(len(own)):
                if context.random.random() < self.gene_rate:
                    genes.append(self.combiner([chromosome[i] for chromosome in chromosomes]))
                else:
                    genes.append(own[i])
            children.append(own.duplicate_with_genes(genes))
        return children


class MeanCrossover(CombineCrossover):
    """均值交叉 (Mean / Average Crossover)

    子代基因值為各親代同位置基因值的（加權）算術平均，僅適用於數值基因。
    整數基因的平均值四捨五入至最接近的整數。

    Attributes:
        weights: 各親代的權重，預設等權重
    """

    def __init__(
        self,
        probability: float = 0.8,
        num_parents: int = 2,
        weights: Optional[Sequence[float]] = None,
        gene_rate: float = 1.0,
        chromosome_rate: float = 1.0,
    ):
        self.weights = list(weights) if weights is not None else None
        super().__init__(
            self._average,
            probability=probability,
            num_parents=num_parents,
            gene_rate=gene_rate,
            chromosome_rate=chromosome_rate,
        )

    def _validate(self, c):
        super()._validate(c)
        if self.weights is not None:
            c.require(
                len(self.weights) == self.num_parents,
                f"Expected {self.num_parents} weights, got {len(self.weights)}",
            )
            c.require(all(w >= 0 for w in self.weights), "Weights must not be negative")
            c.require(sum(self.weights) > 0, "Weights must not sum to zero")

    def _average(self, genes: List[Gene]) -> Gene:
        if not all(isinstance(gene, NumberGene) for gene in genes):
            raise CrossoverConfigurationError(
                ["MeanCrossover requires numeric genes, got "
                 + ", ".join(sorted({type(gene).__name__ for gene in genes}))]
            )
        first, *others = genes
        return first.average(others, self.weights)
