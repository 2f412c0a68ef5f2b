"""
突變算子 (Mutation Operators)

負責對子代引入隨機擾動以避免陷入局部最優解。突變以基因為單位定義，
使不同長度染色體之間的突變率具有可比性。
"""

from abc import abstractmethod
from typing import List

from .alteration import Alterer
from .chromosomes import Chromosome
from .context import EvolutionContext
from .exceptions import MutatorConfigurationError, constraints, validate_probability
from .genes import BooleanGene
from .models import Individual


class Mutator(Alterer):
    """突變算子基底

    先以 individual_rate 決定個體是否參與突變，再以 chromosome_rate 決定
    每條染色體是否突變，最後交由子類別處理染色體內的基因。
    未發生任何變化的個體保留原本的（已快取的）適應度；
    有變化的個體則成為未評估的新個體。

    Attributes:
        individual_rate: 個體突變機率
        chromosome_rate: 染色體突變機率
    """

    def __init__(self, individual_rate: float = 1.0, chromosome_rate: float = 1.0, **rates: float):
        with constraints(MutatorConfigurationError) as c:
            validate_probability(c, "individual rate", individual_rate)
            validate_probability(c, "chromosome rate", chromosome_rate)
            for name, value in rates.items():
                validate_probability(c, name.replace("_", " "), value)
        self.individual_rate = individual_rate
        self.chromosome_rate = chromosome_rate

    def __call__(self, population, context):
        return [self.mutate_individual(individual, context) for individual in population]

    def mutate_individual(self, individual: Individual, context: EvolutionContext) -> Individual:
        """對單一個體執行突變

        Returns:
            突變後的新個體；若沒有任何改變則回傳原個體
        """
        if context.random.random() >= self.individual_rate:
            return individual

        genotype = individual.genotype
        chromosomes: List[Chromosome] = []
        changed = False
        for chromosome in genotype:
            if context.random.random() < self.chromosome_rate:
                mutated = self.mutate_chromosome(chromosome, context)
                changed = changed or mutated != chromosome
                chromosomes.append(mutated)
            else:
                chromosomes.append(chromosome)

        if not changed:
            return individual
        return Individual(genotype=genotype.duplicate_with_chromosomes(chromosomes))

    @abstractmethod
    def mutate_chromosome(self, chromosome: Chromosome, context: EvolutionContext) -> Chromosome:
        """對單一染色體執行突變"""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(individual_rate={self.individual_rate}, "
            f"chromosome_rate={self.chromosome_rate})"
        )


class RandomMutator(Mutator):
    """隨機突變

    對每個基因以 gene_rate 的機率進行獨立的伯努利試驗，
    成功時以 gene.mutate() 取代該基因。

    Attributes:
        gene_rate: 每個基因的突變機率
    """

    def __init__(self, gene_rate: float = 0.1, individual_rate: float = 1.0, chromosome_rate: float = 1.0):
        super().__init__(individual_rate, chromosome_rate, gene_rate=gene_rate)
        self.gene_rate = gene_rate

    def mutate_chromosome(self, chromosome, context):
        return chromosome.duplicate_with_genes(
            gene.mutate(context) if context.random.random() < self.gene_rate else gene
            for gene in chromosome
        )


class SwapMutator(Mutator):
    """交換突變

    每個位置以 swap_rate 的機率與另一個隨機位置交換，適用於排列染色體。

    Attributes:
        swap_rate: 每個位置的交換機率
    """

    def __init__(self, swap_rate: float = 0.5, individual_rate: float = 1.0, chromosome_rate: float = 1.0):
        super().__init__(individual_rate, chromosome_rate, swap_rate=swap_rate)
        self.swap_rate = swap_rate

    def mutate_chromosome(self, chromosome, context):
        genes = list(chromosome.genes)
        for i in context.indices(self.swap_rate, len(genes)):
            j = context.random.randrange(len(genes))
            genes[i], genes[j] = genes[j], genes[i]
        return chromosome.duplicate_with_genes(genes)


class InversionMutator(Mutator):
    """反轉突變

    以 inversion_boundary_probability 決定反轉區段的起點與終點，
    將區段內的基因順序反轉。

    Attributes:
        inversion_boundary_probability: 區段邊界機率
    """

    def __init__(
        self,
        inversion_boundary_probability: float = 0.5,
        individual_rate: float = 1.0,
        chromosome_rate: float = 1.0,
    ):
        super().__init__(
            individual_rate,
            chromosome_rate,
            inversion_boundary_probability=inversion_boundary_probability,
        )
        self.inversion_boundary_probability = inversion_boundary_probability

    def mutate_chromosome(self, chromosome, context):
        size = len(chromosome)
        start, end = 0, size - 1
        for i in range(size):
            if context.random.random() < self.inversion_boundary_probability:
                start = i
                break
        for i in range(start, size):
            if context.random.random() > self.inversion_boundary_probability:
                end = i
                break
        genes = list(chromosome.genes)
        genes[start:end + 1] = reversed(genes[start:end + 1])
        return chromosome.duplicate_with_genes(genes)


class BitFlipMutator(Mutator):
    """位元翻轉突變：以 flip_rate 的機率反轉每個布林基因

    Attributes:
        flip_rate: 每個基因的翻轉機率
    """

    def __init__(self, flip_rate: float = 0.5, individual_rate: float = 1.0, chromosome_rate: float = 1.0):
        super().__init__(individual_rate, chromosome_rate, flip_rate=flip_rate)
        self.flip_rate = flip_rate

    def mutate_chromosome(self, chromosome, context):
        genes = []
        for gene in chromosome:
            if not isinstance(gene, BooleanGene):
                raise TypeError(
                    f"BitFlipMutator requires boolean genes, got {type(gene).__name__}"
                )
            genes.append(gene.flip() if context.random.random() < self.flip_rate else gene)
        return chromosome.duplicate_with_genes(genes)
