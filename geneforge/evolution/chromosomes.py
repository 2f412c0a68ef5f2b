"""
染色體 (Chromosomes)

染色體為同類基因的有序、固定長度序列，建立後不可變。
每種染色體皆有對應的工廠，負責在指定邊界內隨機生成染色體。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Iterator, List, Tuple, Type

from .context import EvolutionContext
from .exceptions import (
    AbsurdOperationError,
    ChromosomeConfigurationError,
    InvalidIndexError,
    constraints,
    validate_positive,
    validate_probability,
)
from .genes import (
    BooleanGene,
    CharGene,
    DoubleGene,
    Gene,
    GeneBounds,
    IntGene,
    _accept_all,
)


@dataclass(frozen=True)
class Chromosome:
    """染色體

    Attributes:
        genes: 基因序列（非空、同類）
    """
    genes: Tuple[Gene, ...]

    # 子類別可收窄允許的基因類型
    gene_type = Gene

    def __post_init__(self):
        object.__setattr__(self, "genes", tuple(self.genes))
        with constraints(ChromosomeConfigurationError) as c:
            c.require(len(self.genes) > 0, "A chromosome must contain at least one gene")
            c.require(
                all(isinstance(gene, self.gene_type) for gene in self.genes),
                f"All genes of a {type(self).__name__} must be instances of {self.gene_type.__name__}",
            )
            c.require(
                len({type(gene) for gene in self.genes}) <= 1,
                "All genes of a chromosome must be of the same kind",
            )

    @property
    def size(self) -> int:
        return len(self.genes)

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self) -> Iterator[Gene]:
        return iter(self.genes)

    def __getitem__(self, index: int) -> Gene:
        if not 0 <= index < len(self.genes):
            raise InvalidIndexError(index, len(self.genes), "chromosome")
        return self.genes[index]

    def verify(self) -> bool:
        """所有基因皆合法時為真"""
        return all(gene.verify() for gene in self.genes)

    def flatten(self) -> List[Any]:
        return [gene.value for gene in self.genes]

    def duplicate_with_genes(self, genes: Iterable[Gene]) -> "Chromosome":
        """建立持有新基因序列的同類染色體"""
        return replace(self, genes=tuple(genes))


class BooleanChromosome(Chromosome):
    """布林染色體"""

    gene_type = BooleanGene

    def true_count(self) -> int:
        return sum(1 for gene in self.genes if gene.value)


class CharChromosome(Chromosome):
    """字元染色體"""

    gene_type = CharGene

    def __str__(self) -> str:
        return "".join(self.flatten())


class IntChromosome(Chromosome):
    """整數染色體"""

    gene_type = IntGene


class DoubleChromosome(Chromosome):
    """浮點數染色體"""

    gene_type = DoubleGene


class PermutationChromosome(Chromosome):
    """排列染色體

    每個值恰好出現一次時才合法。排列型問題（例如旅行推銷員）應搭配
    SwapMutator 或 InversionMutator 使用，以維持排列性質。
    """

    def verify(self) -> bool:
        values = self.flatten()
        return super().verify() and len(set(values)) == len(values)


class NothingChromosome:
    """空染色體：無資料的佔位，任何操作皆引發 AbsurdOperationError"""

    @property
    def genes(self):
        raise AbsurdOperationError("genes")

    @property
    def size(self) -> int:
        raise AbsurdOperationError("size")

    def __getitem__(self, index: int):
        raise AbsurdOperationError("__getitem__")

    def verify(self) -> bool:
        raise AbsurdOperationError("verify")

    def flatten(self) -> List[Any]:
        raise AbsurdOperationError("flatten")

    def duplicate_with_genes(self, genes: Iterable[Gene]):
        raise AbsurdOperationError("duplicate_with_genes")

    def __repr__(self) -> str:
        return "NothingChromosome"


# =============================================================================
# Chromosome Factories
# =============================================================================

class ChromosomeFactory(ABC):
    """染色體工廠介面"""

    @abstractmethod
    def make(self, context: EvolutionContext) -> Chromosome:
        """隨機生成一條染色體"""


def _validate_size(size: int) -> None:
    with constraints(ChromosomeConfigurationError) as c:
        validate_positive(c, "chromosome size", size)


@dataclass
class BooleanChromosomeFactory(ChromosomeFactory):
    """布林染色體工廠

    Attributes:
        size: 染色體長度
        true_rate: 每個基因為 True 的機率
    """
    size: int
    true_rate: float = 0.5

    def __post_init__(self):
        with constraints(ChromosomeConfigurationError) as c:
            validate_positive(c, "chromosome size", self.size)
            validate_probability(c, "true rate", self.true_rate)

    def make(self, context: EvolutionContext) -> BooleanChromosome:
        return BooleanChromosome(tuple(
            BooleanGene(context.random.random() < self.true_rate)
            for _ in range(self.size)
        ))


@dataclass
class _BoundedChromosomeFactory(ChromosomeFactory):
    size: int
    bounds: GeneBounds
    predicate: Callable[[Any], bool] = field(default=_accept_all, repr=False)

    chromosome_type: Type[Chromosome] = field(init=False, default=Chromosome, repr=False)
    gene_type: Type[Gene] = field(init=False, default=Gene, repr=False)

    def __post_init__(self):
        _validate_size(self.size)

    def make(self, context: EvolutionContext) -> Chromosome:
        # 以邊界下限作為樣板，再由其生成規則產生隨機值
        template = self.gene_type(
            value=self.bounds.min_value, bounds=self.bounds, predicate=self.predicate
        )
        return self.chromosome_type(tuple(
            template.duplicate_with_value(template.generator(template.value, context.random))
            for _ in range(self.size)
        ))


@dataclass
class CharChromosomeFactory(_BoundedChromosomeFactory):
    """字元染色體工廠"""
    bounds: GeneBounds = field(default_factory=lambda: GeneBounds(" ", "z"))

    chromosome_type: Type[Chromosome] = field(init=False, default=CharChromosome, repr=False)
    gene_type: Type[Gene] = field(init=False, default=CharGene, repr=False)


@dataclass
class IntChromosomeFactory(_BoundedChromosomeFactory):
    """整數染色體工廠"""
    bounds: GeneBounds = field(default_factory=lambda: GeneBounds(0, 100))

    chromosome_type: Type[Chromosome] = field(init=False, default=IntChromosome, repr=False)
    gene_type: Type[Gene] = field(init=False, default=IntGene, repr=False)


@dataclass
class DoubleChromosomeFactory(_BoundedChromosomeFactory):
    """浮點數染色體工廠"""
    bounds: GeneBounds = field(default_factory=lambda: GeneBounds(0.0, 1.0))

    chromosome_type: Type[Chromosome] = field(init=False, default=DoubleChromosome, repr=False)
    gene_type: Type[Gene] = field(init=False, default=DoubleGene, repr=False)


@dataclass
class PermutationChromosomeFactory(ChromosomeFactory):
    """排列染色體工廠：生成 0..size-1 的隨機排列"""
    size: int

    def __post_init__(self):
        _validate_size(self.size)

    def make(self, context: EvolutionContext) -> PermutationChromosome:
        indices = list(range(self.size))
        context.random.shuffle(indices)
        bounds = GeneBounds(0, self.size - 1)
        return PermutationChromosome(tuple(IntGene(i, bounds=bounds) for i in indices))
