"""
通用演化計算引擎 (Generic Evolutionary Computation Engine)

以基因、染色體、基因型組成候選解，透過選擇、交叉與突變反覆演化種群，
直到終止條件不再成立。
"""

from .context import (
    DEFAULT_TOLERANCE,
    EvolutionContext,
    resolve_context,
)

from .genes import (
    GeneBounds,
    Gene,
    BooleanGene,
    CharGene,
    NumberGene,
    IntGene,
    DoubleGene,
    NothingGene,
)

from .chromosomes import (
    Chromosome,
    BooleanChromosome,
    CharChromosome,
    IntChromosome,
    DoubleChromosome,
    PermutationChromosome,
    NothingChromosome,
    ChromosomeFactory,
    BooleanChromosomeFactory,
    CharChromosomeFactory,
    IntChromosomeFactory,
    DoubleChromosomeFactory,
    PermutationChromosomeFactory,
)

from .models import (
    Genotype,
    GenotypeFactory,
    Individual,
    Population,
    population_fitness,
)

from .population import (
    PopulationGenerator,
    diversity,
    validate_population,
)

from .ranking import (
    IndividualRanker,
    FitnessMaxRanker,
    FitnessMinRanker,
    update_steady,
)

from .selection import (
    Selector,
    RandomSelector,
    TournamentSelector,
    RouletteWheelSelector,
)

from .alteration import (
    Alterer,
    AltererPipeline,
)

from .crossover import (
    Crossover,
    SinglePointCrossover,
    UniformCrossover,
    CombineCrossover,
    MeanCrossover,
)

from .mutation import (
    Mutator,
    RandomMutator,
    SwapMutator,
    InversionMutator,
    BitFlipMutator,
)

from .fitness import (
    FitnessEvaluator,
)

from .generation import (
    EvolutionState,
    TimedRecord,
    IndividualRecord,
    PopulationRecord,
    GenerationStats,
    GenerationRecord,
    EvolutionRecord,
)

from .listeners import (
    EvolutionListener,
    EvolutionRecorder,
    LoggingListener,
    CallbackListener,
)

from .limits import (
    Limit,
    MaxGenerations,
    SteadyGenerations,
    TargetFitness,
    ListenLimit,
    MaxTime,
)

from .engine import (
    EvolutionConfig,
    EngineStatus,
    EvolutionaryEngine,
)

from .exceptions import (
    EvolutionError,
    ConfigurationError,
    EngineConfigurationError,
    SelectionError,
    CrossoverConfigurationError,
    MutatorConfigurationError,
    LimitConfigurationError,
    ChromosomeConfigurationError,
    ConstraintViolationError,
    InvalidIndexError,
    AbsurdOperationError,
    RecordTimingError,
    EvolutionStateError,
    constraints,
)

__all__ = [
    # Context
    "DEFAULT_TOLERANCE",
    "EvolutionContext",
    "resolve_context",
    # Genes
    "GeneBounds",
    "Gene",
    "BooleanGene",
    "CharGene",
    "NumberGene",
    "IntGene",
    "DoubleGene",
    "NothingGene",
    # Chromosomes
    "Chromosome",
    "BooleanChromosome",
    "CharChromosome",
    "IntChromosome",
    "DoubleChromosome",
    "PermutationChromosome",
    "NothingChromosome",
    "ChromosomeFactory",
    "BooleanChromosomeFactory",
    "CharChromosomeFactory",
    "IntChromosomeFactory",
    "DoubleChromosomeFactory",
    "PermutationChromosomeFactory",
    # Models
    "Genotype",
    "GenotypeFactory",
    "Individual",
    "Population",
    "population_fitness",
    # Population
    "PopulationGenerator",
    "diversity",
    "validate_population",
    # Ranking
    "IndividualRanker",
    "FitnessMaxRanker",
    "FitnessMinRanker",
    "update_steady",
    # Selection
    "Selector",
    "RandomSelector",
    "TournamentSelector",
    "RouletteWheelSelector",
    # Alteration
    "Alterer",
    "AltererPipeline",
    # Crossover
    "Crossover",
    "SinglePointCrossover",
    "UniformCrossover",
    "CombineCrossover",
    "MeanCrossover",
    # Mutation
    "Mutator",
    "RandomMutator",
    "SwapMutator",
    "InversionMutator",
    "BitFlipMutator",
    # Fitness
    "FitnessEvaluator",
    # Generation
    "EvolutionState",
    "TimedRecord",
    "IndividualRecord",
    "PopulationRecord",
    "GenerationStats",
    "GenerationRecord",
    "EvolutionRecord",
    # Listeners
    "EvolutionListener",
    "EvolutionRecorder",
    "LoggingListener",
    "CallbackListener",
    # Limits
    "Limit",
    "MaxGenerations",
    "SteadyGenerations",
    "TargetFitness",
    "ListenLimit",
    "MaxTime",
    # Engine
    "EvolutionConfig",
    "EngineStatus",
    "EvolutionaryEngine",
    # Exceptions
    "EvolutionError",
    "ConfigurationError",
    "EngineConfigurationError",
    "SelectionError",
    "CrossoverConfigurationError",
    "MutatorConfigurationError",
    "LimitConfigurationError",
    "ChromosomeConfigurationError",
    "ConstraintViolationError",
    "InvalidIndexError",
    "AbsurdOperationError",
    "RecordTimingError",
    "EvolutionStateError",
    "constraints",
]
