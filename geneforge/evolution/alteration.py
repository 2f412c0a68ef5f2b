"""
變異算子管線 (Alterer Pipeline)

變異算子（交叉與突變）將一個種群轉換為同樣大小的新種群。
多個變異算子可用 `+` 串接成管線，由左至右依序套用。
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from .context import EvolutionContext
from .models import Individual


class Alterer(ABC):
    """變異算子介面"""

    @abstractmethod
    def __call__(
        self,
        population: Sequence[Individual],
        context: EvolutionContext,
    ) -> List[Individual]:
        """回傳與輸入大小相同的新種群"""

    def __add__(self, other: "Alterer") -> "AltererPipeline":
        return AltererPipeline([self]) + other


class AltererPipeline(Alterer):
    """變異算子管線

    每個階段看到的是前一個階段的輸出。

    Attributes:
        alterers: 依序套用的變異算子
    """

    def __init__(self, alterers: Iterable[Alterer] = ()):
        self.alterers: List[Alterer] = []
        for alterer in alterers:
            self.alterers.extend(_flatten(alterer))

    def __call__(self, population, context):
        current = list(population)
        for alterer in self.alterers:
            current = alterer(current, context)
        return current

    def __add__(self, other: Alterer) -> "AltererPipeline":
        return AltererPipeline(self.alterers + _flatten(other))

    def __len__(self) -> int:
        return len(self.alterers)

    def __iter__(self):
        return iter(self.alterers)

    def __repr__(self) -> str:
        return f"AltererPipeline({self.alterers!r})"


def _flatten(alterer: Alterer) -> List[Alterer]:
    if isinstance(alterer, AltererPipeline):
        return list(alterer.alterers)
    return [alterer]
