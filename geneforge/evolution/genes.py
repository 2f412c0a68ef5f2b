"""
基因 (Genes)

定義最小的遺傳資訊單位。基因為不可變物件，突變會透過
duplicate_with_value 產生新的基因，原基因保持不變。
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from random import Random
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from .context import EvolutionContext
from .exceptions import (
    AbsurdOperationError,
    ConstraintViolationError,
    constraints,
)

T = TypeVar("T")

# 帶條件的隨機生成最多嘗試次數
MAX_GENERATION_ATTEMPTS = 10_000


def _accept_all(value: Any) -> bool:
    return True


@dataclass(frozen=True)
class GeneBounds(Generic[T]):
    """基因邊界定義

    定義單一基因的數值範圍（閉區間）。

    Attributes:
        min_value: 最小值
        max_value: 最大值
    """
    min_value: T
    max_value: T

    def __post_init__(self):
        with constraints(ConstraintViolationError) as c:
            c.require(
                self.min_value <= self.max_value,
                f"The lower bound ({self.min_value!r}) must not be greater "
                f"than the upper bound ({self.max_value!r})",
            )

    def validate(self, value: T) -> bool:
        """驗證數值是否在邊界內"""
        return self.min_value <= value <= self.max_value

    def clamp(self, value: T) -> T:
        """將數值限制在邊界內"""
        return max(self.min_value, min(self.max_value, value))


class Gene(ABC):
    """基因介面

    每個基因持有一個值 `value` 與一個生成規則 `generator`。突變一律定義為
    `duplicate_with_value(generator(value, random))`，各種基因只需提供
    自己的生成規則。
    """

    @abstractmethod
    def generator(self, value: Any, rng: Random) -> Any:
        """由目前的值與亂數來源產生新的候選值"""

    def mutate(self, context: EvolutionContext) -> "Gene":
        """產生突變後的新基因"""
        return self.duplicate_with_value(self.generator(self.value, context.random))

    def duplicate_with_value(self, value: Any) -> "Gene":
        """建立持有新值的同類基因，保留邊界、條件與生成規則"""
        return replace(self, value=value)

    def verify(self) -> bool:
        return True

    def flatten(self) -> List[Any]:
        return [self.value]


def _draw_filtered(draw: Callable[[], T], predicate: Callable[[T], bool]) -> T:
    for _ in range(MAX_GENERATION_ATTEMPTS):
        candidate = draw()
        if predicate(candidate):
            return candidate
    raise ValueError(
        f"Could not generate a value satisfying the gene predicate after "
        f"{MAX_GENERATION_ATTEMPTS} attempts"
    )


@dataclass(frozen=True)
class BooleanGene(Gene):
    """布林基因

    Attributes:
        value: 基因值
        generator_fn: 自訂生成規則（可選）
    """
    value: bool
    generator_fn: Optional[Callable[[bool, Random], bool]] = field(
        default=None, compare=False, repr=False
    )

    def generator(self, value: bool, rng: Random) -> bool:
        if self.generator_fn is not None:
            return self.generator_fn(value, rng)
        return rng.random() < 0.5

    def flip(self) -> "BooleanGene":
        """反轉基因值"""
        return self.duplicate_with_value(not self.value)


@dataclass(frozen=True)
class CharGene(Gene):
    """字元基因

    Attributes:
        value: 單一字元
        bounds: 字元範圍（閉區間），預設為 ' '..'z'
        predicate: 額外的合法性條件
        generator_fn: 自訂生成規則（可選）
    """
    value: str
    bounds: GeneBounds = field(default_factory=lambda: GeneBounds(" ", "z"))
    predicate: Callable[[str], bool] = field(default=_accept_all, compare=False, repr=False)
    generator_fn: Optional[Callable[[str, Random], str]] = field(
        default=None, compare=False, repr=False
    )

    def generator(self, value: str, rng: Random) -> str:
        if self.generator_fn is not None:
            return self.generator_fn(value, rng)
        lo, hi = ord(self.bounds.min_value), ord(self.bounds.max_value)
        return _draw_filtered(lambda: chr(rng.randint(lo, hi)), self.predicate)

    def verify(self) -> bool:
        return (
            isinstance(self.value, str)
            and len(self.value) == 1
            and self.bounds.validate(self.value)
            and self.predicate(self.value)
        )


class NumberGene(Gene):
    """數值基因

    支援數值組合（平均），供均值交叉使用。
    """

    def to_float(self) -> float:
        return float(self.value)

    def average(self, others: Sequence["NumberGene"], weights: Optional[Sequence[float]] = None) -> "NumberGene":
        """計算本基因與其他基因的（加權）平均值，並以本基因為樣板建立新基因

        Args:
            others: 其他同類數值基因
            weights: 各基因的權重（含本基因，長度須為 len(others) + 1），預設等權重

        Returns:
            持有平均值的新基因
        """
        values = [self.to_float()] + [g.to_float() for g in others]
        if weights is None:
            weights = [1.0] * len(values)
        if len(weights) != len(values):
            raise ValueError(
                f"Expected {len(values)} weights, got {len(weights)}"
            )
        total = sum(weights)
        if total == 0:
            raise ValueError("Weights must not sum to zero")
        mean = sum(v * w for v, w in zip(values, weights)) / total
        return self.duplicate_with_value(self._from_float(mean))

    def _from_float(self, value: float) -> Any:
        return value


@dataclass(frozen=True)
class IntGene(NumberGene):
    """整數基因

    Attributes:
        value: 基因值
        bounds: 數值範圍（閉區間）
        predicate: 額外的合法性條件
        generator_fn: 自訂生成規則（可選）
    """
    value: int
    bounds: GeneBounds = field(default_factory=lambda: GeneBounds(-(2 ** 31), 2 ** 31 - 1))
    predicate: Callable[[int], bool] = field(default=_accept_all, compare=False, repr=False)
    generator_fn: Optional[Callable[[int, Random], int]] = field(
        default=None, compare=False, repr=False
    )

    def generator(self, value: int, rng: Random) -> int:
        if self.generator_fn is not None:
            return self.generator_fn(value, rng)
        return _draw_filtered(
            lambda: rng.randint(self.bounds.min_value, self.bounds.max_value),
            self.predicate,
        )

    def verify(self) -> bool:
        return self.bounds.validate(self.value) and self.predicate(self.value)

    def _from_float(self, value: float) -> int:
        # 四捨五入（遠離零）
        return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass(frozen=True)
class DoubleGene(NumberGene):
    """浮點數基因

    Attributes:
        value: 基因值
        bounds: 數值範圍
        predicate: 額外的合法性條件
        generator_fn: 自訂生成規則（可選）
    """
    value: float
    bounds: GeneBounds = field(default_factory=lambda: GeneBounds(-1.0e10, 1.0e10))
    predicate: Callable[[float], bool] = field(default=_accept_all, compare=False, repr=False)
    generator_fn: Optional[Callable[[float, Random], float]] = field(
        default=None, compare=False, repr=False
    )

    def generator(self, value: float, rng: Random) -> float:
        if self.generator_fn is not None:
            return self.generator_fn(value, rng)
        return _draw_filtered(
            lambda: rng.uniform(self.bounds.min_value, self.bounds.max_value),
            self.predicate,
        )

    def verify(self) -> bool:
        return (
            not math.isnan(self.value)
            and self.bounds.validate(self.value)
            and self.predicate(self.value)
        )


class NothingGene(Gene):
    """空基因 (Nothing Gene)

    代表無任何可能值的領域，僅作為泛型演算法中「無資料」的佔位。
    任何操作都會引發 AbsurdOperationError。
    """

    @property
    def value(self):
        raise AbsurdOperationError("value")

    def generator(self, value: Any, rng: Random) -> Any:
        raise AbsurdOperationError("generator")

    def mutate(self, context: EvolutionContext) -> Gene:
        raise AbsurdOperationError("mutate")

    def duplicate_with_value(self, value: Any) -> Gene:
        raise AbsurdOperationError("duplicate_with_value")

    def verify(self) -> bool:
        raise AbsurdOperationError("verify")

    def flatten(self) -> List[Any]:
        raise AbsurdOperationError("flatten")

    def __repr__(self) -> str:
        return "NothingGene"
