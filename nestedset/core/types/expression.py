from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping


class Expression(ABC):
    """New-value expression for one column of a patched row."""

    @abstractmethod
    def evaluate(self, row: Mapping[str, Any], column: str) -> Any:
        """Compute the new value of ``column`` from the pre-update row."""
        pass


@dataclass(frozen=True)
class Assign(Expression):
    """``column := value``"""
    value: Any

    def evaluate(self, row: Mapping[str, Any], column: str) -> Any:
        return self.value

    def __str__(self) -> str:
        return f":= {self.value!r}"


@dataclass(frozen=True)
class Increment(Expression):
    """``column += delta`` (delta may be negative)."""
    delta: int

    def evaluate(self, row: Mapping[str, Any], column: str) -> Any:
        return row[column] + self.delta

    def is_noop(self) -> bool:
        return self.delta == 0

    def __str__(self) -> str:
        sign = "+" if self.delta >= 0 else "-"
        return f"{sign}= {abs(self.delta)}"
