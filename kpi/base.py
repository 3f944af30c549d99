"""
kpi/base.py

Shared contract for collection-level KPI formulas.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class BaseKPIFormula(ABC):
    """
    A formula turns per-record input columns into named metric values.

    Implementations declare the input columns they read in
    ``required_inputs``; :meth:`compute` checks them before delegating to
    :meth:`calculate`. Formulas do no I/O and keep no state between calls.
    """

    required_inputs: ClassVar[tuple[str, ...]] = ()

    def compute(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """
        Validate *inputs* and return :meth:`calculate` output.

        Raises ValueError naming every missing column, or when the columns
        are not all the same length.
        """
        missing = [name for name in self.required_inputs if name not in inputs]
        if missing:
            raise ValueError(f"{type(self).__name__} missing inputs: {', '.join(missing)}")

        lengths = {len(inputs[name]) for name in self.required_inputs}
        if len(lengths) > 1:
            raise ValueError(f"{type(self).__name__} input columns differ in length: {sorted(lengths)}")
        return self.calculate(inputs)

    @abstractmethod
    def calculate(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """
        Compute metrics from already-checked *inputs*, keyed by metric name.
        """
