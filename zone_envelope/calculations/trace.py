"""Calculation tracing for audit trails.

Calls to ``trace()`` inside the engine record the value and the inputs it
was computed from whenever a ``TraceContext`` is active; otherwise they
return the value untouched.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .formula_registry import FormulaDefinition, FormulaRegistry


@dataclass
class TracedValue:
    """A single traced calculation."""
    field_path: str
    value: float
    formula_def: Optional[FormulaDefinition]
    input_values: Dict[str, float]
    year: Optional[int] = None
    notes: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> str:
        return _trace_key(self.field_path, self.year)

    def format_inputs(self) -> str:
        """Format input values as "name=value" pairs."""
        return ", ".join(
            f"{name.split('.')[-1]}={format_value(val)}"
            for name, val in self.input_values.items()
        )

    @property
    def computed_formula(self) -> str:
        """Symbolic formula followed by the traced result."""
        formula = self.formula_def.formula if self.formula_def else self.field_path
        if self.input_values:
            return f"{formula} [{self.format_inputs()}] = {format_value(self.value)}"
        return f"{formula} = {format_value(self.value)}"


def format_value(value: float) -> str:
    """Format a value for display."""
    if abs(value) >= 1_000_000:
        return f"${value/1_000_000:,.2f}M"
    elif abs(value) >= 1_000:
        return f"${value/1_000:,.1f}K"
    elif abs(value) < 1 and value != 0:
        return f"{value:.2%}"
    elif value == 0:
        return "0"
    else:
        return f"{value:,.2f}"


def _trace_key(field_path: str, year: Optional[int]) -> str:
    return f"{field_path}:{year}" if year is not None else field_path


class TraceContext:
    """Context manager for capturing calculation traces.

    Usage:
        with TraceContext() as ctx:
            result = compute(engine_input)
        ctx.traces  # all traced calculations

    Only one context is active at a time; entering a new one replaces the
    current one and exiting clears it.
    """
    _current: Optional["TraceContext"] = None

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.traces: Dict[str, TracedValue] = {}

    def __enter__(self) -> "TraceContext":
        TraceContext._current = self
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        TraceContext._current = None

    def record(
        self,
        field_path: str,
        value: float,
        input_values: Dict[str, float],
        year: Optional[int] = None,
        notes: str = "",
    ) -> None:
        if not self.enabled:
            return

        traced = TracedValue(
            field_path=field_path,
            value=value,
            formula_def=FormulaRegistry.get(field_path),
            input_values=dict(input_values),
            year=year,
            notes=notes,
        )
        self.traces[traced.key] = traced

    def get_trace(self, field_path: str, year: Optional[int] = None) -> Optional[TracedValue]:
        return self.traces.get(_trace_key(field_path, year))

    def get_calculation_chain(self, field_path: str) -> List[TracedValue]:
        """Get the traced value and every traced upstream input, inputs first."""
        chain: List[TracedValue] = []
        visited = set()

        def _collect(path: str) -> None:
            if path in visited:
                return
            visited.add(path)
            traced = self.get_trace(path)
            if traced:
                for input_path in traced.input_values:
                    _collect(input_path)
                chain.append(traced)

        _collect(field_path)
        return chain

    def summary(self) -> str:
        """Summarize traces grouped by formula category."""
        by_category: Dict[str, List[TracedValue]] = {}
        for traced in self.traces.values():
            category = traced.formula_def.category.value if traced.formula_def else "Unknown"
            by_category.setdefault(category, []).append(traced)

        lines = [f"Trace Summary ({len(self.traces)} calculations traced)", ""]
        for category, traces in sorted(by_category.items()):
            lines.append(f"=== {category} ({len(traces)} traces) ===")
            for traced in traces:
                lines.append(f"  {traced.key}: {traced.computed_formula}")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def current() -> Optional["TraceContext"]:
        return TraceContext._current


def trace(
    field_path: str,
    value: float,
    input_values: Dict[str, float],
    year: Optional[int] = None,
    notes: str = "",
) -> float:
    """Trace a calculation and return the value unchanged.

    Usable inline:
        noi = trace("operations.noi", egi - opex, {"revenue.egi": egi, "operations.opex": opex})
    """
    ctx = TraceContext.current()
    if ctx:
        ctx.record(field_path, value, input_values, year, notes)
    return value
