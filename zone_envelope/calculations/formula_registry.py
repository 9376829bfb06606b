"""Formula registry describing every traced engine calculation.

Each traced value in the engine has a registered definition naming its
formula and upstream inputs, so an audit export can explain how a number
was produced and what it depends on.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set


class FormulaCategory(str, Enum):
    """Categories for organizing formulas."""
    INPUT = "Input"
    SITE = "Site"
    MASSING = "Massing"
    PARKING = "Parking"
    DEVELOPMENT = "Development"
    REVENUE = "Revenue"
    OPERATIONS = "Operations"
    FINANCING = "Financing"
    RETURNS = "Returns"


@dataclass
class FormulaDefinition:
    """Definition of a single calculation formula.

    Attributes:
        field_path: Dot-notation path to the field (e.g., "costs.hard_costs")
        name: Human-readable name
        formula: Symbolic formula
        inputs: Input field paths that feed into this formula
        category: Category for grouping
        unit: Display unit ("$", "%", "sf", "units", "x")
        notes: Optional explanation
    """
    field_path: str
    name: str
    formula: str
    inputs: List[str] = field(default_factory=list)
    category: FormulaCategory = FormulaCategory.INPUT
    unit: str = "$"
    notes: str = ""


class FormulaRegistry:
    """Central registry of engine formulas, populated lazily on first use."""
    _formulas: Dict[str, FormulaDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, definition: FormulaDefinition) -> None:
        cls._formulas[definition.field_path] = definition

    @classmethod
    def get(cls, field_path: str) -> Optional[FormulaDefinition]:
        cls._ensure_initialized()
        return cls._formulas.get(field_path)

    @classmethod
    def get_all(cls) -> Dict[str, FormulaDefinition]:
        cls._ensure_initialized()
        return cls._formulas.copy()

    @classmethod
    def get_by_category(cls, category: FormulaCategory) -> List[FormulaDefinition]:
        cls._ensure_initialized()
        return [f for f in cls._formulas.values() if f.category == category]

    @classmethod
    def get_inputs(cls, field_path: str) -> List[str]:
        formula = cls.get(field_path)
        return formula.inputs if formula else []

    @classmethod
    def get_dependents(cls, field_path: str) -> List[str]:
        """Get all formulas that use this field as a direct input."""
        cls._ensure_initialized()
        return [path for path, f in cls._formulas.items() if field_path in f.inputs]

    @classmethod
    def get_all_ancestors(cls, field_path: str) -> Set[str]:
        """Get all upstream dependencies recursively."""
        ancestors: Set[str] = set()
        to_process = list(cls.get_inputs(field_path))

        while to_process:
            current = to_process.pop()
            if current not in ancestors:
                ancestors.add(current)
                to_process.extend(cls.get_inputs(current))

        return ancestors

    @classmethod
    def _ensure_initialized(cls) -> None:
        if not cls._initialized:
            _populate_registry()
            cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Reset the registry (mainly for testing)."""
        cls._formulas = {}
        cls._initialized = False


def _populate_registry() -> None:
    F = FormulaDefinition
    C = FormulaCategory

    formulas = [
        # Inputs
        F("inputs.lot_width", "Lot Width", "User input", unit="ft"),
        F("inputs.lot_depth", "Lot Depth", "User input", unit="ft"),
        F("inputs.far", "Effective FAR", "far x variance bonus (if enabled)", unit="x"),
        F("inputs.land_cost", "Land Price", "User input"),

        # Site
        F("site.lot_area", "Lot Area", "lot_width x lot_depth",
          ["inputs.lot_width", "inputs.lot_depth"], C.SITE, "sf"),
        F("site.max_footprint", "Buildable Footprint", "buildable_width x buildable_depth",
          ["site.buildable_width", "site.buildable_depth"], C.SITE, "sf",
          "Lot dimensions less setbacks, floored at zero"),
        F("site.far_ceiling", "Max Allowed GSF", "lot_area x far",
          ["site.lot_area", "inputs.far"], C.SITE, "sf"),

        # Massing
        F("massing.used_gsf", "Used GSF", "sum(floor.area)",
          ["site.far_ceiling"], C.MASSING, "sf"),
        F("massing.total_units", "Total Units",
          "sum(floor(floor_area x efficiency / avg_unit_sf))",
          ["unit_mix.avg_unit_sf", "inputs.efficiency", "site.max_units_by_density"], C.MASSING, "units",
          "Last floor clamped to the density cap"),

        # Parking
        F("parking.provided", "Stalls Provided", "manual override or required stalls",
          ["parking.required"], C.PARKING, "stalls"),
        F("parking.area", "Parking Area", "provided x 350",
          ["parking.provided"], C.PARKING, "sf"),

        # Development
        F("costs.hard_costs", "Hard Costs",
          "residential + retail + parking hard costs",
          ["costs.residential_hard", "costs.retail_hard", "costs.parking_hard"], C.DEVELOPMENT),
        F("costs.soft_costs", "Soft Costs", "hard_costs x soft_cost_pct",
          ["costs.hard_costs"], C.DEVELOPMENT),
        F("costs.acquisition", "Acquisition Cost", "land_cost x (1 + closing_cost_pct)",
          ["inputs.land_cost"], C.DEVELOPMENT),
        F("costs.total_project_cost", "Total Project Cost",
          "acquisition + hard_costs + soft_costs + predevelopment",
          ["costs.acquisition", "costs.hard_costs", "costs.soft_costs", "costs.predevelopment"],
          C.DEVELOPMENT),

        # Revenue
        F("revenue.gross_income", "Gross Potential Income",
          "residential + retail + parking gross income",
          ["revenue.residential_gross", "revenue.retail_gross", "revenue.parking_gross"],
          C.REVENUE),
        F("revenue.egi", "Effective Gross Income", "gross_income - vacancy",
          ["revenue.gross_income", "revenue.vacancy"], C.REVENUE),

        # Operations
        F("operations.opex", "Operating Expenses",
          "management + property_tax + insurance + utilities + repairs",
          ["revenue.egi", "costs.total_project_cost"], C.OPERATIONS),
        F("operations.noi", "Net Operating Income", "egi - opex",
          ["revenue.egi", "operations.opex"], C.OPERATIONS),
        F("operations.adjusted_noi", "NOI After Reserves", "noi - reserves",
          ["operations.noi", "operations.reserves"], C.OPERATIONS),

        # Financing
        F("capital.total_debt", "Total Debt", "sum(source.amount)",
          [], C.FINANCING),
        F("capital.equity_required", "Equity Required",
          "max(0, total_project_cost - total_debt)",
          ["costs.total_project_cost", "capital.total_debt"], C.FINANCING),
        F("capital.debt_service", "Annual Hard Debt Service",
          "sum(PMT(source) x 12) over non-soft sources",
          ["capital.total_debt"], C.FINANCING),

        # Returns
        F("returns.yield_on_cost", "Yield on Cost", "noi / total_project_cost",
          ["operations.noi", "costs.total_project_cost"], C.RETURNS, "%"),
        F("returns.sale_proceeds", "Net Sale Proceeds",
          "noi / exit_cap - selling_costs - total_debt",
          ["operations.noi", "capital.total_debt"], C.RETURNS),
        F("returns.irr", "Levered IRR", "rate where NPV(cash_flows) = 0",
          ["capital.equity_required", "returns.sale_proceeds"], C.RETURNS, "%"),
        F("returns.equity_multiple", "Equity Multiple",
          "sum(positive cash flows) / equity_required",
          ["capital.equity_required"], C.RETURNS, "x"),
        F("returns.residual_land_value", "Residual Land Value",
          "max(0, noi / target_yield - hard_costs - soft_costs - predevelopment)",
          ["operations.noi", "costs.hard_costs", "costs.soft_costs"], C.RETURNS),
    ]

    for formula in formulas:
        FormulaRegistry.register(formula)
