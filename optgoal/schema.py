# optgoal/schema.py
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Literal, Optional, List

SolverName = Literal["highs", "gurobi"]


def _to_list(v):
    """Accept numpy arrays / pandas Series wherever a list of floats is expected"""
    if v is not None and hasattr(v, "tolist"):
        return v.tolist()
    return v


class ReservoirConstraints(BaseModel):
    initial_storage: float = Field(ge=0)       # S_0
    s_min: List[float]                         # S_min[t]
    s_max: List[float]                         # S_max[t]
    r_max: Optional[List[float]] = None        # R_max[t], unbounded if None

    @field_validator("s_min", "s_max", "r_max", mode="before")
    @classmethod
    def coerce_series(cls, v):
        return _to_list(v)

    @property
    def T(self) -> int:
        return len(self.s_min)


class GoalWeights(BaseModel):
    """Penalty weights on the deviation variables of the demand goal.

    ``surplus`` weighs d⁺ (release above demand), ``shortfall`` weighs d⁻
    (release below demand). Setting ``surplus=0`` penalizes only shortfalls.
    """

    surplus: float = Field(default=1.0, ge=0, allow_inf_nan=False)      # w⁺
    shortfall: float = Field(default=1.0, ge=0, allow_inf_nan=False)    # w⁻

    @model_validator(mode="after")
    def some_goal_penalized(self):
        assert self.surplus > 0 or self.shortfall > 0, "At least one deviation weight must be positive"
        return self

    @classmethod
    def shortfall_only(cls) -> "GoalWeights":
        return cls(surplus=0.0, shortfall=1.0)


class SolverSettings(BaseModel):
    name: SolverName = "highs"
    time_limit: Optional[float] = Field(default=None, gt=0)   # seconds
    verbose: bool = False


class ReservoirProblem(BaseModel):
    name: str = "reservoir"
    inflow: List[float]                        # I[t]
    demand: List[float]                        # D[t]
    constraints: ReservoirConstraints
    goals: GoalWeights = Field(default_factory=GoalWeights)
    solver: SolverSettings = Field(default_factory=SolverSettings)
    months: Optional[List[str]] = None         # axis labels for reports/plots

    @field_validator("inflow", "demand", "months", mode="before")
    @classmethod
    def coerce_series(cls, v):
        return _to_list(v)

    @property
    def T(self) -> int:
        """Number of periods in the planning horizon"""
        return len(self.inflow)

    def get_summary(self) -> dict:
        """High-level problem summary for logging/reporting"""
        c = self.constraints
        return {
            "name": self.name,
            "horizon": self.T,
            "initial_storage": c.initial_storage,
            "total_inflow": sum(self.inflow),
            "total_demand": sum(self.demand),
            "storage_range": f"{min(c.s_min):,.2f} - {max(c.s_max):,.2f}",
            "release_cap": "none" if c.r_max is None else f"{max(c.r_max):,.2f}",
            "weights": f"surplus={self.goals.surplus}, shortfall={self.goals.shortfall}",
            "solver": self.solver.name,
        }
