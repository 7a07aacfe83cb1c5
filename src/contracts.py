"""Wire contract for /api/analyze-room, shared by the server and the client.

Python attributes are snake_case; every model reads and writes the camelCase
wire names through an alias generator, so always dump with ``by_alias=True``.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, model_validator
from pydantic.alias_generators import to_camel


class RoomType(str, Enum):
    KITCHEN = "kitchen"
    BATHROOM = "bathroom"
    LIVING_ROOM = "living room"
    BEDROOM = "bedroom"


class Rating(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ScenarioName(str, Enum):
    BUDGET = "Budget Refresh"
    MID_RANGE = "Mid-Range Remodel"
    PREMIUM = "Premium Upgrade"


# Canonical response order: Budget → Mid-Range → Premium
SCENARIO_ORDER: tuple[ScenarioName, ...] = tuple(ScenarioName)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRoomRequest(WireModel):
    image_base64: StrictStr = Field(min_length=1)
    manual_room_type: Optional[RoomType] = None


class RenovationScenario(WireModel):
    name: ScenarioName
    total_cost_min: float = Field(ge=0)
    total_cost_max: float = Field(ge=0)
    materials_cost: float = Field(ge=0)
    labor_cost: float = Field(ge=0)
    time_estimate: str
    permit_likelihood: Rating
    value_impact: float
    roi_rating: Rating
    description: str

    @model_validator(mode="after")
    def _check_cost_range(self) -> "RenovationScenario":
        match self.total_cost_min <= self.total_cost_max:
            case True:
                return self
            case False:
                raise ValueError(
                    f"{self.name.value}: totalCostMin {self.total_cost_min} "
                    f"exceeds totalCostMax {self.total_cost_max}"
                )


def order_scenarios(scenarios: list[RenovationScenario]) -> list[RenovationScenario]:
    """Return scenarios in canonical order; the names must be exactly the three tiers."""
    names = sorted(s.name.value for s in scenarios)
    expected = sorted(n.value for n in SCENARIO_ORDER)
    match names == expected:
        case True:
            return sorted(scenarios, key=lambda s: SCENARIO_ORDER.index(s.name))
        case False:
            raise ValueError(f"expected one scenario per tier {expected}, got {names}")


class RoomAnalysis(WireModel):
    """Structured output requested from the model provider."""

    room_type: RoomType
    scenarios: list[RenovationScenario] = Field(min_length=3, max_length=3)

    @model_validator(mode="after")
    def _normalize_order(self) -> "RoomAnalysis":
        self.scenarios = order_scenarios(self.scenarios)
        return self


class AnalyzeRoomResponse(WireModel):
    room_type: RoomType
    scenarios: list[RenovationScenario] = Field(min_length=3, max_length=3)
    disclaimer: str

    @model_validator(mode="after")
    def _check_order(self) -> "AnalyzeRoomResponse":
        names = tuple(s.name for s in self.scenarios)
        match names == SCENARIO_ORDER:
            case True:
                return self
            case False:
                raise ValueError(f"scenarios out of order: {[n.value for n in names]}")


class ErrorResponse(BaseModel):
    error: str


class AnalysisRecord(WireModel):
    id: str
    room_type: RoomType
    scenarios: list[dict]
    created_at: datetime
