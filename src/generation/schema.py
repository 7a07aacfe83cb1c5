"""JSON schema handed to the model provider for structured output."""
from src.contracts import SCENARIO_ORDER, Rating, RoomType

_RATINGS = [r.value for r in Rating]

SCENARIO_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "name": {"type": "string", "enum": [n.value for n in SCENARIO_ORDER]},
        "totalCostMin": {"type": "number", "description": "USD"},
        "totalCostMax": {"type": "number", "description": "USD"},
        "materialsCost": {"type": "number", "description": "USD"},
        "laborCost": {"type": "number", "description": "USD"},
        "timeEstimate": {"type": "string", "description": "Days or weeks, e.g. '2-3 weeks'"},
        "permitLikelihood": {"type": "string", "enum": _RATINGS},
        "valueImpact": {"type": "number", "description": "Percentage, e.g. 5 for 5%"},
        "roiRating": {"type": "string", "enum": _RATINGS},
        "description": {"type": "string"},
    },
    "required": [
        "name",
        "totalCostMin",
        "totalCostMax",
        "materialsCost",
        "laborCost",
        "timeEstimate",
        "permitLikelihood",
        "valueImpact",
        "roiRating",
        "description",
    ],
}

ANALYSIS_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "roomType": {"type": "string", "enum": [t.value for t in RoomType]},
        "scenarios": {
            "type": "array",
            "items": SCENARIO_SCHEMA,
            "minItems": len(SCENARIO_ORDER),
            "maxItems": len(SCENARIO_ORDER),
        },
    },
    "required": ["roomType", "scenarios"],
}
