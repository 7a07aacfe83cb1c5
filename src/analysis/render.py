"""Plain-text rendering of an analysis session. Pure functions, no I/O."""
from src.analysis.session import AnalysisSession, AnalysisState
from src.constants import (
    MSG_ERROR_HEADER,
    MSG_LOADING,
    MSG_ROOM_TYPE_LABEL,
    MSG_SCENARIOS_HEADER,
    ROI_BADGES,
)
from src.contracts import AnalyzeRoomResponse, RenovationScenario


def format_currency(amount: float) -> str:
    return f"${amount:,.0f}"


def format_cost_range(low: float, high: float) -> str:
    return f"{format_currency(low)} - {format_currency(high)}"


def render_scenario(scenario: RenovationScenario) -> str:
    badge = ROI_BADGES.get(scenario.roi_rating.value, "")
    return "\n".join([
        f"{scenario.name.value}  {badge} {scenario.roi_rating.value} ROI",
        format_cost_range(scenario.total_cost_min, scenario.total_cost_max),
        f"  Materials: {format_currency(scenario.materials_cost)}",
        f"  Labor: {format_currency(scenario.labor_cost)}",
        f"  Time: {scenario.time_estimate}",
        f"  Permits: {scenario.permit_likelihood.value}",
        f"  Value impact: {scenario.value_impact:+g}%",
        scenario.description,
    ])


def render_result(result: AnalyzeRoomResponse) -> str:
    overall = format_cost_range(result.scenarios[0].total_cost_min, result.scenarios[-1].total_cost_max)
    blocks = [
        f"{MSG_ROOM_TYPE_LABEL}: {result.room_type.value}",
        f"Estimated range: {overall}",
        MSG_SCENARIOS_HEADER,
        *map(render_scenario, result.scenarios),
        result.disclaimer,
    ]
    return "\n\n".join(blocks)


def render_session(session: AnalysisSession) -> str:
    match session.state:
        case AnalysisState.RESULT if session.result is not None:
            return render_result(session.result)
        case AnalysisState.ERROR:
            return f"{MSG_ERROR_HEADER}\n{session.error}"
        case _:
            return MSG_LOADING
