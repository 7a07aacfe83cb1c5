from unittest.mock import MagicMock

from src.analysis.render import format_cost_range, format_currency, render_result, render_scenario, render_session
from src.analysis.session import AnalysisSession, AnalysisState
from src.constants import DISCLAIMER, MSG_ERROR_HEADER, MSG_LOADING
from src.contracts import AnalyzeRoomResponse


def _session(state, result=None, error=None) -> MagicMock:
    session = MagicMock(spec=AnalysisSession)
    session.state = state
    session.result = result
    session.error = error
    return session


def test_format_currency():
    assert format_currency(15000) == "$15,000"
    assert format_currency(999.6) == "$1,000"
    assert format_currency(0) == "$0"


def test_format_cost_range():
    assert format_cost_range(3000, 8000) == "$3,000 - $8,000"


def test_render_scenario_lists_every_field(response_payload):
    scenario = AnalyzeRoomResponse.model_validate(response_payload).scenarios[1]
    text = render_scenario(scenario)
    assert text.startswith("Mid-Range Remodel")
    assert "High ROI" in text
    assert "$15,000 - $35,000" in text
    assert "Permits: Medium" in text
    assert "Value impact: +5%" in text
    assert "Time: 1-2 weeks" in text


def test_render_result_orders_blocks(response_payload):
    text = render_result(AnalyzeRoomResponse.model_validate(response_payload))
    assert text.splitlines()[0] == "DETECTED ROOM TYPE: kitchen"
    assert "Estimated range: $3,000 - $90,000" in text
    assert text.index("Budget Refresh") < text.index("Mid-Range Remodel") < text.index("Premium Upgrade")
    assert text.endswith(DISCLAIMER)


def test_render_session_states(response_payload):
    result = AnalyzeRoomResponse.model_validate(response_payload)
    assert render_session(_session(AnalysisState.LOADING)) == MSG_LOADING
    assert render_session(_session(AnalysisState.IDLE)) == MSG_LOADING
    assert render_session(_session(AnalysisState.ERROR, error="boom")) == f"{MSG_ERROR_HEADER}\nboom"
    assert render_session(_session(AnalysisState.RESULT, result=result)) == render_result(result)
