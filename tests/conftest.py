import pytest

from tests.factories import DISCLAIMER_TEXT, make_scenarios


@pytest.fixture
def scenarios() -> list[dict]:
    return make_scenarios()


@pytest.fixture
def analysis_payload(scenarios) -> dict:
    return {"roomType": "kitchen", "scenarios": scenarios}


@pytest.fixture
def response_payload(scenarios) -> dict:
    return {"roomType": "kitchen", "scenarios": scenarios, "disclaimer": DISCLAIMER_TEXT}
