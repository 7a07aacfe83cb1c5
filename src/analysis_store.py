import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from src.constants import DEFAULT_ANALYSIS_STORE_PATH, MSG_ERR_PERSISTENCE
from src.contracts import AnalysisRecord, RenovationScenario, RoomType
from src.errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path(DEFAULT_ANALYSIS_STORE_PATH)


class AnalysisStore:
    """Append-only JSON Lines log of completed analyses. Images are never stored."""

    def __init__(self, path: Path = DEFAULT_STORE_PATH) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, room_type: RoomType, scenarios: list[RenovationScenario]) -> AnalysisRecord:
        record = AnalysisRecord(
            id=str(uuid.uuid4()),
            room_type=room_type,
            scenarios=list(map(lambda s: s.model_dump(mode="json", by_alias=True), scenarios)),
            created_at=datetime.now(timezone.utc),
        )
        line = record.model_dump_json(by_alias=True)
        try:
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise PersistenceError(MSG_ERR_PERSISTENCE % e) from e
        return record

    def records(self) -> list[AnalysisRecord]:
        match self._path.exists():
            case False:
                return []
            case True:
                pass
        with open(self._path, encoding="utf-8") as f:
            lines = [line for line in f.read().splitlines() if line.strip()]
        return [r for r in map(self._parse, lines) if r is not None]

    def count(self) -> int:
        return len(self.records())

    def _parse(self, line: str) -> AnalysisRecord | None:
        try:
            return AnalysisRecord.model_validate(json.loads(line))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Skipping corrupt analysis record in %s: %s", self._path.name, e)
            return None
