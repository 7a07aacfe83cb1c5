"""ClaudeScenarioGenerator — Anthropic Claude backend using forced tool use."""
from anthropic import AsyncAnthropic

from src.constants import (
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_PROMPT,
    ANALYSIS_SCHEMA_DESCRIPTION,
    ANALYSIS_TOOL_NAME,
    CLAUDE_ANALYSIS_MODEL,
)
from src.contracts import RoomAnalysis, RoomType
from src.generation.client import ScenarioGenerator, split_image_payload
from src.generation.schema import ANALYSIS_SCHEMA


class ClaudeScenarioGenerator(ScenarioGenerator):

    def __init__(self, api_key: str, model: str = CLAUDE_ANALYSIS_MODEL) -> None:
        self._api_key = api_key
        self._model = model

    async def generate(self, image_base64: str, room_type: RoomType) -> RoomAnalysis:
        client = AsyncAnthropic(api_key=self._api_key)
        media_type, image_data = split_image_payload(image_base64)
        message = await client.messages.create(
            model=self._model,
            max_tokens=ANALYSIS_MAX_TOKENS,
            tools=[
                {
                    "name": ANALYSIS_TOOL_NAME,
                    "description": ANALYSIS_SCHEMA_DESCRIPTION,
                    "input_schema": ANALYSIS_SCHEMA,
                }
            ],
            tool_choice={"type": "tool", "name": ANALYSIS_TOOL_NAME},
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": media_type,
                                "data": image_data,
                            },
                        },
                        {"type": "text", "text": ANALYSIS_PROMPT % room_type.value},
                    ],
                }
            ],
        )
        tool_input = next(
            (b.input for b in message.content if b.type == "tool_use" and b.name == ANALYSIS_TOOL_NAME),
            None,
        )
        match tool_input:
            case None:
                raise ValueError(f"Claude returned no {ANALYSIS_TOOL_NAME} call")
            case data:
                return RoomAnalysis.model_validate(data)
