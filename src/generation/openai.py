"""OpenAIScenarioGenerator — OpenAI backend using a strict JSON schema response format."""
from openai import AsyncOpenAI

from src.constants import (
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_PROMPT,
    ANALYSIS_SCHEMA_DESCRIPTION,
    ANALYSIS_SCHEMA_NAME,
    OPENAI_ANALYSIS_MODEL,
)
from src.contracts import RoomAnalysis, RoomType
from src.generation.client import ScenarioGenerator, split_image_payload
from src.generation.schema import ANALYSIS_SCHEMA


class OpenAIScenarioGenerator(ScenarioGenerator):

    def __init__(self, api_key: str, model: str = OPENAI_ANALYSIS_MODEL) -> None:
        self._api_key = api_key
        self._model = model

    async def generate(self, image_base64: str, room_type: RoomType) -> RoomAnalysis:
        client = AsyncOpenAI(api_key=self._api_key)
        media_type, image_data = split_image_payload(image_base64)
        response = await client.chat.completions.create(
            model=self._model,
            max_tokens=ANALYSIS_MAX_TOKENS,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": ANALYSIS_SCHEMA_NAME,
                    "description": ANALYSIS_SCHEMA_DESCRIPTION,
                    "schema": ANALYSIS_SCHEMA,
                    "strict": True,
                },
            },
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{media_type};base64,{image_data}"},
                        },
                        {"type": "text", "text": ANALYSIS_PROMPT % room_type.value},
                    ],
                }
            ],
        )
        message = response.choices[0].message
        match (message.content, getattr(message, "refusal", None)):
            case (_, str() as refusal) if refusal:
                raise ValueError(f"OpenAI refused the analysis: {refusal}")
            case (None | "", _):
                raise ValueError("OpenAI returned an empty analysis")
            case (content, _):
                return RoomAnalysis.model_validate_json(content)
