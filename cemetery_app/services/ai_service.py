"""
AI assistance for burial records: trend analysis, memorial notes and headstone reading
"""

import json

from cemetery_app.services.exceptions import ServiceError
from cemetery_app.services.ollama_client import OllamaClient
from cemetery_app.shared.logging_config import get_project_logger
from cemetery_app.shared.models import GraveRecord


ANALYSIS_FALLBACK = "Unable to analyze the records at this time."
NO_TRENDS_MESSAGE = "No notable trends were found in the current records."

ANALYSIS_PROMPT = """Analyze these graveyard records for a small local cemetery.
Summarize trends in lifespan and mortality over time based on the data provided.
Keep the tone respectful and professional.

Data: {records_json}"""

NOTES_PROMPT = """Generate a short, respectful memorial note for a burial record for {name}.
Provide 2 variations. Max 30 words each. Use gentle, traditional language."""

HEADSTONE_PROMPT = """You are an expert at reading headstones.
Carefully examine the provided image of a headstone.
Look specifically for:
- A birth date or year. If only a year (e.g., 1990) is found, format it as YYYY-01-01.
- A death date or year, formatted the same way.
- A stated age in years.
- The name of the deceased, usually the largest text.
- Phrases like "son of" or "daughter of" to identify parentNames.
- Phrases like "wife of" to identify husbandName.

LOGIC FOR AGE:
- If an age is written on the stone, use that number.
- Otherwise, if both birth and death years were found, calculate the age yourself (death year - birth year).
- Return the result in the 'ageAtDeath' field as an integer.

Return only JSON with these fields:
- deceasedFullName
- parentNames
- husbandName
- dateOfBirth (YYYY-MM-DD)
- dateOfDeath (YYYY-MM-DD)
- ageAtDeath (integer)
- notes (any other inscription text)
- gender (Male, Female, or Other)"""

EXTRACTION_SCHEMA = {
    "type": "object",
    "properties": {
        "deceasedFullName": {"type": "string"},
        "parentNames": {"type": "string"},
        "husbandName": {"type": "string"},
        "dateOfBirth": {"type": "string"},
        "dateOfDeath": {"type": "string"},
        "ageAtDeath": {"type": "integer"},
        "notes": {"type": "string"},
        "gender": {"type": "string"},
    },
}


def project_record(record: GraveRecord) -> dict:
    """Compact projection sent to the model for analysis"""
    return {
        'name': record.deceased_full_name,
        'death': record.date_of_death,
        'age': record.age_at_death,
        'grave': record.grave_number,
    }


class AIService:
    """Service wrapping the text and vision models used by the UI"""

    def __init__(self, client: OllamaClient = None):
        self.logger = get_project_logger(__name__)
        self._client = client

    @property
    def client(self) -> OllamaClient:
        if self._client is None:
            self._client = OllamaClient.from_app_config()
        return self._client

    def analyze_records(self, records: list[GraveRecord]) -> str:
        """Narrative trend summary of the records; never raises"""
        records_json = json.dumps([project_record(r) for r in records], ensure_ascii=False)
        prompt = ANALYSIS_PROMPT.format(records_json=records_json)
        try:
            text = self.client.generate(prompt, temperature=0.7)
        except ServiceError as e:
            self.logger.error(f"Record analysis failed: {e}")
            return ANALYSIS_FALLBACK
        if not text:
            self.logger.warning("Record analysis returned an empty response")
            return NO_TRENDS_MESSAGE
        return text

    def suggest_notes(self, deceased_name: str) -> str | None:
        """Memorial note suggestions, or None if the model could not be reached"""
        try:
            text = self.client.generate(NOTES_PROMPT.format(name=deceased_name), temperature=0.9)
        except ServiceError as e:
            self.logger.error(f"Note suggestion failed for {deceased_name!r}: {e}")
            return None
        return text or None

    def extract_from_image(self, image_bytes: bytes, mime_type: str) -> dict | None:
        """Structured fields read from a headstone photo, or None when nothing usable came back"""
        try:
            data = self.client.generate_structured(HEADSTONE_PROMPT, image_bytes, mime_type, EXTRACTION_SCHEMA)
        except ServiceError as e:
            self.logger.error(f"Headstone extraction failed: {e}")
            return None
        extracted = {key: data[key] for key in EXTRACTION_SCHEMA['properties'] if key in data}
        if not any(value not in (None, '') for value in extracted.values()):
            self.logger.warning("Headstone extraction returned no fields")
            return None
        return extracted
