"""
Thin client for the Ollama text generation and vision API
"""

import base64
import json
import re

import requests
from flask import current_app

from cemetery_app.services.exceptions import ExtractionError, ExternalServiceError, handle_service_exceptions
from cemetery_app.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)

JSON_OBJECT = re.compile(r'\{.*\}', re.DOTALL)


class OllamaClient:
    """Calls a (local or remote) Ollama server for text and image prompts"""

    def __init__(self, base_url: str, model: str, vision_model: str = None,
                 api_key: str = None, timeout: int = 120):
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.vision_model = vision_model or model
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_app_config(cls, config=None) -> 'OllamaClient':
        """Build a client from Flask config (defaults to the current app)"""
        if config is None:
            config = current_app.config
        base_url = config.get('OLLAMA_BASE_URL') or f"http://{config['OLLAMA_HOST']}:{config['OLLAMA_PORT']}"
        return cls(
            base_url,
            config['OLLAMA_MODEL'],
            vision_model=config.get('OLLAMA_VISION_MODEL'),
            api_key=config.get('OLLAMA_API_KEY'),
        )

    def _headers(self) -> dict:
        if self.api_key:
            return {'Authorization': f'Bearer {self.api_key}'}
        return {}

    def _post_generate(self, payload: dict) -> str:
        response = requests.post(f"{self.base_url}/api/generate",
                                 json=payload,
                                 headers=self._headers(),
                                 timeout=self.timeout)
        response.raise_for_status()
        return response.json().get('response', '')

    def check_available(self) -> bool:
        """Check if the Ollama server answers"""
        try:
            response = requests.get(f"{self.base_url}/api/tags", headers=self._headers(), timeout=5)
            return response.status_code == 200
        except requests.exceptions.RequestException:
            logger.info(f"Ollama not available at {self.base_url}")
            return False

    @handle_service_exceptions(logger)
    def generate(self, prompt: str, temperature: float = 0.7) -> str:
        """Generate free text for a prompt"""
        text = self._post_generate({
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature}
        })
        return text.strip()

    @handle_service_exceptions(logger)
    def generate_structured(self, prompt: str, image_bytes: bytes, mime_type: str,
                            schema: dict, temperature: float = 0.1) -> dict:
        """
        Ask the vision model to read an image and answer with JSON matching schema

        Raises:
            ExtractionError: if the answer is not a JSON object
        """
        if not image_bytes:
            raise ExternalServiceError("No image data to send")

        logger.debug(f"Sending {len(image_bytes)} bytes of {mime_type} to {self.vision_model}")
        text = self._post_generate({
            "model": self.vision_model,
            "prompt": prompt,
            "images": [base64.b64encode(image_bytes).decode('ascii')],
            "format": schema,
            "stream": False,
            "options": {"temperature": temperature}
        })

        # Models sometimes wrap the object in prose, so find the JSON part
        match = JSON_OBJECT.search(text or '')
        if not match:
            raise ExtractionError("No JSON found in model response")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.error(f"JSON parsing failed: {e}")
            raise ExtractionError("Model response was not valid JSON") from e
        if not isinstance(data, dict):
            raise ExtractionError("Model response is not an object")
        return data
