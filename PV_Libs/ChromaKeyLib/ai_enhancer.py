"""
AI enhancement collaborator.

Sends the current source icon to Gemini with a redraw prompt and returns the
first image part of the response. The workbench calls this at most once per
request and never retries.

Classes:
    IconEnhancer: Protocol any enhancer must satisfy
    GeminiIconEnhancer: google-genai backed implementation
"""

import base64
import logging
from typing import Any, Optional, Protocol

from google import genai
from google.genai import types

from PV_Libs.ChromaKeyLib.errors import EnhancementError
from PV_Libs.config import get_settings
from PV_Libs.constants import DEFAULT_OUTPUT_MIME, ENHANCE_PROMPT

logger = logging.getLogger(__name__)


class IconEnhancer(Protocol):
    def enhance(self, image_bytes: bytes, mime_type: str = DEFAULT_OUTPUT_MIME) -> Optional[bytes]:
        """Return an encoded image, or None when no usable result was produced."""
        ...


def extract_inline_image(response: Any) -> Optional[bytes]:
    """
    Pull the first inline image out of a generate_content response.

    Returns:
        Encoded image bytes, or None when the response carries no image part
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline is None or not getattr(inline, "data", None):
            continue
        data = inline.data
        if isinstance(data, str):
            # Some SDK versions hand back base64 text
            return base64.b64decode(data)
        return bytes(data)
    return None


class GeminiIconEnhancer:
    """
    Redraws an icon at higher resolution with a Gemini image model.

    Args:
        api_key: API key (default: GEMINI_API_KEY / GOOGLE_API_KEY from the environment)
        model: Model name (default: settings.enhance_model)
        client: Pre-built genai.Client, mainly for tests
        prompt: Instruction sent alongside the image

    Raises:
        EnhancementError: If no client is given and no API key is configured
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
        prompt: str = ENHANCE_PROMPT,
    ) -> None:
        settings = get_settings()
        self.model = model or settings.enhance_model
        self.prompt = prompt

        if client is None:
            key = api_key or settings.api_key
            if not key:
                raise EnhancementError(
                    "GEMINI_API_KEY not found in environment or .env. "
                    "Get your key at https://aistudio.google.com/apikey"
                )
            client = genai.Client(api_key=key)
        self._client = client

    def enhance(self, image_bytes: bytes, mime_type: str = DEFAULT_OUTPUT_MIME) -> Optional[bytes]:
        """
        Request an enhanced redraw of an icon.

        Raises:
            EnhancementError: If the API call fails
        """
        logger.info(f"Requesting enhancement from {self.model} ({len(image_bytes)} bytes)")
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                    self.prompt,
                ],
            )
        except Exception as exc:
            raise EnhancementError(f"Enhancement request failed: {exc}") from exc

        result = extract_inline_image(response)
        if result is None:
            logger.warning("Enhancement response contained no image")
        return result
