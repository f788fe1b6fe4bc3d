from google import genai
from google.genai import types
import base64
import io
import logging
from typing import Any, Optional
from visionbulk.config import Config

logger = logging.getLogger(__name__)


class ImageGenerationError(RuntimeError):
    """The image model answered without any image data."""


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class GenAIClient:
    def __init__(self):
        self.client = genai.Client(api_key=Config.GEMINI_API_KEY)
        self.text_model_name = Config.TEXT_MODEL_NAME
        self.image_model_name = Config.IMAGE_MODEL_NAME

    def generate_text(self, prompt: str, schema: Optional[Any] = None) -> str:
        """Returns the model's raw text; JSON when a response schema is given."""
        try:
            config_args = {}
            if schema:
                config_args['response_mime_type'] = 'application/json'
                config_args['response_schema'] = schema

            response = self.client.models.generate_content(
                model=self.text_model_name,
                contents=prompt,
                config=config_args
            )
            return response.text
        except Exception as e:
            logger.error(f"Error generating text: {e}")
            raise

    def generate_image(self, prompt: str, aspect_ratio: str = Config.DEFAULT_ASPECT_RATIO) -> str:
        """
        Generates a single image and returns it as a data URL.

        Args:
            prompt: The full prompt for image generation.
            aspect_ratio: One of Config.ASPECT_RATIOS.

        Returns:
            str: "data:<mime>;base64,<payload>"
        """
        try:
            logger.info(f"Generating image with model {self.image_model_name} ({aspect_ratio})")

            response = self.client.models.generate_content(
                model=self.image_model_name,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    response_modalities=['IMAGE'],
                    image_config=types.ImageConfig(
                        aspect_ratio=aspect_ratio,
                    ),
                )
            )

            for part in response.parts or []:
                inline = getattr(part, 'inline_data', None)
                if inline and inline.data:
                    return to_data_url(inline.data, inline.mime_type or "image/png")

                # Some SDK versions only expose the image through as_image()
                if hasattr(part, 'as_image'):
                    img = part.as_image()
                    if img is not None:
                        image_bytes = getattr(img, 'image_bytes', None)
                        if isinstance(image_bytes, bytes) and image_bytes:
                            return to_data_url(image_bytes, getattr(img, 'mime_type', None) or "image/png")
                        buf = io.BytesIO()
                        img.save(buf, format="PNG")
                        return to_data_url(buf.getvalue(), "image/png")

            raise ImageGenerationError("No image data received from API")

        except Exception as e:
            logger.error(f"Error generating image: {e}")
            raise
