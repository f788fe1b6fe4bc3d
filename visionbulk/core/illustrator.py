import logging

from visionbulk.config import Config
from visionbulk.core.ai_client import GenAIClient

logger = logging.getLogger(__name__)


class SceneIllustrator:
    def __init__(self, ai_client: GenAIClient):
        self.ai_client = ai_client

    def build_prompt(self, prompt: str, character_context: str, style: str) -> str:
        # Only the scene's own characters go in, to prevent character bloat
        return (
            "PHOTOREALISTIC CINEMATIC IMAGE.\n"
            f"STYLE: {style}.\n"
            f"ACTIVE CHARACTERS IN THIS SCENE: {character_context}.\n"
            f"SCENE DESCRIPTION: {prompt}.\n"
            f"TECHNICAL: {Config.TECHNICAL_SUFFIX}"
        )

    def generate_image(self, prompt: str, character_context: str, style: str, aspect_ratio: str) -> str:
        """Generates the image for one scene and returns its data URL."""
        Config.validate_aspect_ratio(aspect_ratio)
        final_prompt = self.build_prompt(prompt, character_context, style)
        logger.debug(f"Image prompt: {final_prompt}")
        return self.ai_client.generate_image(final_prompt, aspect_ratio=aspect_ratio)
