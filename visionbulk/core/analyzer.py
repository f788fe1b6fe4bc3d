import json
import logging

from pydantic import ValidationError

from visionbulk.config import Config
from visionbulk.core.ai_client import GenAIClient
from visionbulk.core.models import AnalysisDraft, AnalysisResult, ScenePrompt

logger = logging.getLogger(__name__)


class AnalysisError(RuntimeError):
    """The script could not be turned into a character sheet and scenes."""


class ScriptAnalyzer:
    def __init__(self, ai_client: GenAIClient):
        self.ai_client = ai_client

    def build_prompt(self, text: str) -> str:
        return f"""
        Analyze the following script/text:
        1. Extract a "Character Sheet" with detailed physical descriptions for ALL main characters to ensure visual consistency.
        2. Divide the text into specific scenes.
        3. For each scene, identify ONLY the characters that are actually present or active in that specific scene.
        4. Create a "refined_prompt" for each scene that strictly describes what is happening. Do NOT include characters who are not in the scene.

        Style: {Config.DEFAULT_STYLE}

        Text: {text}
        """

    def analyze(self, text: str) -> AnalysisResult:
        """
        Extracts the character sheet, the visual style and the ordered scenes.

        Every returned scene starts out pending; the orchestrator normalizes
        it again anyway.
        """
        if not text or not text.strip():
            raise AnalysisError("Cannot analyze an empty script.")

        response_text = self.ai_client.generate_text(self.build_prompt(text), schema=AnalysisDraft)

        # Clean up potential markdown blocks if the model wraps JSON
        clean_text = (response_text or "").replace("```json", "").replace("```", "").strip()
        try:
            draft = AnalysisDraft.model_validate(json.loads(clean_text))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse analysis response: {clean_text[:100]}...")
            raise AnalysisError(f"Model returned an invalid analysis: {e}") from e

        scenes = []
        for position, s in enumerate(draft.scenes, start=1):
            scenes.append(ScenePrompt(
                id=s.id.strip() or str(position),
                original_text=s.original_text,
                refined_prompt=s.refined_prompt,
                present_characters=s.present_characters,
            ))

        logger.info(f"Analysis found {len(draft.characters)} characters and {len(scenes)} scenes.")
        return AnalysisResult(
            characters=draft.characters,
            visual_style=draft.visual_style,
            scenes=scenes,
        )
