import pytest
from unittest.mock import MagicMock
import base64
import io
import sys
import os

from PIL import Image

# Add project root to sys.path so we can import visionbulk and main
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from visionbulk.core.models import AnalysisResult, CharacterInfo, ScenePrompt, SceneStatus


def _png_bytes(color="red"):
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def mock_genai_client(mocker):
    """Fixture to mock the Google GenAI Client."""
    mock_client = mocker.patch('google.genai.Client')
    return mock_client

@pytest.fixture
def png_bytes():
    return _png_bytes()

@pytest.fixture
def png_data_url(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")

@pytest.fixture
def make_scene():
    """Factory for scenes in any state."""
    def _make(scene_id="1", status=SceneStatus.PENDING, image_url=None, error=None, present=None):
        return ScenePrompt(
            id=scene_id,
            original_text=f"Original text {scene_id}",
            refined_prompt=f"Refined prompt {scene_id}",
            present_characters=present or [],
            status=status,
            image_url=image_url,
            error=error,
        )
    return _make

@pytest.fixture
def characters():
    return [
        CharacterInfo(name="Ayesha", description="tall woman with a red scarf"),
        CharacterInfo(name="Bilal", description="bearded man in a grey coat"),
    ]

@pytest.fixture
def analysis(characters, make_scene):
    return AnalysisResult(
        characters=characters,
        visual_style="Cinematic photography",
        scenes=[
            make_scene("1", present=["Ayesha"]),
            make_scene("2", present=["Bilal"]),
            make_scene("3", present=["Ayesha", "Bilal"]),
        ],
    )
