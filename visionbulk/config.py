import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Config:
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")

    TEXT_MODEL_NAME = os.getenv("TEXT_MODEL_NAME", "gemini-3-flash-preview")
    IMAGE_MODEL_NAME = os.getenv("IMAGE_MODEL_NAME", "gemini-2.5-flash-image")

    BASE_OUTPUT_DIR = Path("output")
    BUNDLE_FILENAME = "visionbulk-scenes.zip"
    MANIFEST_FILENAME = "scenes.json"

    # Aspect ratios accepted by the image model
    ASPECT_RATIOS = ("16:9", "9:16", "1:1", "4:3", "3:4")
    DEFAULT_ASPECT_RATIO = "16:9"

    # Baseline look requested from the analysis step
    DEFAULT_STYLE = "Professional Realistic Photography, 8k, cinematic lighting."

    TECHNICAL_SUFFIX = (
        "8k resolution, ultra-detailed, professional color grading, "
        "realistic skin textures, natural lighting."
    )

    @staticmethod
    def validate():
        if not Config.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is not set.")

    @staticmethod
    def validate_aspect_ratio(aspect_ratio: str) -> str:
        if aspect_ratio not in Config.ASPECT_RATIOS:
            allowed = ", ".join(Config.ASPECT_RATIOS)
            raise ValueError(f"Unsupported aspect ratio '{aspect_ratio}'. Expected one of: {allowed}.")
        return aspect_ratio

# Ensure output directories exist structure
def setup_directories(base_path: Path):
    dirs = [
        base_path / "scenes",
    ]
    for d in dirs:
        d.mkdir(parents=True, exist_ok=True)
