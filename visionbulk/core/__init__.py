from .ai_client import GenAIClient, ImageGenerationError
from .analyzer import ScriptAnalyzer, AnalysisError
from .bundler import bundle_scenes, decode_image_payload, NothingToBundleError, BundleError
from .exporter import export_scene, write_scene_files, write_manifest, ExportError
from .illustrator import SceneIllustrator
from .models import AnalysisResult, CharacterInfo, Progress, RunSnapshot, ScenePrompt, SceneStatus
from .orchestrator import BulkOrchestrator, RunError
from .resolver import resolve_character_context, NO_SPECIFIC_CHARACTER
from .state_machine import InvalidTransitionError
