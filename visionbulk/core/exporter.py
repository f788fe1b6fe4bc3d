import binascii
import json
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from visionbulk.core.bundler import decode_image_payload, is_bundleable
from visionbulk.core.models import RunSnapshot, ScenePrompt

logger = logging.getLogger(__name__)


class ExportError(ValueError):
    """A single scene could not be exported."""


def scene_filename(index: int, ext: str) -> str:
    return f"scene-{index}.{ext}"


def export_scene(scene: ScenePrompt, index: int) -> Tuple[str, bytes]:
    """
    Returns the file name and raw bytes for one completed scene.

    ``index`` is the scene's 1-based position in the full scene list, so
    unlike the bundle the numbering keeps gaps left by failed scenes.
    """
    if index < 1:
        raise ExportError(f"Scene index must be 1-based, got {index}")
    if not is_bundleable(scene):
        raise ExportError(f"Scene {scene.id} has no completed image (status: {scene.status.value})")
    try:
        raw, ext = decode_image_payload(scene.image_url)
    except (binascii.Error, ValueError) as e:
        raise ExportError(f"Scene {scene.id} has an undecodable image payload: {e}") from e
    return scene_filename(index, ext), raw


def write_scene_files(scenes: Sequence[ScenePrompt], directory: Path) -> List[Path]:
    """Writes every completed scene to ``directory`` under its original index."""
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for index, scene in enumerate(scenes, start=1):
        if not is_bundleable(scene):
            continue
        filename, raw = export_scene(scene, index)
        path = directory / filename
        path.write_bytes(raw)
        written.append(path)
    logger.info(f"Saved {len(written)} scene images to {directory}")
    return written


def build_manifest(snapshot: RunSnapshot) -> dict:
    scenes = []
    for index, scene in enumerate(snapshot.scenes, start=1):
        entry = {
            "index": index,
            "id": scene.id,
            "status": scene.status.value,
            "original_text": scene.original_text,
            "refined_prompt": scene.refined_prompt,
            "present_characters": list(scene.present_characters),
            "file": None,
            "error": scene.error,
        }
        if is_bundleable(scene):
            entry["file"], _ = export_scene(scene, index)
        scenes.append(entry)

    return {
        "visual_style": snapshot.visual_style,
        "characters": [c.model_dump() for c in snapshot.characters],
        "progress": snapshot.progress.model_dump(),
        "cancelled": snapshot.cancelled,
        "scenes": scenes,
    }


def write_manifest(snapshot: RunSnapshot, path: Path) -> Path:
    """Creates a JSON manifest with the style, the character sheet and every scene's outcome."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(build_manifest(snapshot), f, ensure_ascii=False, indent=4)
    logger.info(f"Manifest saved to {path}")
    return path
