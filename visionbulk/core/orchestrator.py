import logging
import threading
from typing import Callable, Iterator, List, Optional, Sequence

from visionbulk.config import Config
from visionbulk.core import state_machine
from visionbulk.core.bundler import decode_image_payload
from visionbulk.core.models import AnalysisResult, CharacterInfo, Progress, RunSnapshot, ScenePrompt
from visionbulk.core.resolver import resolve_character_context

logger = logging.getLogger(__name__)

GENERIC_SCENE_ERROR = "Failed to generate image"

AnalyzeFn = Callable[[str], AnalysisResult]
# (prompt, character_context, style, aspect_ratio) -> image payload
GenerateImageFn = Callable[[str, str, str, str], str]


class RunError(RuntimeError):
    """The run was aborted before any scene work started."""


class BulkOrchestrator:
    """
    Drives a run: analysis once, then one image per scene, strictly in order.

    The orchestrator owns the scene list for the duration of a run and
    publishes it as a stream of immutable RunSnapshot values. Starting a
    second run over the same output while one is being consumed is the
    caller's responsibility to prevent.
    """

    def __init__(self, analyze: AnalyzeFn, generate_image: GenerateImageFn):
        self.analyze = analyze
        self.generate_image = generate_image

    def run(self, raw_text: str, aspect_ratio: str,
            cancel_event: Optional[threading.Event] = None) -> Iterator[RunSnapshot]:
        """
        Analyzes the text and returns the stream of snapshots for the scene loop.

        Analysis happens before this method returns, so a RunError is raised
        here and never from the returned iterator. The loop itself only
        advances while the iterator is consumed.
        """
        Config.validate_aspect_ratio(aspect_ratio)
        if not raw_text or not raw_text.strip():
            raise RunError("No text to analyze.")

        try:
            analysis = self.analyze(raw_text)
        except Exception as e:
            logger.error(f"Analysis failed: {e}")
            raise RunError("An error occurred during processing. Please check your script and try again.") from e

        return self._generate(analysis, aspect_ratio, cancel_event)

    def run_to_completion(self, raw_text: str, aspect_ratio: str,
                          on_snapshot: Optional[Callable[[RunSnapshot], None]] = None,
                          cancel_event: Optional[threading.Event] = None) -> RunSnapshot:
        """Consumes the whole run and returns its final snapshot."""
        snapshot = None
        for snapshot in self.run(raw_text, aspect_ratio, cancel_event=cancel_event):
            if on_snapshot:
                on_snapshot(snapshot)
        return snapshot

    def _generate(self, analysis: AnalysisResult, aspect_ratio: str,
                  cancel_event: Optional[threading.Event]) -> Iterator[RunSnapshot]:
        characters = tuple(analysis.characters)
        style = analysis.visual_style
        scenes = [state_machine.reset(s) for s in analysis.scenes]
        total = len(scenes)
        progress = Progress(current=0, total=total)

        logger.info(f"Starting generation of {total} scenes ({aspect_ratio}).")
        yield self._snapshot(characters, style, scenes, progress)

        for i, scene in enumerate(scenes):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Run cancelled after {progress.current}/{total} scenes.")
                yield self._snapshot(characters, style, scenes, progress, finished=True, cancelled=True)
                return

            scenes[i] = state_machine.start(scene)
            logger.info(f"Generating scene {scene.id} ({i + 1}/{total})")
            yield self._snapshot(characters, style, scenes, progress)

            context = resolve_character_context(scene.present_characters, characters)
            try:
                image_url = self.generate_image(scene.refined_prompt, context, style, aspect_ratio)
                if image_url:
                    # A payload only counts once it decodes
                    decode_image_payload(image_url)
                scenes[i] = state_machine.complete(scenes[i], image_url)
                logger.info(f"Scene {scene.id} completed.")
            except Exception as e:
                logger.error(f"Failed to illustrate scene {scene.id}: {e}")
                scenes[i] = state_machine.fail(scenes[i], GENERIC_SCENE_ERROR)

            progress = Progress(current=i + 1, total=total)
            yield self._snapshot(characters, style, scenes, progress)

        final = self._snapshot(characters, style, scenes, progress, finished=True)
        logger.info(
            f"Run finished: {len(final.completed_scenes)} completed, {len(final.failed_scenes)} failed."
        )
        yield final

    @staticmethod
    def _snapshot(characters: Sequence[CharacterInfo], style: str, scenes: List[ScenePrompt],
                  progress: Progress, finished: bool = False, cancelled: bool = False) -> RunSnapshot:
        return RunSnapshot(
            characters=tuple(characters),
            visual_style=style,
            scenes=tuple(scenes),
            progress=progress,
            finished=finished,
            cancelled=cancelled,
        )
