"""Lifecycle of a single scene's generation attempt.

    pending -> generating -> completed
                          -> error

``completed`` and ``error`` are terminal. Every function returns a new
``ScenePrompt``; the input scene is never modified.
"""
from typing import Dict, FrozenSet

from visionbulk.core.models import ScenePrompt, SceneStatus

TRANSITIONS: Dict[SceneStatus, FrozenSet[SceneStatus]] = {
    SceneStatus.PENDING: frozenset({SceneStatus.GENERATING}),
    SceneStatus.GENERATING: frozenset({SceneStatus.COMPLETED, SceneStatus.ERROR}),
    SceneStatus.COMPLETED: frozenset(),
    SceneStatus.ERROR: frozenset(),
}


class InvalidTransitionError(ValueError):
    def __init__(self, scene_id: str, source: SceneStatus, target: SceneStatus):
        super().__init__(f"Scene {scene_id}: cannot move from {source.value} to {target.value}")
        self.scene_id = scene_id
        self.source = source
        self.target = target


def can_transition(source: SceneStatus, target: SceneStatus) -> bool:
    return target in TRANSITIONS[source]


def is_terminal(status: SceneStatus) -> bool:
    return not TRANSITIONS[status]


def _move(scene: ScenePrompt, target: SceneStatus, image_url=None, error=None) -> ScenePrompt:
    if not can_transition(scene.status, target):
        raise InvalidTransitionError(scene.id, scene.status, target)
    return _with_status(scene, target, image_url, error)


def _with_status(scene: ScenePrompt, status: SceneStatus, image_url=None, error=None) -> ScenePrompt:
    # model_copy skips validation, so rebuild to keep the payload/status invariant checked
    data = scene.model_dump()
    data.update(status=status, image_url=image_url, error=error)
    return ScenePrompt.model_validate(data)


def reset(scene: ScenePrompt) -> ScenePrompt:
    """Normalize a freshly analyzed scene to ``pending``, whatever status it came with."""
    return _with_status(scene, SceneStatus.PENDING)


def start(scene: ScenePrompt) -> ScenePrompt:
    return _move(scene, SceneStatus.GENERATING)


def complete(scene: ScenePrompt, image_url: str) -> ScenePrompt:
    if not image_url:
        raise ValueError(f"Scene {scene.id}: cannot complete without an image payload")
    return _move(scene, SceneStatus.COMPLETED, image_url=image_url)


def fail(scene: ScenePrompt, message: str) -> ScenePrompt:
    return _move(scene, SceneStatus.ERROR, error=message)
