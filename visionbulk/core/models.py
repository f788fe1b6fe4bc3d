from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator


class SceneStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class CharacterInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Name of the character as used in the script")
    description: str = Field(description="Detailed physical appearance description")


class ScenePrompt(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Identifier of the scene assigned by the analysis step")
    original_text: str = Field(description="The exact text excerpt the scene derives from")
    refined_prompt: str = Field(description="Action-focused prompt describing ONLY what is in this scene")
    present_characters: List[str] = Field(default_factory=list, description="Names of characters present in the scene")
    status: SceneStatus = Field(default=SceneStatus.PENDING, description="Lifecycle state of the scene's image")
    image_url: Optional[str] = Field(default=None, description="Encoded image payload, set once completed")
    error: Optional[str] = Field(default=None, description="Failure reason, set once failed")

    @model_validator(mode="after")
    def _check_payload_matches_status(self):
        if (self.image_url is not None) != (self.status == SceneStatus.COMPLETED):
            raise ValueError(f"Scene {self.id}: image_url must be set if and only if status is completed")
        if (self.error is not None) != (self.status == SceneStatus.ERROR):
            raise ValueError(f"Scene {self.id}: error must be set if and only if status is error")
        return self


class AnalysisResult(BaseModel):
    characters: List[CharacterInfo] = Field(default_factory=list)
    visual_style: str = Field(description="Style descriptor applied to every scene")
    scenes: List[ScenePrompt] = Field(default_factory=list)


# Response schemas handed to the text model. They leave out the lifecycle fields.

class SceneDraft(BaseModel):
    id: str = Field(description="Unique scene identifier")
    original_text: str = Field(description="The exact text content of the scene")
    refined_prompt: str = Field(description="Action-focused prompt describing ONLY what is in this scene.")
    present_characters: List[str] = Field(
        description="Names of characters from the character sheet who appear in this specific scene."
    )


class AnalysisDraft(BaseModel):
    characters: List[CharacterInfo]
    visual_style: str = Field(description="Detailed description of the photographic style")
    scenes: List[SceneDraft]


class Progress(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: int = 0
    total: int = 0


class RunSnapshot(BaseModel):
    """Immutable view of a run, emitted after every scene transition."""
    model_config = ConfigDict(frozen=True)

    characters: Tuple[CharacterInfo, ...] = ()
    visual_style: str = ""
    scenes: Tuple[ScenePrompt, ...] = ()
    progress: Progress = Field(default_factory=Progress)
    finished: bool = False
    cancelled: bool = False

    @property
    def completed_scenes(self) -> List[ScenePrompt]:
        return [s for s in self.scenes if s.status == SceneStatus.COMPLETED]

    @property
    def failed_scenes(self) -> List[ScenePrompt]:
        return [s for s in self.scenes if s.status == SceneStatus.ERROR]

    def to_analysis_result(self) -> AnalysisResult:
        return AnalysisResult(
            characters=list(self.characters),
            visual_style=self.visual_style,
            scenes=list(self.scenes),
        )
