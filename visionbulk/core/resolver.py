from typing import Iterable, List

from visionbulk.core.models import CharacterInfo

NO_SPECIFIC_CHARACTER = "No specific character"


def _names_match(sheet_name: str, scene_names: List[str]) -> bool:
    # Partial names, honorifics and truncation from the analysis step are
    # tolerated: either side may contain the other.
    return any(sheet_name in name or name in sheet_name for name in scene_names)


def resolve_character_context(present_characters: Iterable[str], characters: Iterable[CharacterInfo]) -> str:
    """
    Builds the character context for one scene.

    Returns "Name (description)" for each character of the sheet matched by
    the scene's present characters, joined with "; " in sheet order, or
    NO_SPECIFIC_CHARACTER when nothing matches. Names are compared as given,
    so an empty scene name matches every character.
    """
    scene_names = [n.lower() for n in present_characters]

    matched = []
    for char in characters:
        if _names_match(char.name.lower(), scene_names):
            matched.append(f"{char.name} ({char.description})")

    return "; ".join(matched) or NO_SPECIFIC_CHARACTER
