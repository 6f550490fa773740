"""
Resource Loader Module for SPELLOTRON.

Loads the alphabet pose library and the per-level word lists.

Formats:
    - Pose library: JSON file matching PoseLibrarySchema.
    - Word lists: either a JSON file {"levels": {"first_grade": [...]}}
      or a directory holding one `<level>.words` text file per level,
      one word per line.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Union

from pydantic import ValidationError

from ..helpers.enums import DifficultyLevel
from ..helpers.exception_handler import ResourceLoadError
from ..schemas.sche_resources import LetterPoseSchema, PoseLibrarySchema, WordListsSchema
from .pose_library import PoseLibrary

logger = logging.getLogger(__name__)

WORD_FILE_SUFFIX = ".words"

PathLike = Union[str, Path]


def load_pose_library(path: PathLike) -> PoseLibrary:
    """
    Load the alphabet pose library.

    Args:
        path: JSON pose library file.

    Returns:
        PoseLibrary: Loaded library (not yet checked for completeness).

    Raises:
        ResourceLoadError: File missing, unreadable or malformed.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
        schema = PoseLibrarySchema.model_validate_json(raw)
        poses = [entry.to_letter_pose() for entry in schema.poses]
    except (OSError, ValidationError, ValueError) as e:
        logger.error(f"Error loading internal poses from {path}: {e}")
        raise ResourceLoadError(message=f"Cannot load pose library {path}: {e}") from e

    library = PoseLibrary(poses)
    logger.info(f"Loaded {len(library)} poses from {path}")
    return library


def save_pose_library(library: PoseLibrary, path: PathLike) -> None:
    """Write a pose library in the format read by load_pose_library."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    schema = PoseLibrarySchema(poses=[LetterPoseSchema.from_letter_pose(pose) for pose in library])
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema.model_dump(mode="json"), f, indent=2)


def load_word_file(path: PathLike) -> List[str]:
    """Read one word per line, trimmed, blank lines skipped."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            words = [line.strip() for line in f]
    except OSError as e:
        logger.error(f"Error loading internal wordlist {path}: {e}")
        raise ResourceLoadError(message=f"Cannot load word list {path}: {e}") from e

    words = [word for word in words if word]
    logger.info(f"{len(words)} words were successfully initialized from {path.name}")
    return words


def load_word_lists(path: PathLike) -> Dict[DifficultyLevel, List[str]]:
    """
    Load every level's word list.

    Args:
        path: JSON file or directory of `<level>.words` files.

    Returns:
        Dict[DifficultyLevel, List[str]]: Words per level.
    """
    path = Path(path)
    if path.is_dir():
        lists = {}
        for file in sorted(path.glob(f"*{WORD_FILE_SUFFIX}")):
            level = _parse_level(file.stem, file)
            lists[level] = load_word_file(file)
        return lists

    try:
        schema = WordListsSchema.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.error(f"Error loading internal wordlist {path}: {e}")
        raise ResourceLoadError(message=f"Cannot load word lists {path}: {e}") from e

    return {
        _parse_level(name, path): [word.strip() for word in words if word.strip()]
        for name, words in schema.levels.items()
    }


def load_word_list(path: PathLike, level: Union[DifficultyLevel, int, str]) -> List[str]:
    """
    Word list for one level.

    Unknown levels fall back to the first-grade list.

    Raises:
        ResourceLoadError: Neither the level nor the fallback is present.
    """
    level = DifficultyLevel.parse(level)
    lists = load_word_lists(path)
    if level in lists:
        return lists[level]
    if DifficultyLevel.FIRST_GRADE in lists:
        logger.warning(f"No word list for {level.value}; using first_grade")
        return lists[DifficultyLevel.FIRST_GRADE]
    raise ResourceLoadError(message=f"No word list for level {level.value} in {path}")


def _parse_level(name: str, source: Path) -> DifficultyLevel:
    try:
        return DifficultyLevel.parse(name)
    except ValueError as e:
        raise ResourceLoadError(message=f"Unknown difficulty level {name!r} in {source}") from e
