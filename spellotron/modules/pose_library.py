"""
Pose Library Module for SPELLOTRON.

Read-only alphabet of LetterPose goals, loaded once at startup and
shared by every component that needs a goal pose.
"""

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping

from ..core.data_types import ALPHABET, LetterPose
from ..helpers.exception_handler import MissingLetterPoseError

logger = logging.getLogger(__name__)


class PoseLibrary:
    """
    Immutable {letter -> LetterPose} mapping.

    Example:
        >>> library = PoseLibrary(poses)
        >>> library.validate_complete()
        >>> library.get("a").name
        'A'
    """

    def __init__(self, poses: Iterable[LetterPose]):
        by_name = {}
        for pose in poses:
            if pose.name in by_name:
                logger.warning(f"Duplicate pose for letter {pose.name}; keeping the last one")
            by_name[pose.name] = pose
        self._poses: Mapping[str, LetterPose] = MappingProxyType(by_name)

    def __len__(self) -> int:
        return len(self._poses)

    def __contains__(self, letter: object) -> bool:
        return isinstance(letter, str) and letter.upper() in self._poses

    def __iter__(self) -> Iterator[LetterPose]:
        return iter(self._poses.values())

    @property
    def poses(self) -> Mapping[str, LetterPose]:
        return self._poses

    def get(self, letter: str) -> LetterPose:
        """
        Look up the goal pose of a letter.

        Args:
            letter: Letter, any case.

        Returns:
            LetterPose: The shared goal pose.

        Raises:
            MissingLetterPoseError: The letter is absent from the library.
        """
        pose = self._poses.get(letter.upper())
        if pose is None:
            logger.error(f"Error loading new goal pose: {letter!r}")
            raise MissingLetterPoseError(message=f"No pose for letter {letter!r} in pose library")
        return pose

    def missing_letters(self) -> List[str]:
        return [letter for letter in ALPHABET if letter not in self._poses]

    def validate_complete(self) -> None:
        """Raise MissingLetterPoseError unless all 26 letters are present."""
        missing = self.missing_letters()
        if missing:
            raise MissingLetterPoseError(
                message=f"Pose library incomplete, missing: {', '.join(missing)}"
            )
        logger.info(f"{len(self._poses)} alphabet poses successfully initialized")
