"""
Pose Comparator Module for SPELLOTRON.

Scores how closely the player's current skeleton matches a goal letter
pose on a 0-100 scale.

Method:
    1. Both skeletons are moved into a body frame built from the joints
       they share, using the same rule on each side: origin at the hip
       center, unit length = torso (shoulder center to hip center).
       When an anchor is not comparable, the centroid and RMS spread
       of the comparable joints are used instead.
    2. For every joint tracked (or inferred) in BOTH skeletons, the
       deviation is the distance between normalized positions divided
       by `max_joint_deviation`, clipped to [0, 1].
    3. Score = 100 * (1 - weighted mean deviation). Inferred joints
       carry a lower weight.

Joints that are not tracked in either skeleton are left out instead of
penalized, so partial occlusion does not sink the score. With no
comparable joint at all the score is 0.

Author: SPELLOTRON Team
Version: 1.0.0
"""

from typing import Dict, Tuple
import numpy as np

from .data_types import JOINT_INDEX, JOINT_ORDER, JointId, PoseSample

DEFAULT_MAX_JOINT_DEVIATION = 1.0
DEFAULT_INFERRED_JOINT_WEIGHT = 0.5

MIN_SCORE = 0.0
MAX_SCORE = 100.0

_EPS = 1e-9
_HIP = JOINT_INDEX[JointId.HIP_CENTER]
_SHOULDER = JOINT_INDEX[JointId.SHOULDER_CENTER]


def normalize_skeleton(points: np.ndarray, usable: np.ndarray) -> np.ndarray:
    """
    Center and scale a skeleton into its body frame.

    Args:
        points: Joint positions (N, 3).
        usable: Boolean mask (N,) of joints to anchor on and keep; pass
            the same mask for two skeletons that are compared.

    Returns:
        np.ndarray: Normalized positions (N, 3); unusable rows are zero.
    """
    points = np.where(usable[:, None], points, 0.0)
    if not usable.any():
        return points

    if usable[_HIP]:
        origin = points[_HIP]
    else:
        origin = points[usable].mean(axis=0)

    scale = 0.0
    if usable[_HIP] and usable[_SHOULDER]:
        scale = float(np.linalg.norm(points[_SHOULDER] - points[_HIP]))
    if scale <= _EPS:
        spread = points[usable] - origin
        scale = float(np.sqrt(np.mean(np.sum(spread ** 2, axis=1))))
    if scale <= _EPS or not np.isfinite(scale):
        scale = 1.0

    normalized = (points - origin) / scale
    return np.where(usable[:, None], normalized, 0.0)


def _deviations(
    current: PoseSample,
    goal: PoseSample,
    max_joint_deviation: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return (comparable mask, clipped per-joint deviation for every joint)."""
    current_usable = current.usable_mask()
    goal_usable = goal.usable_mask()
    comparable = current_usable & goal_usable

    current_norm = normalize_skeleton(current.to_numpy(), comparable)
    goal_norm = normalize_skeleton(goal.to_numpy(), comparable)

    distance = np.linalg.norm(current_norm - goal_norm, axis=1)
    deviation = np.clip(distance / max_joint_deviation, 0.0, 1.0)
    deviation = np.where(comparable, deviation, 0.0)
    return comparable, deviation


def compare_poses(
    current: PoseSample,
    goal: PoseSample,
    max_joint_deviation: float = DEFAULT_MAX_JOINT_DEVIATION,
    inferred_joint_weight: float = DEFAULT_INFERRED_JOINT_WEIGHT,
) -> float:
    """
    Similarity between the current frame and a goal pose.

    Args:
        current: Player skeleton for this frame.
        goal: Goal letter skeleton.
        max_joint_deviation: Normalized distance (torso lengths) at which
            a joint counts as fully wrong.
        inferred_joint_weight: Weight of a joint inferred in either sample.

    Returns:
        float: Similarity in [0, 100]; 100 = exact match, 0 when no joint
        is comparable.
    """
    if max_joint_deviation <= 0:
        raise ValueError("max_joint_deviation must be positive")

    comparable, deviation = _deviations(current, goal, max_joint_deviation)
    if not comparable.any():
        return MIN_SCORE

    inferred = current.inferred_mask() | goal.inferred_mask()
    weights = np.where(inferred, inferred_joint_weight, 1.0)[comparable]
    total_weight = float(weights.sum())
    if total_weight <= _EPS:
        weights = np.ones_like(weights)
        total_weight = float(weights.size)

    mean_deviation = float(np.dot(weights, deviation[comparable]) / total_weight)
    score = MAX_SCORE * (1.0 - mean_deviation)
    return float(min(MAX_SCORE, max(MIN_SCORE, score)))


def joint_deviations(
    current: PoseSample,
    goal: PoseSample,
    max_joint_deviation: float = DEFAULT_MAX_JOINT_DEVIATION,
) -> Dict[JointId, float]:
    """
    Per-joint clipped deviation in [0, 1] for every comparable joint.

    Useful for debug overlays showing which limb is off.
    """
    comparable, deviation = _deviations(current, goal, max_joint_deviation)
    return {
        joint_id: float(deviation[i])
        for i, joint_id in enumerate(JOINT_ORDER)
        if comparable[i]
    }
