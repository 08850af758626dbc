"""
Frame Sampler

Chooses which frames of a video get analyzed. At most `target_samples`
frames are picked at a fixed stride, so analysis cost does not grow
with video length.
"""

import math
from itertools import islice
from typing import Iterator

DEFAULT_FRAME_RATE = 30
DEFAULT_TARGET_SAMPLES = 30


def total_frame_count(duration: float, frame_rate: float = DEFAULT_FRAME_RATE) -> int:
    """Number of nominal frames in a video of `duration` seconds."""
    if duration < 0 or not math.isfinite(duration):
        raise ValueError(f"Invalid video duration: {duration}")
    return int(math.floor(duration * frame_rate))


def sampling_step(total_frames: int, target_samples: int = DEFAULT_TARGET_SAMPLES) -> int:
    """Frame stride; never smaller than 1."""
    return max(1, total_frames // target_samples)


def sample_frame_indices(
    duration: float,
    frame_rate: float = DEFAULT_FRAME_RATE,
    target_samples: int = DEFAULT_TARGET_SAMPLES,
) -> Iterator[int]:
    """
    Lazily yield frame indices 0, step, 2*step, ... below the frame count,
    never more than `target_samples` of them.

    The cap truncates rather than spreads: when the floor stride is too
    small (59 frames -> step 1), only the first `target_samples` frames
    are covered and the tail of the video is not analyzed.

    Each call returns a fresh iterator, so sampling is restartable.
    A zero-length video yields nothing.
    """
    total_frames = total_frame_count(duration, frame_rate)
    step = sampling_step(total_frames, target_samples)
    # floor stride overshoots when total_frames is not a multiple of target
    return islice(range(0, total_frames, step), target_samples)


def sample_timestamps(
    duration: float,
    frame_rate: float = DEFAULT_FRAME_RATE,
    target_samples: int = DEFAULT_TARGET_SAMPLES,
) -> Iterator[tuple[int, float]]:
    """
    Yield (frame_index, timestamp_seconds) pairs for the sampled frames.

    Example:
        for index, timestamp in sample_timestamps(10.0):
            image = source.frame_at(timestamp)
    """
    for index in sample_frame_indices(duration, frame_rate, target_samples):
        yield index, index / frame_rate
