"""
Swing Analyzer Service

High-level service that orchestrates frame sampling, pose detection,
angle calculation and phase classification to produce a coaching report.

This is the main entry point for analyzing golf swings.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from ..domain.analysis import (
    AnalysisRun,
    AnalysisState,
    FrameOutcome,
    SwingAccumulator,
)
from ..exceptions import (
    AnalysisCancelledError,
    DurationUnavailableError,
    FrameExtractionError,
    PoseDetectionError,
    SwingAnalysisError,
)
from .angle_calculator import AngleCalculator
from .frame_sampler import (
    DEFAULT_FRAME_RATE,
    DEFAULT_TARGET_SAMPLES,
    sample_timestamps,
    sampling_step,
    total_frame_count,
)
from .joint_extractor import JointExtractor, MIN_JOINT_CONFIDENCE
from .pose_detector import MediaPipePoseProvider, PoseProvider
from .report_generator import ReportGenerator
from .video_source import DEFAULT_MAX_DIMENSION, FrameSource, open_video_source

logger = logging.getLogger(__name__)

PoseProviderFactory = Callable[[], PoseProvider]
FrameSourceFactory = Callable[[str], FrameSource]


async def run_blocking(
    func: Callable[..., Any],
    *args: Any,
    cleanup: Optional[Callable[[Any], Any]] = None,
) -> Any:
    """
    Run blocking work in a worker thread.

    Cancelling the caller does not stop the thread, so on cancellation
    this waits for the thread to finish before re-raising. Nothing the
    thread uses gets released underneath it. If the abandoned call still
    produced a result, `cleanup` is applied to it.
    """
    future = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        await asyncio.wait({future})
        if cleanup is not None and not future.cancelled() and future.exception() is None:
            await asyncio.to_thread(cleanup, future.result())
        raise


class SwingAnalyzer:
    """
    Analyzes golf swings from video.

    For every sampled frame this service:
    1. Extracts the image at the frame's timestamp
    2. Detects key points through the pose provider
    3. Calculates spine, hip and shoulder angles
    4. Classifies the swing phase
    and finally aggregates everything into a text report.

    A frame that fails at any step is logged and skipped. Only problems
    opening the video abort the run.

    Each call to analyze_video() owns its accumulator, frame source and
    pose provider, so several videos can be analyzed concurrently with
    one SwingAnalyzer.

    Usage:
        analyzer = SwingAnalyzer()
        run = AnalysisRun()
        report = await analyzer.analyze_video("swing.mp4", run=run)
        print(run.progress, report)
    """

    def __init__(
        self,
        pose_provider_factory: Optional[PoseProviderFactory] = None,
        frame_source_factory: Optional[FrameSourceFactory] = None,
        frame_rate: float = DEFAULT_FRAME_RATE,
        target_samples: int = DEFAULT_TARGET_SAMPLES,
        min_confidence: float = MIN_JOINT_CONFIDENCE,
        adaptive_orientation: bool = False,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
    ):
        self.pose_provider_factory = pose_provider_factory or MediaPipePoseProvider
        self.frame_source_factory = frame_source_factory or (
            lambda path: open_video_source(path, max_dimension=max_dimension)
        )
        self.frame_rate = frame_rate
        self.target_samples = target_samples
        self.min_confidence = min_confidence
        self.adaptive_orientation = adaptive_orientation
        self.report_generator = ReportGenerator()

    # -------------------------------------------------------------------------
    # Main Analysis Method
    # -------------------------------------------------------------------------

    async def analyze_video(self, video_path: str, run: Optional[AnalysisRun] = None) -> str:
        """
        Analyze a golf swing video and return the report text.

        Args:
            video_path: Path to video file
            run: Optional status object to publish state and progress to

        Returns:
            Report text (possibly full of "not available" sections if
            nothing useful was detected)

        Raises:
            VideoSetupError: video cannot be opened or has no usable duration
            AnalysisCancelledError: run.cancel() was called
        """
        run = run or AnalysisRun()
        accumulator = SwingAccumulator()

        run.transition(AnalysisState.SAMPLING)
        logger.info(f"Run {run.id}: starting analysis of {video_path}")

        try:
            source = await run_blocking(
                self.frame_source_factory, video_path, cleanup=lambda s: s.close()
            )
        except asyncio.CancelledError:
            logger.info(f"Run {run.id}: task cancelled while opening video")
            run.transition(AnalysisState.CANCELLED)
            raise
        except Exception as e:
            self._fail(run, e)
            raise

        provider = None
        try:
            try:
                total_frames = total_frame_count(source.duration_seconds, self.frame_rate)
            except ValueError:
                raise DurationUnavailableError(video_path)

            logger.info(
                f"Run {run.id}: duration {source.duration_seconds:.2f}s, "
                f"{total_frames} frames, analyzing every "
                f"{sampling_step(total_frames, self.target_samples)} frames, "
                f"orientation {source.orientation_angle}°"
            )

            # Model loading blocks
            provider = await run_blocking(
                self.pose_provider_factory, cleanup=lambda p: self._release(p, None)
            )
            extractor = JointExtractor(
                provider,
                min_confidence=self.min_confidence,
                adaptive_orientation=self.adaptive_orientation,
            )

            run.transition(AnalysisState.EXTRACTING)
            for frame_index, timestamp in sample_timestamps(
                source.duration_seconds, self.frame_rate, self.target_samples
            ):
                self._check_cancelled(run)

                outcome = await run_blocking(
                    self._analyze_frame, source, extractor, frame_index, timestamp
                )
                accumulator.add(outcome)

                run.frames_analyzed = accumulator.frames_analyzed
                run.frames_skipped = accumulator.frames_skipped
                run.update_progress(frame_index / total_frames)

            self._check_cancelled(run)

            run.transition(AnalysisState.AGGREGATING)
            report = self.report_generator.generate(accumulator)

        except AnalysisCancelledError:
            logger.info(f"Run {run.id}: cancelled")
            run.transition(AnalysisState.CANCELLED)
            raise
        except asyncio.CancelledError:
            logger.info(f"Run {run.id}: task cancelled")
            run.transition(AnalysisState.CANCELLED)
            raise
        except Exception as e:
            self._fail(run, e)
            raise
        finally:
            await asyncio.to_thread(self._release, provider, source)

        logger.info(
            f"Run {run.id}: analysis complete. {len(accumulator.phases)} swing phases, "
            f"{accumulator.frames_analyzed} frames analyzed, "
            f"{accumulator.frames_skipped} skipped"
        )

        run.report = report
        run.update_progress(1.0)
        run.transition(AnalysisState.DONE)
        return report

    # -------------------------------------------------------------------------
    # Per-frame Pipeline
    # -------------------------------------------------------------------------

    def _analyze_frame(
        self,
        source: FrameSource,
        extractor: JointExtractor,
        frame_index: int,
        timestamp: float,
    ) -> FrameOutcome:
        """Run extraction -> key points -> metrics -> phase on one frame."""
        try:
            image = source.frame_at(timestamp)
            key_points = extractor.extract(image, source.orientation_angle)
        except (FrameExtractionError, PoseDetectionError) as e:
            logger.warning(f"Error analyzing frame {frame_index}: {e.message}")
            return FrameOutcome.skipped(frame_index, timestamp, e.message)
        except Exception as e:
            logger.warning(f"Unexpected error analyzing frame {frame_index}: {e}")
            return FrameOutcome.skipped(frame_index, timestamp, str(e))

        if not key_points:
            logger.warning(f"Frame {frame_index}: no pose detected")
            return FrameOutcome.skipped(frame_index, timestamp, "no pose detected")

        metrics = AngleCalculator.calculate_all(key_points)
        logger.debug(
            f"Frame {frame_index}: phase={metrics.phase}, spine={metrics.spine_angle}, "
            f"hip={metrics.hip_rotation}, shoulder={metrics.shoulder_rotation}"
        )
        return FrameOutcome.analyzed(frame_index, timestamp, metrics)

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_cancelled(run: AnalysisRun) -> None:
        if run.cancel_requested:
            raise AnalysisCancelledError(run.id)

    @staticmethod
    def _fail(run: AnalysisRun, error: Exception) -> None:
        if isinstance(error, SwingAnalysisError):
            run.error = error.message
            run.error_code = error.code
        else:
            run.error = str(error)
            run.error_code = "ANALYSIS_FAILED"
        logger.error(f"Run {run.id}: analysis failed: {run.error}")
        run.transition(AnalysisState.FAILED)

    @staticmethod
    def _release(provider: Optional[PoseProvider], source: Optional[FrameSource]) -> None:
        close = getattr(provider, "close", None)
        if callable(close):
            close()
        if source is not None:
            source.close()

