"""
Swing Analyzer Tests

End-to-end runs through the orchestrator with fake pose provider and
frame source.
"""
import asyncio
import threading
import time
from unittest.mock import Mock

import pytest

from core.domain.analysis import AnalysisRun, AnalysisState
from core.domain.pose import ImageOrientation
from core.exceptions import (
    AnalysisCancelledError,
    DurationUnavailableError,
    VideoOpenError,
)
from core.services.report_generator import (
    NO_HIP_MESSAGE,
    NO_PHASES_MESSAGE,
    NO_SHOULDER_MESSAGE,
    NO_SPINE_MESSAGE,
)
from core.services.swing_analyzer import SwingAnalyzer
from tests.fakes import (
    FakeFrameSource,
    FakePoseProvider,
    SWING_POSE,
    SlowFrameSource,
    body_joints,
)


def make_analyzer(provider, source) -> SwingAnalyzer:
    return SwingAnalyzer(
        pose_provider_factory=lambda: provider,
        frame_source_factory=lambda path: source,
    )


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_ten_second_swing(self, swing_provider, ten_second_source):
        """300 frames sampled every 10 -> 30 backswing frames"""
        run = AnalysisRun()

        report = await make_analyzer(swing_provider, ten_second_source).analyze_video("swing.mp4", run)

        assert ten_second_source.requested == pytest.approx([i / 30 for i in range(0, 300, 10)])
        assert report.startswith("Swing Analysis:\n\nSwing Phases:\n")
        assert "- Backswing: 30 frames (100.0%)" in report
        assert "- Downswing: 0 frames (0.0%)" in report
        assert "- Follow-through: 0 frames (0.0%)" in report
        assert "- Average angle: 180.0°" in report
        assert "- Issue: Excessive spine tilt" in report
        assert "- Issue: Limited hip rotation" in report
        assert "- Issue: Limited shoulder turn" in report

        assert run.state == AnalysisState.DONE
        assert run.report == report
        assert run.progress == 1.0
        assert run.frames_analyzed == 30
        assert run.frames_skipped == 0

    @pytest.mark.asyncio
    async def test_orientation_hint_fixed(self, swing_provider, ten_second_source):
        ten_second_source.orientation_angle = -90

        await make_analyzer(swing_provider, ten_second_source).analyze_video("swing.mp4")

        assert set(swing_provider.orientations) == {ImageOrientation.RIGHT}

    @pytest.mark.asyncio
    async def test_resources_released(self, swing_provider, ten_second_source):
        await make_analyzer(swing_provider, ten_second_source).analyze_video("swing.mp4")

        assert swing_provider.closed
        assert ten_second_source.closed


class TestDegradedInput:

    @pytest.mark.asyncio
    async def test_no_pose_detected(self, empty_provider, ten_second_source):
        run = AnalysisRun()

        report = await make_analyzer(empty_provider, ten_second_source).analyze_video("swing.mp4", run)

        assert NO_PHASES_MESSAGE in report
        assert NO_SPINE_MESSAGE in report
        assert NO_HIP_MESSAGE in report
        assert NO_SHOULDER_MESSAGE in report
        assert run.state == AnalysisState.DONE
        assert run.frames_skipped == 30
        assert run.frames_analyzed == 0

    @pytest.mark.asyncio
    async def test_failed_frames_are_skipped(self, swing_provider):
        source = FakeFrameSource(duration_seconds=10.0, failing_timestamps={0.0, 1.0})
        run = AnalysisRun()

        report = await make_analyzer(swing_provider, source).analyze_video("swing.mp4", run)

        assert "- Backswing: 28 frames (100.0%)" in report
        assert run.frames_skipped == 2
        assert run.frames_analyzed == 28

    @pytest.mark.asyncio
    async def test_every_frame_fails(self, swing_provider):
        source = FakeFrameSource(duration_seconds=3.0, fail_all=True)
        run = AnalysisRun()

        report = await make_analyzer(swing_provider, source).analyze_video("swing.mp4", run)

        assert NO_PHASES_MESSAGE in report
        assert run.state == AnalysisState.DONE
        assert swing_provider.body_calls == 0

    @pytest.mark.asyncio
    async def test_provider_errors_are_skipped(self, ten_second_source):
        provider = FakePoseProvider(fail=True)
        run = AnalysisRun()

        report = await make_analyzer(provider, ten_second_source).analyze_video("swing.mp4", run)

        assert NO_SPINE_MESSAGE in report
        assert run.frames_skipped == 30

    @pytest.mark.asyncio
    async def test_unexpected_provider_error_is_skipped(self, ten_second_source):
        provider = Mock()
        provider.detect_body_pose.side_effect = RuntimeError("graph crashed")
        run = AnalysisRun()

        await make_analyzer(provider, ten_second_source).analyze_video("swing.mp4", run)

        assert run.state == AnalysisState.DONE
        assert run.frames_skipped == 30
        provider.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_zero_length_video(self, swing_provider):
        source = FakeFrameSource(duration_seconds=0.0)
        run = AnalysisRun()

        report = await make_analyzer(swing_provider, source).analyze_video("swing.mp4", run)

        assert NO_PHASES_MESSAGE in report
        assert swing_provider.body_calls == 0
        assert run.state == AnalysisState.DONE
        assert run.progress == 1.0

    @pytest.mark.asyncio
    async def test_partial_pose(self, ten_second_source):
        """Only hips visible: hip section filled, the rest fall back"""
        hips = {k: v for k, v in SWING_POSE.items() if k.value.endswith("hip")}
        provider = FakePoseProvider(body=body_joints(hips))

        report = await make_analyzer(provider, ten_second_source).analyze_video("swing.mp4")

        assert NO_PHASES_MESSAGE in report
        assert NO_SPINE_MESSAGE in report
        assert "Hip Rotation Analysis:" in report
        assert NO_SHOULDER_MESSAGE in report


class TestSetupErrors:

    @pytest.mark.asyncio
    async def test_unreadable_video_fails_run(self, swing_provider):
        def open_source(path):
            raise VideoOpenError(path)

        analyzer = SwingAnalyzer(
            pose_provider_factory=lambda: swing_provider,
            frame_source_factory=open_source,
        )
        run = AnalysisRun()

        with pytest.raises(VideoOpenError):
            await analyzer.analyze_video("missing.mp4", run)

        assert run.state == AnalysisState.FAILED
        assert run.error_code == "VIDEO_OPEN_FAILED"
        assert run.report is None
        assert swing_provider.body_calls == 0

    @pytest.mark.asyncio
    async def test_unknown_duration_fails_run(self, swing_provider):
        source = FakeFrameSource(duration_seconds=float("nan"))
        run = AnalysisRun()

        with pytest.raises(DurationUnavailableError):
            await make_analyzer(swing_provider, source).analyze_video("swing.mp4", run)

        assert run.state == AnalysisState.FAILED
        assert run.error_code == "DURATION_UNAVAILABLE"
        assert source.closed

    @pytest.mark.asyncio
    async def test_unexpected_setup_error_fails_run(self, swing_provider):
        analyzer = SwingAnalyzer(
            pose_provider_factory=lambda: swing_provider,
            frame_source_factory=Mock(side_effect=OSError("disk gone")),
        )
        run = AnalysisRun()

        with pytest.raises(OSError):
            await analyzer.analyze_video("swing.mp4", run)

        assert run.state == AnalysisState.FAILED
        assert run.error_code == "ANALYSIS_FAILED"
        assert run.error == "disk gone"


class TestRunStatus:

    @pytest.mark.asyncio
    async def test_progress_monotonic(self, swing_provider, ten_second_source):
        run = AnalysisRun()
        seen = []
        run.add_listener(lambda r: seen.append((r.state, r.progress)))

        await make_analyzer(swing_provider, ten_second_source).analyze_video("swing.mp4", run)

        progress = [p for _, p in seen]
        assert progress == sorted(progress)
        assert all(0.0 <= p <= 1.0 for p in progress)
        assert progress[-1] == 1.0

        states = []
        for state, _ in seen:
            if not states or states[-1] != state:
                states.append(state)
        assert states == [
            AnalysisState.SAMPLING,
            AnalysisState.EXTRACTING,
            AnalysisState.AGGREGATING,
            AnalysisState.DONE,
        ]

    @pytest.mark.asyncio
    async def test_cancel_at_frame_boundary(self, swing_provider, ten_second_source):
        run = AnalysisRun()

        def cancel_midway(r):
            if r.progress >= 0.5:
                r.cancel()

        run.add_listener(cancel_midway)

        with pytest.raises(AnalysisCancelledError):
            await make_analyzer(swing_provider, ten_second_source).analyze_video("swing.mp4", run)

        assert run.state == AnalysisState.CANCELLED
        assert run.report is None
        assert len(ten_second_source.requested) == 16
        assert swing_provider.closed
        assert ten_second_source.closed

    @pytest.mark.asyncio
    async def test_concurrent_runs_are_isolated(self):
        sources = {
            "long.mp4": FakeFrameSource(duration_seconds=10.0),
            "short.mp4": FakeFrameSource(duration_seconds=0.5),
        }
        analyzer = SwingAnalyzer(
            pose_provider_factory=lambda: FakePoseProvider(body=body_joints(SWING_POSE)),
            frame_source_factory=lambda path: sources[path],
        )
        long_run, short_run = AnalysisRun(), AnalysisRun()

        long_report, short_report = await asyncio.gather(
            analyzer.analyze_video("long.mp4", long_run),
            analyzer.analyze_video("short.mp4", short_run),
        )

        assert "- Backswing: 30 frames (100.0%)" in long_report
        assert "- Backswing: 15 frames (100.0%)" in short_report
        assert long_run.frames_analyzed == 30
        assert short_run.frames_analyzed == 15
        assert long_run.id != short_run.id


class TestTaskCancellation:

    @pytest.mark.asyncio
    async def test_waits_for_frame_in_flight_before_release(self, swing_provider):
        source = SlowFrameSource(duration_seconds=10.0, delay=0.3)
        run = AnalysisRun()
        task = asyncio.create_task(
            make_analyzer(swing_provider, source).analyze_video("swing.mp4", run)
        )

        for _ in range(200):
            if source.reading.is_set():
                break
            await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert source.closed
        assert not source.closed_while_reading
        assert swing_provider.closed
        assert run.state == AnalysisState.CANCELLED

    @pytest.mark.asyncio
    async def test_source_opened_after_cancel_is_closed(self, swing_provider):
        opening = threading.Event()
        source = FakeFrameSource(duration_seconds=10.0)

        def open_source(path):
            opening.set()
            time.sleep(0.2)
            return source

        analyzer = SwingAnalyzer(
            pose_provider_factory=lambda: swing_provider,
            frame_source_factory=open_source,
        )
        run = AnalysisRun()
        task = asyncio.create_task(analyzer.analyze_video("swing.mp4", run))

        for _ in range(200):
            if opening.is_set():
                break
            await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert source.closed
        assert source.requested == []
        assert run.state == AnalysisState.CANCELLED


class SlowPoseProvider(FakePoseProvider):
    """Model load and close both take a while, like the MediaPipe graphs"""

    def __init__(self, delay: float):
        time.sleep(delay)
        super().__init__(body=body_joints(SWING_POSE))
        self.delay = delay

    def close(self):
        time.sleep(self.delay)
        super().close()


class TestEventLoopResponsiveness:

    @pytest.mark.asyncio
    async def test_provider_setup_and_release_run_off_loop(self, ten_second_source):
        analyzer = SwingAnalyzer(
            pose_provider_factory=lambda: SlowPoseProvider(delay=0.3),
            frame_source_factory=lambda path: ten_second_source,
        )
        gaps = []
        done = asyncio.Event()

        async def ticker():
            loop = asyncio.get_running_loop()
            last = loop.time()
            while not done.is_set():
                await asyncio.sleep(0.01)
                now = loop.time()
                gaps.append(now - last)
                last = now

        tick = asyncio.create_task(ticker())
        try:
            report = await analyzer.analyze_video("swing.mp4")
        finally:
            done.set()
            await tick

        assert "- Backswing: 30 frames (100.0%)" in report
        assert max(gaps) < 0.2
