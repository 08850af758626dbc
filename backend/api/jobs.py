"""
Analysis Job Manager

Runs video analyses in the background so clients can poll or stream
progress instead of holding a request open.
"""

import asyncio
import logging
import os
from typing import Optional

from config import get_settings
from core.domain.analysis import AnalysisRun
from core.exceptions import RunNotFound, SwingAnalysisError
from core.services import SwingAnalyzer

logger = logging.getLogger(__name__)


class AnalysisJobManager:
    """
    Tracks analysis runs started through the API.

    Each run gets its own AnalysisRun status object and asyncio task;
    runs never share accumulators. Only the newest `max_finished_runs`
    finished runs stay available for polling.
    """

    def __init__(self, max_finished_runs: int = 100):
        self.max_finished_runs = max_finished_runs
        self.runs: dict[str, AnalysisRun] = {}
        self.tasks: dict[str, asyncio.Task] = {}

    def start(
        self,
        analyzer: SwingAnalyzer,
        video_path: str,
        cleanup_path: Optional[str] = None,
    ) -> AnalysisRun:
        """Create a run and schedule it on the running event loop."""
        run = AnalysisRun()
        self.runs[run.id] = run
        self.tasks[run.id] = asyncio.create_task(
            self._execute(analyzer, run, video_path, cleanup_path)
        )
        logger.info(f"Started analysis run {run.id}. Active: {len(self.tasks)}")
        return run

    def get(self, run_id: str) -> AnalysisRun:
        run = self.runs.get(run_id)
        if run is None:
            raise RunNotFound(run_id)
        return run

    def cancel(self, run_id: str) -> AnalysisRun:
        """Request cooperative cancellation of a run."""
        run = self.get(run_id)
        if not run.state.is_finished:
            run.cancel()
        return run

    async def _execute(
        self,
        analyzer: SwingAnalyzer,
        run: AnalysisRun,
        video_path: str,
        cleanup_path: Optional[str],
    ) -> None:
        try:
            await analyzer.analyze_video(video_path, run=run)
        except SwingAnalysisError as e:
            # State and error are already recorded on the run
            logger.info(f"Run {run.id} ended with {e.code}")
        except Exception as e:
            logger.error(f"Run {run.id} crashed: {e}")
        finally:
            self.tasks.pop(run.id, None)
            if cleanup_path and os.path.exists(cleanup_path):
                os.unlink(cleanup_path)
            self._evict_finished()

    def _evict_finished(self) -> None:
        """Drop the oldest finished runs beyond the retention limit."""
        finished = [
            run_id for run_id, run in self.runs.items()
            if run.state.is_finished and run_id not in self.tasks
        ]
        # dicts keep insertion order, so the oldest runs come first
        for run_id in finished[:max(0, len(finished) - self.max_finished_runs)]:
            del self.runs[run_id]
            logger.debug(f"Evicted finished run {run_id}")


# Global job manager
jobs = AnalysisJobManager(max_finished_runs=get_settings().MAX_FINISHED_RUNS)
