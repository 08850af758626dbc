"""
Report Generator Service

Builds the coaching report text from everything collected during a run.

The report has four sections, always in this order:
    1. Swing phase tally
    2. Spine angle statistics and feedback
    3. Hip rotation statistics and feedback
    4. Shoulder rotation statistics and feedback

Each section falls back to an explanatory sentence when nothing was
measured, so generating a report never fails.
"""

from typing import List

from ..domain.analysis import SwingAccumulator, SwingPhase

# Coaching thresholds (degrees)
SPINE_SHALLOW_THRESHOLD = 45.0
SPINE_EXCESSIVE_THRESHOLD = 90.0
HIP_LIMITED_THRESHOLD = 45.0
HIP_EXCESSIVE_THRESHOLD = 90.0
SHOULDER_LIMITED_THRESHOLD = 90.0
SHOULDER_EXCESSIVE_THRESHOLD = 120.0

REPORT_HEADER = "Swing Analysis:"

NO_PHASES_MESSAGE = (
    "No valid swing phases detected. "
    "Please ensure the video shows a clear view of your golf swing."
)
NO_SPINE_MESSAGE = (
    "Spine angle analysis not available. "
    "Please ensure your spine is visible in the video."
)
NO_HIP_MESSAGE = (
    "Hip rotation analysis not available. "
    "Please ensure your hips are visible in the video."
)
NO_SHOULDER_MESSAGE = (
    "Shoulder rotation analysis not available. "
    "Please ensure your shoulders are visible in the video."
)

_PHASE_LABELS = (
    (SwingPhase.BACKSWING, "Backswing"),
    (SwingPhase.DOWNSWING, "Downswing"),
    (SwingPhase.FOLLOW_THROUGH, "Follow-through"),
)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


class ReportGenerator:
    """
    Turns a SwingAccumulator into report text.

    Stateless; the same accumulated data always yields the same text.

    Usage:
        report = ReportGenerator().generate(accumulator)
    """

    def generate(self, accumulator: SwingAccumulator) -> str:
        report = f"{REPORT_HEADER}\n\n"
        report += self._phase_section(accumulator)
        report += self._spine_section(accumulator.spine_angles)
        report += self._hip_section(accumulator.hip_rotations)
        report += self._shoulder_section(accumulator.shoulder_rotations)
        return report

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def _phase_section(self, accumulator: SwingAccumulator) -> str:
        counts = [(label, accumulator.phase_count(phase)) for phase, label in _PHASE_LABELS]
        total = sum(count for _, count in counts)

        if total == 0:
            return f"{NO_PHASES_MESSAGE}\n\n"

        lines = ["Swing Phases:"]
        for label, count in counts:
            percentage = count / total * 100
            lines.append(f"- {label}: {count} frames ({percentage:.1f}%)")
        return "\n".join(lines) + "\n\n"

    def _spine_section(self, spine_angles: List[float]) -> str:
        if not spine_angles:
            return f"{NO_SPINE_MESSAGE}\n\n"

        average = _mean(spine_angles)
        lines = [
            "Spine Angle Analysis:",
            f"- Average angle: {average:.1f}°",
            f"- Range: {min(spine_angles):.1f}° to {max(spine_angles):.1f}°",
        ]

        if average < SPINE_SHALLOW_THRESHOLD:
            lines.append("- Issue: Spine angle too shallow during backswing")
            lines.append("- Recommendation: Maintain a more upright spine angle for better rotation")
        elif average > SPINE_EXCESSIVE_THRESHOLD:
            lines.append("- Issue: Excessive spine tilt")
            lines.append("- Recommendation: Keep spine angle more neutral throughout the swing")

        return "\n".join(lines) + "\n\n"

    def _hip_section(self, hip_rotations: List[float]) -> str:
        if not hip_rotations:
            return f"{NO_HIP_MESSAGE}\n\n"

        maximum = max(hip_rotations)
        lines = [
            "Hip Rotation Analysis:",
            f"- Average rotation: {_mean(hip_rotations):.1f}°",
            f"- Maximum rotation: {maximum:.1f}°",
        ]

        if maximum < HIP_LIMITED_THRESHOLD:
            lines.append("- Issue: Limited hip rotation")
            lines.append("- Recommendation: Focus on rotating hips more during backswing")
        elif maximum > HIP_EXCESSIVE_THRESHOLD:
            lines.append("- Issue: Excessive hip rotation")
            lines.append("- Recommendation: Maintain more stability in lower body")

        return "\n".join(lines) + "\n\n"

    def _shoulder_section(self, shoulder_rotations: List[float]) -> str:
        # Last section: no trailing blank line
        if not shoulder_rotations:
            return f"{NO_SHOULDER_MESSAGE}\n"

        maximum = max(shoulder_rotations)
        lines = [
            "Shoulder Rotation Analysis:",
            f"- Average rotation: {_mean(shoulder_rotations):.1f}°",
            f"- Maximum rotation: {maximum:.1f}°",
        ]

        if maximum < SHOULDER_LIMITED_THRESHOLD:
            lines.append("- Issue: Limited shoulder turn")
            lines.append("- Recommendation: Work on increasing shoulder rotation for more power")
        elif maximum > SHOULDER_EXCESSIVE_THRESHOLD:
            lines.append("- Issue: Over-rotation of shoulders")
            lines.append("- Recommendation: Focus on maintaining better control during backswing")

        return "\n".join(lines) + "\n"
