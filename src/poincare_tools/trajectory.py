"""Stokes trajectory records: points, tick marks, and labels."""

from __future__ import annotations

from dataclasses import dataclass, field

from poincare_tools.constants import (
    MAX_LABEL_TEXTLENGTH,
    MAX_NUM_LABELS,
    MAX_NUM_STOKES_COORDS,
    MAX_NUM_TICKMARKS,
)
from poincare_tools.errors import CapacityError
from poincare_tools.params import Anchor

StokesTriplet = tuple[float, float, float]


@dataclass(frozen=True)
class Label:
    """Text attached to a trajectory point.

    Parameters:
        index: 0-based point index the label refers to.
        text: TeX label text (at most 256 characters).
        anchor: Placement relative to the point; None means centred.
    """

    index: int
    text: str
    anchor: Anchor | None = None


@dataclass
class Trajectory:
    """One Stokes trajectory, built append-only by the parser.

    ``begin_label`` and ``end_label`` are reserved slots for the ``b``/``e``
    statements; they refer to the first and last point. ``visible`` holds the
    per-point classification computed by segmentation.
    """

    points: list[StokesTriplet] = field(default_factory=list)
    ticks: list[int] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    begin_label: Label | None = None
    end_label: Label | None = None
    visible: list[bool] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def last_index(self) -> int:
        return len(self.points) - 1

    def reset(self) -> None:
        """Clear all points, ticks, and labels for reuse."""
        self.points.clear()
        self.ticks.clear()
        self.labels.clear()
        self.visible.clear()
        self.begin_label = None
        self.end_label = None

    def add_point(self, s1: float, s2: float, s3: float) -> int:
        """Append a Stokes triplet.

        Returns:
            0-based index of the new point.

        Raises:
            CapacityError: More than 5000 points.
        """
        if len(self.points) >= MAX_NUM_STOKES_COORDS:
            raise CapacityError(
                f'Trajectory exceeds {MAX_NUM_STOKES_COORDS} Stokes triplets'
            )
        self.points.append((float(s1), float(s2), float(s3)))
        return len(self.points) - 1

    def add_tick(self) -> None:
        """Mark the most recent point with a tick.

        Raises:
            IndexError: No point scanned yet.
            CapacityError: More than 500 tick marks.
        """
        if not self.points:
            raise IndexError('Tick mark before any Stokes triplet')
        if len(self.ticks) >= MAX_NUM_TICKMARKS:
            raise CapacityError(f'Trajectory exceeds {MAX_NUM_TICKMARKS} tick marks')
        self.ticks.append(len(self.points) - 1)

    def add_label(self, text: str, anchor: Anchor | None) -> None:
        """Attach an interior label to the most recent point.

        Raises:
            IndexError: No point scanned yet.
            CapacityError: More than 50 labels or text longer than 256 characters.
        """
        if not self.points:
            raise IndexError('Label before any Stokes triplet')
        if len(self.labels) >= MAX_NUM_LABELS:
            raise CapacityError(f'Trajectory exceeds {MAX_NUM_LABELS} labels')
        _check_text(text)
        self.labels.append(Label(len(self.points) - 1, text, anchor))

    def set_begin_label(self, text: str, anchor: Anchor | None) -> None:
        _check_text(text)
        self.begin_label = Label(0, text, anchor)

    def set_end_label(self, text: str, anchor: Anchor | None) -> None:
        """Attach the end label; it follows the last point as points are added."""
        _check_text(text)
        self.end_label = Label(-1, text, anchor)

    def all_labels(self) -> list[Label]:
        """Begin, interior, and end labels with resolved 0-based indices.

        Raises:
            IndexError: A label refers to a point that does not exist.
        """
        out: list[Label] = []
        if self.begin_label is not None:
            out.append(self.begin_label)
        out.extend(self.labels)
        if self.end_label is not None:
            out.append(Label(self.last_index, self.end_label.text, self.end_label.anchor))
        for label in out:
            if not 0 <= label.index < len(self.points):
                raise IndexError(
                    f'Label {label.text!r} refers to point {label.index} '
                    f'of a {len(self.points)}-point trajectory'
                )
        return out


def _check_text(text: str) -> None:
    if len(text) > MAX_LABEL_TEXTLENGTH:
        raise CapacityError(
            f'Label text exceeds {MAX_LABEL_TEXTLENGTH} characters ({len(text)})'
        )
