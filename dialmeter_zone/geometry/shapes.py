"""
Dial Zone Shapes
================

Pure geometric representations of the sensing zones - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Fail-fast validation at construction (startup), never per frame
- Order of zones in a layout is the physical angular order on the dial
"""

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple


@dataclass(frozen=True)
class DialZone:
    """
    Immutable rectangular sensing zone.

    Covers pixels with x <= px < x + width and y <= py < y + height.

    Attributes:
        x: Left edge (pixels)
        y: Top edge (pixels)
        width: Zone width (pixels)
        height: Zone height (pixels)
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        """Validate geometry."""
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Zone origin must be >= 0, got ({self.x}, {self.y})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Zone must have positive area, got {self.width}x{self.height}"
            )

    @property
    def area(self) -> int:
        """Number of pixels covered."""
        return self.width * self.height

    def fits_in(self, frame_resolution_wh: Tuple[int, int]) -> bool:
        """Check the zone lies entirely inside a frame of the given size."""
        width, height = frame_resolution_wh
        return self.x + self.width <= width and self.y + self.height <= height

    def as_xywh(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class ZoneLayout:
    """
    Ordered, validated set of dial zones for one frame resolution.

    The index of a zone in the layout is its observation value. Earlier
    zones win when geometries overlap.

    Attributes:
        zones: Zones in angular order around the dial
        frame_resolution_wh: (width, height) of the frames being analysed
    """

    zones: Tuple[DialZone, ...]
    frame_resolution_wh: Tuple[int, int]

    def __post_init__(self):
        """Reject configurations that could only fail later, per frame."""
        # Normalise to tuples (frozen dataclass)
        object.__setattr__(self, "zones", tuple(self.zones))
        object.__setattr__(self, "frame_resolution_wh", tuple(self.frame_resolution_wh))

        width, height = self.frame_resolution_wh
        if width <= 0 or height <= 0:
            raise ValueError(
                f"frame_resolution_wh must be positive, got {self.frame_resolution_wh}"
            )

        if len(self.zones) < 2:
            raise ValueError(f"A dial needs at least 2 zones, got {len(self.zones)}")

        for index, zone in enumerate(self.zones):
            if not isinstance(zone, DialZone):
                raise TypeError(f"Zone {index} must be DialZone, got {type(zone)}")
            if not zone.fits_in(self.frame_resolution_wh):
                raise ValueError(
                    f"Zone {index} {zone.as_xywh()} exceeds frame "
                    f"{width}x{height}"
                )

    @classmethod
    def from_xywh(
        cls,
        rects: Sequence[Sequence[int]],
        frame_resolution_wh: Tuple[int, int],
    ) -> "ZoneLayout":
        """Build a layout from [x, y, width, height] rows."""
        zones = tuple(DialZone(*(int(v) for v in rect)) for rect in rects)
        return cls(zones=zones, frame_resolution_wh=frame_resolution_wh)

    @property
    def zone_count(self) -> int:
        return len(self.zones)

    def __len__(self) -> int:
        return len(self.zones)

    def __iter__(self) -> Iterator[DialZone]:
        return iter(self.zones)

    def __getitem__(self, index: int) -> DialZone:
        return self.zones[index]
