"""
Track geometry: a straight multi-lane corridor or a closed oval circuit
made of two straights and two semicircular curves.
"""
import math

from trackpilot.constants import (
    ARC_SEGMENTS, CIRCUIT, DEFAULT_LANE_COUNT, DEFAULT_ROAD_WIDTH,
    LONG_STRAIGHT_RATIO, STRAIGHT_ROAD_INFINITY, TRACK_HEIGHT_RATIO,
)
from trackpilot.geometry import lerp

TRACK_TYPES = ("straight", "curved")


class Road:
    def __init__(self, x, width=DEFAULT_ROAD_WIDTH, lane_count=DEFAULT_LANE_COUNT,
                 track_type="straight", y=0.0):
        if track_type not in TRACK_TYPES:
            raise ValueError(f"Unknown track type {track_type!r}, expected one of {TRACK_TYPES}")
        if lane_count < 1:
            raise ValueError(f"A road needs at least one lane, got {lane_count}")

        self.x = x
        self.y = y
        self.width = width
        self.lane_count = lane_count
        self.track_type = track_type

        if track_type == "curved":
            # Geometry is derived from the viewport in update_dimensions()
            self.track_width = width
            self.track_height = 0.0
            self.centerline = None
            self.viewport = None
            self.borders = ()
        else:
            self.left = x - width / 2
            self.right = x + width / 2
            self.top = -STRAIGHT_ROAD_INFINITY
            self.bottom = STRAIGHT_ROAD_INFINITY

            top_left = (self.left, self.top)
            top_right = (self.right, self.top)
            bottom_left = (self.left, self.bottom)
            bottom_right = (self.right, self.bottom)
            self.borders = (
                (top_left, bottom_left),
                (top_right, bottom_right),
            )

    @property
    def is_curved(self):
        return self.track_type == "curved"

    @property
    def circuit_length(self):
        """Span of the track parameter for one lap, None for an open road."""
        return CIRCUIT if self.is_curved else None

    @property
    def lane_width(self):
        return self.width / self.lane_count

    @property
    def middle_lane(self):
        return self.lane_count // 2

    def _clamp_lane(self, lane_index):
        return max(0, min(int(lane_index), self.lane_count - 1))

    def update_dimensions(self, new_width, new_height):
        """Rebuild the oval to fit a viewport. No-op for straight roads or unchanged sizes."""
        if not self.is_curved:
            return
        if self.viewport == (new_width, new_height):
            return

        x = new_width / 2
        y = new_height / 2
        track_height = new_height * TRACK_HEIGHT_RATIO
        long_straight = new_width * LONG_STRAIGHT_RATIO

        centerline = {
            "right_arc": {"center": (x + long_straight / 2, y), "radius": track_height,
                          "start_angle": -math.pi / 2, "end_angle": math.pi / 2},
            "left_arc": {"center": (x - long_straight / 2, y), "radius": track_height,
                         "start_angle": math.pi / 2, "end_angle": 3 * math.pi / 2},
        }
        borders = self._generate_borders(centerline, track_height)

        # Swap everything in at once so readers never see half-built geometry
        self.x, self.y = x, y
        self.track_height = track_height
        self.centerline = centerline
        self.borders = borders
        self.viewport = (new_width, new_height)
        print(f"Track dimensions: center=({x:.1f}, {y:.1f}) track_height={track_height:.1f} "
              f"track_width={self.track_width} borders={len(borders)}")

    def _generate_borders(self, centerline, track_height):
        borders = []
        outer = track_height + self.track_width / 2
        inner = track_height - self.track_width / 2

        for arc in (centerline["right_arc"], centerline["left_arc"]):
            cx, cy = arc["center"]
            for radius in (outer, inner):
                for i in range(1, ARC_SEGMENTS + 1):
                    a1 = arc["start_angle"] + (i - 1) / ARC_SEGMENTS * math.pi
                    a2 = arc["start_angle"] + i / ARC_SEGMENTS * math.pi
                    borders.append((
                        (cx + math.cos(a1) * radius, cy + math.sin(a1) * radius),
                        (cx + math.cos(a2) * radius, cy + math.sin(a2) * radius),
                    ))

        left_x, left_y = centerline["left_arc"]["center"]
        right_x, right_y = centerline["right_arc"]["center"]
        for radius in (outer, inner):
            borders.append(((left_x, left_y - radius), (right_x, right_y - radius)))
            borders.append(((left_x, left_y + radius), (right_x, right_y + radius)))

        return tuple(borders)

    def lane_x(self, lane_index):
        """Column of a lane on the straight road."""
        return self.left + self.lane_width / 2 + self._clamp_lane(lane_index) * self.lane_width

    def get_lane_center(self, lane_index, t=0.0):
        """
        World position of a lane at track parameter t.

        On the oval t runs over [0, 2pi): top straight, right curve, bottom
        straight, left curve, each a quarter of the range. Values outside
        wrap around. On the straight road t is distance up the corridor.
        """
        if not self.is_curved:
            return (self.lane_x(lane_index), -t)

        if self.centerline is None:
            return (self.x, self.y)

        lane_offset = (self._clamp_lane(lane_index) - self.middle_lane) * self.lane_width
        t = t % CIRCUIT
        right = self.centerline["right_arc"]["center"]
        left = self.centerline["left_arc"]["center"]
        quarter = math.pi / 2

        if t < quarter:
            center_x = lerp(left[0], right[0], t / quarter)
            center_y = self.y - self.track_height
            track_angle = 0.0
        elif t < math.pi:
            curve_angle = -math.pi / 2 + (t - quarter) / quarter * math.pi
            center_x = right[0] + math.cos(curve_angle) * self.track_height
            center_y = right[1] + math.sin(curve_angle) * self.track_height
            track_angle = curve_angle + math.pi / 2
        elif t < 3 * quarter:
            center_x = lerp(right[0], left[0], (t - math.pi) / quarter)
            center_y = self.y + self.track_height
            track_angle = math.pi
        else:
            curve_angle = math.pi / 2 + (t - 3 * quarter) / quarter * math.pi
            center_x = left[0] + math.cos(curve_angle) * self.track_height
            center_y = left[1] + math.sin(curve_angle) * self.track_height
            track_angle = curve_angle + math.pi / 2

        # Lane offset is applied perpendicular to the direction of travel
        return (
            center_x + lane_offset * math.cos(track_angle + math.pi / 2),
            center_y + lane_offset * math.sin(track_angle + math.pi / 2),
        )
