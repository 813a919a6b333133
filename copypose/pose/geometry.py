from __future__ import annotations

import math

# Returned when a joint vector has zero length; reads as "maximally different".
DEGENERATE_ANGLE = 180.0


def angle_at(a, b, c) -> float:
	"""
	Angle in degrees [0..180] at vertex `b` between rays b->a and b->c.

	Points only need `.x` and `.y`. A zero-length ray yields DEGENERATE_ANGLE
	instead of NaN.
	"""
	abx, aby = float(a.x) - float(b.x), float(a.y) - float(b.y)
	cbx, cby = float(c.x) - float(b.x), float(c.y) - float(b.y)
	mag = math.hypot(abx, aby) * math.hypot(cbx, cby)
	if mag == 0.0:
		return DEGENERATE_ANGLE
	cos = (abx * cbx + aby * cby) / mag
	return math.degrees(math.acos(max(-1.0, min(1.0, cos))))
