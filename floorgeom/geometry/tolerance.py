from __future__ import annotations

# Positional epsilon for near-zero distance/length checks.
EPS_POS = 1e-12

# Vertex weld epsilon for duplicate-vertex detection.
EPS_WELD = 1e-6

# Denominator threshold below which consecutive offset lines count as parallel.
EPS_PARALLEL = 1e-3

# Segment length below which a solver constraint is skipped for the iteration.
EPS_SEGMENT = 1e-9

# Edge-match tolerance for centerline adjacency (world units).
ADJACENCY_TOLERANCE = 2.0

# Point-on-edge tolerance for T-junction vertex injection (world units).
JOIN_TOLERANCE = 1.0
