# =============================================================================
# URBANLAYOUT CONSTANTS
# =============================================================================
# Centralized constants for the layout engine. Geometry tolerances, search
# limits and the defaults applied to blocks that omit a setting all live here.
# =============================================================================

# =============================================================================
# GEOMETRY
# =============================================================================

PARALLEL_EPSILON = 1e-10                # |cross| below this means parallel segments
AREA_TOLERANCE = 1e-6                   # Slack for floating-point area comparisons

# =============================================================================
# LANDMARK PLACEMENT
# =============================================================================

LANDMARK_SEARCH_STEP = 5.0              # Spiral ring spacing (metres)
LANDMARK_ANGLE_STEP_DEG = 15            # Angular step inside one ring (degrees)
LANDMARK_RADIUS_FACTOR = 2.0            # Max radius = factor * max(width, length)

# =============================================================================
# BLOCK GENERATION
# =============================================================================

PERIMETER_JITTER = 0.1                  # Full jitter span for street-front rows (±5%)
SCATTER_JITTER = 0.2                    # Full jitter span for interior scatter (±10%)
SCATTER_INTERIOR_SHARE = 0.5            # Share of the coverage budget left to scatter
SCATTER_OVERSAMPLE = 2                  # Poisson points requested per interior slot

CORNER_DEPTH = 70.0                     # Arm length of a corner lot along each road
CORNER_WING = 35.0                      # Arm thickness away from the road
CORNER_SIZE_JITTER = 0.2                # Depth and wing drawn within ±20%
CORNER_SETBACK = 3.0                    # Road edge to corner building face
CORNER_MIN_ANGLE_DEG = 45               # Sharper junctions get no corner lot
CORNER_RAY_LENGTH = 2000.0              # Setback lines are intersected as segments this long
CORNER_MAX_REACH_FACTOR = 3.0           # Inner corner further than factor * depth is rejected

DEFAULT_LAYOUT = "fill"

# Applied when neither the block nor the city defaults set a value
BLOCK_DEFAULTS = {
    "size": (20.0, 20.0),
    "height": (10.0, 30.0),
    "spacing": 5.0,
    "coverage": 0.6,
    "layout": DEFAULT_LAYOUT,
    "color": "grey",
}

# =============================================================================
# SAMPLING
# =============================================================================

POISSON_ATTEMPTS = 30                   # Candidate offsets tried per active point
POISSON_NEIGHBOURHOOD = 2               # Cells scanned each side (5x5 window)

# =============================================================================
# POLYGON DIFFERENCE
# =============================================================================

DIFFERENCE_RESOLUTION = 5.0             # Raster cell size for block carving (metres)

# =============================================================================
# TREES
# =============================================================================

TREE_SPACING = 8.0                      # Minimum distance between any two trees
PARK_TREE_INSET = 3.0                   # Keep park trees off the park edge
PARK_TREE_DENSITY = 0.003               # Trees per square metre of park
PARK_TREE_MIN = 3                       # Every park gets at least this many
PARK_TREE_ATTEMPTS = 10                 # Random tries per requested park tree
STREET_TREE_SPACING = 20.0              # Distance between street trees along a road
STREET_TREE_SETBACK = 0.5               # Road edge to street tree centre

# =============================================================================
# RANDOMNESS
# =============================================================================

DEFAULT_SEED = 42
