"""
thresholds.py — Named layout constants.

Every heuristic number used by role detection, pairing, planning and clamping
lives here. Tunable copies are exposed through ArrangerSettings; these are the
defaults those settings start from.
"""

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# ROLE DETECTION
# =============================================================================

TOP_BAND_HEIGHTS = 1.0          # display must sit within minY + avgHeight
BOTTOM_BAND_HEIGHTS = 2.0       # and above maxY - 2 * avgHeight
DISPLAY_WIDE_FACTOR = 2.5       # width > 2.5x average width
DISPLAY_ASPECT_RATIO = 3.0      # or width / height > 3

# =============================================================================
# PAIRING
# =============================================================================

ROW_BUCKET_PX = 30.0            # rectangles within the same 30px band share a row
TIGHT_TOLERANCE_PX = 10.0
EXPANDED_TOLERANCE_RATIO = 0.5
EXPANDED_TOLERANCE_FLOOR_PX = 30.0
NEAREST_DISTANCE_FACTOR = 2.0   # accept nearest text within 2x the larger rect side

# =============================================================================
# CLASSIFICATION
# =============================================================================

CALCULATOR_MIN_BUTTONS = 10
MENU_MIN_BUTTONS = 4            # "more than 3"
MENU_MIN_MEAN_LABEL_LENGTH = 3.0
DASHBOARD_MIN_DISPLAYS = 2
MEANINGFUL_NAME_MAX_LENGTH = 10

# =============================================================================
# PLANNING
# =============================================================================

DEFAULT_BUTTON_WIDTH = 60.0
DEFAULT_BUTTON_HEIGHT = 60.0
DISPLAY_TEXT_PADDING = 10.0
DASHBOARD_DISPLAY_COLUMNS = 2
MENU_COLUMN_BUCKET_PX = 30.0    # menu items within the same 30px band share a column

# Canvas discovery defaults
DEFAULT_NODE_WIDTH = 100.0
DEFAULT_NODE_HEIGHT = 40.0
DEFAULT_CONTAINER_WIDTH = 400.0
DEFAULT_CONTAINER_HEIGHT = 600.0
DUPLICATE_POSITION_BUCKET = 10.0

# =============================================================================
# CLAMPING AND EXECUTION
# =============================================================================

CLAMP_MARGIN = 10.0
TEMPLATE_BATCH_SIZE = 15
DELEGATED_BATCH_SIZE = 8
CORNER_RADIUS = 8.0


# =============================================================================
# TUNABLE GROUPS
# =============================================================================

class RoleThresholds(BaseModel):
    """Display-vs-button detection multipliers."""

    model_config = ConfigDict(frozen=True)

    top_band_heights: float = TOP_BAND_HEIGHTS
    bottom_band_heights: float = BOTTOM_BAND_HEIGHTS
    wide_factor: float = DISPLAY_WIDE_FACTOR
    aspect_ratio: float = DISPLAY_ASPECT_RATIO


class PairingThresholds(BaseModel):
    """Rectangle/text matching tolerances, in canvas pixels."""

    model_config = ConfigDict(frozen=True)

    row_bucket: float = Field(default=ROW_BUCKET_PX, gt=0)
    tight_tolerance: float = TIGHT_TOLERANCE_PX
    expanded_ratio: float = EXPANDED_TOLERANCE_RATIO
    expanded_floor: float = EXPANDED_TOLERANCE_FLOOR_PX
    nearest_factor: float = NEAREST_DISTANCE_FACTOR
