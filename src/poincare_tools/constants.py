"""Fixed constants: capacity limits, projection and shading defaults.

Values follow the poincare map generator (version 1.24) conventions.
"""

import math

VERSION = '1.24'

# Capacity limits per trajectory
MAX_NUM_STOKES_COORDS = 5000
MAX_NUM_TICKMARKS = MAX_NUM_STOKES_COORDS // 10
MAX_NUM_LABELS = MAX_NUM_TICKMARKS // 10
MAX_LABEL_TEXTLENGTH = 256
MAX_NUM_ARROWS = 24

# Euler angles of the view (radians)
DEFAULT_ROT_PSI = math.radians(-40.0)
DEFAULT_ROT_PHI = math.radians(15.0)

# Light source for the sphere shading (radians)
DEFAULT_PHI_SOURCE = math.radians(30.0)
DEFAULT_THETA_SOURCE = math.radians(30.0)

# Whiteness: 0.0 is black, 1.0 is white
DEFAULT_MAX_WHITENESS = 0.99
DEFAULT_MIN_WHITENESS = 0.75
DEFAULT_HIDDEN_GRAYTONE = 0.65

# Shading grid: radial bins and angular bins of the projected disk
DEFAULT_RHO_DIVISOR = 50
DEFAULT_PHI_DIVISOR = 80

# Axis lengths relative to the sphere radius
DEFAULT_POSITIVE_AXIS_LENGTH = 1.5
DEFAULT_NEGATIVE_AXIS_LENGTH = 0.1

# Line widths (PostScript points) and arrowhead opening angle (degrees)
DEFAULT_PATH_THICKNESS = 1.0
DEFAULT_ARROW_THICKNESS = 0.6
DEFAULT_ARROW_HEADANGLE = 30.0
DEFAULT_COORD_AXIS_THICKNESS = 0.6

# Sphere radius on paper (mm)
DEFAULT_SCALEFACTOR = 6.0

DEFAULT_OUTFILENAME = 'aout.mp'

DEFAULT_AXISLABELS = ('S_1', 'S_2', 'S_3')
NORMALIZED_AXISLABELS = ('S_1/S_0', 'S_2/S_0', 'S_3/S_0')
DEFAULT_AXISLABEL_ANCHOR = 'urgt'
# Secondary axes always place their labels here (x, y, z)
EXTRA_AXISLABEL_ANCHORS = ('bot', 'bot', 'top')

# Half length of a tick mark on the unit sphere
TICK_HALF_LENGTH = 0.028213

# Gray levels (0.0 black, 1.0 white)
EQUATOR_GRAY = 1.0 - 0.45
INSIDE_AXIS_GRAY = 1.0 - 0.85

# Sampling of user arrows and equator half circles
ARROW_PARAM_STEP = 0.02
EQUATOR_SAMPLES = 73

# Relative tolerance: tangents shorter than this times the point norm, and
# normals of unit vectors shorter than this, are treated as zero
DEGENERACY_EPS = 1.0e-12

MM_TO_PT = 72.0 / 25.4
