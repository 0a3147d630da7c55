"""Package-wide default constants."""

# Permutation space
# Rankings are encoded as one digit per item, so 9 is a hard ceiling.
# J! grows fast: 8! = 40,320 and 9! = 362,880 rankings.
MAX_EXACT_ITEMS = 9

# Monte Carlo simulation
DEFAULT_N_DRAWS = 1000
DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_CONTINUOUS_GRID = tuple(range(1, 8))  # arbitrary range when none is given
PATTERN_SEPARATOR = "_"

# Coefficient name matching for fitted choice models
COEF_NAME_SEPARATOR = ":"
INTERCEPT_TOKEN = "intercept"  # matches "(Intercept)", "intercept"
