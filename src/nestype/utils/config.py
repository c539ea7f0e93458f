"""
Configuration constants to replace magic numbers throughout nestype
"""

# Dimension limits (matches the storage engine's maximum number of dimensions)
MAX_DIM = 128

# Default dtype when no leaf carries type information (empty or all-missing data)
DEFAULT_DTYPE_NAME = "float64"

# Inferred scalar names per value category
BOOL_TYPE_NAME = "bool"
INT_TYPE_NAME = "int64"
FLOAT_TYPE_NAME = "float64"
COMPLEX_TYPE_NAME = "complex128"
BYTES_TYPE_NAME = "bytes"
STRING_TYPE_NAME = "string"

# Element type of var dimension offset arrays handed to the storage engine
OFFSET_DTYPE = "int32"

# Categorical label rendering for missing labels
NA_LABEL = "NA"

# Optional marker prefix in rendered descriptors
OPTION_PREFIX = "?"

# Name of the root value in diagnostics paths
VALUE_ROOT = "value"

# Error reporting constants
COLOR_ENV_VAR = "NESTYPE_COLOR"

# Nesting limit for records, tuples and lists combined (steps from the root value)
MAX_NESTING = 128
