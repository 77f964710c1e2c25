# utils/constants.py

# --- Element Schema ---
# Input attribute columns, in featurization order. Must match between training and inference.
FEATURE_COLUMNS = [
    "ControlId",
    "Name",
    "CSSClass",
    "Value",
    "Role",
    "Type",
    "Title",
    "Href",
]
LABEL_COLUMN = "Element"
EXPECTED_COLUMNS = FEATURE_COLUMNS + [LABEL_COLUMN]

# Derived column names
FEATURES_COLUMN = "Features"
FEATURIZED_SUFFIX = "Featurized"
PREDICTED_LABEL_COLUMN = "PredictedLabel"
SCORE_COLUMN = "Score"
# 0-based data row of the source CSV, kept in saved split snapshots
ROW_ID_COLUMN = "RowId"

# --- Defaults ---
DEFAULT_SEED = 111
DEFAULT_TEST_SIZE = 0.3
DEFAULT_ALGORITHM = "sdca_maximum_entropy"
DEFAULT_TOP_K = 3
LOG_LOSS_EPSILON = 1e-15

# --- Top-Level Result Directories ---
# Sequentially numbered for proper sorting
MODEL_DIR = ""                               # Trained model sits at the base of the results tree
CONFIG_DIR = "01_RunConfiguration"           # Run config, metadata, seeds
SPLITS_DIR = "02_DataSplits"                 # Train/test split
EVALUATION_DIR = "03_PerformanceMetrics"     # Metrics and confusion matrices
DATA_REPORT_DIR = "04_DataQualityChecks"     # Label distribution, missing cells

# --- File Names ---
# The model artifact name collides with the conventional input file name.
# Kept for compatibility with existing consumers of the artifact.
MODEL_FILE = "data.csv"
CONFIG_USED_FILE = "config_used.json"
CONFIG_HASH_FILE = "config_hash.txt"
RUN_METADATA_FILE = "run_metadata.json"
