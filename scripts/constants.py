"""Constants for the project."""

from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent

# ============================================================================
# Data directories
# ============================================================================
DATA_FOLDER = PROJECT_ROOT / "data"
LABELLED_FASTA_PATH = DATA_FOLDER / "labelled_sequences.fa"
FULL_GENUS_FOLDER = DATA_FOLDER / "full_genus_fastas"
UNALIGNED_TRAINING_FOLDER = DATA_FOLDER / "unaligned_training_fastas"
ALIGNED_TRAINING_FOLDER = DATA_FOLDER / "aligned_training_fastas"

# ============================================================================
# Results directories
# ============================================================================
RESULTS_FOLDER = PROJECT_ROOT / "results"

# Profile HMMs built from the aligned training sets (from build_models.py)
MODELS_FOLDER = RESULTS_FOLDER / "models"

# Build rates used for every model (from build_models.py)
BUILD_CONFIG_YAML = RESULTS_FOLDER / "build_config.yaml"

# Per-model scores of classified queries (from classify_query.py)
CLASSIFICATION_FOLDER = RESULTS_FOLDER / "classification"

# ============================================================================
# Training-set selection
# ============================================================================
MAX_TRAINING_RECORDS = 25
MIN_SEQUENCE_LENGTH = 480
MAX_SEQUENCE_LENGTH = 782
RANDOM_SEED = 42

# ============================================================================
# Classification
# ============================================================================
N_WORKERS = 4
FASTA_SUFFIXES = (".fa", ".fasta", ".fas")
MODEL_SUFFIX = ".yaml"
