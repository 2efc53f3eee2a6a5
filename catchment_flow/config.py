"""
Configuration module for the catchment attribute modelling pipeline.

Contains all constants, file paths, column names, and model parameters used
throughout the feature and training pipelines.
"""
from pathlib import Path
from typing import Dict, Optional
import os

# ============================================================================
# FILE PATHS
# ============================================================================
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv('CATCHMENT_DATA_DIR', str(PROJECT_ROOT / "data" / "raw")))

# Model paths
MODELS_DIR = PROJECT_ROOT / "models"
TREE_MODEL_PATH = MODELS_DIR / "classification_tree.joblib"
FOREST_MODEL_PATH = MODELS_DIR / "random_forest.joblib"
MLFLOW_TRACKING_URI = PROJECT_ROOT / "mlruns"

# ============================================================================
# SOURCE FILES
# ============================================================================
FIELD_SEPARATOR = ";"

# Table name -> file name. Order is the join order; hydrology comes first.
ATTRIBUTE_FILES: Dict[str, str] = {
    "hydro": "hydro.txt",
    "climate": "climate.txt",
    "soil": "soil.txt",
    "vege": "vege.txt",
    "topo": "topo.txt",
    "geol": "geol.txt",
}
HYDROLOGY_TABLE = "hydro"

# ============================================================================
# COLUMN ROLES
# ============================================================================
KEY_COLUMN = "gauge_id"
RESPONSE_COLUMN = "q_mean"

# ============================================================================
# FEATURE ENGINEERING
# ============================================================================
LOG_SUFFIX = "_log"
SQUARED_SUFFIX = "_squared"

# ============================================================================
# TRAINING CONFIGURATION
# ============================================================================
_seed = os.getenv('CATCHMENT_RANDOM_STATE')
RANDOM_STATE: Optional[int] = int(_seed) if _seed else None  # unseeded unless set

TRAIN_FRACTION = 0.7
N_RESPONSE_BINS = 4  # quartiles
CV_FOLDS = 5
OPTUNA_N_TRIALS = 30
OPTUNA_TIMEOUT = None

# Forward stepwise entry threshold
STEPWISE_P_ENTER = 0.3

# Classification tree parameters (close to the usual recursive partitioning
# defaults: minsplit=20, minbucket=7, maxdepth=30)
TREE_PARAMS = {
    "criterion": "gini",
    "min_samples_split": 20,
    "min_samples_leaf": 7,
    "max_depth": 30,
}

# Random forest parameters
FOREST_PARAMS = {
    "n_estimators": 500,
    "max_features": "sqrt",
    "bootstrap": True,
    "n_jobs": -1,
}
