"""
Random forest over the quantile-binned streamflow response.
"""
import pandas as pd
import joblib
import logging
from pathlib import Path
from typing import Any, Optional
from sklearn.ensemble import RandomForestClassifier

from catchment_flow import config
from catchment_flow.training_pipeline.split import RandomSource

logger = logging.getLogger(__name__)


def train_random_forest(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    params: Optional[dict] = None,
    random_state: RandomSource = None
) -> RandomForestClassifier:
    """
    Train a random forest classifier on binned response classes.

    Args:
        X_train: Training features.
        y_train: Training class labels (from bin_response()).
        params: Forest parameters. If None, uses config.FOREST_PARAMS.
        random_state: Seed or RandomState for bootstrap and feature sampling.
            None leaves the forest unseeded.

    Returns:
        Fitted RandomForestClassifier.

    Example:
        >>> forest = train_random_forest(X_train, y_train_bins, random_state=1)
        >>> print(len(forest.estimators_))
        500
    """
    if params is None:
        params = config.FOREST_PARAMS

    logger.info("Training random forest...")

    model = RandomForestClassifier(**params, random_state=random_state)
    model.fit(X_train, y_train)

    logger.info(f"✓ Random forest trained ({len(model.estimators_)} trees)")

    return model


def save_model(model: Any, model_path: Path) -> None:
    """
    Save a fitted model to disk.

    Args:
        model: Fitted estimator.
        model_path: Destination path (parent directories are created).

    Example:
        >>> save_model(forest, config.FOREST_MODEL_PATH)
        ✓ Model saved to: models/random_forest.joblib
    """
    model_path = Path(model_path)
    model_path.parent.mkdir(parents=True, exist_ok=True)

    joblib.dump(model, model_path)
    logger.info(f"✓ Model saved to: {model_path}")
