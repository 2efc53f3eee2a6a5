"""
Classification tree over the quantile-binned streamflow response.
"""
import pandas as pd
import logging
from typing import Optional, Sequence
from sklearn.tree import DecisionTreeClassifier, export_text

from catchment_flow import config
from catchment_flow.training_pipeline.split import RandomSource

logger = logging.getLogger(__name__)


def train_classification_tree(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    params: Optional[dict] = None,
    random_state: RandomSource = None
) -> DecisionTreeClassifier:
    """
    Train a classification tree on binned response classes.

    Args:
        X_train: Training features.
        y_train: Training class labels (from bin_response()).
        params: Tree parameters. If None, uses config.TREE_PARAMS.
        random_state: Seed or RandomState for tie-breaking between splits.

    Returns:
        Fitted DecisionTreeClassifier.

    Example:
        >>> tree = train_classification_tree(X_train, y_train_bins)
        >>> print(tree.get_depth())
        7
    """
    if params is None:
        params = config.TREE_PARAMS

    logger.info("Training classification tree...")

    model = DecisionTreeClassifier(**params, random_state=random_state)
    model.fit(X_train, y_train)

    logger.info(
        f"✓ Tree trained: depth = {model.get_depth()}, leaves = {model.get_n_leaves()}"
    )

    return model


def describe_tree(model: DecisionTreeClassifier, feature_names: Sequence[str]) -> str:
    """Return the tree's split rules as indented text."""
    return export_text(model, feature_names=list(feature_names))
