"""
Model evaluation module for the streamflow models.

Provides held-out evaluation for:
- Classifiers over binned response (accuracy, confusion matrix)
- The OLS regression (R², RMSE on the test split)
- Feature importance ranking
- MLflow logging capabilities
"""
import pandas as pd
import numpy as np
import logging
from sklearn.metrics import (
    accuracy_score, balanced_accuracy_score, f1_score,
    confusion_matrix, mean_squared_error, r2_score
)
from typing import Any, Dict, Optional, Sequence

import statsmodels.api as sm

from catchment_flow import config
from catchment_flow.training_pipeline.split import complete_cases

logger = logging.getLogger(__name__)


def predict_classes(model: Any, X: pd.DataFrame) -> pd.Series:
    """
    Predict class labels, keeping the row index of ``X``.

    For a random forest this is the majority vote aggregated over all trees.
    """
    return pd.Series(model.predict(X), index=X.index, name="predicted_class")


def evaluate_classifier(
    model: Any,
    X_test: pd.DataFrame,
    y_test: pd.Series
) -> Dict[str, float]:
    """
    Evaluate a classifier on the held-out split.

    Metrics calculated:
    - Accuracy: Correct predictions / Total predictions
    - Balanced accuracy: Mean recall over classes
    - F1 (macro): Unweighted mean F1 over classes

    Args:
        model: Fitted classifier with predict().
        X_test: Test features.
        y_test: Test class labels.

    Returns:
        Dictionary of metric names and values.

    Example:
        >>> metrics = evaluate_classifier(forest, X_test, y_test)
        >>> print(f"Accuracy: {metrics['accuracy']:.4f}")
        Accuracy: 0.7612
    """
    logger.info("Evaluating classifier...")

    y_pred = predict_classes(model, X_test)

    metrics = {
        'accuracy': accuracy_score(y_test, y_pred),
        'balanced_accuracy': balanced_accuracy_score(y_test, y_pred),
        'f1_macro': f1_score(y_test, y_pred, average='macro', zero_division=0),
    }

    logger.info("Evaluation metrics:")
    for metric, value in metrics.items():
        logger.info(f"  {metric:20s}: {value:.4f}")

    return metrics


def confusion_matrix_table(
    y_true: pd.Series,
    y_pred: pd.Series,
    labels: Optional[Sequence] = None
) -> pd.DataFrame:
    """
    Confusion matrix with labelled rows (actual) and columns (predicted).

    Args:
        y_true: True class labels.
        y_pred: Predicted class labels.
        labels: Class order. If None, uses the sorted union of both.

    Returns:
        DataFrame of counts; rows are actual classes, columns predicted.

    Example:
        >>> print(confusion_matrix_table(y_test, y_pred))
        predicted   1   2   3   4
        actual
        1          44   6   0   0
        ...
    """
    if labels is None:
        labels = sorted(set(y_true) | set(y_pred))

    matrix = confusion_matrix(y_true, y_pred, labels=labels)

    return pd.DataFrame(
        matrix,
        index=pd.Index(labels, name='actual'),
        columns=pd.Index(labels, name='predicted')
    )


def evaluate_regression(
    results: Any,
    test: pd.DataFrame,
    response: str
) -> Dict[str, float]:
    """
    Evaluate a fitted OLS model on the held-out split.

    Args:
        results: Fitted statsmodels RegressionResults.
        test: Test data holding the response and the model's predictors.
        response: Response column name.

    Returns:
        Dictionary with 'r_squared' and 'rmse' on the test rows that have no
        missing values in the model's columns.
    """
    predictors = [name for name in results.params.index if name != 'const']
    data = complete_cases(test, [response, *predictors])

    X = sm.add_constant(data[predictors], has_constant='add')
    y_pred = results.predict(X)

    metrics = {
        'r_squared': r2_score(data[response], y_pred),
        'rmse': float(np.sqrt(mean_squared_error(data[response], y_pred))),
    }

    logger.info("Held-out regression metrics:")
    for metric, value in metrics.items():
        logger.info(f"  {metric:20s}: {value:.4f}")

    return metrics


def source_attribute(feature: str) -> str:
    """Strip the ``_log`` / ``_squared`` suffix to recover the catchment attribute."""
    for suffix in (config.LOG_SUFFIX, config.SQUARED_SUFFIX):
        if feature.endswith(suffix):
            return feature[:-len(suffix)]
    return feature


def get_feature_importance(
    model: Any,
    feature_names: Sequence[str],
    top_n: int = 20
) -> pd.DataFrame:
    """
    Rank forest importances, tracing derived features to their attribute.

    ``p_mean``, ``p_mean_log`` and ``p_mean_squared`` all report
    ``p_mean`` as their source attribute, so the ranking can be read per
    catchment attribute as well as per column.

    Args:
        model: Fitted tree ensemble exposing feature_importances_.
        feature_names: Column names in training order.
        top_n: Number of rows to return.

    Returns:
        DataFrame with 'feature', 'attribute' and 'importance' columns,
        most important first. Empty if the model has no importances.
    """
    if not hasattr(model, 'feature_importances_'):
        logger.warning(f"{type(model).__name__} has no feature importances")
        return pd.DataFrame(columns=['feature', 'attribute', 'importance'])

    ranked = pd.DataFrame({
        'feature': list(feature_names),
        'importance': model.feature_importances_
    })
    ranked.insert(1, 'attribute', ranked['feature'].map(source_attribute))
    ranked = ranked.sort_values('importance', ascending=False).head(top_n).reset_index(drop=True)

    leaders = ", ".join(
        f"{row.feature} ({row.importance:.3f})" for row in ranked.head(5).itertuples()
    )
    logger.info(f"Most important catchment features: {leaders}")

    return ranked


def log_metrics_to_mlflow(
    metrics: Dict[str, float],
    params: Dict[str, Any],
    confusion: Optional[pd.DataFrame] = None,
    run_name: Optional[str] = None
) -> None:
    """
    Log evaluation metrics, parameters and the confusion matrix to MLflow.

    Args:
        metrics: Dictionary of metric names and values.
        params: Model parameters to record.
        confusion: Confusion matrix from confusion_matrix_table().
        run_name: Optional name for MLflow run.

    Note:
        Requires mlflow to be installed; skipped with a warning otherwise.

    Example:
        >>> log_metrics_to_mlflow(metrics, forest.get_params(), cm, "random_forest")
    """
    try:
        import mlflow
    except ImportError:
        logger.warning("MLflow not available. Skipping MLflow logging.")
        return

    mlflow.set_tracking_uri(str(config.MLFLOW_TRACKING_URI))

    with mlflow.start_run(run_name=run_name):
        mlflow.log_params({k: str(v) for k, v in params.items()})

        for metric_name, metric_value in metrics.items():
            mlflow.log_metric(metric_name, float(metric_value))

        if confusion is not None:
            mlflow.log_text(confusion.to_csv(), "confusion_matrix.csv")

    logger.info(f"✓ Metrics logged to MLflow (run: {run_name})")
