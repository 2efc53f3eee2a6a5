"""
Hyperparameter tuning module using Optuna for the random forest.

Uses Bayesian optimization (TPE) to choose forest hyperparameters,
maximizing stratified cross-validated accuracy on the training split.
"""
import pandas as pd
import logging
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import StratifiedKFold, cross_val_score
from typing import Optional
import optuna
from optuna.samplers import TPESampler

from catchment_flow import config
from catchment_flow.training_pipeline.forest import train_random_forest
from catchment_flow.training_pipeline.split import RandomSource

logger = logging.getLogger(__name__)


def create_objective(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    cv_folds: int = None,
    random_state: RandomSource = None
):
    """
    Create Optuna objective function for hyperparameter optimization.

    The objective function performs stratified cross-validation and returns
    the mean accuracy.

    Args:
        X_train: Training features.
        y_train: Training class labels.
        cv_folds: Number of CV folds. If None, uses config.CV_FOLDS.
        random_state: Seed or RandomState for folds and forests.

    Returns:
        Objective function for Optuna.

    Example:
        >>> objective = create_objective(X_train, y_train)
        >>> trial = study.ask()
        >>> score = objective(trial)
    """
    if cv_folds is None:
        cv_folds = config.CV_FOLDS

    def objective(trial):
        """Optuna objective function."""
        params = {
            'n_estimators': trial.suggest_int('n_estimators', 100, 800, step=50),
            'max_depth': trial.suggest_int('max_depth', 3, 30),
            'min_samples_leaf': trial.suggest_int('min_samples_leaf', 1, 10),
            'max_features': trial.suggest_categorical('max_features', ['sqrt', 'log2', 0.3, 0.5]),
        }

        model = RandomForestClassifier(**params, n_jobs=-1, random_state=random_state)

        cv = StratifiedKFold(n_splits=cv_folds, shuffle=True, random_state=random_state)
        scores = cross_val_score(model, X_train, y_train, cv=cv, scoring='accuracy')

        return scores.mean()

    return objective


def run_optuna_study(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    n_trials: int = None,
    timeout: Optional[int] = None,
    seed: Optional[int] = None,
    random_state: RandomSource = None
) -> optuna.Study:
    """
    Run Optuna hyperparameter optimization study.

    Args:
        X_train: Training features.
        y_train: Training class labels.
        n_trials: Number of trials. If None, uses config.OPTUNA_N_TRIALS.
        timeout: Time limit in seconds. If None, uses config.OPTUNA_TIMEOUT.
        seed: Seed for the TPE sampler. None leaves the sampler unseeded.
        random_state: Seed or RandomState for folds and forests.

    Returns:
        Completed Optuna study object.

    Example:
        >>> study = run_optuna_study(X_train, y_train, n_trials=20)
        >>> print(f"Best CV accuracy: {study.best_value:.4f}")
        Best CV accuracy: 0.7433
    """
    if n_trials is None:
        n_trials = config.OPTUNA_N_TRIALS
    if timeout is None:
        timeout = config.OPTUNA_TIMEOUT

    logger.info("=" * 80)
    logger.info("OPTUNA HYPERPARAMETER TUNING")
    logger.info("=" * 80)
    logger.info(f"Objective: Maximize CV accuracy")
    logger.info(f"Number of trials: {n_trials}")
    logger.info(f"CV folds: {config.CV_FOLDS}")

    objective = create_objective(X_train, y_train, random_state=random_state)

    study = optuna.create_study(
        direction='maximize',
        sampler=TPESampler(seed=seed)
    )

    logger.info("\nRunning optimization...")
    study.optimize(objective, n_trials=n_trials, timeout=timeout)

    logger.info("\n✓ Optimization complete")
    logger.info(f"Best CV accuracy: {study.best_value:.4f}")
    logger.info(f"Best parameters:")
    for param, value in study.best_params.items():
        logger.info(f"  {param:20s}: {value}")

    return study


def train_best_forest(
    X_train: pd.DataFrame,
    y_train: pd.Series,
    best_params: dict,
    random_state: RandomSource = None
) -> RandomForestClassifier:
    """
    Train final random forest with best hyperparameters from Optuna.

    Args:
        X_train: Training features.
        y_train: Training class labels.
        best_params: Best parameters from Optuna study.
        random_state: Seed or RandomState for the final forest.

    Returns:
        Fitted RandomForestClassifier.

    Example:
        >>> forest = train_best_forest(X_train, y_train, study.best_params)
    """
    logger.info("Training final forest with best parameters...")

    params = {**config.FOREST_PARAMS, **best_params}

    return train_random_forest(X_train, y_train, params=params, random_state=random_state)
