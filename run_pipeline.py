"""
Unified pipeline orchestrator for the catchment streamflow models.

Executes complete pipeline: feature table → train/test split → linear
regression → classification tree → random forest.

Usage:
    python run_pipeline.py --data-dir data/raw         # Unseeded run
    python run_pipeline.py --seed 2024                 # Reproducible run
    python run_pipeline.py --n-trials 30               # Tune the random forest
    python run_pipeline.py --save-models --log-mlflow  # Persist and track
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from catchment_flow import config
from catchment_flow.exceptions import PipelineError
from catchment_flow.main import run_preprocessing_pipeline
from catchment_flow.training_pipeline.split import (
    bin_response,
    split_features_target,
    split_train_test,
    usable_predictors
)
from catchment_flow.training_pipeline.linear import (
    fit_linear_model,
    forward_select_predictors,
    summarize_linear_model
)
from catchment_flow.training_pipeline.tree import describe_tree, train_classification_tree
from catchment_flow.training_pipeline.forest import save_model, train_random_forest
from catchment_flow.training_pipeline.tune_optuna import run_optuna_study, train_best_forest
from catchment_flow.training_pipeline.evaluation import (
    confusion_matrix_table,
    evaluate_classifier,
    evaluate_regression,
    get_feature_importance,
    log_metrics_to_mlflow,
    predict_classes
)

logger = logging.getLogger(__name__)


def run_full_pipeline(
    data_dir: Optional[Path] = None,
    seed: Optional[int] = None,
    n_bins: Optional[int] = None,
    n_trials: Optional[int] = None,
    save_models: bool = False,
    log_mlflow: bool = False
) -> Dict[str, Any]:
    """
    Execute complete modelling pipeline.

    Stages:
    1. Feature table (load, join, transform, filter)
    2. Train/test split and response binning
    3. Linear regression (all predictors, then forward stepwise)
    4. Classification tree
    5. Random forest (Optuna-tuned when n_trials is given)

    Every random draw comes from one RandomState built from ``seed``; with
    no seed the run is not reproducible.

    Args:
        data_dir: Directory with the attribute files (None = config default).
        seed: Seed for the process-wide random source.
        n_bins: Number of response quantile bins (None = config default).
        n_trials: Optuna trials for the forest; None skips tuning.
        save_models: Save tree and forest with joblib.
        log_mlflow: Log each model's parameters and metrics to MLflow.

    Returns:
        Dict of per-model results.

    Raises:
        PipelineError: If any feature stage fails.
    """
    logger.info("=" * 80)
    logger.info("CATCHMENT STREAMFLOW PIPELINE ORCHESTRATOR")
    logger.info("=" * 80)

    rng = np.random.RandomState(seed)
    if seed is None:
        logger.warning("No seed given: split and model results will vary between runs")

    # Stage 1: Feature table
    logger.info("\n[Stage 1/5] FEATURE TABLE")
    table, manifest = run_preprocessing_pipeline(data_dir)
    response = manifest.response

    # Stage 2: Split and binning
    logger.info("\n[Stage 2/5] SPLIT AND BINNING")
    predictors = usable_predictors(table, response)
    classes = bin_response(table[response], n_bins=n_bins)
    train, test = split_train_test(table, random_state=rng)

    X_train, y_train = split_features_target(train, response, predictors)
    X_test, y_test = split_features_target(test, response, predictors)
    y_train_cls = classes.loc[X_train.index]
    y_test_cls = classes.loc[X_test.index]

    results: Dict[str, Any] = {'n_train': len(train), 'n_test': len(test)}

    # Stage 3: Linear regression
    logger.info("\n[Stage 3/5] LINEAR REGRESSION")
    full_ols = fit_linear_model(train, response, predictors)
    selected = forward_select_predictors(train, response, predictors)
    if not selected:
        logger.warning("Forward selection kept no predictor; reporting the full model only")
        stepwise_ols = full_ols
    else:
        stepwise_ols = fit_linear_model(train, response, selected)

    linear_summary = summarize_linear_model(stepwise_ols)
    linear_metrics = evaluate_regression(stepwise_ols, test, response)
    results['linear'] = {
        'full_r_squared': float(full_ols.rsquared),
        'selected_predictors': selected,
        **linear_summary,
        'test': linear_metrics,
    }

    # Stage 4: Classification tree
    logger.info("\n[Stage 4/5] CLASSIFICATION TREE")
    tree = train_classification_tree(X_train, y_train_cls, random_state=rng)
    tree_metrics = evaluate_classifier(tree, X_test, y_test_cls)
    tree_confusion = confusion_matrix_table(y_test_cls, predict_classes(tree, X_test))
    logger.info(f"\nTree rules:\n{describe_tree(tree, X_train.columns)}")
    logger.info(f"\nConfusion matrix (tree):\n{tree_confusion}")
    results['tree'] = {'metrics': tree_metrics, 'confusion_matrix': tree_confusion}

    # Stage 5: Random forest
    logger.info("\n[Stage 5/5] RANDOM FOREST")
    if n_trials:
        sampler_seed = int(rng.randint(np.iinfo(np.int32).max)) if seed is not None else None
        study = run_optuna_study(
            X_train, y_train_cls,
            n_trials=n_trials,
            seed=sampler_seed,
            random_state=rng
        )
        forest = train_best_forest(X_train, y_train_cls, study.best_params, random_state=rng)
    else:
        forest = train_random_forest(X_train, y_train_cls, random_state=rng)

    forest_metrics = evaluate_classifier(forest, X_test, y_test_cls)
    forest_confusion = confusion_matrix_table(y_test_cls, predict_classes(forest, X_test))
    importance = get_feature_importance(forest, X_train.columns, top_n=20)
    logger.info(f"\nConfusion matrix (forest):\n{forest_confusion}")
    logger.info(f"\nTop features (forest):\n{importance.head(10).to_string(index=False)}")
    results['forest'] = {
        'metrics': forest_metrics,
        'confusion_matrix': forest_confusion,
        'feature_importance': importance,
    }

    if save_models:
        save_model(tree, config.TREE_MODEL_PATH)
        save_model(forest, config.FOREST_MODEL_PATH)

    if log_mlflow:
        log_metrics_to_mlflow(
            {f"test_{k}": v for k, v in linear_metrics.items()},
            {'predictors': selected, 'seed': seed},
            run_name="linear_regression"
        )
        log_metrics_to_mlflow(tree_metrics, tree.get_params(), tree_confusion, run_name="classification_tree")
        log_metrics_to_mlflow(forest_metrics, forest.get_params(), forest_confusion, run_name="random_forest")

    # Final summary
    logger.info("\n" + "=" * 80)
    logger.info("✓ PIPELINE COMPLETE")
    logger.info("=" * 80)
    logger.info(f"Rows:            {len(table):,} (train {len(train):,} / test {len(test):,})")
    logger.info(f"Linear R² (test): {linear_metrics['r_squared']:.4f}")
    logger.info(f"Tree accuracy:    {tree_metrics['accuracy']:.4f}")
    logger.info(f"Forest accuracy:  {forest_metrics['accuracy']:.4f}")

    return results


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run the catchment streamflow modelling pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with the default data directory
  python run_pipeline.py

  # Reproducible run on another directory
  python run_pipeline.py --data-dir /data/camels --seed 7

  # Tune the forest with 20 Optuna trials and save both classifiers
  python run_pipeline.py --n-trials 20 --save-models
        """
    )
    parser.add_argument(
        '--data-dir',
        type=Path,
        default=None,
        help=f'Directory with the attribute files (default: {config.DATA_DIR})'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=config.RANDOM_STATE,
        help='Seed for the split and the models (default: unseeded)'
    )
    parser.add_argument(
        '--n-bins',
        type=int,
        default=None,
        help=f'Number of response quantile bins (default: {config.N_RESPONSE_BINS})'
    )
    parser.add_argument(
        '--n-trials',
        type=int,
        default=None,
        help='Tune the random forest with this many Optuna trials'
    )
    parser.add_argument(
        '--save-models',
        action='store_true',
        help=f'Save the fitted tree and forest under {config.MODELS_DIR}'
    )
    parser.add_argument(
        '--log-mlflow',
        action='store_true',
        help='Log parameters and metrics to MLflow'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        run_full_pipeline(
            data_dir=args.data_dir,
            seed=args.seed,
            n_bins=args.n_bins,
            n_trials=args.n_trials,
            save_models=args.save_models,
            log_mlflow=args.log_mlflow
        )
    except PipelineError as e:
        logger.error(f"❌ Pipeline failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
