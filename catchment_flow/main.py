"""
Preprocessing entry point for the catchment attribute pipeline.

Runs loader → joiner → schema introspection → feature transformer → row
filter and returns the modelling table. Nothing is written to disk.

Usage:
    python -m catchment_flow.main --data-dir data/raw
"""
import argparse
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import pandas as pd

from catchment_flow import config
from catchment_flow.feature_pipeline import (
    ColumnManifest,
    build_column_manifest,
    create_features,
    join_attribute_tables,
    load_attribute_tables,
    prepare_modelling_table
)

logger = logging.getLogger(__name__)


def run_preprocessing_pipeline(
    data_dir: Optional[Union[str, Path]] = None
) -> Tuple[pd.DataFrame, ColumnManifest]:
    """
    Build the modelling table from the six attribute files.

    Args:
        data_dir: Directory with the attribute files. If None, uses
            config.DATA_DIR.

    Returns:
        Tuple of (modelling table, column manifest of the joined table).

    Raises:
        PipelineError: Any ParseError, JoinError, TransformError or
            EmptyResultError raised by a stage.

    Example:
        >>> table, manifest = run_preprocessing_pipeline("data/raw")
        >>> print(table.shape)
        (671, 160)
    """
    logger.info("=" * 80)
    logger.info("CATCHMENT FEATURE PIPELINE")
    logger.info("=" * 80)

    logger.info("\n[1/5] Loading attribute tables...")
    tables = load_attribute_tables(data_dir)

    logger.info("\n[2/5] Joining tables...")
    joined = join_attribute_tables(tables)

    logger.info("\n[3/5] Assigning column roles...")
    manifest = build_column_manifest(joined)

    logger.info("\n[4/5] Engineering features...")
    features = create_features(joined, manifest)

    logger.info("\n[5/5] Filtering rows...")
    table = prepare_modelling_table(features, manifest)

    logger.info(f"\n✓ Modelling table ready: {table.shape[0]:,} rows × {table.shape[1]} columns")

    return table, manifest


def main():
    """CLI entry point: build and describe the modelling table."""
    parser = argparse.ArgumentParser(description="Build the catchment modelling table")
    parser.add_argument(
        '--data-dir',
        type=Path,
        default=None,
        help=f'Directory with the attribute files (default: {config.DATA_DIR})'
    )
    args = parser.parse_args()

    table, manifest = run_preprocessing_pipeline(args.data_dir)
    print(table.describe().T.to_string())


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    main()
