"""
Feature pipeline for the catchment attribute modelling table.

Public API for loading, joining, transforming and filtering the watershed
attribute tables.
"""
from catchment_flow.feature_pipeline.load import (
    load_attribute_table,
    load_attribute_tables
)
from catchment_flow.feature_pipeline.joining import join_attribute_tables
from catchment_flow.feature_pipeline.schema import (
    ColumnManifest,
    build_column_manifest
)
from catchment_flow.feature_pipeline.engineering import create_features
from catchment_flow.feature_pipeline.cleaning import prepare_modelling_table

__all__ = [
    'load_attribute_table',
    'load_attribute_tables',
    'join_attribute_tables',
    'ColumnManifest',
    'build_column_manifest',
    'create_features',
    'prepare_modelling_table',
]
