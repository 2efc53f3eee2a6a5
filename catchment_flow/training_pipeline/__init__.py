"""
Training pipeline for the streamflow models.

Contains modules for splitting and binning, the linear regression, the
classification tree, the random forest, hyperparameter tuning, and
evaluation.
"""
