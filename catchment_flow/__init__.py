"""
Catchment attribute modelling pipeline.

Joins watershed attribute tables, engineers log and squared features, and
fits regression, tree and forest models of mean streamflow.
"""
