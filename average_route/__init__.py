"""Utilities for deriving an average route from historical vessel trajectories.

This package provides modular building blocks to read recorded routes, filter
length outliers, simplify and align trajectories, and cluster the aligned point
cloud into a single representative route.
"""
