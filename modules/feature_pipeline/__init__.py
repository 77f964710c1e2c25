"""
Feature Pipeline Module
=======================

Responsibility:
- Per-column text featurization of the element attributes.
- Concatenation of the featurized columns into a single feature matrix.
"""

from .feature_pipeline import (
    build_feature_pipeline,
    build_text_featurizer,
    prepare_features,
    resolve_feature_params,
)

__all__ = ['build_feature_pipeline', 'build_text_featurizer', 'prepare_features', 'resolve_feature_params']
