"""
Model Factory Module
====================

Responsibility:
- Registry of supported multiclass classification algorithms.
- Construction of estimators from algorithm descriptors and parameters.
"""

from .model_factory import ModelFactory, AlgorithmConfig

__all__ = ['ModelFactory', 'AlgorithmConfig']
