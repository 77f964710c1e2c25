"""
Training Engine Module
======================

Responsibility:
- Orchestrates load -> split -> featurize -> train for element data (Trainer).
- Evaluates the trained model on the held-out split.
- Persists the trained pipeline with its schema.
- Defines the classifier backend capability interface.
"""

from .trained_model import TrainedModel
from .backend import ClassifierBackend, SklearnClassifierBackend
from .trainer import Trainer

__all__ = ['Trainer', 'TrainedModel', 'ClassifierBackend', 'SklearnClassifierBackend']
