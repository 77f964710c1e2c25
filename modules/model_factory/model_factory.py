import inspect
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from sklearn.linear_model import LogisticRegression, SGDClassifier
from sklearn.naive_bayes import MultinomialNB
from sklearn.multiclass import OneVsRestClassifier

from utils.exceptions import ConfigurationError
from utils import constants


@dataclass(frozen=True)
class AlgorithmConfig:
    """
    Describes which classifier a Trainer fits and how it is presented.

    The name is the registry key used by ModelFactory; params are passed to the
    estimator constructor after filtering.
    """
    name: str = constants.DEFAULT_ALGORITHM
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return ModelFactory.DISPLAY_NAMES.get(self.name, self.name)

    @classmethod
    def from_config(cls, config: dict) -> "AlgorithmConfig":
        training = config.get('training', {})
        return cls(
            name=training.get('algorithm', constants.DEFAULT_ALGORITHM),
            params=dict(training.get('params', {}) or {}),
        )


class ModelFactory:
    """
    Factory for creating multiclass classifiers with a unified interface.
    Handles distinction between natively multiclass models and those requiring wrappers.
    """

    # Estimators that handle multiclass targets natively, with per-algorithm defaults
    NATIVE_MODELS = {
        # Entropy-regularised linear classifiers
        'sdca_maximum_entropy': (LogisticRegression, {'solver': 'saga', 'max_iter': 1000, 'tol': 1e-4}),
        'lbfgs_maximum_entropy': (LogisticRegression, {'solver': 'lbfgs', 'max_iter': 1000}),
        'sgd_maximum_entropy': (SGDClassifier, {'loss': 'log_loss', 'max_iter': 1000, 'tol': 1e-4}),

        # Count-based
        'naive_bayes': (MultinomialNB, {}),
    }

    # Binary estimators that MUST be wrapped (one model per class)
    WRAPPED_MODELS = {
        'one_vs_rest_logistic': (LogisticRegression, {'solver': 'liblinear', 'max_iter': 1000}),
    }

    DISPLAY_NAMES = {
        'sdca_maximum_entropy': 'SdcaMaximumEntropy',
        'lbfgs_maximum_entropy': 'LbfgsMaximumEntropy',
        'sgd_maximum_entropy': 'SgdMaximumEntropy',
        'naive_bayes': 'NaiveBayes',
        'one_vs_rest_logistic': 'OneVersusAllLogistic',
    }

    @classmethod
    def create(cls, model_name: str, params: Dict[str, Any] = None, seed: Optional[int] = None) -> Any:
        """
        Create and return an instantiated classifier.

        User params override the algorithm defaults; the seed is applied as
        random_state only where the estimator accepts one and the user did not set it.
        """
        if params is None:
            params = {}

        if model_name in cls.NATIVE_MODELS:
            model_class, defaults = cls.NATIVE_MODELS[model_name]
            return model_class(**cls._resolve_params(model_class, defaults, params, seed))

        elif model_name in cls.WRAPPED_MODELS:
            model_class, defaults = cls.WRAPPED_MODELS[model_name]
            base_estimator = model_class(**cls._resolve_params(model_class, defaults, params, seed))
            return OneVsRestClassifier(base_estimator)

        else:
            raise ConfigurationError(f"Unknown model name: {model_name}. Available: {cls.get_available_models()}")

    @classmethod
    def get_available_models(cls) -> List[str]:
        """Return list of all supported model names."""
        return list(cls.NATIVE_MODELS.keys()) + list(cls.WRAPPED_MODELS.keys())

    @classmethod
    def _resolve_params(cls, model_class, defaults: Dict[str, Any], params: Dict[str, Any],
                        seed: Optional[int]) -> Dict[str, Any]:
        merged = {**defaults, **params}
        if seed is not None:
            merged.setdefault('random_state', seed)
        return cls._filter_params(model_class, merged)

    @staticmethod
    def _filter_params(model_class, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Remove parameters from `params` that are not accepted by `model_class` constructor.
        """
        sig = inspect.signature(model_class.__init__)

        valid_keys = [
            p.name for p in sig.parameters.values()
            if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
        ]

        # Always allow **kwargs if the model supports it
        has_kwargs = any(p.kind == p.VAR_KEYWORD for p in sig.parameters.values())

        if has_kwargs:
            return params

        return {k: v for k, v in params.items() if k in valid_keys}
