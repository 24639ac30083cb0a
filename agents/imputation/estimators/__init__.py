# agents/imputation/estimators/__init__.py
"""
Estimator registry.

Usage:
```python
    from agents.imputation.estimators import get_estimator

    output = get_estimator("knn").impute(prepared, config)
```
"""

from __future__ import annotations

from typing import Dict, Type

from agents.imputation.estimators.base import BaseEstimator, Cell, EstimatorOutput, FieldwiseEstimator
from agents.imputation.estimators.central_tendency import MeanMedianEstimator
from agents.imputation.estimators.knn import KNNEstimator
from agents.imputation.estimators.mice import MICEEstimator
from agents.imputation.estimators.neural_network import NeuralNetworkEstimator
from agents.imputation.estimators.random_forest import RandomForestEstimator
from agents.imputation.estimators.regression import RegressionEstimator
from core.exceptions import ConfigurationError

__all__ = [
    "BaseEstimator",
    "FieldwiseEstimator",
    "Cell",
    "EstimatorOutput",
    "ESTIMATORS",
    "get_estimator",
    "MeanMedianEstimator",
    "KNNEstimator",
    "RegressionEstimator",
    "RandomForestEstimator",
    "NeuralNetworkEstimator",
    "MICEEstimator",
]

ESTIMATORS: Dict[str, Type[BaseEstimator]] = {
    cls.name: cls
    for cls in (
        MeanMedianEstimator,
        KNNEstimator,
        RegressionEstimator,
        RandomForestEstimator,
        NeuralNetworkEstimator,
        MICEEstimator,
    )
}


def get_estimator(name: str) -> BaseEstimator:
    """
    Instantiate the estimator registered under ``name``.

    Raises:
        ConfigurationError: ``name`` is not a registered estimator.
    """
    try:
        return ESTIMATORS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown imputation method: {name}",
            details={"available": sorted(ESTIMATORS)},
        ) from None
