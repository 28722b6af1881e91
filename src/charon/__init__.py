# charon/__init__.py
"""
charon: information-gain classification trees (scikit-learn style).

Exports:
    - TreeClassifier
    - train, select_feature, Settings
    - decide
"""
from loguru import logger

from .classifier import TreeClassifier
from .exceptions import CharonError, InvalidEncodingError, RegressionNotSupportedError
from .learning import Settings, select_feature, train
from .logging import PACKAGE_NAME, enable_logging
from .tree import decide

logger.disable(PACKAGE_NAME)

__all__ = [
    "CharonError",
    "InvalidEncodingError",
    "RegressionNotSupportedError",
    "Settings",
    "TreeClassifier",
    "decide",
    "enable_logging",
    "select_feature",
    "train",
]
__version__ = "0.1.0"
