from .base import BaseRule, NodeCallback
from .performance import UseZipToWrapArrayContents

__all__ = [
    "BaseRule",
    "NodeCallback",
    "UseZipToWrapArrayContents",
]
