"""Classification of query sequences against a gallery of profile HMMs."""

from .driver import BestResult, ClassificationDriver, ModelSource, classify

__all__ = ["BestResult", "ClassificationDriver", "ModelSource", "classify"]
