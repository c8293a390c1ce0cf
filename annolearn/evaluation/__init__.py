"""
Holdout and cross-validation evaluation of annotators
"""

# License: BSD3

from .folds import make_folds, train_test_splits
from .harness import (CrossValidationResult, Evaluation,
                      FoldFailure)
