"""
Cross-validation and holdout evaluation.

An `Evaluation` knows how to train a model on some documents and how
to test a model on others, producing `AnnotationStatistics`. Out of
this, the base class builds holdout evaluation (`train_and_test`) and
k-fold cross-validation (`cross_validation`).

Folds are independent (each writes its model to a directory of its
own) so they can run in parallel. A fold that fails with a
`LearningError` is recorded as such; the other folds still count, but
the result is flagged as incomplete.
"""

# License: BSD3

from collections import namedtuple
import os
import sys
import warnings

from joblib import Parallel, delayed

from ..learning.errors import LearningError
from ..metrics.annotation_stats import AnnotationStatistics
from .folds import train_test_splits


class FoldFailure(namedtuple('FoldFailure', 'fold error')):
    """
    A fold that could not be trained or tested
    """
    __slots__ = ()

    def __str__(self):
        return 'fold {0}: {1}: {2}'.format(self.fold,
                                          type(self.error).__name__,
                                          self.error)


class CrossValidationResult(object):
    """
    Statistics for each fold that completed, plus failures for those
    that did not

    Parameters
    ----------
    fold_stats: dict(int, AnnotationStatistics)
    failures: list of FoldFailure
    """
    def __init__(self, fold_stats, failures, ignore_category=False):
        self.fold_stats = fold_stats
        self.failures = failures
        self.ignore_category = ignore_category

    @property
    def complete(self):
        "True if no fold failed"
        return not self.failures

    @property
    def n_folds(self):
        "number of folds, whether they completed or not"
        return len(self.fold_stats) + len(self.failures)

    def total(self):
        "statistics summed over the folds that completed"
        return AnnotationStatistics.add_all(
            [self.fold_stats[i] for i in sorted(self.fold_stats)],
            ignore_category=self.ignore_category)

    def report(self, digits=4):
        "text report of the summed statistics"
        lines = []
        if not self.complete:
            lines.append('INCOMPLETE: {0} of {1} folds failed'.format(
                len(self.failures), self.n_folds))
            lines.extend(str(f) for f in self.failures)
            lines.append('')
        total = self.total()
        lines.append(total.report(digits=digits))
        lines.append('')
        lines.append(total.confusions().to_string())
        return '\n'.join(lines)

    def __str__(self):
        return self.report()


class Evaluation(object):
    """
    Base class for evaluations; implement `train` and `test`.

    Parameters
    ----------
    base_dir: string
        Models are written to subdirectories of this directory
    ignore_category: boolean, optional
        Score span offsets only
    verbose: int, optional
        0 for silence
    """
    def __init__(self, base_dir, ignore_category=False, verbose=0):
        self.base_dir = base_dir
        self.ignore_category = ignore_category
        self.verbose = verbose

    def train(self, documents, output_dir):
        """
        Train a model on the documents, writing it to `output_dir`
        """
        raise NotImplementedError

    def test(self, documents, model_dir):
        """
        Run the model in `model_dir` over the documents and return
        `AnnotationStatistics` against their gold spans
        """
        raise NotImplementedError

    def new_statistics(self):
        "fresh, empty statistics with our settings"
        return AnnotationStatistics(ignore_category=self.ignore_category)

    def train_and_test(self, train_docs, test_docs, name='holdout'):
        """
        Holdout evaluation: train on `train_docs`, test on `test_docs`.

        The model goes to `base_dir/name`. With no test documents this
        just trains a model (and returns empty statistics).
        """
        model_dir = os.path.join(self.base_dir, name)
        if self.verbose:
            print('{0}: training on {1} documents'.format(
                name, len(train_docs)), file=sys.stderr)
        self.train(train_docs, model_dir)
        if not test_docs:
            return self.new_statistics()
        if self.verbose:
            print('{0}: testing on {1} documents'.format(
                name, len(test_docs)), file=sys.stderr)
        return self.test(test_docs, model_dir)

    def _run_fold(self, fold, train_docs, test_docs):
        "(fold, statistics or None, failure or None)"
        try:
            stats = self.train_and_test(train_docs, test_docs,
                                        name='fold-{0}'.format(fold))
        except LearningError as err:
            return fold, None, FoldFailure(fold, err)
        return fold, stats, None

    def cross_validation(self, documents, k, assignment='round_robin',
                         n_jobs=1):
        """
        k-fold cross-validation over the documents.

        Parameters
        ----------
        documents: list
        k: int
            Number of folds, `2 <= k <= len(documents)`
        assignment: string, optional
            See `annolearn.evaluation.folds.ASSIGNMENTS`
        n_jobs: int, optional
            Number of folds to run at once

        Returns
        -------
        result: CrossValidationResult
        """
        splits = list(train_test_splits(documents, k,
                                        assignment=assignment))
        outcomes = Parallel(n_jobs=n_jobs, backend='threading',
                            verbose=self.verbose)(
            delayed(self._run_fold)(fold, train_docs, test_docs)
            for fold, train_docs, test_docs in splits)

        fold_stats = {}
        failures = []
        for fold, stats, failure in outcomes:
            if failure is None:
                fold_stats[fold] = stats
            else:
                warnings.warn('cross-validation ' + str(failure))
                failures.append(failure)
        return CrossValidationResult(fold_stats,
                                     sorted(failures, key=lambda f: f.fold),
                                     ignore_category=self.ignore_category)
