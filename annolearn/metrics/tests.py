# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=too-many-public-methods, invalid-name

"""
Tests for annolearn.metrics
"""

import unittest

import numpy as np

from annolearn.annotation import AnnotationSpan
from annolearn.metrics.annotation_stats import (ANY_CATEGORY,
                                                AnnotationStatistics)
from annolearn.metrics.scores import precision_recall_fscore


def _spans(*triples):
    "annotation spans from (start, end, category) triples"
    return [AnnotationSpan.from_tuple(t) for t in triples]


class AnnotationStatisticsTest(unittest.TestCase):
    "tests for AnnotationStatistics"

    def test_exact_match(self):
        "one span, right offsets, right category"
        stats = AnnotationStatistics()
        stats.add(_spans((0, 5, 'PER')), _spans((0, 5, 'PER')))
        self.assertEqual((1, 0, 0), stats.counts('PER'))
        self.assertEqual((1.0, 1.0, 1.0), stats.scores())
        self.assertEqual((1.0, 1.0, 1.0), stats.scores('PER'))

    def test_wrong_category(self):
        "right offsets, wrong category"
        stats = AnnotationStatistics()
        stats.add(_spans((0, 5, 'PER')), _spans((0, 5, 'ORG')))
        self.assertEqual((0, 1, 0), stats.counts('ORG'))
        self.assertEqual((0, 0, 1), stats.counts('PER'))
        self.assertEqual(0.0, stats.precision())
        self.assertEqual(0.0, stats.recall())
        self.assertEqual(0.0, stats.f1())
        self.assertEqual({('PER', 'ORG'): 1},
                         stats.as_counts()['confusions'])
        # ... which does not matter if we only look at offsets
        loose = AnnotationStatistics(ignore_category=True)
        loose.add(_spans((0, 5, 'PER')), _spans((0, 5, 'ORG')))
        self.assertEqual((1, 0, 0), loose.counts(ANY_CATEGORY))
        self.assertEqual(1.0, loose.f1())

    def test_spurious(self):
        "a prediction where there is nothing to find"
        stats = AnnotationStatistics()
        stats.add([], _spans((0, 5, 'PER')))
        self.assertEqual((0, 1, 0), stats.counts('PER'))
        self.assertEqual(0.0, stats.precision('PER'))
        self.assertEqual(0.0, stats.recall('PER'))
        self.assertEqual(0.0, stats.f1('PER'))
        self.assertEqual({(None, 'PER'): 1},
                         stats.as_counts()['confusions'])

    def test_empty(self):
        "no spans at all, no nan"
        stats = AnnotationStatistics()
        stats.add([], [])
        self.assertEqual((0.0, 0.0, 0.0), stats.scores())
        self.assertEqual((0.0, 0.0, 0.0), stats.scores('PER'))
        self.assertEqual([], stats.categories())
        self.assertIn('micro avg', stats.report())

    def test_conservation(self):
        "every gold span and every predicted span is counted once"
        gold = _spans((0, 5, 'PER'), (6, 9, 'ORG'), (10, 12, 'LOC'),
                      (10, 12, 'LOC'), (20, 25, 'PER'))
        pred = _spans((0, 5, 'PER'), (6, 9, 'PER'), (10, 12, 'LOC'),
                      (13, 15, 'ORG'), (20, 26, 'PER'))
        stats = AnnotationStatistics()
        stats.add(gold, pred)
        for cat in ['PER', 'ORG', 'LOC']:
            tp, fp, fn = stats.counts(cat)
            self.assertEqual(len([s for s in gold if s.category == cat]),
                             tp + fn)
            self.assertEqual(len([s for s in pred if s.category == cat]),
                             tp + fp)
        self.assertEqual(len(gold), stats.reference_count())
        self.assertEqual(len(pred), stats.predicted_count())
        self.assertEqual((2, 3, 3), stats.counts())

    def test_merge(self):
        "adding statistics is commutative and adds up the counts"
        stats1 = AnnotationStatistics()
        stats1.add(_spans((0, 5, 'PER')), _spans((0, 5, 'ORG')))
        stats2 = AnnotationStatistics()
        stats2.add(_spans((0, 5, 'PER'), (7, 9, 'LOC')),
                   _spans((0, 5, 'PER')))
        self.assertEqual(stats1 + stats2, stats2 + stats1)
        total = AnnotationStatistics.add_all([stats1, stats2])
        self.assertEqual(stats1 + stats2, total)
        self.assertEqual((1, 1, 2), total.counts())

        both = AnnotationStatistics()
        both.add(_spans((0, 5, 'PER')), _spans((0, 5, 'ORG')))
        both.add(_spans((0, 5, 'PER'), (7, 9, 'LOC')),
                 _spans((0, 5, 'PER')))
        self.assertEqual(both, total)

        self.assertRaises(ValueError, stats1.update,
                          AnnotationStatistics(ignore_category=True))

    def test_add_nothing(self):
        "sum of no statistics"
        total = AnnotationStatistics.add_all([])
        self.assertEqual((0, 0, 0), total.counts())

    def test_confusions(self):
        "confusion matrix"
        stats = AnnotationStatistics()
        stats.add(_spans((0, 5, 'PER'), (6, 9, 'ORG'), (10, 12, 'LOC')),
                  _spans((0, 5, 'ORG'), (6, 9, 'ORG'), (13, 14, 'PER')))
        matrix = stats.confusions()
        self.assertEqual(['LOC', 'ORG', 'PER', 'none'], list(matrix.index))
        self.assertEqual(['ORG', 'PER', 'none'], list(matrix.columns))
        self.assertEqual(1, matrix.loc['PER', 'ORG'])
        self.assertEqual(1, matrix.loc['ORG', 'ORG'])
        self.assertEqual(1, matrix.loc['LOC', 'none'])
        self.assertEqual(1, matrix.loc['none', 'PER'])
        self.assertEqual(4, matrix.values.sum())

    def test_report(self):
        "text and dictionary reports"
        stats = AnnotationStatistics()
        stats.add(_spans((0, 5, 'PER'), (6, 9, 'ORG')),
                  _spans((0, 5, 'PER')))
        report = stats.report(digits=2)
        self.assertIn('PER', report)
        self.assertIn('ORG', report)
        self.assertIn('micro avg', report)
        self.assertIn('0.67', report)
        scores = stats.as_dict()
        self.assertEqual(set(['PER', 'ORG', 'micro']), set(scores))
        self.assertEqual(1.0, scores['PER']['f1'])
        self.assertEqual(0.0, scores['ORG']['recall'])
        self.assertEqual(1, scores['ORG']['fn'])
        self.assertAlmostEqual(0.5, scores['micro']['recall'])


def test_precision_recall_fscore():
    "scores from counts, with zero denominators"
    p, r, f = precision_recall_fscore([1, 0, 0], [2, 0, 1], [1, 1, 0])
    assert np.allclose(p, [0.5, 0.0, 0.0])
    assert np.allclose(r, [1.0, 0.0, 0.0])
    assert np.allclose(f, [2. / 3, 0.0, 0.0])
    assert not np.any(np.isnan(f))
