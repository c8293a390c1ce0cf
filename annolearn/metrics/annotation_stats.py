"""
Precision, recall and F1 of predicted annotation spans against gold
spans.

Spans are matched exactly: a predicted span and a gold span match if
they have the same offsets (and, unless categories are ignored, the
same category). Counts accumulate over as many documents (and folds)
as you like, and statistics objects can be added together.
"""

# License: BSD3

from collections import Counter, defaultdict

import numpy as np
import pandas as pd
from tabulate import tabulate

from .scores import precision_recall_fscore


ANY_CATEGORY = '*'
"""
The only category when categories are ignored
"""

NONE_LABEL = 'none'
"""
How missing spans (no gold span, or no predicted span) are shown
in the confusion matrix
"""


class AnnotationStatistics(object):
    """
    True positive, false positive and false negative counts, broken
    down by category, plus a confusion count for each
    `(gold category, predicted category)` pair, where either side may
    be None for "no span at that position".

    Parameters
    ----------
    ignore_category: boolean, optional
        If True, only span offsets matter
    """
    def __init__(self, ignore_category=False):
        self.ignore_category = ignore_category
        self.true_positives = Counter()
        self.false_positives = Counter()
        self.false_negatives = Counter()
        self.confusion_counts = Counter()

    def _key(self, span):
        "(offsets, category) of a span"
        category = ANY_CATEGORY if self.ignore_category else span.category
        return (span.offsets(), category)

    def add(self, gold_spans, predicted_spans):
        """
        Count the spans predicted for a document against the gold
        spans of that document.

        * a predicted span with the same offsets and category as a
          gold span is a true positive
        * otherwise, if there is a gold span with the same offsets
          (but another category), this is one false positive for the
          predicted category and one false negative for the gold one
        * otherwise the predicted span is a false positive
        * gold spans left unmatched are false negatives

        Exact matches are paired up before positional ones.
        """
        gold = [self._key(s) for s in gold_spans]
        pred = [self._key(s) for s in predicted_spans]

        gold_count = Counter(gold)
        matched = Counter()
        unmatched_pred = []
        for item in pred:
            if matched[item] < gold_count[item]:
                matched[item] += 1
                category = item[1]
                self.true_positives[category] += 1
                self.confusion_counts[(category, category)] += 1
            else:
                unmatched_pred.append(item)

        # gold spans that were not exactly matched, by position
        by_offsets = defaultdict(list)
        for item in gold:
            if matched[item] > 0:
                matched[item] -= 1
            else:
                by_offsets[item[0]].append(item[1])

        for offsets, category in unmatched_pred:
            self.false_positives[category] += 1
            if by_offsets[offsets]:
                gold_category = by_offsets[offsets].pop(0)
                self.false_negatives[gold_category] += 1
                self.confusion_counts[(gold_category, category)] += 1
            else:
                self.confusion_counts[(None, category)] += 1

        for categories in by_offsets.values():
            for gold_category in categories:
                self.false_negatives[gold_category] += 1
                self.confusion_counts[(gold_category, None)] += 1

    # -----------------------------------------------------------------
    # merging
    # -----------------------------------------------------------------

    def update(self, other):
        """
        Add the counts of another statistics object to ours
        """
        if other.ignore_category != self.ignore_category:
            raise ValueError('cannot merge statistics that do not agree '
                             'on ignoring categories')
        self.true_positives.update(other.true_positives)
        self.false_positives.update(other.false_positives)
        self.false_negatives.update(other.false_negatives)
        self.confusion_counts.update(other.confusion_counts)
        return self

    def __add__(self, other):
        res = AnnotationStatistics(ignore_category=self.ignore_category)
        res.update(self)
        res.update(other)
        return res

    def __eq__(self, other):
        return isinstance(other, AnnotationStatistics) and\
            self.as_counts() == other.as_counts()

    def __ne__(self, other):
        return not self == other

    @classmethod
    def add_all(cls, stats, ignore_category=None):
        """
        Sum of a collection of statistics (empty statistics if there
        are none)
        """
        stats = list(stats)
        if ignore_category is None:
            ignore_category = stats[0].ignore_category if stats else False
        res = cls(ignore_category=ignore_category)
        for stat in stats:
            res.update(stat)
        return res

    def as_counts(self):
        "plain dictionaries of the non-zero counts"
        def strip(counter):
            "without zero cells"
            return dict((k, v) for k, v in counter.items() if v)
        return {'tp': strip(self.true_positives),
                'fp': strip(self.false_positives),
                'fn': strip(self.false_negatives),
                'confusions': strip(self.confusion_counts)}

    # -----------------------------------------------------------------
    # scores
    # -----------------------------------------------------------------

    def categories(self):
        "sorted list of the categories seen on either side"
        cats = set(self.true_positives) | set(self.false_positives) |\
            set(self.false_negatives)
        return sorted(c for c in cats if c is not None)

    def _sums(self, categories):
        "arrays of tp, predicted and reference counts"
        tp_sum = np.array([self.true_positives[c] for c in categories],
                          dtype=float)
        fp_sum = np.array([self.false_positives[c] for c in categories],
                          dtype=float)
        fn_sum = np.array([self.false_negatives[c] for c in categories],
                          dtype=float)
        return tp_sum, tp_sum + fp_sum, tp_sum + fn_sum

    def counts(self, category=None):
        """
        `(tp, fp, fn)` for a category, or summed over all categories
        if None
        """
        if category is None:
            return (sum(self.true_positives.values()),
                    sum(self.false_positives.values()),
                    sum(self.false_negatives.values()))
        return (self.true_positives[category],
                self.false_positives[category],
                self.false_negatives[category])

    def scores(self, category=None):
        """
        `(precision, recall, f1)` for a category, or micro-averaged
        over all categories if None. Scores with a zero denominator
        are 0.0
        """
        tp, fp, fn = self.counts(category)
        p, r, f = precision_recall_fscore([tp], [tp + fp], [tp + fn])
        return float(p[0]), float(r[0]), float(f[0])

    def precision(self, category=None):
        "TP / (TP + FP)"
        return self.scores(category)[0]

    def recall(self, category=None):
        "TP / (TP + FN)"
        return self.scores(category)[1]

    def f1(self, category=None):
        "2PR / (P + R)"
        return self.scores(category)[2]

    def reference_count(self, category=None):
        "number of gold spans"
        tp, _, fn = self.counts(category)
        return tp + fn

    def predicted_count(self, category=None):
        "number of predicted spans"
        tp, fp, _ = self.counts(category)
        return tp + fp

    # -----------------------------------------------------------------
    # reports
    # -----------------------------------------------------------------

    def confusions(self):
        """
        Confusion matrix as a DataFrame, with gold categories as rows
        and predicted categories as columns; the `none` row (resp.
        column) counts predicted (resp. gold) spans that had no
        counterpart at the same offsets
        """
        golds = sorted(set(g for g, _ in self.confusion_counts
                           if g is not None))
        preds = sorted(set(p for _, p in self.confusion_counts
                           if p is not None))
        rows = golds + [None]
        cols = preds + [None]
        data = [[self.confusion_counts[(g, p)] for p in cols] for g in rows]
        label = lambda c: NONE_LABEL if c is None else c
        return pd.DataFrame(data,
                            index=pd.Index([label(g) for g in rows],
                                           name='gold'),
                            columns=pd.Index([label(p) for p in cols],
                                             name='predicted'))

    def as_dict(self):
        """
        Scores and counts as plain data: one entry per category,
        plus `'micro'` for the overall scores
        """
        def entry(category):
            "scores for one row"
            p, r, f = self.scores(category)
            tp, fp, fn = self.counts(category)
            return {'precision': p, 'recall': r, 'f1': f,
                    'tp': tp, 'fp': fp, 'fn': fn}
        res = dict((c, entry(c)) for c in self.categories())
        res['micro'] = entry(None)
        return res

    def report(self, digits=4):
        """Text table of precision, recall, F1 and supports for each
        category, with micro-averaged scores on the last line
        """
        headers = ['precision', 'recall', 'f1-score', 'support',
                   'sup_pred']
        categories = self.categories()
        rows = []
        if categories:
            tp_sum, pred_sum, true_sum = self._sums(categories)
            p, r, f = precision_recall_fscore(tp_sum, pred_sum, true_sum)
            for i, cat in enumerate(categories):
                rows.append([cat, p[i], r[i], f[i],
                             int(true_sum[i]), int(pred_sum[i])])
        p, r, f = self.scores()
        rows.append(['micro avg', p, r, f,
                     self.reference_count(), self.predicted_count()])
        return tabulate(rows, headers=headers,
                        floatfmt='.{0}f'.format(digits))

    def __str__(self):
        return self.report()
