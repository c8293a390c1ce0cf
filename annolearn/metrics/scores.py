"""Precision, recall and F1 from counts.

Counts may be per category (arrays) or summed over all categories
(arrays of length one, for micro-averaging).
"""

# License: BSD3

import numpy as np


def precision_recall_fscore(tp_sum, pred_sum, true_sum):
    """Compute precision, recall and F1 from counts.

    Parameters
    ----------
    tp_sum: array of float
        Number of true positives (for each class)
    pred_sum: array of float
        Number of predictions, ie. true positives plus false positives
    true_sum: array of float
        Number of reference items, ie. true positives plus false
        negatives

    Returns
    -------
    precision, recall, f_score: arrays of float
        When a denominator is 0, the score is 0.0 (never nan)
    """
    tp_sum = np.asarray(tp_sum, dtype=float)
    pred_sum = np.asarray(pred_sum, dtype=float)
    true_sum = np.asarray(true_sum, dtype=float)

    # when the div denominator is 0, assign 0.0 (instead of np.inf)
    with np.errstate(divide='ignore', invalid='ignore'):
        precision = tp_sum / pred_sum
        precision[pred_sum == 0] = 0.0

        recall = tp_sum / true_sum
        recall[true_sum == 0] = 0.0

        f_score = 2 * (precision * recall) / (precision + recall)
        f_score[precision + recall == 0] = 0.0

    return precision, recall, f_score

