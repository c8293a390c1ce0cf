"""
Splitting a collection of documents into folds.

Documents are never split: a fold is a list of whole documents.
"""

# License: BSD3

ASSIGNMENTS = frozenset(['round_robin', 'block'])
"""
How documents are dealt out to folds:

* round_robin: document i goes to fold i mod k
* block: folds are runs of consecutive documents
"""


def make_folds(items, k, assignment='round_robin'):
    """
    Partition items into k folds of near-equal size (sizes differ by
    at most one).

    :raises ValueError: unless `2 <= k <= len(items)`
    """
    items = list(items)
    if assignment not in ASSIGNMENTS:
        raise ValueError('assignment must be one of ' +
                         str(sorted(ASSIGNMENTS)))
    if k < 2 or k > len(items):
        raise ValueError('cannot make {0} folds out of {1} items'.format(
            k, len(items)))

    if assignment == 'round_robin':
        return [items[i::k] for i in range(k)]

    size, extra = divmod(len(items), k)
    folds = []
    start = 0
    for i in range(k):
        end = start + size + (1 if i < extra else 0)
        folds.append(items[start:end])
        start = end
    return folds


def train_test_splits(items, k, assignment='round_robin'):
    """
    For each fold, `(fold number, training items, test items)`, where
    the test items are those of the fold and the training items those
    of all the other folds
    """
    folds = make_folds(items, k, assignment=assignment)
    for i, test in enumerate(folds):
        train = [x for j, fold in enumerate(folds) if j != i for x in fold]
        yield i, train, test
