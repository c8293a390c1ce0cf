"""
Features and helpers for building compound feature names.

A feature is a name plus a value; the value is a number, a boolean
or a string. Feature extractors are plain functions from some unit
(a token, a span, a document) to a list of features. The helpers in
this module wrap such functions to look at a neighbouring unit instead,
prefixing the names of the features they return with the context
they were extracted in (eg. `LeftSibling_pos`).
"""

# License: BSD3

from collections import namedtuple
import itertools


class Feature(namedtuple('Feature', 'name value')):
    """
    A named feature value.

    Features are immutable; `renamed` returns a copy
    """
    __slots__ = ()

    @staticmethod
    def create_name(*parts):
        """
        Build a compound feature name, eg. ::

            Feature.create_name('Preceding_1', 'pos') == 'Preceding_1_pos'

        Empty or None parts are skipped, so that a context with no
        name leaves the sub-feature name unchanged. Composition is
        associative ::

            create_name(create_name(a, b), c) == create_name(a, create_name(b, c))
        """
        return '_'.join(str(p) for p in parts if p)

    def renamed(self, prefix):
        "copy of this feature with `prefix` added to its name"
        return self._replace(name=Feature.create_name(prefix, self.name))


def prefixed(prefix, features):
    """
    Rename each feature in a list by adding a context prefix
    """
    return [feature.renamed(prefix) for feature in features]


def relative_name(offset, left='Left', right='Right', what='Sibling'):
    """
    Context name for an item `offset` positions away ::

        relative_name(-1) == 'LeftSibling'
        relative_name(2) == '2RightSibling'
        relative_name(0) == ''
    """
    if offset == 0:
        return ''
    side = left if offset < 0 else right
    if abs(offset) > 1:
        return '{0}{1}{2}'.format(abs(offset), side, what)
    return '{0}{1}'.format(side, what)


def relative_extractor(offset, extract, **kwargs):
    """
    Turn a feature extractor `extract :: item -> [Feature]` into one
    that looks at the item `offset` positions away in some sequence
    (eg. the children of a tree node)::

        (items, idx) -> [Feature]

    Features of the neighbour are prefixed with `relative_name(offset)`.
    Out of bounds neighbours yield no features.
    """
    name = relative_name(offset, **kwargs)

    def inner(items, idx):
        "extract from the neighbour"
        tgt = idx + offset
        if tgt < 0 or tgt >= len(items):
            return []
        return prefixed(name, extract(items[tgt]))
    return inner


OUT_OF_BOUNDS = 'OOB'
"""
Value of window features that fall beyond the edges of a sequence
"""


def window_features(items, idx, extract, preceding=0, following=0):
    """
    Extract features of the items in a window around position `idx`.

    For each `k` in `1..preceding` (resp. `following`), the features
    of the item `k` positions before (resp. after) are renamed with
    `Preceding_k` (resp. `Following_k`). Positions that fall outside
    of the sequence give a single `Preceding_k_OOB` feature, so that
    sequence edges are visible to the learner.
    """
    feats = []
    windows = itertools.chain(
        (('Preceding', k, idx - k) for k in range(1, preceding + 1)),
        (('Following', k, idx + k) for k in range(1, following + 1)))
    for direction, k, tgt in windows:
        ctx = Feature.create_name(direction, k)
        if 0 <= tgt < len(items):
            feats.extend(prefixed(ctx, extract(items[tgt])))
        else:
            feats.append(Feature(Feature.create_name(ctx, OUT_OF_BOUNDS),
                                 True))
    return feats


def extract_all(extractors, item):
    """
    Run each extractor on an item and concatenate the results,
    in registration order
    """
    return list(itertools.chain.from_iterable(ext(item)
                                              for ext in extractors))


class Instance(namedtuple('Instance', 'outcome features')):
    """
    What gets written to a data writer: an outcome and a feature
    vector. For sequence backends, the outcome is a list of outcomes
    and the features a list of feature vectors, one per item
    """
    __slots__ = ()

    @classmethod
    def sequence(cls, instances):
        "fuse per-item instances into one sequence instance"
        instances = list(instances)
        return cls([x.outcome for x in instances],
                   [x.features for x in instances])
