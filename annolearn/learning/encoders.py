"""
Feature and outcome encoders.

Feature extractors produce lists of `Feature`, with values of mixed
types. Learning backends want something more uniform: either
`NameNumber` pairs (a symbol and a float) for backends that read
symbolic data, or `(index, value)` pairs for backends that read
indexed sparse vectors (eg. the svmlight format).

Encoders are stateful. While training, they grow a table of the
feature names (resp. outcomes) they have seen; once frozen (at the
end of training, or when loaded from a model) they never allocate
anything new, so that a model always sees the same feature space
it was trained on.
"""

# License: BSD3

from collections import Counter, defaultdict, namedtuple
import numbers
import os
import re

import numpy as np

from .errors import UnknownOutcome, UnsupportedFeatureType
from .vocabulary_format import (dump_lookup, dump_vocabulary,
                                load_lookup, load_vocabulary)


NAMES_FILE = 'names.tsv'
OUTCOMES_FILE = 'outcomes.tsv'
VOCABULARY_FILE = 'vocabulary.tsv'

UNKNOWN_NAME = '__UNKNOWN__'
"""
Reserved feature name for the unknown bucket
"""

UNKNOWN_POLICIES = frozenset(['drop', 'unknown'])
"""
What to do with feature names that were never seen in training:

* drop: ignore the feature
* unknown: replace its name with `UNKNOWN_NAME`
"""

_WHITESPACE = re.compile(r'\s+')


class NameNumber(namedtuple('NameNumber', 'name number')):
    """
    A feature encoded as a symbol and a float
    """
    __slots__ = ()


# ---------------------------------------------------------------------
# per-type encoders
# ---------------------------------------------------------------------

class BooleanEncoder(object):
    """
    True features are encoded as `(name, 1)`; False ones are dropped
    """
    def encodes(self, value):
        "True if this encoder handles the value"
        return isinstance(value, (bool, np.bool_))

    def encode(self, feature):
        "[NameNumber]"
        if feature.value:
            return [NameNumber(feature.name, 1.0)]
        return []


class NumberEncoder(object):
    """
    Numbers are encoded as `(name, value)`
    """
    def encodes(self, value):
        "True if this encoder handles the value"
        return isinstance(value, numbers.Number) and\
            not isinstance(value, (bool, np.bool_))

    def encode(self, feature):
        "[NameNumber]"
        return [NameNumber(feature.name, float(feature.value))]


class StringEncoder(object):
    """
    Strings are one-hot encoded as `(name=value, 1)`
    """
    def encodes(self, value):
        "True if this encoder handles the value"
        return isinstance(value, str)

    def encode(self, feature):
        "[NameNumber]"
        value = _WHITESPACE.sub('_', feature.value)
        return [NameNumber(u'{0}={1}'.format(feature.name, value), 1.0)]


# ---------------------------------------------------------------------
# feature encoders
# ---------------------------------------------------------------------

def _alias(idx):
    "short alias for the idx-th name"
    return np.base_repr(idx, 36).lower()


class NameNumberFeaturesEncoder(object):
    """
    Encodes lists of features as lists of `NameNumber`.

    Each feature is routed to the first of the registered
    per-type encoders that accepts its value.

    Parameters
    ----------
    compress: boolean, optional
        If True, replace each distinct name by a short alias, assigned
        the first time the name is seen
    sort_name_lookup: boolean, optional
        If True, save the name table sorted by name, and load it back
        as a binary search table. This has no effect on which alias
        a name gets
    unknown_policy: one of UNKNOWN_POLICIES
        Treatment of names unseen in training, once frozen
    """
    def __init__(self, compress=False, sort_name_lookup=False,
                 unknown_policy='drop'):
        if unknown_policy not in UNKNOWN_POLICIES:
            raise ValueError('unknown_policy must be one of ' +
                             str(sorted(UNKNOWN_POLICIES)))
        self.compress = compress
        self.sort_name_lookup = sort_name_lookup
        self.unknown_policy = unknown_policy
        self.encoders = []
        self.frozen = False
        # name -> alias (the name itself if we do not compress)
        self.names_ = {}
        if unknown_policy == 'unknown':
            self._allocate(UNKNOWN_NAME)

    @classmethod
    def default(cls, **kwargs):
        """
        An encoder with the usual boolean, number and string
        encoders
        """
        enc = cls(**kwargs)
        enc.add_encoder(BooleanEncoder())
        enc.add_encoder(NumberEncoder())
        enc.add_encoder(StringEncoder())
        return enc

    def add_encoder(self, encoder):
        "register a per-type encoder, tried after the existing ones"
        self.encoders.append(encoder)

    def _allocate(self, name):
        "assign an alias to a new name"
        alias = _alias(len(self.names_)) if self.compress else name
        self.names_[name] = alias
        return alias

    def _lookup(self, name):
        """
        alias for the name, allocating it if we are still
        training; None if the name should be dropped
        """
        alias = self.names_.get(name)
        if alias is not None:
            return alias
        elif not self.frozen:
            return self._allocate(name)
        elif self.unknown_policy == 'unknown':
            return self.names_[UNKNOWN_NAME]
        else:
            return None

    def _route(self, feature):
        "per-type encoding of a single feature"
        for encoder in self.encoders:
            if encoder.encodes(feature.value):
                return encoder.encode(feature)
        raise UnsupportedFeatureType(feature)

    def encode(self, features):
        """
        Encode a feature vector as a list of NameNumber.

        Names are looked up in (or, before freezing, added to) the
        name table; the order of the features is preserved
        """
        encoded = []
        for feature in features:
            for name, number in self._route(feature):
                alias = self._lookup(_WHITESPACE.sub('_', name))
                if alias is not None:
                    encoded.append(NameNumber(alias, number))
        return encoded

    def unknown_key(self):
        "alias of the unknown bucket"
        return self.names_[UNKNOWN_NAME]

    def forget(self, aliases):
        """
        Remove the names with the given aliases from the table, so
        that they are treated as unseen once frozen. The unknown name
        is never forgotten
        """
        self.names_ = dict((name, alias) for name, alias in self.names_.items()
                           if name == UNKNOWN_NAME or alias not in aliases)

    def freeze(self):
        "stop allocating new names"
        self.frozen = True

    def save(self, dirname):
        "write the name table to dirname"
        dump_lookup(self.names_, os.path.join(dirname, NAMES_FILE),
                    sort=self.sort_name_lookup)

    @classmethod
    def load(cls, dirname, compress=False, sort_name_lookup=False,
             unknown_policy='drop'):
        """
        Read a frozen encoder back from dirname (with the default
        per-type encoders)
        """
        enc = cls.default(compress=compress,
                          sort_name_lookup=sort_name_lookup,
                          unknown_policy=unknown_policy)
        enc.names_ = load_lookup(os.path.join(dirname, NAMES_FILE),
                                 sort=sort_name_lookup)
        enc.freeze()
        return enc


class SparseFeaturesEncoder(object):
    """
    Encodes lists of features as sparse vectors, ie. lists of
    `(index, value)` sorted by index.

    Symbols come out of a `NameNumberFeaturesEncoder`, and are mapped
    to column indices in the order they are first seen. Repeated
    symbols within one instance have their values summed.
    """
    def __init__(self, name_encoder):
        self.name_encoder = name_encoder
        # every time a new value is encountered, add it to the vocabulary
        vocabulary = defaultdict()
        vocabulary.default_factory = vocabulary.__len__
        for alias in name_encoder.names_.values():
            vocabulary[alias]
        self.vocabulary_ = vocabulary

    @property
    def frozen(self):
        "True once no new indices can be allocated"
        return self.name_encoder.frozen

    @property
    def n_features(self):
        "number of columns"
        return len(self.vocabulary_)

    def encode(self, features):
        "[(int, float)]"
        row = defaultdict(float)
        for alias, number in self.name_encoder.encode(features):
            try:
                row[self.vocabulary_[alias]] += number
            except KeyError:
                # ignore unknown features if fixed vocab
                continue
        return sorted(row.items())

    def unknown_key(self):
        "column of the unknown bucket"
        return self.vocabulary_[self.name_encoder.unknown_key()]

    def forget(self, columns):
        """
        Forget the names behind the given columns. The columns stay
        allocated (their weights will just be zero)
        """
        self.name_encoder.forget(set(alias for alias, col
                                     in self.vocabulary_.items()
                                     if col in columns))

    def freeze(self):
        "stop allocating new names and indices"
        self.name_encoder.freeze()
        self.vocabulary_ = dict(self.vocabulary_)

    def save(self, dirname):
        "write the name table and vocabulary to dirname"
        self.name_encoder.save(dirname)
        dump_vocabulary(self.vocabulary_,
                        os.path.join(dirname, VOCABULARY_FILE))

    @classmethod
    def load(cls, dirname, **kwargs):
        "read a frozen encoder back from dirname"
        name_encoder = NameNumberFeaturesEncoder.load(dirname, **kwargs)
        enc = cls(name_encoder)
        enc.vocabulary_ = load_vocabulary(os.path.join(dirname,
                                                       VOCABULARY_FILE))
        return enc


def fold_rare_features(encoder, rows, cutoff=1):
    """
    Make the unknown bucket of an encoder learnable.

    Features occurring in at most `cutoff` of the encoded `rows`
    are replaced, in place, by the encoder's unknown feature (with
    their values summed, as duplicates are at inference time), and
    the encoder forgets their names. Rows are lists of `(key, value)`
    pairs as returned by the encoder's `encode`.

    Returns the number of distinct features folded
    """
    counts = Counter()
    for row in rows:
        counts.update(set(key for key, _ in row))
    unknown = encoder.unknown_key()
    rare = set(key for key, count in counts.items()
               if count <= cutoff and key != unknown)
    if not rare:
        return 0
    for row in rows:
        kept = [x for x in row if x[0] not in rare]
        if len(kept) == len(row):
            continue
        total = sum(value for key, value in row if key in rare)
        row[:] = sorted(kept + [NameNumber(unknown, total)])
    encoder.forget(rare)
    return len(rare)


# ---------------------------------------------------------------------
# outcome encoders
# ---------------------------------------------------------------------

class OutcomeEncoder(object):
    """
    Bijection between outcomes and a backend's native labels.

    Outcomes are strings; they are added to the label table the first
    time they are encoded, unless the encoder is frozen, in which case
    unseen outcomes are an error.
    """
    def __init__(self):
        self.classes_ = []
        self._index = {}
        self.frozen = False

    def _class_index(self, outcome):
        "index of outcome in classes_, allocating it if allowed"
        idx = self._index.get(outcome)
        if idx is None:
            if self.frozen:
                raise UnknownOutcome(outcome)
            idx = len(self.classes_)
            self._index[outcome] = idx
            self.classes_.append(outcome)
        return idx

    def encode(self, outcome):
        "native label for the outcome"
        raise NotImplementedError

    def decode(self, label):
        "outcome for the native label"
        raise NotImplementedError

    def encode_sequence(self, outcomes):
        "element-wise encode"
        return [self.encode(x) for x in outcomes]

    def decode_sequence(self, labels):
        "element-wise decode"
        return [self.decode(x) for x in labels]

    def freeze(self):
        "stop accepting new outcomes"
        self.frozen = True

    def save(self, dirname):
        "write the label table to dirname"
        table = dict((lbl, str(idx)) for idx, lbl in enumerate(self.classes_))
        dump_lookup(table, os.path.join(dirname, OUTCOMES_FILE))

    @classmethod
    def load(cls, dirname):
        "read a frozen encoder back from dirname"
        table = load_lookup(os.path.join(dirname, OUTCOMES_FILE))
        enc = cls()
        for lbl, _ in sorted(table.items(), key=lambda x: int(x[1])):
            enc._class_index(lbl)
        enc.freeze()
        return enc


class StringOutcomeEncoder(OutcomeEncoder):
    """
    Outcomes are their own native labels
    """
    def encode(self, outcome):
        self._class_index(outcome)
        return outcome

    def decode(self, label):
        if label not in self._index:
            raise UnknownOutcome(label)
        return label


class IntegerOutcomeEncoder(OutcomeEncoder):
    """
    Outcomes are encoded as their index in the label table
    """
    def encode(self, outcome):
        return self._class_index(outcome)

    def decode(self, label):
        try:
            idx = int(label)
        except (TypeError, ValueError):
            raise UnknownOutcome(label)
        if idx < 0 or idx >= len(self.classes_) or idx != label:
            raise UnknownOutcome(label)
        return self.classes_[idx]
