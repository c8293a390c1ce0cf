"""This module implements loaders and dumpers for vocabularies and
lookup tables.

Both are tab-separated UTF-8 files with one entry per line. A
vocabulary maps feature names to integer indices (written one-based,
as in the svmlight format); a lookup table maps names to arbitrary
strings (eg. compressed aliases, or outcome labels).
"""

# License: BSD3

import bisect
import codecs


def _dump_vocabulary(vocabulary, f):
    """Actually do dump"""
    line_pattern = u'{fn}\t{fx}\n'
    # order features by idx
    for feat_name, feat_idx in sorted(vocabulary.items(),
                                      key=lambda x: x[1]):
        # feature ids in libsvm are one-based, so feat_idx + 1
        f.write(line_pattern.format(fn=feat_name,
                                    fx=str(feat_idx + 1)))


def dump_vocabulary(vocabulary, f):
    """Dump the vocabulary as a tab-separated file.
    """
    with codecs.open(f, 'w', 'utf-8') as f:
        _dump_vocabulary(vocabulary, f)


def _load_vocabulary(f):
    """Actually read the vocabulary"""
    vocabulary = {}
    for row in f.read().splitlines():
        name, idx_ = row.rsplit('\t', 1)
        vocabulary[name] = int(idx_) - 1
    return vocabulary


def load_vocabulary(f):
    """Read vocabulary file into a dictionary of feature name
    and index"""
    with codecs.open(f, 'r', 'utf-8') as f:
        return _load_vocabulary(f)


# ---------------------------------------------------------------------
# lookup tables
# ---------------------------------------------------------------------

class SortedLookup(object):
    """Read-only name to value table backed by two parallel sorted
    lists, searched by bisection.

    Offers the read-only subset of the dict interface that the
    encoders need.
    """
    def __init__(self, pairs):
        pairs = sorted(pairs)
        self._keys = [k for k, _ in pairs]
        self._values = [v for _, v in pairs]

    def _find(self, key):
        "index of key, or -1"
        idx = bisect.bisect_left(self._keys, key)
        if idx < len(self._keys) and self._keys[idx] == key:
            return idx
        return -1

    def __getitem__(self, key):
        idx = self._find(key)
        if idx < 0:
            raise KeyError(key)
        return self._values[idx]

    def __contains__(self, key):
        return self._find(key) >= 0

    def __len__(self):
        return len(self._keys)

    def __iter__(self):
        return iter(self._keys)

    def get(self, key, default=None):
        "value for key, or default"
        idx = self._find(key)
        return default if idx < 0 else self._values[idx]

    def items(self):
        "(key, value) pairs, sorted by key"
        return list(zip(self._keys, self._values))

    def values(self):
        "values, in key order"
        return list(self._values)


def _dump_lookup(table, f, sort=False):
    """Actually do dump"""
    line_pattern = u'{k}\t{v}\n'
    items = list(table.items())
    if sort:
        items = sorted(items)
    for key, val in items:
        f.write(line_pattern.format(k=key, v=val))


def dump_lookup(table, f, sort=False):
    """Dump a name to value table as a tab-separated file.

    Entries are written in the iteration order of `table`
    (insertion order for a dict), or sorted by name if `sort`
    """
    with codecs.open(f, 'w', 'utf-8') as f:
        _dump_lookup(table, f, sort=sort)


def _load_lookup(f, sort=False):
    """Actually read the table"""
    pairs = []
    for row in f.read().splitlines():
        if not row:
            continue
        key, val = row.rsplit('\t', 1)
        pairs.append((key, val))
    if sort:
        return SortedLookup(pairs)
    return dict(pairs)


def load_lookup(f, sort=False):
    """Read a name to value table.

    If `sort` is True the table is expected to have been dumped
    sorted, and is loaded as a `SortedLookup` (binary search)
    rather than a dict. Either way, the same names map to the
    same values.
    """
    with codecs.open(f, 'r', 'utf-8') as f:
        return _load_lookup(f, sort=sort)
