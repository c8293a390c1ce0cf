"""This module implements a dumper for the svmlight format

See `sklearn.datasets.svmlight_format`; data dumped here is read back
with `sklearn.datasets.load_svmlight_file`.
"""

# License: BSD3

import codecs
import itertools


def _dump_svmlight(X_gen, y_gen, f, query_id=None):
    """Actually do dump"""
    # define string formatting patterns for values and lines
    value_pattern = u'{fid}:{fv}'

    if query_id is None:
        qids = itertools.repeat(None)
    else:
        qids = iter(query_id)

    for x, yi, qi in zip(X_gen, y_gen, qids):
        # sort features by their index
        x = sorted(x)
        # zero values need not be written in the svmlight format
        x = [(feat_id, feat_val) for feat_id, feat_val in x
             if feat_val != 0]
        # feature ids in libsvm are one-based, so feat_id + 1
        parts = [u'{0}'.format(yi)]
        if qi is not None:
            parts.append(u'qid:{0}'.format(qi))
        parts.extend(value_pattern.format(fid=feat_id + 1, fv=repr(feat_val))
                     for feat_id, feat_val in x)
        f.write(u' '.join(parts) + u'\n')


def dump_svmlight_file(X_gen, y_gen, f, comment=None, query_id=None):
    """Dump the dataset in svmlight file format.

    Parameters
    ----------
    X_gen: iterable of list of (int, float)
        Sparse feature vectors, with zero-based indices
    y_gen: iterable of int
        Class labels
    f: string
        Output file path
    comment: string, optional
        Written at the top of the file, as `#` lines
    query_id: iterable of int, optional
        Group (eg. sequence) identifier for each instance
    """
    with codecs.open(f, 'w', 'utf-8') as f:
        if comment:
            for line in comment.splitlines():
                f.write(u'# {0}\n'.format(line))
        _dump_svmlight(X_gen, y_gen, f, query_id=query_id)
