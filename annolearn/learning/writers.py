"""
Data writers: collect training instances and build models.

All data writers follow the same protocol. While open, `write` encodes
each instance and buffers it. `close` then

1. flushes the buffered instances to a training data file in the
   output directory, in the backend's syntax
2. freezes and saves the feature and outcome encoders
3. runs the backend trainer over the training data file
4. packages encoders and parameters into `model.zip` (see
   `annolearn.learning.model`)

Backends differ only in the syntax of the training data file and in
how the trainer is invoked. The trainers are scikit-learn estimators;
we only keep their parameters, as a matrix of per-outcome weights
plus a vector of biases (and, for sequences, label transition scores).
"""

# License: BSD3

import codecs
import os
import re
import shutil
import sys
import tempfile
import warnings

import numpy as np
from sklearn.datasets import load_svmlight_file
from sklearn.feature_extraction import DictVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.svm import LinearSVC

from .encoders import (NameNumberFeaturesEncoder, SparseFeaturesEncoder,
                       IntegerOutcomeEncoder, StringOutcomeEncoder,
                       VOCABULARY_FILE, fold_rare_features)
from .features import Instance
from .errors import (LearningError, TrainingBackendFailure,
                     WriterClosedError)
from .model import PARAMETERS_FILE, model_path, package_model
from .svmlight_format import dump_svmlight_file
from .vocabulary_format import dump_vocabulary


DEFAULT_C = 1.0
DEFAULT_MAX_ITER = 1000
DEFAULT_UNKNOWN_CUTOFF = 1

# outcomes are tab-separated fields of one line in the maxent data file
_LINE_BREAKERS = re.compile(r'[\t\r\n]')


# ---------------------------------------------------------------------
# training helpers
# ---------------------------------------------------------------------

def fit_linear(estimator, X, y, n_classes):
    """Fit a linear estimator and return its weights in a
    backend-independent shape.

    Parameters
    ----------
    estimator: sklearn linear classifier
    X: sparse matrix, shape=[n_samples, n_features]
    y: array of int, shape=[n_samples]
        Outcome indices, in `0..n_classes`

    Returns
    -------
    coef: array of float, shape=[n_classes, n_features]
        Row `k` holds the weights of outcome `k`
    intercept: array of float, shape=[n_classes]
        Outcomes absent from y get -inf
    """
    y = np.asarray(y, dtype=int)
    coef = np.zeros((n_classes, X.shape[1]))
    intercept = np.full(n_classes, -np.inf)
    present = np.unique(y)
    if len(present) == 0:
        raise ValueError('no training instances')
    elif len(present) == 1:
        # nothing to learn; scikit-learn refuses to fit a single class
        warnings.warn('only one outcome in training data: {0}'.format(
            present[0]))
        intercept[present[0]] = 0.0
        return coef, intercept

    estimator.fit(X, y)
    classes = estimator.classes_.astype(int)
    est_coef = np.asarray(estimator.coef_)
    est_intercept = np.atleast_1d(estimator.intercept_)
    if est_coef.shape[0] == 1:
        # binary problem: a single row scores the second class
        # against the first one
        coef[classes[1]] = est_coef[0]
        intercept[classes[0]] = 0.0
        intercept[classes[1]] = est_intercept[0]
    else:
        coef[classes] = est_coef
        intercept[classes] = est_intercept
    return coef, intercept


def label_transitions(label_seqs, n_classes):
    """Log-probabilities of start labels and label bigrams, with
    add-one smoothing.

    Returns
    -------
    start: array of float, shape=[n_classes]
    transitions: array of float, shape=[n_classes, n_classes]
    """
    start = np.ones(n_classes)
    trans = np.ones((n_classes, n_classes))
    for seq in label_seqs:
        if len(seq) == 0:
            continue
        start[seq[0]] += 1
        for prev, cur in zip(seq[:-1], seq[1:]):
            trans[prev, cur] += 1
    start = np.log(start / start.sum())
    trans = np.log(trans / trans.sum(axis=1, keepdims=True))
    return start, trans


def _split_by_qid(y, qid):
    """Group consecutive labels that share a query id"""
    seqs = []
    last = None
    for yi, qi in zip(y, qid):
        if not seqs or qi != last:
            seqs.append([])
            last = qi
        seqs[-1].append(int(yi))
    return seqs


# ---------------------------------------------------------------------
# writers
# ---------------------------------------------------------------------

class DataWriter(object):
    """Base class for data writers.

    Subclasses set `BACKEND` and `DATA_FILE`, build their encoders in
    `_make_encoders`, and implement `encode`, `flush` and `train`.

    Parameters
    ----------
    output_dir: string
        Where the training data and the model are written
    compress: boolean, optional
        Replace feature names by short aliases
    sort_name_lookup: boolean, optional
        Save the name table sorted by name
    unknown_policy: string, optional
        See `annolearn.learning.encoders.UNKNOWN_POLICIES`; defaults to
        the backend's `UNKNOWN_POLICY`
    unknown_cutoff: int, optional
        With the `unknown` policy, names seen in at most this many
        training items are folded into the unknown bucket, so that
        the bucket gets a weight of its own
    verbose: int, optional
        0 for silence; passed on to the trainer
    train_options:
        Backend specific trainer options
    """
    BACKEND = None
    DATA_FILE = 'training-data'
    UNKNOWN_POLICY = 'drop'

    def __init__(self, output_dir, compress=False, sort_name_lookup=False,
                 unknown_policy=None,
                 unknown_cutoff=DEFAULT_UNKNOWN_CUTOFF, verbose=0,
                 **train_options):
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)
        self.output_dir = output_dir
        self.compress = compress
        self.sort_name_lookup = sort_name_lookup
        self.unknown_policy = unknown_policy or self.UNKNOWN_POLICY
        self.unknown_cutoff = unknown_cutoff
        self.verbose = verbose
        self.train_options = train_options
        self.closed = False
        self._buffer = []
        self.features_encoder, self.outcome_encoder = self._make_encoders()

    @property
    def data_file(self):
        "path to the training data file"
        return os.path.join(self.output_dir, self.DATA_FILE)

    @property
    def model_file(self):
        "path the model is written to on close"
        return model_path(self.output_dir)

    def _name_encoder(self):
        "a fresh feature name encoder with our options"
        return NameNumberFeaturesEncoder.default(
            compress=self.compress,
            sort_name_lookup=self.sort_name_lookup,
            unknown_policy=self.unknown_policy)

    def _make_encoders(self):
        "(features encoder, outcome encoder)"
        raise NotImplementedError

    def _check_open(self):
        "raise if closed"
        if self.closed:
            raise WriterClosedError('data writer for {0} is closed'.format(
                self.output_dir))

    def write(self, instance):
        """
        Encode and buffer an instance
        """
        self._check_open()
        self._buffer.append(self.encode(instance))

    def encode(self, instance):
        "encoded form of an instance, as it will be flushed"
        raise NotImplementedError

    def feature_rows(self, encoded_instances):
        "the encoded feature rows of the instances, one per item"
        return [feats for _, feats in encoded_instances]

    def fold_rare_names(self):
        """
        With the `unknown` policy, fold rare names of the buffered
        instances into the unknown bucket (see `fold_rare_features`)
        """
        if self.unknown_policy != 'unknown':
            return 0
        n_folded = fold_rare_features(self.features_encoder,
                                      self.feature_rows(self._buffer),
                                      cutoff=self.unknown_cutoff)
        if self.verbose:
            print('{0} rare feature names folded into the unknown '
                  'bucket'.format(n_folded), file=sys.stderr)
        return n_folded

    def flush(self, encoded_instances, data_file):
        "write encoded instances to the data file"
        raise NotImplementedError

    def train(self, data_file, staging_dir):
        """
        Run the trainer; save any extra tables to `staging_dir` and
        return a dictionary of parameter arrays
        """
        raise NotImplementedError

    def manifest(self):
        "description of the model for its loader"
        return {'backend': self.BACKEND,
                'compress': self.compress,
                'sort_name_lookup': self.sort_name_lookup,
                'unknown_policy': self.unknown_policy,
                'unknown_cutoff': self.unknown_cutoff}

    def close(self):
        """
        Flush the data, train and package the model.

        Returns the path to the model file. Whether or not this
        succeeds, the writer is closed afterwards.
        """
        self._check_open()
        self.closed = True
        dest = self.model_file
        if os.path.exists(dest):
            # stale model from an earlier run
            os.remove(dest)
        staging_dir = tempfile.mkdtemp(prefix='.staging-',
                                       dir=self.output_dir)
        try:
            self.fold_rare_names()
            self.features_encoder.freeze()
            self.outcome_encoder.freeze()
            if self.verbose:
                print('writing {0} instances to {1}'.format(
                    len(self._buffer), self.data_file), file=sys.stderr)
            self.flush(self._buffer, self.data_file)
            self._buffer = []
            self.features_encoder.save(staging_dir)
            self.outcome_encoder.save(staging_dir)
            params = self.train(self.data_file, staging_dir)
            np.savez(os.path.join(staging_dir, PARAMETERS_FILE), **params)
            package_model(staging_dir, self.manifest(), dest)
        except LearningError:
            raise
        except Exception as err:
            raise TrainingBackendFailure(
                '{0} training failed in {1}: {2}'.format(
                    self.BACKEND, self.output_dir, err)) from err
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)
        if self.verbose:
            print('model written to {0}'.format(dest), file=sys.stderr)
        return dest


class MaxentDataWriter(DataWriter):
    """
    Maximum entropy (logistic regression) backend reading symbolic
    data: one instance per line, the outcome then `name:value` pairs,
    tab-separated.

    Trainer options: `C`, `max_iter`
    """
    BACKEND = 'maxent'
    DATA_FILE = 'training-data.maxent'
    UNKNOWN_POLICY = 'unknown'

    def _make_encoders(self):
        return self._name_encoder(), StringOutcomeEncoder()

    def encode(self, instance):
        if _LINE_BREAKERS.search(instance.outcome):
            raise ValueError('outcome {0!r} contains a tab or line '
                             'break'.format(instance.outcome))
        return (self.outcome_encoder.encode(instance.outcome),
                self.features_encoder.encode(instance.features))

    def flush(self, encoded_instances, data_file):
        with codecs.open(data_file, 'w', 'utf-8') as stream:
            for outcome, feats in encoded_instances:
                parts = [outcome]
                parts.extend(u'{0}:{1!r}'.format(name, number)
                             for name, number in feats)
                stream.write(u'\t'.join(parts) + u'\n')

    @staticmethod
    def read_data(data_file):
        """
        Read a data file back as a list of outcomes and a list
        of feature dictionaries
        """
        outcomes = []
        rows = []
        with codecs.open(data_file, 'r', 'utf-8') as stream:
            for line in stream.read().splitlines():
                fields = line.split(u'\t')
                row = {}
                for field in fields[1:]:
                    name, number = field.rsplit(u':', 1)
                    row[name] = row.get(name, 0.0) + float(number)
                outcomes.append(fields[0])
                rows.append(row)
        return outcomes, rows

    def train(self, data_file, staging_dir):
        outcomes, rows = self.read_data(data_file)
        classes = self.outcome_encoder.classes_
        index = dict((lbl, i) for i, lbl in enumerate(classes))
        y = [index[lbl] for lbl in outcomes]
        vzer = DictVectorizer()
        X = vzer.fit_transform(rows)
        dump_vocabulary(vzer.vocabulary_,
                        os.path.join(staging_dir, VOCABULARY_FILE))
        estimator = LogisticRegression(
            C=self.train_options.get('C', DEFAULT_C),
            max_iter=self.train_options.get('max_iter', DEFAULT_MAX_ITER),
            verbose=self.verbose)
        coef, intercept = fit_linear(estimator, X, y, len(classes))
        return {'coef': coef, 'intercept': intercept}


class LiblinearDataWriter(DataWriter):
    """
    Linear SVM backend reading indexed data in svmlight format.

    Trainer options: `C`, `max_iter`
    """
    BACKEND = 'liblinear'
    DATA_FILE = 'training-data.liblinear'

    def _make_encoders(self):
        return (SparseFeaturesEncoder(self._name_encoder()),
                IntegerOutcomeEncoder())

    def encode(self, instance):
        return (self.outcome_encoder.encode(instance.outcome),
                self.features_encoder.encode(instance.features))

    def flush(self, encoded_instances, data_file):
        dump_svmlight_file((x for _, x in encoded_instances),
                           (y for y, _ in encoded_instances),
                           data_file)

    def _estimator(self):
        "untrained scikit-learn estimator"
        return LinearSVC(C=self.train_options.get('C', DEFAULT_C),
                         max_iter=self.train_options.get('max_iter',
                                                         DEFAULT_MAX_ITER),
                         verbose=self.verbose)

    def train(self, data_file, staging_dir):
        X, y = load_svmlight_file(data_file,
                                  n_features=self.features_encoder.n_features,
                                  zero_based=False)
        n_classes = len(self.outcome_encoder.classes_)
        coef, intercept = fit_linear(self._estimator(), X, y, n_classes)
        return {'coef': coef, 'intercept': intercept}


class ViterbiDataWriter(LiblinearDataWriter):
    """
    Sequence backend: per-item scores come from a logistic regression
    over the item features, label sequences from label bigram
    statistics; the classifier decodes the best joint sequence.

    Each instance written is a whole sequence (see
    `annolearn.learning.features.Instance.sequence`); sequences are
    stored in svmlight format, with one `qid` per sequence.

    Trainer options: `C`, `max_iter`
    """
    BACKEND = 'viterbi'
    DATA_FILE = 'training-data.viterbi'

    def encode(self, instance):
        if len(instance.outcome) != len(instance.features):
            raise ValueError('sequence of {0} outcomes for {1} items'.format(
                len(instance.outcome), len(instance.features)))
        return (self.outcome_encoder.encode_sequence(instance.outcome),
                [self.features_encoder.encode(x) for x in instance.features])

    def write_sequence(self, instances):
        "write per-item instances as one sequence"
        self.write(Instance.sequence(instances))

    def feature_rows(self, encoded_instances):
        return [x for _, xs in encoded_instances for x in xs]

    def flush(self, encoded_instances, data_file):
        X_gen = (x for _, xs in encoded_instances for x in xs)
        y_gen = (y for ys, _ in encoded_instances for y in ys)
        qids = (i for i, (ys, _) in enumerate(encoded_instances, start=1)
                for _ in ys)
        dump_svmlight_file(X_gen, y_gen, data_file, query_id=qids)

    def _estimator(self):
        return LogisticRegression(
            C=self.train_options.get('C', DEFAULT_C),
            max_iter=self.train_options.get('max_iter', DEFAULT_MAX_ITER),
            verbose=self.verbose)

    def train(self, data_file, staging_dir):
        X, y, qid = load_svmlight_file(
            data_file,
            n_features=self.features_encoder.n_features,
            zero_based=False,
            query_id=True)
        n_classes = len(self.outcome_encoder.classes_)
        coef, intercept = fit_linear(self._estimator(), X, y, n_classes)
        start, transitions = label_transitions(_split_by_qid(y, qid),
                                               n_classes)
        return {'coef': coef, 'intercept': intercept,
                'start': start, 'transitions': transitions}


WRITERS = dict((cls.BACKEND, cls) for cls in
               [MaxentDataWriter, LiblinearDataWriter, ViterbiDataWriter])


def make_data_writer(backend, output_dir, **kwargs):
    """
    Data writer for the named backend (see `WRITERS`)
    """
    try:
        cls = WRITERS[backend]
    except KeyError:
        raise ValueError('unknown backend {0!r} (expected one of {1})'.format(
            backend, ', '.join(sorted(WRITERS))))
    return cls(output_dir, **kwargs)
