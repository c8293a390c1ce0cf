"""
Classifiers: load a model and use it to classify feature vectors.

A classifier wraps the frozen encoders and the parameters of one
model. It never modifies them, so a single classifier may be shared
between threads.
"""

# License: BSD3

import os

import numpy as np
from scipy.special import log_softmax

from .encoders import (NameNumberFeaturesEncoder, SparseFeaturesEncoder,
                       IntegerOutcomeEncoder, StringOutcomeEncoder,
                       NAMES_FILE, OUTCOMES_FILE, VOCABULARY_FILE)
from .errors import CorruptModelError
from .model import PARAMETERS_FILE, open_model
from .viterbi import viterbi
from .vocabulary_format import load_vocabulary


class Classifier(object):
    """Base class for linear classifiers.

    Subclasses set `BACKEND`, `PARAMETERS` (the arrays they expect to
    find in the parameters file), and implement `vectorize`, which
    turns a feature vector into `(column, value)` pairs.
    """
    BACKEND = None
    PARAMETERS = ['coef', 'intercept']
    REQUIRED_FILES = [NAMES_FILE, OUTCOMES_FILE, PARAMETERS_FILE]

    def __init__(self, features_encoder, outcome_encoder, params):
        self.features_encoder = features_encoder
        self.outcome_encoder = outcome_encoder
        self.coef = params['coef']
        self.intercept = params['intercept']
        n_classes = len(outcome_encoder.classes_)
        if self.coef.shape[0] != n_classes or\
                self.intercept.shape != (n_classes,):
            raise CorruptModelError(
                'parameters do not match {0} outcomes'.format(n_classes))

    # -----------------------------------------------------------------
    # loading
    # -----------------------------------------------------------------

    @staticmethod
    def _encoder_options(manifest):
        "keyword arguments for the feature name encoder"
        return {'compress': manifest.get('compress', False),
                'sort_name_lookup': manifest.get('sort_name_lookup', False),
                'unknown_policy': manifest.get('unknown_policy', 'drop')}

    @classmethod
    def _load_params(cls, dirname):
        "read the parameter arrays"
        with np.load(os.path.join(dirname, PARAMETERS_FILE)) as npz:
            missing = [p for p in cls.PARAMETERS if p not in npz.files]
            if missing:
                raise CorruptModelError('missing parameters: ' +
                                        ', '.join(missing))
            params = dict((p, npz[p]) for p in cls.PARAMETERS)
        for arr in params.values():
            arr.setflags(write=False)
        return params

    @classmethod
    def from_model(cls, dirname, manifest):
        "build a classifier out of an unpacked model"
        raise NotImplementedError

    # -----------------------------------------------------------------
    # classifying
    # -----------------------------------------------------------------

    def vectorize(self, features):
        "[(int, float)]"
        raise NotImplementedError

    def decision_function(self, features):
        """
        Score of each outcome (in the order of the outcome encoder's
        `classes_`)
        """
        row = self.vectorize(features)
        scores = self.intercept.copy()
        if row:
            cols = np.array([c for c, _ in row], dtype=int)
            vals = np.array([v for _, v in row])
            scores += self.coef[:, cols].dot(vals)
        return scores

    def score(self, features):
        "dictionary from outcome to score"
        scores = self.decision_function(features)
        return dict(zip(self.outcome_encoder.classes_, scores.tolist()))

    def classify(self, features):
        "best outcome for the feature vector"
        best = int(np.argmax(self.decision_function(features)))
        return self._decode(best)

    def _decode(self, idx):
        "outcome for the idx-th class"
        raise NotImplementedError


class MaxentClassifier(Classifier):
    """
    Classifier for models built by `MaxentDataWriter`
    """
    BACKEND = 'maxent'
    REQUIRED_FILES = Classifier.REQUIRED_FILES + [VOCABULARY_FILE]

    def __init__(self, features_encoder, outcome_encoder, params, vocabulary):
        super(MaxentClassifier, self).__init__(features_encoder,
                                               outcome_encoder, params)
        self.vocabulary = vocabulary

    @classmethod
    def from_model(cls, dirname, manifest):
        fenc = NameNumberFeaturesEncoder.load(dirname,
                                              **cls._encoder_options(manifest))
        oenc = StringOutcomeEncoder.load(dirname)
        vocab = load_vocabulary(os.path.join(dirname, VOCABULARY_FILE))
        return cls(fenc, oenc, cls._load_params(dirname), vocab)

    def vectorize(self, features):
        row = {}
        for name, number in self.features_encoder.encode(features):
            col = self.vocabulary.get(name)
            if col is None:
                # names unseen by the trainer have no weight
                continue
            row[col] = row.get(col, 0.0) + number
        return sorted(row.items())

    def _decode(self, idx):
        return self.outcome_encoder.decode(self.outcome_encoder.classes_[idx])


class LiblinearClassifier(Classifier):
    """
    Classifier for models built by `LiblinearDataWriter`
    """
    BACKEND = 'liblinear'
    REQUIRED_FILES = Classifier.REQUIRED_FILES + [VOCABULARY_FILE]

    @classmethod
    def _load_encoders(cls, dirname, manifest):
        "(features encoder, outcome encoder)"
        fenc = SparseFeaturesEncoder.load(dirname,
                                          **cls._encoder_options(manifest))
        oenc = IntegerOutcomeEncoder.load(dirname)
        return fenc, oenc

    @classmethod
    def from_model(cls, dirname, manifest):
        fenc, oenc = cls._load_encoders(dirname, manifest)
        return cls(fenc, oenc, cls._load_params(dirname))

    def vectorize(self, features):
        n_cols = self.coef.shape[1]
        return [(c, v) for c, v in self.features_encoder.encode(features)
                if c < n_cols]

    def _decode(self, idx):
        return self.outcome_encoder.decode(idx)


class ViterbiClassifier(LiblinearClassifier):
    """
    Sequence classifier for models built by `ViterbiDataWriter`.

    `classify` makes an independent decision for one item;
    `classify_sequence` finds the best sequence of outcomes for a
    whole sequence of items.
    """
    BACKEND = 'viterbi'
    PARAMETERS = Classifier.PARAMETERS + ['start', 'transitions']

    def __init__(self, features_encoder, outcome_encoder, params):
        super(ViterbiClassifier, self).__init__(features_encoder,
                                                outcome_encoder, params)
        self.start = params['start']
        self.transitions = params['transitions']
        n_classes = len(outcome_encoder.classes_)
        if self.start.shape != (n_classes,) or\
                self.transitions.shape != (n_classes, n_classes):
            raise CorruptModelError(
                'transitions do not match {0} outcomes'.format(n_classes))

    def emissions(self, sequence):
        """
        Log-probability of each outcome for each item of the sequence,
        shape=[n_items, n_classes]
        """
        if not sequence:
            return np.zeros((0, len(self.outcome_encoder.classes_)))
        scores = np.array([self.decision_function(x) for x in sequence])
        return log_softmax(scores, axis=1)

    def classify_sequence(self, sequence):
        """
        Jointly best outcomes for a sequence of feature vectors
        """
        path, _ = viterbi(self.emissions(sequence), self.transitions,
                          start=self.start)
        return self.outcome_encoder.decode_sequence(path)


CLASSIFIERS = dict((cls.BACKEND, cls) for cls in
                   [MaxentClassifier, LiblinearClassifier, ViterbiClassifier])


def load_classifier(path):
    """
    Load the model at `path` (the model file, or the output directory
    of the data writer that built it)

    :raises MissingArtifactError: if there is no model there
    :raises CorruptModelError: if the model is unreadable
    """
    with open_model(path) as (manifest, dirname):
        backend = manifest.get('backend')
        try:
            cls = CLASSIFIERS[backend]
        except KeyError:
            raise CorruptModelError('{0}: unknown backend {1!r}'.format(
                path, backend))
        missing = [f for f in cls.REQUIRED_FILES
                   if not os.path.exists(os.path.join(dirname, f))]
        if missing:
            raise CorruptModelError('{0}: missing {1}'.format(
                path, ', '.join(missing)))
        try:
            return cls.from_model(dirname, manifest)
        except (ValueError, KeyError, OSError) as err:
            raise CorruptModelError('{0}: {1}'.format(path, err))
