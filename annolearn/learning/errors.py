"""
Exceptions raised by the encoders, data writers and classifiers.

None of these are transient: they signal either malformed input
(an unroutable feature value, an outcome the model never saw),
misuse of a writer, or a broken model/backend. Nothing in annolearn
retries on them.
"""

# License: BSD3


class LearningError(Exception):
    """
    Base class for the errors of this package; the evaluation
    harness treats any of these as fatal to the current fold
    """
    pass


class UnsupportedFeatureType(LearningError, TypeError):
    """
    No feature encoder accepts the value of a feature.
    This is a programming (or configuration) error.
    """
    def __init__(self, feature):
        msg = "no encoder for feature {0!r} (value of type {1})".format(
            feature.name, type(feature.value).__name__)
        super(UnsupportedFeatureType, self).__init__(msg)
        self.feature = feature


class UnknownOutcome(LearningError, KeyError):
    """
    An outcome (or its native encoding) was not seen while the
    outcome encoder was being trained
    """
    def __init__(self, outcome):
        super(UnknownOutcome, self).__init__(outcome)
        self.outcome = outcome

    def __str__(self):
        return "unknown outcome: {0!r}".format(self.outcome)


class WriterClosedError(LearningError):
    """
    A data writer was used after it was closed
    """
    pass


class TrainingBackendFailure(LearningError):
    """
    Flushing the training data or running the backend trainer
    failed; no model was produced
    """
    pass


class ModelLoadError(LearningError):
    """
    A model artifact could not be loaded
    """
    pass


class MissingArtifactError(ModelLoadError):
    """
    There is no model artifact at the given path
    """
    pass


class CorruptModelError(ModelLoadError):
    """
    The model artifact exists but is unreadable, incomplete,
    or was written with an incompatible format version
    """
    pass
