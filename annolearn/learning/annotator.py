"""
Annotators: the bridge between feature extraction and the learners.

An annotator runs in one of two modes. In training mode it holds a
data writer and feeds it instances built from gold annotations; in
inference mode it holds a classifier and turns its decisions into
annotation spans. The host pipeline decides which, and calls
`process` on each unit of text.
"""

# License: BSD3

from .chunking import outcomes_to_spans, spans_to_outcomes
from .features import Instance, extract_all, window_features


class Annotator(object):
    """
    Base class for annotators; give it exactly one of a data writer
    (training mode) or a classifier (inference mode)
    """
    def __init__(self, data_writer=None, classifier=None):
        if (data_writer is None) == (classifier is None):
            raise ValueError('need exactly one of a data writer or '
                             'a classifier')
        self.data_writer = data_writer
        self.classifier = classifier

    @property
    def is_training(self):
        "True if we are writing training data"
        return self.data_writer is not None

    def collection_process_complete(self):
        """
        Call once all documents are processed; in training mode this
        closes the data writer (which builds the model) and returns
        the path to the model
        """
        if self.is_training:
            return self.data_writer.close()
        return None


class SequenceChunker(Annotator):
    """
    Finds chunks (eg. named entity mentions) in sentences, learning
    one BIO outcome per token.

    Token features are the features returned by the extractors for
    the token itself, plus those of its neighbours in a window of
    `preceding` tokens before and `following` after.

    If the data writer has a `write_sequence` method (resp. the
    classifier a `classify_sequence` method) whole sentences are
    written (resp. classified) at once; otherwise each token is an
    independent instance.

    Parameters
    ----------
    extractors: list of functions `token -> [Feature]`
    """
    def __init__(self, extractors, preceding=2, following=2, **kwargs):
        super(SequenceChunker, self).__init__(**kwargs)
        self.extractors = extractors
        self.preceding = preceding
        self.following = following

    def _extract(self, token):
        "features of a single token"
        return extract_all(self.extractors, token)

    def token_features(self, tokens, idx):
        "feature vector for the idx-th token of a sentence"
        feats = self._extract(tokens[idx])
        feats.extend(window_features(tokens, idx, self._extract,
                                     preceding=self.preceding,
                                     following=self.following))
        return feats

    def process(self, tokens, gold_spans=None):
        """
        Process one sentence.

        Parameters
        ----------
        tokens: list of Span
            Tokens of the sentence (any Span subclass the extractors
            know how to read)
        gold_spans: list of AnnotationSpan
            Gold chunks; only used in training mode. Spans that do
            not cover any token of the sentence are ignored

        Returns
        -------
        spans: list of AnnotationSpan
            Predicted chunks (empty in training mode)
        """
        if not tokens:
            return []
        vectors = [self.token_features(tokens, i)
                   for i in range(len(tokens))]
        if self.is_training:
            outcomes = spans_to_outcomes(tokens, gold_spans or [])
            instances = [Instance(o, x) for o, x in zip(outcomes, vectors)]
            if hasattr(self.data_writer, 'write_sequence'):
                self.data_writer.write_sequence(instances)
            else:
                for instance in instances:
                    self.data_writer.write(instance)
            return []

        if hasattr(self.classifier, 'classify_sequence'):
            outcomes = self.classifier.classify_sequence(vectors)
        else:
            outcomes = [self.classifier.classify(x) for x in vectors]
        return outcomes_to_spans(tokens, outcomes)
