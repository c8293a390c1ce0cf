"""
Evaluation of sequence chunkers (eg. named entity recognizers).
"""

# License: BSD3

from collections import namedtuple

from ..learning.annotator import SequenceChunker
from ..learning.classifiers import load_classifier
from ..learning.writers import make_data_writer
from ..util import concat_l
from .harness import Evaluation


class ChunkedDocument(namedtuple('ChunkedDocument',
                                 'doc_id sentences spans')):
    """
    A document as a chunker sees it

    * doc_id: document identifier
    * sentences: list of list of tokens (tokens are Spans)
    * spans: gold AnnotationSpans
    """
    __slots__ = ()


class ChunkerEvaluation(Evaluation):
    """
    Train and test a `SequenceChunker` with the given feature
    extractors, on `ChunkedDocument`s

    Parameters
    ----------
    extractors: list of functions `token -> [Feature]`
    backend: string, optional
        Name of the learning backend (see
        `annolearn.learning.writers.WRITERS`)
    writer_options: dict, optional
        Extra options for the data writer (eg. `compress`, `C`); a
        `verbose` here overrides the one derived from ours
    """
    def __init__(self, base_dir, extractors, backend='viterbi',
                 preceding=2, following=2, writer_options=None,
                 **kwargs):
        super(ChunkerEvaluation, self).__init__(base_dir, **kwargs)
        self.extractors = extractors
        self.backend = backend
        self.preceding = preceding
        self.following = following
        self.writer_options = writer_options or {}

    def _chunker(self, **kwargs):
        "chunker with our feature settings"
        return SequenceChunker(self.extractors,
                               preceding=self.preceding,
                               following=self.following,
                               **kwargs)

    def train(self, documents, output_dir):
        options = dict({'verbose': max(self.verbose - 1, 0)},
                       **self.writer_options)
        writer = make_data_writer(self.backend, output_dir, **options)
        chunker = self._chunker(data_writer=writer)
        for doc in documents:
            for sentence in doc.sentences:
                chunker.process(sentence, doc.spans)
        return chunker.collection_process_complete()

    def predict(self, documents, model_dir):
        """
        Predicted spans for each document, as a dictionary from
        document identifier to list of AnnotationSpan
        """
        chunker = self._chunker(classifier=load_classifier(model_dir))
        return dict((doc.doc_id,
                     concat_l(chunker.process(s) for s in doc.sentences))
                    for doc in documents)

    def test(self, documents, model_dir):
        predicted = self.predict(documents, model_dir)
        stats = self.new_statistics()
        for doc in documents:
            stats.add(doc.spans, predicted[doc.doc_id])
        return stats
