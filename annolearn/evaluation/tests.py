# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=too-many-public-methods, invalid-name

"""
Tests for annolearn.evaluation
"""

import os
import shutil
import tempfile
import unittest
import warnings

from annolearn.annotation import AnnotationSpan, Span
from annolearn.evaluation.chunker import ChunkedDocument, ChunkerEvaluation
from annolearn.evaluation.folds import make_folds, train_test_splits
from annolearn.evaluation.harness import Evaluation
from annolearn.learning.chunking import outcomes_to_spans
from annolearn.learning.errors import TrainingBackendFailure
from annolearn.learning.features import Feature
from annolearn.learning.model import model_path


# ---------------------------------------------------------------------
# folds
# ---------------------------------------------------------------------

def test_round_robin_folds():
    "item i goes to fold i mod k"
    folds = make_folds(range(10), 3)
    assert folds == [[0, 3, 6, 9], [1, 4, 7], [2, 5, 8]]


def test_block_folds():
    "consecutive runs of near-equal size"
    folds = make_folds(range(10), 3, assignment='block')
    assert folds == [[0, 1, 2, 3], [4, 5, 6], [7, 8, 9]]


def test_bad_folds():
    "k out of range, unknown assignment"
    for k in (0, 1, 5):
        try:
            make_folds(range(4), k)
        except ValueError:
            pass
        else:
            assert False, 'expected a ValueError for k={0}'.format(k)
    try:
        make_folds(range(4), 2, assignment='random')
    except ValueError:
        pass
    else:
        assert False, 'expected a ValueError'


def test_train_test_splits():
    "four documents, two folds"
    docs = ['d1', 'd2', 'd3', 'd4']
    splits = list(train_test_splits(docs, 2))
    assert len(splits) == 2
    tested = []
    for _, train, test in splits:
        assert not set(train) & set(test)
        assert sorted(train + test) == docs
        tested.extend(test)
    assert sorted(tested) == docs


# ---------------------------------------------------------------------
# harness
# ---------------------------------------------------------------------

def _doc(doc_id, *triples):
    "document with no text, only gold spans"
    return ChunkedDocument(doc_id, [],
                           [AnnotationSpan.from_tuple(t) for t in triples])


DOCS = [_doc('d1', (0, 5, 'PER')),
        _doc('d2', (0, 3, 'ORG'), (4, 9, 'PER')),
        _doc('d3'),
        _doc('d4', (2, 6, 'LOC'))]


class EchoEvaluation(Evaluation):
    """
    Remembers what it was trained and tested on, and predicts the
    gold spans back, except for documents listed in `misses`
    """
    def __init__(self, base_dir, misses=(), **kwargs):
        super(EchoEvaluation, self).__init__(base_dir, **kwargs)
        self.misses = misses
        self.trained = {}
        self.tested = {}

    def train(self, documents, output_dir):
        self.trained[os.path.basename(output_dir)] =\
            [d.doc_id for d in documents]

    def test(self, documents, model_dir):
        self.tested[os.path.basename(model_dir)] =\
            [d.doc_id for d in documents]
        stats = self.new_statistics()
        for doc in documents:
            pred = [] if doc.doc_id in self.misses else doc.spans
            stats.add(doc.spans, pred)
        return stats


class FailingEvaluation(EchoEvaluation):
    "fails to train the second fold"
    def train(self, documents, output_dir):
        if os.path.basename(output_dir) == 'fold-1':
            raise TrainingBackendFailure('no luck')
        super(FailingEvaluation, self).train(documents, output_dir)


class HarnessTest(unittest.TestCase):
    "tests for the Evaluation base class"

    def test_two_folds(self):
        "one train/test cycle per fold, disjoint, covering everything"
        evaluation = EchoEvaluation('/nonexistent')
        result = evaluation.cross_validation(DOCS, 2)
        self.assertTrue(result.complete)
        self.assertEqual(2, result.n_folds)
        self.assertEqual(set(['fold-0', 'fold-1']), set(evaluation.trained))
        self.assertEqual(set(['fold-0', 'fold-1']), set(evaluation.tested))
        all_tested = []
        for name, tested in evaluation.tested.items():
            self.assertFalse(set(tested) & set(evaluation.trained[name]))
            all_tested.extend(tested)
        self.assertEqual(['d1', 'd2', 'd3', 'd4'], sorted(all_tested))
        total = result.total()
        self.assertEqual((4, 0, 0), total.counts())
        self.assertEqual(1.0, total.f1())

    def test_partial_credit(self):
        "fold statistics add up"
        evaluation = EchoEvaluation('/nonexistent', misses=['d2'])
        total = evaluation.cross_validation(DOCS, 4).total()
        self.assertEqual((2, 0, 2), total.counts())
        self.assertEqual(1.0, total.precision())
        self.assertEqual(0.5, total.recall())

    def test_parallel(self):
        "folds in parallel, same result"
        evaluation = EchoEvaluation('/nonexistent', misses=['d4'])
        seq = evaluation.cross_validation(DOCS, 4, assignment='block')
        par = evaluation.cross_validation(DOCS, 4, assignment='block',
                                          n_jobs=2)
        self.assertEqual(seq.total(), par.total())

    def test_failed_fold(self):
        "a fold that fails does not stop the others"
        evaluation = FailingEvaluation('/nonexistent')
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            result = evaluation.cross_validation(DOCS, 2)
        self.assertTrue(any('fold 1' in str(w.message) for w in caught))
        self.assertFalse(result.complete)
        self.assertEqual(2, result.n_folds)
        self.assertEqual([1], [f.fold for f in result.failures])
        self.assertIsInstance(result.failures[0].error,
                              TrainingBackendFailure)
        self.assertEqual([0], list(result.fold_stats))
        report = result.report()
        self.assertTrue(report.startswith('INCOMPLETE'))
        self.assertIn('micro avg', report)

    def test_holdout(self):
        "train and test once; with no test documents, just train"
        evaluation = EchoEvaluation('/nonexistent')
        stats = evaluation.train_and_test(DOCS[:3], DOCS[3:])
        self.assertEqual(['d1', 'd2', 'd3'], evaluation.trained['holdout'])
        self.assertEqual(['d4'], evaluation.tested['holdout'])
        self.assertEqual((1, 0, 0), stats.counts())
        stats = evaluation.train_and_test(DOCS, [], name='final')
        self.assertEqual(4, len(evaluation.trained['final']))
        self.assertNotIn('final', evaluation.tested)
        self.assertEqual((0, 0, 0), stats.counts())


# ---------------------------------------------------------------------
# chunker
# ---------------------------------------------------------------------

class Token(Span):
    "a token and its text"
    def __init__(self, start, end, text):
        super(Token, self).__init__(start, end)
        self.text = text


def _token_features(token):
    "what a token looks like"
    return [Feature('word', token.text.lower()),
            Feature('capitalized', token.text[:1].isupper())]


SENTENCES = [[('John', 'B-PER'), ('Smith', 'I-PER'), ('lives', 'O'),
              ('in', 'O'), ('Paris', 'B-LOC'), ('.', 'O')],
             [('Mary', 'B-PER'), ('visited', 'O'), ('London', 'B-LOC'),
              ('.', 'O')]]


def _chunked_document(doc_id, sentences):
    "document out of (word, outcome) sentences, with gold spans"
    start = 0
    token_sents = []
    spans = []
    for sentence in sentences:
        tokens = []
        for word, _ in sentence:
            tokens.append(Token(start, start + len(word), word))
            start += len(word) + 1
        token_sents.append(tokens)
        spans.extend(outcomes_to_spans(tokens, [o for _, o in sentence]))
    return ChunkedDocument(doc_id, token_sents, spans)


def _corpus(n_docs):
    "documents telling the same story in varying order"
    return [_chunked_document('doc{0}'.format(i),
                              SENTENCES if i % 2 else SENTENCES[::-1])
            for i in range(n_docs)]


class ChunkerEvaluationTest(unittest.TestCase):
    "training and testing chunkers for real"

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def _evaluation(self, backend):
        "chunker evaluation for the backend"
        return ChunkerEvaluation(os.path.join(self.tmp_dir, backend),
                                 [_token_features],
                                 backend=backend,
                                 preceding=1, following=1,
                                 writer_options={'C': 10.0})

    def test_gold_spans(self):
        "gold spans of the corpus"
        doc = _corpus(1)[0]
        self.assertEqual([(0, 4, 'PER'), (13, 19, 'LOC'),
                          (22, 32, 'PER'), (42, 47, 'LOC')],
                         [s.as_tuple() for s in doc.spans])

    def test_liblinear(self):
        "token by token"
        evaluation = self._evaluation('liblinear')
        result = evaluation.cross_validation(_corpus(6), 3)
        self.assertTrue(result.complete)
        total = result.total()
        self.assertEqual(24, total.reference_count())
        self.assertEqual(1.0, total.f1())

    def test_viterbi(self):
        "whole sentences"
        evaluation = self._evaluation('viterbi')
        result = evaluation.cross_validation(_corpus(6), 3,
                                             assignment='block', n_jobs=2)
        self.assertTrue(result.complete)
        self.assertEqual(1.0, result.total().f1())

    def test_final_model(self):
        "training on everything leaves a model to predict with"
        evaluation = self._evaluation('maxent')
        docs = _corpus(4)
        stats = evaluation.train_and_test(docs, [], name='final')
        self.assertEqual((0, 0, 0), stats.counts())
        model_dir = os.path.join(self.tmp_dir, 'maxent', 'final')
        self.assertTrue(os.path.exists(model_path(model_dir)))
        predicted = evaluation.predict(docs[:1], model_dir)
        self.assertEqual(docs[0].spans, predicted['doc0'])

    def test_writer_verbosity(self):
        "writer options may set their own verbosity"
        evaluation = ChunkerEvaluation(os.path.join(self.tmp_dir, 'quiet'),
                                       [_token_features],
                                       backend='liblinear',
                                       preceding=1, following=1,
                                       writer_options={'C': 10.0,
                                                       'verbose': 0},
                                       verbose=2)
        evaluation.train_and_test(_corpus(2), [], name='final')
        model_dir = os.path.join(self.tmp_dir, 'quiet', 'final')
        self.assertTrue(os.path.exists(model_path(model_dir)))
