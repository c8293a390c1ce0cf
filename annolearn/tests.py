# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=too-many-public-methods, invalid-name

"""
Tests for annolearn spans and BIO chunking
"""

import unittest

from annolearn.annotation import AnnotationSpan, Span
from annolearn.learning.chunking import (outcomes_to_spans,
                                         spans_to_outcomes,
                                         split_outcome)

# ---------------------------------------------------------------------
# spans
# ---------------------------------------------------------------------

def test_encloses():
    "which tokens a chunk covers"
    chunk = Span(5, 10)
    assert chunk.encloses(chunk)
    assert chunk.encloses(Span(5, 7))
    assert chunk.encloses(Span(7, 7))
    assert not chunk.encloses(Span(4, 6))
    assert not chunk.encloses(Span(9, 11))
    assert not chunk.encloses(None)
    # an annotation span encloses whatever its offsets do
    assert AnnotationSpan(0, 10, 'PER').encloses(Span(5, 10))


class AnnotationSpanTest(unittest.TestCase):
    "tests for annolearn.annotation.AnnotationSpan"

    def test_equality(self):
        "equality takes the category into account"
        self.assertEqual(AnnotationSpan(0, 5, 'PER'),
                         AnnotationSpan(0, 5, 'PER'))
        self.assertNotEqual(AnnotationSpan(0, 5, 'PER'),
                            AnnotationSpan(0, 5, 'ORG'))
        self.assertEqual(AnnotationSpan(0, 5, 'PER').offsets(),
                         AnnotationSpan(0, 5, 'ORG').offsets())

    def test_hash(self):
        "annotation spans can be used in sets"
        spans = set([AnnotationSpan(0, 5, 'PER'),
                     AnnotationSpan(0, 5, 'PER'),
                     AnnotationSpan(0, 5, 'ORG')])
        self.assertEqual(2, len(spans))

    def test_tuple(self):
        "conversion from and to triples"
        span = AnnotationSpan.from_tuple((3, 8, 'LOC'))
        self.assertEqual((3, 8, 'LOC'), span.as_tuple())

    def test_sort(self):
        "sorting is by offsets, then category"
        spans = [AnnotationSpan(4, 6, 'A'),
                 AnnotationSpan(0, 5, 'PER'),
                 AnnotationSpan(0, 5, 'ORG')]
        self.assertEqual([(0, 5, 'ORG'), (0, 5, 'PER'), (4, 6, 'A')],
                         [s.as_tuple() for s in sorted(spans)])


# ---------------------------------------------------------------------
# chunking
# ---------------------------------------------------------------------

def _tokens(*words):
    "tokens for space separated words"
    tokens = []
    start = 0
    for word in words:
        tokens.append(Span(start, start + len(word)))
        start += len(word) + 1
    return tokens


def test_split_outcome():
    "BIO prefixes"
    assert split_outcome('B-PER') == ('B-', 'PER')
    assert split_outcome('I-ORG') == ('I-', 'ORG')
    assert split_outcome('O') == (None, None)


def test_spans_to_outcomes():
    "gold spans to BIO outcomes"
    # John Smith works at Acme Corp
    tokens = _tokens('John', 'Smith', 'works', 'at', 'Acme', 'Corp')
    spans = [AnnotationSpan(0, 10, 'PER'), AnnotationSpan(20, 29, 'ORG')]
    assert spans_to_outcomes(tokens, spans) ==\
        ['B-PER', 'I-PER', 'O', 'O', 'B-ORG', 'I-ORG']


def test_adjacent_chunks():
    "two chunks of the same category in a row stay distinct"
    tokens = _tokens('Paris', 'London')
    spans = [AnnotationSpan(0, 5, 'LOC'), AnnotationSpan(6, 12, 'LOC')]
    outcomes = spans_to_outcomes(tokens, spans)
    assert outcomes == ['B-LOC', 'B-LOC']
    assert outcomes_to_spans(tokens, outcomes) == spans


def test_outcomes_to_spans():
    "BIO outcomes back to spans"
    tokens = _tokens('John', 'Smith', 'works', 'at', 'Acme', 'Corp')
    outcomes = ['B-PER', 'I-PER', 'O', 'O', 'B-ORG', 'I-ORG']
    assert outcomes_to_spans(tokens, outcomes) ==\
        [AnnotationSpan(0, 10, 'PER'), AnnotationSpan(20, 29, 'ORG')]


def test_outcomes_to_spans_lenient():
    "a dangling or mismatched I- starts a new chunk"
    tokens = _tokens('a', 'b', 'c')
    outcomes = ['I-X', 'I-Y', 'O']
    assert outcomes_to_spans(tokens, outcomes) ==\
        [AnnotationSpan(0, 1, 'X'), AnnotationSpan(2, 3, 'Y')]


def test_outcomes_to_spans_length():
    "one outcome per token"
    try:
        outcomes_to_spans(_tokens('a', 'b'), ['O'])
    except ValueError:
        pass
    else:
        assert False, 'expected a ValueError'
