"""
BIO chunking: conversion between annotation spans over a document and
one outcome per token.

The first token of a chunk of category `X` gets the outcome `B-X`,
the following tokens of the chunk get `I-X`, and tokens outside any
chunk get `O`. Chunkers learn these per-token outcomes and turn the
predicted outcome sequences back into spans.
"""

# License: BSD3

from ..annotation import AnnotationSpan


OUTSIDE = 'O'
BEGIN_PREFIX = 'B-'
INSIDE_PREFIX = 'I-'


def split_outcome(outcome):
    """
    `(prefix, category)` for an outcome, eg. `('B-', 'PER')`;
    `(None, None)` for the outside outcome
    """
    for prefix in (BEGIN_PREFIX, INSIDE_PREFIX):
        if outcome.startswith(prefix):
            return prefix, outcome[len(prefix):]
    return None, None


def spans_to_outcomes(tokens, spans):
    """
    One BIO outcome per token.

    A token belongs to a span if the span encloses it. Tokens
    enclosed by more than one span are attributed to the first
    one (by start offset).

    Parameters
    ----------
    tokens: list of Span
        Tokens of a sentence or document, in text order
    spans: list of AnnotationSpan
    """
    outcomes = [OUTSIDE] * len(tokens)
    for span in sorted(spans):
        first = True
        for i, token in enumerate(tokens):
            if outcomes[i] != OUTSIDE or not span.encloses(token):
                continue
            prefix = BEGIN_PREFIX if first else INSIDE_PREFIX
            outcomes[i] = prefix + span.category
            first = False
    return outcomes


def outcomes_to_spans(tokens, outcomes):
    """
    Spans described by a sequence of BIO outcomes.

    An `I-X` that does not continue a chunk of category `X` starts a
    new chunk, as if it were `B-X`.

    Parameters
    ----------
    tokens: list of Span
    outcomes: list of string
        Same length as tokens
    """
    if len(tokens) != len(outcomes):
        raise ValueError('{0} outcomes for {1} tokens'.format(
            len(outcomes), len(tokens)))
    spans = []
    current = None  # (start token, end token, category)
    for i, outcome in enumerate(outcomes):
        prefix, category = split_outcome(outcome)
        continues = prefix == INSIDE_PREFIX and current is not None and\
            current[2] == category
        if continues:
            current = (current[0], i, category)
            continue
        if current is not None:
            spans.append(current)
            current = None
        if prefix is not None:
            current = (i, i, category)
    if current is not None:
        spans.append(current)
    return [AnnotationSpan(tokens[s].char_start, tokens[e].char_end, cat)
            for s, e, cat in spans]
