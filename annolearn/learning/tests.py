# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=too-many-public-methods, invalid-name

"""
Tests for annolearn.learning
"""

import codecs
import json
import os
import shutil
import tempfile
import unittest
import zipfile

import numpy as np

from annolearn.learning.classifiers import (LiblinearClassifier,
                                            MaxentClassifier,
                                            ViterbiClassifier,
                                            load_classifier)
from annolearn.learning.encoders import (IntegerOutcomeEncoder,
                                         NameNumber,
                                         NameNumberFeaturesEncoder,
                                         SparseFeaturesEncoder,
                                         StringOutcomeEncoder,
                                         UNKNOWN_NAME,
                                         fold_rare_features)
from annolearn.learning.errors import (CorruptModelError,
                                       MissingArtifactError,
                                       TrainingBackendFailure,
                                       UnknownOutcome,
                                       UnsupportedFeatureType,
                                       WriterClosedError)
from annolearn.learning.features import (Feature, Instance, prefixed,
                                         relative_extractor,
                                         relative_name,
                                         window_features)
from annolearn.learning.model import MANIFEST_FILE, model_path
from annolearn.learning.svmlight_format import dump_svmlight_file
from annolearn.learning.viterbi import viterbi
from annolearn.learning.vocabulary_format import (SortedLookup,
                                                  dump_lookup,
                                                  load_lookup)
from annolearn.learning.writers import (LiblinearDataWriter,
                                        MaxentDataWriter,
                                        ViterbiDataWriter,
                                        label_transitions,
                                        make_data_writer)


# ---------------------------------------------------------------------
# features
# ---------------------------------------------------------------------

def test_create_name():
    "compound names"
    assert Feature.create_name('LeftSibling', 'pos') == 'LeftSibling_pos'
    assert Feature.create_name('', 'pos') == 'pos'
    assert Feature.create_name('Preceding', 2) == 'Preceding_2'
    # associative
    left = Feature.create_name(Feature.create_name('a', 'b'), 'c')
    right = Feature.create_name('a', Feature.create_name('b', 'c'))
    assert left == right == 'a_b_c'


def test_prefixed():
    "renaming features with a context"
    feats = [Feature('pos', 'NN'), Feature('len', 3)]
    assert prefixed('LeftSibling', feats) ==\
        [Feature('LeftSibling_pos', 'NN'), Feature('LeftSibling_len', 3)]
    # same prefix, same names
    assert prefixed('X', feats) == prefixed('X', feats)


def test_relative_extractor():
    "features of a neighbour"
    assert relative_name(-1) == 'LeftSibling'
    assert relative_name(2) == '2RightSibling'
    assert relative_name(0) == ''
    word = lambda w: [Feature('word', w)]
    left = relative_extractor(-1, word)
    items = ['a', 'b', 'c']
    assert left(items, 1) == [Feature('LeftSibling_word', 'a')]
    assert left(items, 0) == []


def test_window_features():
    "preceding and following items, with out of bounds markers"
    word = lambda w: [Feature('word', w)]
    feats = window_features(['a', 'b', 'c'], 0, word,
                            preceding=1, following=2)
    assert feats == [Feature('Preceding_1_OOB', True),
                     Feature('Following_1_word', 'b'),
                     Feature('Following_2_word', 'c')]


# ---------------------------------------------------------------------
# encoders
# ---------------------------------------------------------------------

FEATS = [Feature('word', 'John Smith'),
         Feature('cap', True),
         Feature('digit', False),
         Feature('len', 4),
         Feature('ratio', 0.5)]


class FeaturesEncoderTest(unittest.TestCase):
    "tests for NameNumberFeaturesEncoder"

    def test_per_type_encoding(self):
        "booleans, numbers and strings"
        enc = NameNumberFeaturesEncoder.default()
        self.assertEqual([NameNumber('word=John_Smith', 1.0),
                          NameNumber('cap', 1.0),
                          NameNumber('len', 4.0),
                          NameNumber('ratio', 0.5)],
                         enc.encode(FEATS))

    def test_unsupported(self):
        "values of other types are a programming error"
        enc = NameNumberFeaturesEncoder.default()
        self.assertRaises(UnsupportedFeatureType,
                          enc.encode, [Feature('x', None)])
        self.assertRaises(TypeError,
                          enc.encode, [Feature('x', [1, 2])])
        # no encoders at all
        self.assertRaises(UnsupportedFeatureType,
                          NameNumberFeaturesEncoder().encode,
                          [Feature('x', 1)])

    def test_determinism(self):
        "same vector, same encoding, whatever the options"
        for compress in (False, True):
            for sort in (False, True):
                enc = NameNumberFeaturesEncoder.default(
                    compress=compress, sort_name_lookup=sort)
                first = enc.encode(FEATS)
                self.assertEqual(first, enc.encode(FEATS))
                enc.freeze()
                self.assertEqual(first, enc.encode(FEATS))

    def test_compression(self):
        "names are replaced by short aliases, in order of appearance"
        enc = NameNumberFeaturesEncoder.default(compress=True)
        encoded = enc.encode(FEATS)
        self.assertEqual(['0', '1', '2', '3'], [x.name for x in encoded])
        self.assertEqual([1.0, 1.0, 4.0, 0.5], [x.number for x in encoded])
        # aliases are stable
        self.assertEqual([NameNumber('2', 7.0)],
                         enc.encode([Feature('len', 7)]))
        many = [Feature('f{0}'.format(i), 1) for i in range(40)]
        enc.encode(many)
        self.assertEqual('10', enc.names_['f32'])  # 36 in base 36

    def test_frozen_drop(self):
        "unseen names are dropped once frozen"
        enc = NameNumberFeaturesEncoder.default(compress=True)
        enc.encode(FEATS)
        enc.freeze()
        self.assertEqual([NameNumber('2', 3.0)],
                         enc.encode([Feature('unseen', 1),
                                     Feature('len', 3)]))
        self.assertNotIn('unseen', enc.names_)

    def test_frozen_unknown(self):
        "unseen names go to the unknown bucket once frozen"
        enc = NameNumberFeaturesEncoder.default(compress=True,
                                                unknown_policy='unknown')
        enc.encode(FEATS)
        unk = enc.names_[UNKNOWN_NAME]
        enc.freeze()
        self.assertEqual([NameNumber(unk, 1.0)],
                         enc.encode([Feature('unseen', 'x')]))

    def test_bad_policy(self):
        "only two unknown name policies"
        self.assertRaises(ValueError, NameNumberFeaturesEncoder,
                          unknown_policy='guess')

    def test_fold_rare(self):
        "rare names are trained as the unknown bucket, then forgotten"
        enc = NameNumberFeaturesEncoder.default(unknown_policy='unknown')
        rows = [enc.encode([Feature('w', 'a'), Feature('n', 2)]),
                enc.encode([Feature('w', 'a'), Feature('x', 3),
                            Feature('y', 1)])]
        self.assertEqual(3, fold_rare_features(enc, rows, cutoff=1))
        self.assertEqual([[NameNumber(UNKNOWN_NAME, 2.0),
                           NameNumber('w=a', 1.0)],
                          [NameNumber(UNKNOWN_NAME, 4.0),
                           NameNumber('w=a', 1.0)]],
                         rows)
        self.assertEqual(set([UNKNOWN_NAME, 'w=a']), set(enc.names_))
        enc.freeze()
        self.assertEqual([NameNumber(UNKNOWN_NAME, 5.0)],
                         enc.encode([Feature('x', 5)]))
        # nothing is rare below the cutoff
        self.assertEqual(0, fold_rare_features(enc, rows, cutoff=0))

    def test_fold_rare_sparse(self):
        "rare columns are folded into the unknown column"
        enc = SparseFeaturesEncoder(
            NameNumberFeaturesEncoder.default(unknown_policy='unknown'))
        rows = [enc.encode([Feature('w', 'a'), Feature('n', 2)]),
                enc.encode([Feature('w', 'a')])]
        self.assertEqual([(1, 1.0), (2, 2.0)], rows[0])
        self.assertEqual(1, fold_rare_features(enc, rows))
        self.assertEqual([[(0, 2.0), (1, 1.0)], [(1, 1.0)]], rows)
        enc.freeze()
        self.assertEqual(3, enc.n_features)
        self.assertEqual([(0, 1.0)], enc.encode([Feature('n', 1)]))


class EncoderPersistenceTest(unittest.TestCase):
    "saving and loading encoders"

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_sort_invariance(self):
        "sorting the name table does not change any alias"
        many = [Feature('f{0}'.format(i), 1) for i in range(50, 0, -1)]
        for sort in (False, True):
            enc = NameNumberFeaturesEncoder.default(compress=True,
                                                    sort_name_lookup=sort)
            before = enc.encode(many)
            enc.freeze()
            enc.save(self.tmp_dir)
            loaded = NameNumberFeaturesEncoder.load(self.tmp_dir,
                                                    compress=True,
                                                    sort_name_lookup=sort)
            if sort:
                self.assertIsInstance(loaded.names_, SortedLookup)
            self.assertEqual(before, loaded.encode(many))
            for name, alias in enc.names_.items():
                self.assertEqual(alias, loaded.names_[name])

    def test_sparse_roundtrip(self):
        "sparse encoder state survives save/load"
        enc = SparseFeaturesEncoder(NameNumberFeaturesEncoder.default())
        row = enc.encode(FEATS + [Feature('len', 1)])
        # repeated names are summed
        self.assertEqual([(0, 1.0), (1, 1.0), (2, 5.0), (3, 0.5)], row)
        enc.freeze()
        enc.save(self.tmp_dir)
        loaded = SparseFeaturesEncoder.load(self.tmp_dir)
        self.assertEqual(4, loaded.n_features)
        self.assertEqual(row, loaded.encode(FEATS + [Feature('len', 1),
                                                     Feature('new', 1)]))

    def test_outcome_roundtrip(self):
        "outcome encoders are bijections over the training outcomes"
        for cls in (StringOutcomeEncoder, IntegerOutcomeEncoder):
            enc = cls()
            outcomes = ['O', 'B-PER', 'I-PER', 'O']
            natives = enc.encode_sequence(outcomes)
            self.assertEqual(outcomes, enc.decode_sequence(natives))
            enc.freeze()
            enc.save(self.tmp_dir)
            loaded = cls.load(self.tmp_dir)
            self.assertEqual(['O', 'B-PER', 'I-PER'], loaded.classes_)
            for outcome in outcomes:
                self.assertEqual(outcome,
                                 loaded.decode(loaded.encode(outcome)))
            self.assertRaises(UnknownOutcome, loaded.encode, 'B-ORG')

    def test_unknown_outcome(self):
        "decoding a label that was never seen fails"
        enc = IntegerOutcomeEncoder()
        enc.encode('yes')
        self.assertRaises(UnknownOutcome, enc.decode, 1)
        self.assertRaises(UnknownOutcome, enc.decode, -1)
        enc = StringOutcomeEncoder()
        enc.encode('yes')
        self.assertRaises(UnknownOutcome, enc.decode, 'no')
        self.assertRaises(KeyError, enc.decode, 'no')


def test_sorted_lookup():
    "binary search table"
    table = SortedLookup([('b', '1'), ('a', '0'), ('c', '2')])
    assert table['a'] == '0'
    assert table.get('c') == '2'
    assert table.get('d') is None
    assert 'b' in table
    assert 'bb' not in table
    assert len(table) == 3
    assert table.items() == [('a', '0'), ('b', '1'), ('c', '2')]


def test_lookup_format():
    "lookup tables in insertion or sorted order"
    tmp_dir = tempfile.mkdtemp()
    try:
        path = os.path.join(tmp_dir, 'names.tsv')
        table = {'zeta': '0', 'alpha': '1', 'has:colon': '2'}
        dump_lookup(table, path, sort=True)
        with codecs.open(path, 'r', 'utf-8') as stream:
            lines = stream.read().splitlines()
        assert lines == ['alpha\t1', 'has:colon\t2', 'zeta\t0']
        assert load_lookup(path) == table
        assert load_lookup(path, sort=True).items() == sorted(table.items())
    finally:
        shutil.rmtree(tmp_dir)


def test_dump_svmlight():
    "svmlight lines are one-based, sorted, without zeros"
    tmp_dir = tempfile.mkdtemp()
    try:
        path = os.path.join(tmp_dir, 'data')
        dump_svmlight_file([[(2, 1.0), (0, 0.5), (1, 0.0)], []],
                           [1, 0], path, query_id=[1, 2])
        with codecs.open(path, 'r', 'utf-8') as stream:
            lines = stream.read().splitlines()
        assert lines == ['1 qid:1 1:0.5 3:1.0', '0 qid:2']
    finally:
        shutil.rmtree(tmp_dir)


# ---------------------------------------------------------------------
# viterbi
# ---------------------------------------------------------------------

def test_viterbi_joint():
    "joint decoding can overrule the locally best label"
    # labels: 0 = O, 1 = B, 2 = I
    emissions = np.log([[0.1, 0.8, 0.1],
                        [0.6, 0.0001, 0.3999],
                        [0.9, 0.05, 0.05]])
    # O -> I is forbidden, B -> I very likely
    transitions = np.log([[0.5, 0.5, 1e-9],
                          [0.1, 0.1, 0.8],
                          [0.4, 0.3, 0.3]])
    greedy = [int(np.argmax(row)) for row in emissions]
    assert greedy == [1, 0, 0]
    path, score = viterbi(emissions, transitions)
    assert path == [1, 2, 0]
    expected = emissions[0, 1] + transitions[1, 2] + emissions[1, 2] +\
        transitions[2, 0] + emissions[2, 0]
    assert np.isclose(score, expected)


def test_viterbi_edges():
    "empty and single item sequences"
    assert viterbi(np.zeros((0, 3)), np.zeros((3, 3))) == ([], 0.0)
    path, _ = viterbi(np.log([[0.2, 0.8]]), np.zeros((2, 2)),
                      start=np.log([0.9, 0.1]))
    assert path == [0]


def test_label_transitions():
    "smoothed bigram log-probabilities"
    start, trans = label_transitions([[0, 1], [0]], 2)
    assert np.allclose(np.exp(start), [3. / 4, 1. / 4])
    assert np.allclose(np.exp(trans), [[1. / 3, 2. / 3], [0.5, 0.5]])


# ---------------------------------------------------------------------
# writers and classifiers
# ---------------------------------------------------------------------

def _word(word):
    "single feature vector"
    return [Feature('word', word), Feature('len', len(word))]


SENTIMENT = [('pos', 'good'), ('pos', 'great'), ('pos', 'nice'),
             ('neg', 'bad'), ('neg', 'awful'), ('neg', 'poor')] * 5

SEQUENCES = [[('B-PER', 'John'), ('I-PER', 'Smith'), ('O', 'runs')],
             [('B-PER', 'Mary'), ('O', 'sleeps')],
             [('O', 'the'), ('O', 'dog'), ('O', 'runs')]] * 4


def _train(backend, output_dir, extra=(), **kwargs):
    "build a model for the toy data of the backend (plus extra instances)"
    writer = make_data_writer(backend, output_dir, **kwargs)
    if backend == 'viterbi':
        for seq in SEQUENCES:
            writer.write_sequence(Instance(o, _word(w)) for o, w in seq)
    else:
        for outcome, word in SENTIMENT + list(extra):
            writer.write(Instance(outcome, _word(word)))
    writer.close()
    return writer


class WriterTest(unittest.TestCase):
    "data writer lifecycle"

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_lifecycle(self):
        "no model until closed, no writing after"
        writer = LiblinearDataWriter(self.tmp_dir)
        writer.write(Instance('pos', _word('good')))
        writer.write(Instance('neg', _word('bad')))
        self.assertFalse(os.path.exists(model_path(self.tmp_dir)))
        self.assertEqual(model_path(self.tmp_dir), writer.close())
        self.assertTrue(os.path.exists(model_path(self.tmp_dir)))
        self.assertTrue(os.path.exists(writer.data_file))
        self.assertRaises(WriterClosedError,
                          writer.write, Instance('pos', _word('good')))
        self.assertRaises(WriterClosedError, writer.close)

    def test_training_failure(self):
        "a failed training run leaves no model behind"
        writer = LiblinearDataWriter(self.tmp_dir)
        self.assertRaises(TrainingBackendFailure, writer.close)
        self.assertTrue(writer.closed)
        self.assertFalse(os.path.exists(model_path(self.tmp_dir)))
        self.assertEqual([], [f for f in os.listdir(self.tmp_dir)
                              if f.startswith('.')])

    def test_unsupported_feature(self):
        "bad feature values are reported on write"
        writer = MaxentDataWriter(self.tmp_dir)
        self.assertRaises(UnsupportedFeatureType, writer.write,
                          Instance('pos', [Feature('w', object())]))

    def test_outcome_separators(self):
        "maxent outcomes must fit in one field of one line"
        writer = MaxentDataWriter(self.tmp_dir, unknown_policy='drop')
        for outcome in ['a\tb', 'a\nb', 'a\r']:
            self.assertRaises(ValueError, writer.write,
                              Instance(outcome, _word('good')))
        writer.write(Instance('two words', _word('good')))
        writer.write(Instance('pos', _word('nice')))
        writer.close()
        self.assertEqual('two words',
                         load_classifier(self.tmp_dir).classify(
                             _word('good')))

    def test_sequence_length(self):
        "sequence outcomes and items must match"
        writer = ViterbiDataWriter(self.tmp_dir)
        self.assertRaises(ValueError, writer.write,
                          Instance(['O', 'O'], [_word('a')]))

    def test_unknown_backend(self):
        "backends are looked up by name"
        self.assertRaises(ValueError, make_data_writer, 'crf', self.tmp_dir)

    def test_single_outcome(self):
        "with a single outcome, that is all we ever predict"
        writer = LiblinearDataWriter(self.tmp_dir)
        writer.write(Instance('pos', _word('good')))
        writer.write(Instance('pos', _word('nice')))
        with self.assertWarns(UserWarning):
            writer.close()
        classifier = load_classifier(self.tmp_dir)
        self.assertEqual('pos', classifier.classify(_word('bad')))


class ClassifierTest(unittest.TestCase):
    "building models and classifying with them"

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def _subdir(self, name):
        "fresh output directory"
        return os.path.join(self.tmp_dir, name)

    def test_maxent(self):
        "maximum entropy backend"
        _train('maxent', self._subdir('m'))
        classifier = load_classifier(self._subdir('m'))
        self.assertIsInstance(classifier, MaxentClassifier)
        self.assertEqual('unknown',
                         classifier.features_encoder.unknown_policy)
        self.assertEqual('pos', classifier.classify(_word('good')))
        self.assertEqual('neg', classifier.classify(_word('awful')))
        scores = classifier.score(_word('good'))
        self.assertEqual(set(['pos', 'neg']), set(scores))
        self.assertGreater(scores['pos'], scores['neg'])
        # unseen features do not get in the way
        self.assertIn(classifier.classify([Feature('word', 'meh')]),
                      ['pos', 'neg'])

    def test_liblinear(self):
        "linear svm backend"
        _train('liblinear', self._subdir('l'))
        classifier = load_classifier(model_path(self._subdir('l')))
        self.assertIsInstance(classifier, LiblinearClassifier)
        self.assertEqual('drop',
                         classifier.features_encoder.name_encoder.unknown_policy)
        self.assertEqual('pos', classifier.classify(_word('nice')))
        self.assertEqual('neg', classifier.classify(_word('poor')))
        self.assertIn(classifier.classify([Feature('word', 'meh')]),
                      ['pos', 'neg'])

    def test_unknown_bucket(self):
        "unseen names score through the unknown bucket, or not at all"
        # negative words seen once each
        rare = [('neg', 'dreadful'), ('neg', 'dismal'), ('neg', 'lousy')]
        unseen = [Feature('word', 'meh')]
        _train('maxent', self._subdir('unk'), extra=rare,
               unknown_policy='unknown')
        _train('maxent', self._subdir('drop'), extra=rare,
               unknown_policy='drop')
        c_unk = load_classifier(self._subdir('unk'))
        c_drop = load_classifier(self._subdir('drop'))

        # rare names were trained as unknown, and are unknown now
        self.assertNotIn('word=dreadful', c_unk.features_encoder.names_)
        self.assertIn('word=dreadful', c_drop.features_encoder.names_)

        self.assertNotEqual(c_unk.score(unseen), c_drop.score(unseen))
        # dropping: an unseen word is no word at all
        self.assertEqual(c_drop.score([]), c_drop.score(unseen))
        # unknown: unseen words look like the rare (negative) ones
        margin = lambda s: s['neg'] - s['pos']
        self.assertGreater(margin(c_unk.score(unseen)),
                           margin(c_unk.score([])))

        with zipfile.ZipFile(model_path(self._subdir('unk'))) as zfile:
            manifest = json.loads(zfile.read(MANIFEST_FILE).decode('utf-8'))
        self.assertEqual('unknown', manifest['unknown_policy'])
        self.assertEqual(1, manifest['unknown_cutoff'])

    def test_unknown_bucket_indexed(self):
        "indexed backends train a weight for the unknown column too"
        rare = [('neg', 'dreadful'), ('neg', 'dismal'), ('neg', 'lousy')]
        _train('liblinear', self._subdir('l'), extra=rare,
               unknown_policy='unknown')
        classifier = load_classifier(self._subdir('l'))
        fenc = classifier.features_encoder
        self.assertNotIn('word=dreadful', fenc.name_encoder.names_)
        col = fenc.unknown_key()
        self.assertTrue(np.any(classifier.coef[:, col] != 0))
        self.assertEqual([(col, 1.0)], fenc.encode([Feature('word', 'meh')]))

    def test_viterbi(self):
        "sequence backend"
        _train('viterbi', self._subdir('v'), C=10.0)
        classifier = load_classifier(self._subdir('v'))
        self.assertIsInstance(classifier, ViterbiClassifier)
        for seq in SEQUENCES[:3]:
            outcomes = [o for o, _ in seq]
            vectors = [_word(w) for _, w in seq]
            self.assertEqual(outcomes, classifier.classify_sequence(vectors))
        self.assertEqual([], classifier.classify_sequence([]))
        self.assertEqual('B-PER', classifier.classify(_word('John')))

    def test_compression_transparency(self):
        "compressing names changes the model files, not the decisions"
        plain = _train('liblinear', self._subdir('plain'))
        comp = _train('liblinear', self._subdir('comp'), compress=True)
        plain_names = plain.features_encoder.name_encoder.names_
        comp_names = comp.features_encoder.name_encoder.names_
        self.assertEqual(set(plain_names), set(comp_names))
        self.assertEqual('word=good', plain_names['word=good'])
        self.assertNotEqual('word=good', comp_names['word=good'])

        c_plain = load_classifier(self._subdir('plain'))
        c_comp = load_classifier(self._subdir('comp'))
        # aliases assigned in training are the ones used at inference
        loaded_names = c_comp.features_encoder.name_encoder.names_
        for name, alias in comp_names.items():
            self.assertEqual(alias, loaded_names[name])
        for _, word in SENTIMENT[:6]:
            self.assertEqual(c_plain.classify(_word(word)),
                             c_comp.classify(_word(word)))

    def test_sort_invariance(self):
        "sorting the name table changes nothing but the lookup"
        plain = _train('maxent', self._subdir('plain'), compress=True)
        srt = _train('maxent', self._subdir('sorted'), compress=True,
                     sort_name_lookup=True)
        self.assertEqual(plain.features_encoder.names_,
                         srt.features_encoder.names_)
        c_plain = load_classifier(self._subdir('plain'))
        c_sorted = load_classifier(self._subdir('sorted'))
        self.assertIsInstance(c_sorted.features_encoder.names_,
                              SortedLookup)
        for _, word in SENTIMENT[:6]:
            self.assertEqual(c_plain.classify(_word(word)),
                             c_sorted.classify(_word(word)))

    def test_missing_model(self):
        "loading from nowhere"
        self.assertRaises(MissingArtifactError, load_classifier,
                          self._subdir('nothing'))
        self.assertRaises(MissingArtifactError, load_classifier,
                          os.path.join(self.tmp_dir, 'model.zip'))

    def test_corrupt_model(self):
        "loading garbage"
        path = model_path(self.tmp_dir)
        with open(path, 'wb') as stream:
            stream.write(b'not a zip file')
        self.assertRaises(CorruptModelError, load_classifier, self.tmp_dir)

    def _fake_model(self, manifest, members=None):
        "a model file with the given manifest"
        path = model_path(self.tmp_dir)
        with zipfile.ZipFile(path, 'w') as zfile:
            zfile.writestr(MANIFEST_FILE, json.dumps(manifest))
            for name, content in (members or {}).items():
                zfile.writestr(name, content)
        return path

    def test_version_mismatch(self):
        "models written by another version of the format"
        self._fake_model({'format_version': 99, 'backend': 'maxent'})
        self.assertRaises(CorruptModelError, load_classifier, self.tmp_dir)

    def test_incomplete_model(self):
        "models with missing pieces"
        self._fake_model({'format_version': 1, 'backend': 'maxent'},
                         {'names.tsv': 'a\ta\n'})
        self.assertRaises(CorruptModelError, load_classifier, self.tmp_dir)
        self._fake_model({'format_version': 1, 'backend': 'svm'})
        self.assertRaises(CorruptModelError, load_classifier, self.tmp_dir)
