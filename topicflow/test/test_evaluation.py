#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""
Automated tests for scoring trained topic models.
"""

import logging
import unittest

import numpy as np

from topicflow.models import evaluation
from topicflow.models.coherencemodel import CoherenceModel
from topicflow.models.ldamodel import fit
from topicflow.test.utils import common_corpus, common_texts, common_vocabulary


class FixedTopicModel(object):
    """Model stand-in with fixed `theta` and `phi`, for checking the perplexity formula by hand."""
    eps = 0.0

    def __init__(self, theta, phi):
        self.theta = np.asarray(theta, dtype=float)
        self.phi = np.asarray(phi, dtype=float)

    def topic_term_distribution(self):
        return self.phi

    def document_topic_distribution(self, bow):
        return self.theta


class TestPerplexity(unittest.TestCase):
    def setUp(self):
        self.model = fit(
            common_corpus, num_topics=2, id2word=common_vocabulary, config={'random_seed': 0, 'max_passes': 5}
        )

    def test_formula(self):
        model = FixedTopicModel([1.0], [[0.5, 0.5]])
        self.assertAlmostEqual(evaluation.perplexity(model, [[(0, 2), (1, 2)]]), 2.0)

        model = FixedTopicModel([0.5, 0.5], [[0.25, 0.75], [0.75, 0.25]])
        self.assertAlmostEqual(evaluation.perplexity(model, [[(0, 1)], [(1, 3)]]), 2.0)

    def test_lower_bound(self):
        self.assertGreaterEqual(evaluation.perplexity(self.model, common_corpus), 1.0)

    def test_matches_training_history(self):
        self.assertAlmostEqual(evaluation.perplexity(self.model, common_corpus), self.model.perplexity_history[-1])

    def test_deterministic(self):
        self.assertEqual(
            evaluation.perplexity(self.model, common_corpus), evaluation.perplexity(self.model, common_corpus)
        )

    def test_empty_documents_skipped(self):
        expected = evaluation.perplexity(self.model, common_corpus)
        self.assertAlmostEqual(evaluation.perplexity(self.model, [[]] + common_corpus + [[]]), expected)

    def test_no_words(self):
        self.assertRaises(ValueError, evaluation.perplexity, self.model, [])
        self.assertRaises(ValueError, evaluation.perplexity, self.model, [[], []])

    def test_model_untouched(self):
        before = self.model.get_topics()
        evaluation.perplexity(self.model, [[(0, 3), (11, 1)]])
        self.assertTrue(np.array_equal(before, self.model.get_topics()))


class TestCoherence(unittest.TestCase):
    def setUp(self):
        self.model = fit(
            common_corpus, num_topics=2, id2word=common_vocabulary, config={'random_seed': 0, 'max_passes': 5}
        )

    def test_u_mass(self):
        value = evaluation.coherence(self.model, common_corpus, top_n=5)
        expected = CoherenceModel(model=self.model, corpus=common_corpus, topn=5).get_coherence()
        self.assertEqual(value, expected)
        self.assertLessEqual(value, 0.0 + 1e-9)

    def test_sliding_window_measures(self):
        for measure in ('c_uci', 'c_npmi'):
            value = evaluation.coherence(self.model, common_corpus, top_n=5, measure=measure, texts=common_texts)
            self.assertTrue(np.isfinite(value))
        npmi = evaluation.coherence(self.model, common_corpus, top_n=5, measure='c_npmi', texts=common_texts)
        self.assertTrue(-1.0 <= npmi <= 1.0)

    def test_sliding_window_needs_texts(self):
        self.assertRaises(ValueError, evaluation.coherence, self.model, common_corpus, measure='c_uci')

    def test_unknown_measure(self):
        self.assertRaises(ValueError, evaluation.coherence, self.model, common_corpus, measure='c_v')


class TestTopicSummaries(unittest.TestCase):
    def test_summaries(self):
        model = fit(common_corpus, num_topics=3, id2word=common_vocabulary, config={'random_seed': 0})
        summaries = evaluation.topic_summaries(model, n=4)
        self.assertEqual([k for k, _ in summaries], [0, 1, 2])
        for k, terms in summaries:
            self.assertEqual(len(terms), 4)
            self.assertEqual(terms, model.top_terms(k, 4))
            self.assertTrue(set(terms) <= set(common_vocabulary.token2id))

    def test_more_terms_than_vocabulary(self):
        model = fit(common_corpus, num_topics=2, id2word=common_vocabulary, config={'random_seed': 0})
        for _, terms in evaluation.topic_summaries(model, n=50):
            self.assertEqual(len(terms), len(common_vocabulary))


if __name__ == '__main__':
    logging.basicConfig(level=logging.WARNING)
    unittest.main()
