#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""
Automated tests for the end-to-end topic discovery pipeline.
"""

import logging
import math
import unittest
import warnings

import numpy as np

from topicflow.corpora import BowCorpus, Vocabulary
from topicflow.exceptions import BowEncodingWarning, InvalidConfiguration
from topicflow.models import LdaModel
from topicflow.pipeline import Document, PipelineResult, TopicPipeline
from topicflow.test.utils import cat_car_documents

# stemmed forms of the cat and car vocabularies
CAT_STEMS = {'cat', 'meow', 'pet', 'purr'}
CAR_STEMS = {'car', 'engin', 'drive', 'road'}


def cat_car_pipeline(seed, **options):
    params = dict(num_topics=2, alpha=0.1, eta=0.1, max_passes=50, random_seed=seed, min_df=2, top_n=3)
    params.update(options)
    return TopicPipeline(**params)


class TestPipelineOptions(unittest.TestCase):
    def test_defaults(self):
        pipeline = TopicPipeline()
        self.assertEqual(pipeline.config.num_topics, 10)
        self.assertEqual(pipeline.config.normalizer.stemmer, 'porter')
        self.assertIsNone(pipeline.vocabulary)
        self.assertIsNone(pipeline.model)

    def test_flat_options(self):
        pipeline = TopicPipeline(num_topics=3, max_df=0.5, stemmer=None, max_passes=7, coherence_measure='c_npmi')
        self.assertEqual(pipeline.config.num_topics, 3)
        self.assertEqual(pipeline.config.vocabulary.max_df, 0.5)
        self.assertIsNone(pipeline.config.normalizer.stemmer)
        self.assertEqual(pipeline.config.training.max_passes, 7)
        self.assertEqual(pipeline.config.coherence_measure, 'c_npmi')

    def test_from_options(self):
        pipeline = TopicPipeline.from_options({'num_topics': 4, 'random_seed': 1})
        self.assertEqual(pipeline.config.num_topics, 4)
        self.assertEqual(pipeline.config.training.random_seed, 1)

    def test_invalid_options(self):
        self.assertRaises(InvalidConfiguration, TopicPipeline, num_topic=3)
        self.assertRaises(InvalidConfiguration, TopicPipeline, num_topics=0)
        self.assertRaises(InvalidConfiguration, TopicPipeline, max_df=1.5)
        self.assertRaises(InvalidConfiguration, TopicPipeline, stemmer='lancaster')
        self.assertRaises(InvalidConfiguration, TopicPipeline, coherence_measure='c_v')
        self.assertRaises(InvalidConfiguration, TopicPipeline, alpha=-1.0)

    def test_transform_before_run(self):
        self.assertRaises(RuntimeError, TopicPipeline().transform, "a cat")

    def test_str(self):
        self.assertEqual(str(TopicPipeline(num_topics=3)), "TopicPipeline<num_topics=3, fitted=False>")


class TestPipelineRun(unittest.TestCase):
    def setUp(self):
        self.documents = [Document('doc%i' % i, text) for i, text in enumerate(cat_car_documents)]

    def test_result(self):
        pipeline = cat_car_pipeline(0)
        result = pipeline.run(self.documents)
        self.assertIsInstance(result, PipelineResult)
        self.assertEqual(result.doc_ids, ['doc0', 'doc1', 'doc2', 'doc3'])
        self.assertIsInstance(result.vocabulary, Vocabulary)
        self.assertTrue(result.vocabulary.frozen)
        self.assertEqual(set(result.vocabulary.token2id), CAT_STEMS | CAR_STEMS)
        self.assertIsInstance(result.corpus, BowCorpus)
        self.assertEqual(len(result.corpus), 4)
        self.assertIsInstance(result.model, LdaModel)
        self.assertTrue(result.model.frozen)
        self.assertIs(pipeline.model, result.model)
        self.assertIs(pipeline.vocabulary, result.vocabulary)
        self.assertGreaterEqual(result.perplexity, 1.0)
        self.assertTrue(math.isfinite(result.coherence))
        self.assertEqual([k for k, _ in result.topics], [0, 1])
        self.assertTrue(all(len(terms) == 3 for _, terms in result.topics))
        self.assertEqual(result.token_sequences[0][:3], ['cat', 'meow', 'pet'])
        self.assertEqual(str(pipeline), "TopicPipeline<num_topics=2, fitted=True>")

    def test_cat_car_topics(self):
        pipeline = cat_car_pipeline(0)
        result = pipeline.run(self.documents)
        top = [set(terms) for _, terms in result.topics]
        self.assertFalse(top[0] & top[1])
        cat_topic = 0 if top[0] <= CAT_STEMS else 1
        self.assertLessEqual(top[cat_topic], CAT_STEMS)
        self.assertLessEqual(top[1 - cat_topic], CAR_STEMS)
        thetas = [pipeline.transform(text) for _, text in self.documents]
        for theta in thetas[:2]:
            self.assertGreaterEqual(theta[cat_topic], 0.8)
        for theta in thetas[2:]:
            self.assertGreaterEqual(theta[1 - cat_topic], 0.8)

    def test_deterministic(self):
        result1 = cat_car_pipeline(7, max_passes=5).run(self.documents)
        result2 = cat_car_pipeline(7, max_passes=5).run(self.documents)
        self.assertTrue(np.array_equal(result1.model.get_topics(), result2.model.get_topics()))
        self.assertEqual(result1.perplexity, result2.perplexity)
        self.assertEqual(result1.coherence, result2.coherence)

    def test_bare_strings(self):
        result = cat_car_pipeline(0, max_passes=2).run(cat_car_documents)
        self.assertEqual(result.doc_ids, [0, 1, 2, 3])

    def test_pairs(self):
        result = cat_car_pipeline(0, max_passes=2).run([(10, text) for text in cat_car_documents])
        self.assertEqual(result.doc_ids, [10, 10, 10, 10])

    def test_transform(self):
        pipeline = cat_car_pipeline(0, max_passes=5)
        pipeline.run(self.documents)
        theta = pipeline.transform("The cats purr.")
        self.assertEqual(theta.shape, (2,))
        self.assertAlmostEqual(theta.sum(), 1.0)
        # no known term: uniform distribution
        self.assertTrue(np.allclose(pipeline.transform("zebras and giraffes"), [0.5, 0.5]))
        self.assertTrue(np.allclose(pipeline.transform(None), [0.5, 0.5]))
        self.assertEqual(len(pipeline.vocabulary), 8)

    def test_empty_documents(self):
        documents = self.documents + [Document('empty', ''), Document('missing', None), Document('stop', 'the and')]
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = cat_car_pipeline(0, max_passes=3).run(documents)
        self.assertEqual(len(result.corpus), 7)
        self.assertEqual(result.corpus.empty_documents, [4, 5, 6])
        self.assertEqual(result.token_sequences[4:], [[], [], []])
        self.assertTrue(any(issubclass(w.category, BowEncodingWarning) for w in caught))
        self.assertTrue(math.isfinite(result.perplexity))

    def test_nothing_to_train_on(self):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", BowEncodingWarning)
            self.assertRaises(InvalidConfiguration, TopicPipeline(num_topics=2).run, ["the and of", None])
        self.assertRaises(InvalidConfiguration, TopicPipeline(num_topics=2).run, [])

    def test_sliding_window_coherence(self):
        result = cat_car_pipeline(0, max_passes=5, coherence_measure='c_npmi').run(self.documents)
        self.assertTrue(-1.0 <= result.coherence <= 1.0)


if __name__ == '__main__':
    logging.basicConfig(level=logging.WARNING)
    unittest.main()
