#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

import logging
import unittest

import numpy as np
from scipy.special import psi  # gamma function utils

from topicflow import matutils


def dirichlet_expectation(alpha):
    r"""For a vector :math:`\theta \sim Dir(\alpha)`, compute :math:`E[log \theta]`."""
    if len(alpha.shape) == 1:
        result = psi(alpha) - psi(np.sum(alpha))
    else:
        result = psi(alpha) - psi(np.sum(alpha, 1))[:, np.newaxis]
    return result


class TestLdaModelInner(unittest.TestCase):
    def setUp(self):
        self.random_state = np.random.RandomState()
        self.num_runs = 100  # test functions with *num_runs* random inputs
        self.num_topics = 100

    def testLogSumExp(self):
        # test logsumexp against a direct computation on small inputs
        for dtype in [np.float16, np.float32, np.float64]:
            for i in range(self.num_runs):
                input = self.random_state.uniform(-1000, 1000, size=(self.num_topics, 1))
                known_good = np.log(np.sum(np.exp(input - input.max()))) + input.max()
                test_values = matutils.logsumexp(input.astype(dtype))
                msg = "logsumexp failed for dtype={}".format(dtype)
                self.assertTrue(np.allclose(known_good, test_values, rtol=1e-2), msg)

    def testMeanAbsoluteDifference(self):
        for dtype in [np.float16, np.float32, np.float64]:
            for i in range(self.num_runs):
                input1 = self.random_state.uniform(-10000, 10000, size=(self.num_topics,))
                input2 = self.random_state.uniform(-10000, 10000, size=(self.num_topics,))
                known_good = np.mean(np.abs(input1 - input2))
                test_values = matutils.mean_absolute_difference(input1.astype(dtype), input2.astype(dtype))
                msg = "mean_absolute_difference failed for dtype={}".format(dtype)
                self.assertTrue(np.allclose(known_good, test_values, rtol=1e-2), msg)

    def testDirichletExpectation(self):
        for dtype in [np.float32, np.float64]:
            for i in range(self.num_runs):
                # 1 dimensional case
                input_1d = self.random_state.uniform(.01, 10000, size=(self.num_topics,))
                known_good = dirichlet_expectation(input_1d)
                test_values = matutils.dirichlet_expectation(input_1d.astype(dtype))
                msg = "dirichlet_expectation_1d failed for dtype={}".format(dtype)
                self.assertTrue(np.allclose(known_good, test_values, rtol=1e-4), msg)
                self.assertEqual(test_values.dtype, dtype)

                # 2 dimensional case
                input_2d = self.random_state.uniform(.01, 10000, size=(1, self.num_topics,))
                known_good = dirichlet_expectation(input_2d)
                test_values = matutils.dirichlet_expectation(input_2d.astype(dtype))
                msg = "dirichlet_expectation_2d failed for dtype={}".format(dtype)
                self.assertTrue(np.allclose(known_good, test_values, rtol=1e-4), msg)


class TestArgsort(unittest.TestCase):
    def test_reverse_ties_by_index(self):
        self.assertEqual(matutils.argsort([0.2, 0.5, 0.2, 0.1], topn=3, reverse=True).tolist(), [1, 0, 2])
        self.assertEqual(matutils.argsort([0.3, 0.3, 0.3], reverse=True).tolist(), [0, 1, 2])

    def test_ascending(self):
        self.assertEqual(matutils.argsort([3, 1, 2]).tolist(), [1, 2, 0])
        self.assertEqual(matutils.argsort([3, 1, 2], topn=1).tolist(), [1])

    def test_topn_edges(self):
        self.assertEqual(matutils.argsort([3, 1, 2], topn=0).tolist(), [])
        self.assertEqual(matutils.argsort([3, 1, 2], topn=10, reverse=True).tolist(), [0, 2, 1])


class TestRows(unittest.TestCase):
    def test_normalize_rows(self):
        result = matutils.normalize_rows(np.array([[1.0, 3.0], [2.0, 2.0]]))
        self.assertTrue(np.allclose(result, [[0.25, 0.75], [0.5, 0.5]]))

    def test_read_only(self):
        array = np.zeros(3)
        self.assertIs(matutils.read_only(array), array)
        self.assertFalse(array.flags.writeable)
        with self.assertRaises(ValueError):
            array[0] = 1.0


if __name__ == '__main__':
    logging.basicConfig(level=logging.WARNING)
    unittest.main()
