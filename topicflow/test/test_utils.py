#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""
Automated tests for checking various utils functions.
"""

import logging
import unittest

import numpy as np

from topicflow import utils
from topicflow.test.utils import temporary_file


class TestUtils(unittest.TestCase):
    def test_grouper(self):
        self.assertEqual(list(utils.grouper(range(10), 3)), [[0, 1, 2], [3, 4, 5], [6, 7, 8], [9]])
        self.assertEqual(list(utils.grouper([], 3)), [])

    def test_split_evenly(self):
        self.assertEqual(utils.split_evenly(list(range(7)), 3), [[0, 1, 2], [3, 4], [5, 6]])
        self.assertEqual(utils.split_evenly(list(range(2)), 4), [[0], [1]])
        self.assertEqual(utils.split_evenly([1], 1), [[1]])

    def test_to_unicode(self):
        self.assertEqual(utils.to_unicode(None), '')
        self.assertEqual(utils.to_unicode('kůň'), 'kůň')
        self.assertEqual(utils.to_unicode('kůň'.encode('utf8')), 'kůň')
        self.assertEqual(utils.to_unicode(b'a\xffb'), 'a�b')

    def test_get_random_state(self):
        state = np.random.RandomState(1)
        self.assertIs(utils.get_random_state(state), state)
        self.assertEqual(utils.get_random_state(5).randint(100), np.random.RandomState(5).randint(100))
        self.assertRaises(ValueError, utils.get_random_state, 'seed')

    def test_smart_extension(self):
        self.assertEqual(utils.smart_extension('model.lda', '.state'), 'model.lda.state')
        self.assertEqual(utils.smart_extension('model.lda.gz', '.state'), 'model.lda.state.gz')

    def test_revdict(self):
        self.assertEqual(utils.revdict({1: 2, 3: 4}), {2: 1, 4: 3})

    def test_pickle(self):
        with temporary_file('obj.pkl') as fname:
            utils.pickle({'a': [1, 2]}, fname)
            self.assertEqual(utils.unpickle(fname), {'a': [1, 2]})

    def test_is_corpus(self):
        self.assertTrue(utils.is_corpus([[(0, 1)], []])[0])
        self.assertFalse(utils.is_corpus([['cat', 'meow']])[0])
        self.assertFalse(utils.is_corpus([])[0])
        result, corpus = utils.is_corpus(iter([[(0, 1)], [(1, 2)]]))
        self.assertTrue(result)
        self.assertEqual(list(corpus), [[(0, 1)], [(1, 2)]])


class TestWindowing(unittest.TestCase):

    arr10_5 = np.array([
        [0, 1, 2, 3, 4],
        [1, 2, 3, 4, 5],
        [2, 3, 4, 5, 6],
        [3, 4, 5, 6, 7],
        [4, 5, 6, 7, 8],
        [5, 6, 7, 8, 9]
    ])

    def _assert_arrays_equal(self, expected, actual):
        self.assertEqual(expected.shape, actual.shape)
        self.assertTrue((actual == expected).all())

    def test_strided_windows1(self):
        out = utils.strided_windows(range(5), 2)
        expected = np.array([
            [0, 1],
            [1, 2],
            [2, 3],
            [3, 4]
        ])
        self._assert_arrays_equal(expected, out)

    def test_strided_windows2(self):
        input_arr = np.arange(10)
        out = utils.strided_windows(input_arr, 5)
        expected = self.arr10_5.copy()
        self._assert_arrays_equal(expected, out)
        out[0, 0] = 10
        self.assertEqual(10, input_arr[0], "should make view rather than copy")

    def test_strided_windows_window_size_exceeds_size(self):
        input_arr = np.array(['this', 'is', 'test'], dtype='object')
        out = utils.strided_windows(input_arr, 4)
        expected = np.ndarray((0, 0))
        self._assert_arrays_equal(expected, out)

    def test_strided_windows_window_size_equals_size(self):
        input_arr = np.array(['this', 'is', 'test'], dtype='object')
        out = utils.strided_windows(input_arr, 3)
        expected = np.array([input_arr.copy()])
        self._assert_arrays_equal(expected, out)

    def test_iter_windows_include_below_window_size(self):
        texts = [['this', 'is', 'a'], ['test', 'document']]
        out = utils.iter_windows(texts, 3, ignore_below_size=False)
        windows = [list(w) for w in out]
        self.assertEqual(texts, windows)

        out = utils.iter_windows(texts, 3)
        windows = [list(w) for w in out]
        self.assertEqual([texts[0]], windows)

    def test_iter_windows_list_texts(self):
        texts = [['this', 'is', 'a'], ['test', 'document']]
        windows = list(utils.iter_windows(texts, 2))
        list_windows = [list(iterable) for iterable in windows]
        expected = [['this', 'is'], ['is', 'a'], ['test', 'document']]
        self.assertListEqual(list_windows, expected)

    def test_iter_windows_uses_views(self):
        texts = [np.array(['this', 'is', 'a'], dtype='object'), ['test', 'document']]
        windows = list(utils.iter_windows(texts, 2))
        list_windows = [list(iterable) for iterable in windows]
        expected = [['this', 'is'], ['is', 'a'], ['test', 'document']]
        self.assertListEqual(list_windows, expected)
        windows[0][0] = 'modified'
        self.assertEqual('modified', texts[0][0])

    def test_iter_windows_with_copy(self):
        texts = [
            np.array(['this', 'is', 'a'], dtype='object'),
            np.array(['test', 'document'], dtype='object')
        ]
        windows = list(utils.iter_windows(texts, 2, copy=True))

        windows[0][0] = 'modified'
        self.assertEqual('this', texts[0][0])

        windows[2][0] = 'modified'
        self.assertEqual('test', texts[1][0])

    def test_iter_windows_doc_num(self):
        texts = [np.arange(3), np.arange(1)]
        self.assertEqual(
            [doc_num for doc_num, _ in utils.iter_windows(texts, 2, ignore_below_size=False, include_doc_num=True)],
            [0, 0, 1]
        )


if __name__ == '__main__':
    logging.basicConfig(level=logging.WARNING)
    unittest.main()
