#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""This module contains classes for analyzing the texts of a corpus to accumulate
statistical information about word occurrences."""

import logging

import numpy as np

from topicflow import utils

logger = logging.getLogger(__name__)


def _ids_to_words(ids, dictionary):
    """Convert an iterable of ids to their corresponding words using a vocabulary."""
    top_words = set()
    for word_id in ids:
        top_words.add(dictionary[word_id])
    return top_words


class BaseAnalyzer(object):
    """Base class for corpus and text analyzers.

    Occurrence counts are kept only for `relevant_ids`, the term ids that appear in some segment.
    Looking up any other id raises KeyError.

    """
    def __init__(self, relevant_ids):
        self.relevant_ids = set(relevant_ids)
        self._vocab_size = len(self.relevant_ids)
        self.id2contiguous = {word_id: n for n, word_id in enumerate(sorted(self.relevant_ids))}
        self.log_every = 1000
        self._num_docs = 0

    @property
    def num_docs(self):
        return self._num_docs

    @num_docs.setter
    def num_docs(self, num):
        self._num_docs = num
        if self._num_docs % self.log_every == 0:
            logger.info("%s accumulated stats from %d documents", self.__class__.__name__, self._num_docs)

    def analyze_text(self, text, doc_num=None):
        raise NotImplementedError("Base classes should implement analyze_text.")

    def __getitem__(self, word_or_words):
        if hasattr(word_or_words, '__iter__'):
            return self.get_co_occurrences(*word_or_words)
        else:
            return self.get_occurrences(word_or_words)

    def get_occurrences(self, word_id):
        """Return number of docs the word occurs in, once `accumulate` has been called."""
        return self._get_occurrences(self.id2contiguous[word_id])

    def get_co_occurrences(self, word_id1, word_id2):
        """Return number of docs the words co-occur in, once `accumulate` has been called."""
        return self._get_co_occurrences(self.id2contiguous[word_id1], self.id2contiguous[word_id2])


class InvertedIndexBased(BaseAnalyzer):
    """Analyzer that builds up an inverted index (relevant term -> set of document numbers) to accumulate stats."""
    def __init__(self, *args):
        super(InvertedIndexBased, self).__init__(*args)
        self._inverted_index = [set() for _ in range(self._vocab_size)]

    def _get_occurrences(self, word_id):
        return len(self._inverted_index[word_id])

    def _get_co_occurrences(self, word_id1, word_id2):
        s1 = self._inverted_index[word_id1]
        s2 = self._inverted_index[word_id2]
        return len(s1.intersection(s2))

    def index_to_dict(self):
        contiguous2id = {n: word_id for word_id, n in self.id2contiguous.items()}
        return {contiguous2id[n]: doc_id_set for n, doc_id_set in enumerate(self._inverted_index)}


class CorpusAccumulator(InvertedIndexBased):
    """Gather word occurrence stats from a corpus by iterating over its BoW representation.

    Every document counts once per term, whatever the term's count (boolean document).

    """
    def analyze_text(self, text, doc_num=None):
        doc_words = frozenset(x[0] for x in text)
        top_ids_in_doc = self.relevant_ids.intersection(doc_words)
        for word_id in top_ids_in_doc:
            self._inverted_index[self.id2contiguous[word_id]].add(self._num_docs)

    def accumulate(self, corpus):
        for document in corpus:
            self.analyze_text(document)
            self.num_docs += 1
        return self


class InvertedIndexAccumulator(InvertedIndexBased):
    """Gather word occurrence stats from token texts by sliding a window over them.

    Each window position is a virtual document. Texts shorter than the window are one virtual document;
    texts without any relevant term are skipped.

    """
    def __init__(self, relevant_ids, dictionary):
        super(InvertedIndexAccumulator, self).__init__(relevant_ids)
        self.relevant_words = _ids_to_words(self.relevant_ids, dictionary)
        self.token2id = dictionary.token2id
        self._none_token = self._vocab_size  # placeholder for irrelevant tokens inside a window

    def __str__(self):
        return "%s<%i relevant terms, %i virtual documents>" % (
            self.__class__.__name__, self._vocab_size, self._num_docs
        )

    def accumulate(self, texts, window_size):
        relevant_texts = self._iter_texts(texts)
        windows = utils.iter_windows(relevant_texts, window_size, ignore_below_size=False, include_doc_num=True)
        for doc_num, virtual_document in windows:
            self.analyze_text(virtual_document, doc_num)
            self.num_docs += 1
        return self

    def _iter_texts(self, texts):
        dtype = np.uint16 if np.iinfo(np.uint16).max >= self._vocab_size else np.uint32
        for text in texts:
            if self.text_is_relevant(text):
                yield np.array([
                    self.id2contiguous[self.token2id[w]] if w in self.relevant_words
                    else self._none_token
                    for w in text], dtype=dtype)

    def text_is_relevant(self, text):
        """Return True if the text has any relevant words, else False."""
        for word in text:
            if word in self.relevant_words:
                return True
        return False

    def analyze_text(self, window, doc_num=None):
        for word_id in window:
            if word_id != self._none_token:
                self._inverted_index[word_id].add(self._num_docs)
