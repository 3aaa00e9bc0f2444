#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""This module contains functions to estimate word (co-)occurrence probabilities for segmented topics."""

import itertools
import logging

from topicflow.topic_coherence.text_analysis import CorpusAccumulator, InvertedIndexAccumulator

logger = logging.getLogger(__name__)


def p_boolean_document(corpus, segmented_topics):
    """Perform the boolean document probability estimation. Boolean document estimates the probability of a single word
    as the number of documents in which the word occurs divided by the total number of documents.

    Parameters
    ----------
    corpus : iterable of list of (int, int)
        The corpus of documents.
    segmented_topics : list of list of (int, int)
        Output of one of the :mod:`~topicflow.topic_coherence.segmentation` functions.

    Returns
    -------
    :class:`~topicflow.topic_coherence.text_analysis.CorpusAccumulator`
        Accumulator that can be used to lookup term document counts and co-occurrence counts.

    """
    top_ids = unique_ids_from_segments(segmented_topics)
    return CorpusAccumulator(top_ids).accumulate(corpus)


def p_boolean_sliding_window(texts, segmented_topics, dictionary, window_size):
    """Perform the boolean sliding window probability estimation.

    Notes
    -----
    Boolean sliding window determines word counts using a sliding window. The window
    moves over the documents one word token per step. Each step defines a new virtual
    document by copying the window content. Boolean document is applied to these virtual
    documents to compute word probabilities.

    Parameters
    ----------
    texts : iterable of list of str
        Token sequences.
    segmented_topics : list of list of (int, int)
        Output of one of the :mod:`~topicflow.topic_coherence.segmentation` functions.
    dictionary : :class:`~topicflow.corpora.Vocabulary`
        Mapping between the terms of `texts` and the ids in `segmented_topics`.
    window_size : int
        Size of the sliding window.

    Returns
    -------
    :class:`~topicflow.topic_coherence.text_analysis.InvertedIndexAccumulator`

    """
    top_ids = unique_ids_from_segments(segmented_topics)
    accumulator = InvertedIndexAccumulator(top_ids, dictionary)
    logger.info("using %s to estimate probabilities from sliding windows", accumulator)
    return accumulator.accumulate(texts, window_size)


def unique_ids_from_segments(segmented_topics):
    """Return the set of all unique ids in a list of segmented topics.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.topic_coherence import probability_estimation
        >>> segmentation = [[(1, 2)]]
        >>> probability_estimation.unique_ids_from_segments(segmentation)
        {1, 2}

    """
    unique_ids = set()  # is a set of all the unique ids contained in topics.
    for s_i in segmented_topics:
        for word_id in itertools.chain.from_iterable(s_i):
            unique_ids.add(word_id)
    return unique_ids
