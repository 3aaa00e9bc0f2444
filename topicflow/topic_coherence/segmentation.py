#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""This module contains functions to split the top terms of each topic into pairs of term ids to be confirmed."""

import logging

logger = logging.getLogger(__name__)


def s_one_pre(topics):
    r"""Pair every term with each term ranked above it.

    Notes
    -----
    s_one_pre segmentation is defined as
    :math:`s_{pre} = {(W', W^{*}) | W' = w_{i}; W^{*} = {w_j}; w_{i}, w_{j} \in W; i > j}`

    Parameters
    ----------
    topics : list of sequence of int
        Top term ids of every topic, most probable first.

    Returns
    -------
    list of list of (int, int)
        :math:`(W', W^{*})` pairs of each topic.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.topic_coherence import segmentation
        >>> segmentation.s_one_pre([[1, 2, 3], [4, 5, 6]])
        [[(2, 1), (3, 1), (3, 2)], [(5, 4), (6, 4), (6, 5)]]

    """
    s_one_pre_res = []
    for top_words in topics:
        top_words = list(top_words)
        s_one_pre_t = []
        for w_prime_index, w_prime in enumerate(top_words[1:]):
            for w_star in top_words[:w_prime_index + 1]:
                s_one_pre_t.append((w_prime, w_star))
        s_one_pre_res.append(s_one_pre_t)
    return s_one_pre_res


def s_one_one(topics):
    r"""Pair every term with every other term of the same topic, in both orders.

    Notes
    -----
    s_one_one segmentation is defined as
    :math:`s_{one} = {(W', W^{*}) | W' = {w_i}; W^{*} = {w_j}; w_{i}, w_{j} \in W; i \neq j}`

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.topic_coherence import segmentation
        >>> segmentation.s_one_one([[1, 2, 3]])
        [[(1, 2), (1, 3), (2, 1), (2, 3), (3, 1), (3, 2)]]

    """
    s_one_one_res = []
    for top_words in topics:
        top_words = list(top_words)
        s_one_one_res.append([
            (w_prime, w_star)
            for w_prime_index, w_prime in enumerate(top_words)
            for w_star_index, w_star in enumerate(top_words)
            if w_prime_index != w_star_index
        ])
    return s_one_one_res
