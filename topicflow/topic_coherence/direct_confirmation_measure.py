#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""This module contains functions to compute direct confirmation on a pair of words."""

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Should be small. Value as suggested in paper http://svn.aksw.org/papers/2015/WSDM_Topic_Evaluation/public.pdf
EPSILON = 1e-12


def log_conditional_probability(segmented_topics, accumulator, with_std=False, with_support=False):
    r"""Calculate the log-conditional-probability measure which is used by coherence measures such as `u_mass`.

    This is defined as :math:`m_{lc}(S_i) = log \frac{P(W', W^{*}) + \epsilon}{P(W^{*})}`.
    A pair whose conditioning term :math:`W^{*}` never occurs scores 0.0.

    Parameters
    ----------
    segmented_topics : list of list of (int, int)
        Output from :func:`~topicflow.topic_coherence.segmentation.s_one_pre` or
        :func:`~topicflow.topic_coherence.segmentation.s_one_one`.
    accumulator : :class:`~topicflow.topic_coherence.text_analysis.InvertedIndexBased`
        Word occurrence accumulator from :mod:`topicflow.topic_coherence.probability_estimation`.
    with_std : bool
        Also return the standard deviation across the pairs of each topic.
    with_support : bool
        Also return the number of pairs of each topic.

    Returns
    -------
    list of float
        Log conditional probabilities measurement for each topic.

    """
    topic_coherences = []
    num_docs = float(accumulator.num_docs)
    for s_i in segmented_topics:
        segment_sims = []
        for w_prime, w_star in s_i:
            w_star_count = accumulator[w_star]
            if not w_star_count or not num_docs:
                m_lc_i = 0.0
            else:
                co_occur_count = accumulator[w_prime, w_star]
                m_lc_i = np.log(((co_occur_count / num_docs) + EPSILON) / (w_star_count / num_docs))
            segment_sims.append(m_lc_i)
        topic_coherences.append(aggregate_segment_sims(segment_sims, with_std, with_support))

    return topic_coherences


def aggregate_segment_sims(segment_sims, with_std, with_support):
    """Compute (mean[, std[, support]]) of the pairwise values of a single topic.

    Examples
    ---------
    .. sourcecode:: pycon

        >>> from topicflow.topic_coherence import direct_confirmation_measure
        >>> direct_confirmation_measure.aggregate_segment_sims([0.25, 0.75, 0.5, 0.25], False, False)
        0.4375

    """
    if not segment_sims:  # a topic with a single term has no pairs
        segment_sims = [0.0]
    mean = float(np.mean(segment_sims))
    stats = [mean]
    if with_std:
        stats.append(float(np.std(segment_sims)))
    if with_support:
        stats.append(len(segment_sims))

    return stats[0] if len(stats) == 1 else tuple(stats)


def log_ratio_measure(segmented_topics, accumulator, normalize=False, with_std=False, with_support=False):
    r"""Compute the log ratio measure (PMI), or its normalized variant (NPMI), for `segmented_topics`.

    Notes
    -----
    If `normalize=False`:
        :math:`m_{lr}(S_i) = log \frac{P(W', W^{*}) + \epsilon}{P(W') * P(W^{*})}`, used by `c_uci`.
    If `normalize=True`:
        :math:`m_{nlr}(S_i) = \frac{m_{lr}(S_i)}{-log(P(W', W^{*}) + \epsilon)}`, used by `c_npmi`.

    A pair where either term never occurs scores 0.0. Two terms that occur together in every
    document have NPMI 1.0.

    Returns
    -------
    list of float
        Log ratio measurements for each topic.

    """
    topic_coherences = []
    num_docs = float(accumulator.num_docs)
    for s_i in segmented_topics:
        segment_sims = []
        for w_prime, w_star in s_i:
            w_prime_count = accumulator[w_prime]
            w_star_count = accumulator[w_star]
            if not w_prime_count or not w_star_count or not num_docs:
                segment_sims.append(0.0)
                continue
            co_occur_count = accumulator[w_prime, w_star]
            co_doc_prob = co_occur_count / num_docs
            numerator = co_doc_prob + EPSILON
            denominator = (w_prime_count / num_docs) * (w_star_count / num_docs)
            m_lr_i = np.log(numerator / denominator)
            if normalize:
                if co_doc_prob >= 1.0:
                    m_lr_i = 1.0
                else:
                    m_lr_i = m_lr_i / (-np.log(co_doc_prob + EPSILON))
            segment_sims.append(m_lr_i)
        topic_coherences.append(aggregate_segment_sims(segment_sims, with_std, with_support))

    return topic_coherences
