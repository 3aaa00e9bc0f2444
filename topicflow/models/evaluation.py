#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Score a trained topic model: perplexity, topic coherence and top-term summaries.

None of these functions modifies the model; given the same model and corpus they return the same value.

Examples
--------
.. sourcecode:: pycon

    >>> from topicflow.models import evaluation
    >>> from topicflow.models.ldamodel import fit
    >>> from topicflow.test.utils import common_corpus
    >>>
    >>> lda = fit(common_corpus, num_topics=2, config={'random_seed': 0})
    >>> score = evaluation.perplexity(lda, common_corpus)
    >>> summaries = evaluation.topic_summaries(lda, n=3)

"""

import logging

import numpy as np

from topicflow.models.coherencemodel import CoherenceModel

logger = logging.getLogger(__name__)


def perplexity(model, corpus):
    r"""Perplexity of `corpus` under `model`, lower is better.

    .. math::

        \exp\left(-\frac{\sum_d \sum_w n_{dw} \log(\theta_d \cdot \phi_{:, w} + \epsilon)}{N}\right)

    with :math:`\theta_d` inferred for every document, :math:`N` the number of words in `corpus` and
    :math:`\epsilon` the smoothing constant the model trains with.

    Parameters
    ----------
    model : :class:`~topicflow.models.ldamodel.LdaModel`
        Trained model.
    corpus : iterable of list of (int, int)
        Bag-of-words documents, encoded against the model's vocabulary.

    Returns
    -------
    float

    Raises
    ------
    ValueError
        If `corpus` contains no words.

    """
    phi = model.topic_term_distribution()
    eps = getattr(model, 'eps', 1e-100)
    loglik, num_words = 0.0, 0
    for doc in corpus:
        doc = list(doc)
        counts = np.array([cnt for _, cnt in doc], dtype=np.float64)
        if not doc or counts.sum() == 0:
            continue
        ids = [int(idx) for idx, _ in doc]
        theta = model.document_topic_distribution(doc)
        word_probs = np.dot(theta, phi[:, ids])
        loglik += float(np.dot(counts, np.log(word_probs + eps)))
        num_words += int(counts.sum())

    if num_words == 0:
        raise ValueError("perplexity is undefined for a corpus without words")
    result = float(np.exp(-loglik / num_words))
    logger.debug("perplexity %.3f over %i words", result, num_words)
    return result


def coherence(model, corpus, top_n=10, measure='u_mass', texts=None):
    """Mean coherence of the top `top_n` terms of every topic of `model`, higher is better.

    Parameters
    ----------
    model : :class:`~topicflow.models.ldamodel.LdaModel`
        Trained model.
    corpus : iterable of list of (int, int)
        Reference bag-of-words corpus, used by 'u_mass'.
    top_n : int, optional
        Number of top terms per topic.
    measure : {'u_mass', 'c_uci', 'c_npmi'}, optional
        Coherence measure, see :mod:`~topicflow.models.coherencemodel`.
    texts : list of list of str, optional
        Token sequences, required by 'c_uci' and 'c_npmi'.

    Returns
    -------
    float

    """
    cm = CoherenceModel(model=model, corpus=corpus, texts=texts, coherence=measure, topn=top_n)
    return cm.get_coherence()


def topic_summaries(model, n=10):
    """Top `n` terms of every topic, as a list of `(topic_index, [term, ...])` in topic order."""
    return [(topic_index, model.top_terms(topic_index, n)) for topic_index in range(model.num_topics)]
