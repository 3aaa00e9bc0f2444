#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Calculate topic coherence with the four stage pipeline of Roeder, Both and Hinneburg [1]_:

    Segmentation -> Probability Estimation -> Confirmation Measure -> Aggregation.

Supported measures:

* 'u_mass': pairs every top term with the terms ranked above it, estimates probabilities as
  document frequencies over the bag-of-words corpus and confirms with the log conditional probability.
* 'c_uci': pairs every top term with every other, estimates probabilities over sliding windows of
  the token texts and confirms with the pointwise mutual information (PMI).
* 'c_npmi': as 'c_uci', with normalized PMI.

Examples
--------
.. sourcecode:: pycon

    >>> from topicflow.models.coherencemodel import CoherenceModel
    >>> from topicflow.models.ldamodel import fit
    >>> from topicflow.test.utils import common_corpus, common_texts
    >>>
    >>> lda = fit(common_corpus, num_topics=2, config={'random_seed': 1})
    >>> cm = CoherenceModel(model=lda, corpus=common_corpus, coherence='u_mass')
    >>> coherence = cm.get_coherence()  # get coherence value

.. [1] Michael Roeder, Andreas Both and Alexander Hinneburg. Exploring the space of topic
  coherence measures. http://svn.aksw.org/papers/2015/WSDM_Topic_Evaluation/public.pdf.

"""

import logging
from collections import namedtuple

from topicflow import matutils
from topicflow.topic_coherence import (segmentation, probability_estimation,
                                       direct_confirmation_measure, aggregation)

logger = logging.getLogger(__name__)

BOOLEAN_DOCUMENT_BASED = {'u_mass'}
SLIDING_WINDOW_BASED = {'c_uci', 'c_npmi'}

_make_pipeline = namedtuple('Coherence_Measure', 'seg, prob, conf, aggr')
COHERENCE_MEASURES = {
    'u_mass': _make_pipeline(
        segmentation.s_one_pre,
        probability_estimation.p_boolean_document,
        direct_confirmation_measure.log_conditional_probability,
        aggregation.arithmetic_mean
    ),
    'c_uci': _make_pipeline(
        segmentation.s_one_one,
        probability_estimation.p_boolean_sliding_window,
        direct_confirmation_measure.log_ratio_measure,
        aggregation.arithmetic_mean
    ),
    'c_npmi': _make_pipeline(
        segmentation.s_one_one,
        probability_estimation.p_boolean_sliding_window,
        direct_confirmation_measure.log_ratio_measure,
        aggregation.arithmetic_mean
    ),
}

SLIDING_WINDOW_SIZES = {
    'c_uci': 10,
    'c_npmi': 10,
    'u_mass': None
}


class CoherenceModel(object):
    """Compute the coherence of the topics of a trained model, or of explicitly given topics.

    The pipeline phases can be executed individually:

    1. :meth:`segment_topics` splits the top terms of every topic into pairs,
    2. :meth:`estimate_probabilities` accumulates (co-)occurrence counts from the corpus or texts and
       caches them on the instance,
    3. :meth:`get_coherence_per_topic` confirms every pair and averages per topic,
    4. :meth:`aggregate_measures` averages the per-topic values.

    The model is never modified.

    """
    def __init__(self, model=None, topics=None, texts=None, corpus=None, dictionary=None,
                 window_size=None, coherence='u_mass', topn=10):
        """

        Parameters
        ----------
        model : :class:`~topicflow.models.ldamodel.LdaModel`, optional
            Trained topic model. Either `model` or `topics` is required.
        topics : list of list of str, optional
            Tokenized topics, most probable term first. Needs `dictionary`.
        texts : list of list of str, optional
            Token sequences, needed by the sliding window measures. For 'u_mass' they are encoded
            with `dictionary` when no `corpus` is given.
        corpus : iterable of list of (int, int), optional
            Bag-of-words corpus, used by 'u_mass'.
        dictionary : :class:`~topicflow.corpora.Vocabulary`, optional
            Term mapping of `corpus`. Defaults to `model.id2word`.
        window_size : int, optional
            Sliding window size; defaults to 10 for 'c_uci' and 'c_npmi'. Ignored by 'u_mass'.
        coherence : {'u_mass', 'c_uci', 'c_npmi'}
            Coherence measure.
        topn : int, optional
            Number of top terms of every topic to use.

        Raises
        ------
        ValueError
            For an unsupported measure, or when the inputs the measure needs are missing.

        """
        if model is None and topics is None:
            raise ValueError("one of model or topics has to be provided")
        elif topics is not None and dictionary is None:
            raise ValueError("dictionary has to be provided if topics are to be used")
        if texts is None and corpus is None:
            raise ValueError("one of texts or corpus has to be provided")
        if coherence not in COHERENCE_MEASURES:
            raise ValueError("%s coherence is not currently supported" % coherence)

        self.dictionary = dictionary if dictionary is not None else model.id2word
        self.coherence = coherence
        self.window_size = window_size if window_size is not None else SLIDING_WINDOW_SIZES[coherence]
        self.texts = texts
        self.corpus = corpus

        if coherence in BOOLEAN_DOCUMENT_BASED:
            if corpus is None:
                self.corpus = [self.dictionary.doc2bow(text) for text in texts]
        else:
            if texts is None:
                raise ValueError("'texts' should be provided for %s coherence" % coherence)
            if not hasattr(self.dictionary, 'token2id'):
                raise ValueError("%s coherence needs a Vocabulary to map texts onto term ids" % coherence)

        self.topn = topn
        self.model = model
        self._accumulator = None
        if topics is not None:
            self.topics = [self._ensure_elements_are_ids(topic)[:topn] for topic in topics]
        else:
            self.topics = self._get_topics_from_model(model, topn)

    def __str__(self):
        return "%s<coherence=%s, topn=%i, num_topics=%i>" % (
            self.__class__.__name__, self.coherence, self.topn, len(self.topics)
        )

    @property
    def measure(self):
        return COHERENCE_MEASURES[self.coherence]

    def _ensure_elements_are_ids(self, topic):
        """Interpret `topic` as either a list of tokens or a list of term ids, whichever matches more of it."""
        topic = list(topic)
        ids_from_tokens = [self.dictionary.token2id[t] for t in topic if t in self.dictionary.token2id]
        ids_from_ids = [int(i) for i in topic if not isinstance(i, str) and i in self.dictionary]
        if len(ids_from_tokens) > len(ids_from_ids):
            return ids_from_tokens
        elif len(ids_from_ids) > len(ids_from_tokens):
            return ids_from_ids
        else:
            raise ValueError('unable to interpret topic as either a list of tokens or a list of ids')

    @staticmethod
    def _get_topics_from_model(model, topn):
        """Top `topn` term ids of every topic of `model`, ties by ascending id."""
        try:
            return [
                [int(idx) for idx in matutils.argsort(topic, topn=topn, reverse=True)]
                for topic in model.get_topics()
            ]
        except AttributeError:
            raise ValueError(
                "This topic model is not currently supported. Supported topic models"
                " should implement the `get_topics` method."
            )

    def segment_topics(self):
        return self.measure.seg(self.topics)

    def estimate_probabilities(self, segmented_topics=None):
        """Accumulate word occurrences and co-occurrences from the corpus or texts, as the measure requires."""
        if segmented_topics is None:
            segmented_topics = self.segment_topics()

        if self.coherence in BOOLEAN_DOCUMENT_BASED:
            self._accumulator = self.measure.prob(self.corpus, segmented_topics)
        else:
            self._accumulator = self.measure.prob(
                texts=self.texts, segmented_topics=segmented_topics,
                dictionary=self.dictionary, window_size=self.window_size,
            )

        return self._accumulator

    def get_coherence_per_topic(self, segmented_topics=None, with_std=False, with_support=False):
        """Get the coherence of every topic, in topic order."""
        measure = self.measure
        if segmented_topics is None:
            segmented_topics = measure.seg(self.topics)
        if self._accumulator is None:
            self.estimate_probabilities(segmented_topics)

        kwargs = dict(with_std=with_std, with_support=with_support)
        if self.coherence in SLIDING_WINDOW_BASED:
            kwargs['normalize'] = (self.coherence == 'c_npmi')

        return measure.conf(segmented_topics, self._accumulator, **kwargs)

    def aggregate_measures(self, topic_coherences):
        """Aggregate the individual topic coherence measures using the pipeline's aggregation function."""
        return self.measure.aggr(topic_coherences)

    def get_coherence(self):
        """Get the coherence of all topics, the mean of the per-topic values."""
        confirmed_measures = self.get_coherence_per_topic()
        coherence = self.aggregate_measures(confirmed_measures)
        logger.info("%s coherence of %i topics: %.4f", self.coherence, len(confirmed_measures), coherence)
        return coherence
