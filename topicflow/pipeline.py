#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Run the whole topic discovery chain on a collection of raw documents:

    normalize -> build vocabulary -> encode -> fit LDA -> evaluate.

All options are given once, as flat names, when the pipeline is constructed; see
:meth:`topicflow.config.PipelineConfig.from_options` for the accepted names.

Examples
--------
.. sourcecode:: pycon

    >>> from topicflow.pipeline import Document, TopicPipeline
    >>>
    >>> documents = [
    ...     Document(1, "The cat purrs and meows at its pet owner."),
    ...     Document(2, "My pet cat likes to purr, then meow."),
    ...     Document(3, "Drive the car with its new engine down the road."),
    ...     Document(4, "The car engine roars on the open road drive."),
    ... ]
    >>> pipeline = TopicPipeline(num_topics=2, alpha=0.1, eta=0.1, max_passes=50, random_seed=1)
    >>> result = pipeline.run(documents)
    >>> theta = pipeline.transform("a cat that purrs")

"""

import logging
from collections import namedtuple

from topicflow.config import PipelineConfig
from topicflow.corpora import encode, encode_corpus, Vocabulary
from topicflow.models import evaluation
from topicflow.models.ldamodel import fit
from topicflow.parsing.preprocessing import TextNormalizer

logger = logging.getLogger(__name__)

Document = namedtuple('Document', 'doc_id text')

PipelineResult = namedtuple(
    'PipelineResult', 'doc_ids token_sequences vocabulary corpus model perplexity coherence topics'
)
PipelineResult.__doc__ = """Everything :meth:`TopicPipeline.run` produced, in pipeline order.

`topics` is the list of `(topic_index, [term, ...])` summaries; `perplexity` and `coherence` are
measured on the training corpus.
"""


class TopicPipeline(object):
    """Configured, reusable topic discovery pipeline.

    Attributes
    ----------
    config : :class:`~topicflow.config.PipelineConfig`
        Validated configuration.
    vocabulary : :class:`~topicflow.corpora.Vocabulary`
        Frozen vocabulary of the last :meth:`run`, None before that.
    model : :class:`~topicflow.models.ldamodel.LdaModel`
        Frozen model of the last :meth:`run`, None before that.

    """
    def __init__(self, **options):
        """

        Parameters
        ----------
        **options
            Flat option names, e.g. `num_topics=5, max_df=0.5, stemmer=None`.

        Raises
        ------
        :class:`~topicflow.exceptions.InvalidConfiguration`
            If an option is unknown or invalid. Nothing has been computed at that point.

        """
        self.config = PipelineConfig.from_options(options)
        self.normalizer = TextNormalizer(self.config.normalizer)
        self.vocabulary = None
        self.model = None

    @classmethod
    def from_options(cls, options):
        """Create a pipeline from a mapping of flat option names."""
        return cls(**dict(options))

    def __str__(self):
        return "%s<num_topics=%i, fitted=%s>" % (self.__class__.__name__, self.config.num_topics, self.model is not None)

    @staticmethod
    def _split_documents(documents):
        """Separate `(doc_id, text)` pairs into ids and texts. Bare strings get their position as id."""
        doc_ids, texts = [], []
        for position, document in enumerate(documents):
            if document is None or isinstance(document, (str, bytes)):
                doc_ids.append(position)
                texts.append(document)
            else:
                doc_id, text = document
                doc_ids.append(doc_id)
                texts.append(text)
        return doc_ids, texts

    def run(self, documents):
        """Normalize, encode and model `documents`, then score the model.

        Parameters
        ----------
        documents : iterable of {:class:`Document`, (object, str), str}
            Raw documents in corpus order. Missing or empty texts are allowed.

        Returns
        -------
        :class:`PipelineResult`

        Raises
        ------
        :class:`~topicflow.exceptions.InvalidConfiguration`
            If there are no documents, or no term survives normalization and pruning.

        """
        config = self.config
        doc_ids, texts = self._split_documents(documents)
        logger.info("running %s on %i documents", self, len(texts))

        token_sequences = [self.normalizer(text) for text in texts]
        vocabulary = Vocabulary.build(
            token_sequences,
            min_df=config.vocabulary.min_df, max_df=config.vocabulary.max_df, keep_n=config.vocabulary.keep_n,
        )
        corpus = encode_corpus(token_sequences, vocabulary)
        model = fit(
            corpus, config.num_topics, alpha=config.alpha, eta=config.eta,
            config=config.training, id2word=vocabulary,
        )
        self.vocabulary, self.model = vocabulary, model

        score = evaluation.perplexity(model, corpus)
        coherence = evaluation.coherence(
            model, corpus, top_n=config.top_n, measure=config.coherence_measure, texts=token_sequences,
        )
        topics = evaluation.topic_summaries(model, n=config.top_n)
        logger.info("finished %s: perplexity %.3f, %s coherence %.4f", self, score, config.coherence_measure, coherence)

        return PipelineResult(
            doc_ids=doc_ids, token_sequences=token_sequences, vocabulary=vocabulary, corpus=corpus,
            model=model, perplexity=score, coherence=coherence, topics=topics,
        )

    def transform(self, raw_text):
        """Get the topic distribution `theta` of a new raw document, using the vocabulary and model of :meth:`run`.

        Terms unknown to the vocabulary are ignored; a document without known terms gets the uniform distribution.

        Raises
        ------
        RuntimeError
            If :meth:`run` has not been called yet.

        """
        if self.model is None:
            raise RuntimeError("%s has no model yet, call run() first" % self.__class__.__name__)
        bow = encode(self.normalizer(raw_text), self.vocabulary)
        return self.model.document_topic_distribution(bow)
