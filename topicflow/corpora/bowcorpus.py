#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Encode token sequences into sparse bag-of-words vectors against a frozen :class:`~topicflow.corpora.Vocabulary`.

Examples
--------
.. sourcecode:: pycon

    >>> from topicflow.corpora import build_vocabulary, encode, encode_corpus
    >>>
    >>> texts = [['cat', 'meow', 'cat'], ['car', 'road']]
    >>> vocab = build_vocabulary(texts)
    >>> encode(['cat', 'dog', 'cat', 'road'], vocab)
    [(0, 2), (3, 1)]
    >>> corpus = encode_corpus(texts, vocab)
    >>> len(corpus), corpus.num_terms
    (2, 4)

"""

import logging
import warnings

from topicflow import utils
from topicflow.exceptions import BowEncodingWarning

logger = logging.getLogger(__name__)


def encode(token_sequence, vocabulary):
    """Convert one token sequence into a bag-of-words, a list of `(term_id, count)` in ascending id order.

    Tokens absent from `vocabulary` are dropped silently. The counts sum to the number of kept tokens.

    """
    return vocabulary.doc2bow(token_sequence)


class BowCorpus(utils.SaveLoad):
    """Ordered, sized, re-iterable collection of bag-of-words documents encoded against one vocabulary.

    Attributes
    ----------
    vocabulary : :class:`~topicflow.corpora.Vocabulary`
        The vocabulary the documents were encoded with.
    empty_documents : list of int
        Positions of documents whose bag-of-words is empty (empty text, or every token out of vocabulary).

    """
    def __init__(self, documents, vocabulary, empty_documents=None):
        self.documents = [list(doc) for doc in documents]
        self.vocabulary = vocabulary
        if empty_documents is None:
            empty_documents = [docno for docno, doc in enumerate(self.documents) if not doc]
        self.empty_documents = list(empty_documents)

    def __iter__(self):
        for doc in self.documents:
            yield list(doc)

    def __len__(self):
        return len(self.documents)

    def __getitem__(self, docno):
        if isinstance(docno, slice):
            return [list(doc) for doc in self.documents[docno]]
        return list(self.documents[docno])

    def __str__(self):
        return "%s<%i documents, %i features, %i non-zero entries>" % (
            self.__class__.__name__, len(self), self.num_terms, self.num_nnz
        )

    @property
    def num_terms(self):
        """Number of features, the size of the vocabulary."""
        return len(self.vocabulary)

    @property
    def num_nnz(self):
        return sum(len(doc) for doc in self.documents)

    @property
    def num_words(self):
        """Total number of kept tokens over all documents."""
        return sum(cnt for doc in self.documents for _, cnt in doc)

    def to_texts(self):
        """Map every bag-of-words back to its terms, each term repeated `count` times, in ascending id order."""
        return [
            [self.vocabulary[termid] for termid, cnt in doc for _ in range(cnt)]
            for doc in self.documents
        ]


def encode_corpus(token_sequences, vocabulary):
    """Encode an ordered collection of token sequences into a :class:`BowCorpus`.

    Documents that encode to an empty bag-of-words stay in the corpus at their position. They are logged
    and summarized by a single :class:`~topicflow.exceptions.BowEncodingWarning`.

    Parameters
    ----------
    token_sequences : iterable of list of str
        Normalized documents, in corpus order.
    vocabulary : :class:`~topicflow.corpora.Vocabulary`
        Vocabulary to encode with. It is never modified.

    Returns
    -------
    :class:`BowCorpus`

    """
    documents, empty = [], []
    for docno, tokens in enumerate(token_sequences):
        bow = encode(tokens, vocabulary)
        if not bow:
            logger.debug("document #%i encoded to an empty bag-of-words (%i tokens in)", docno, len(tokens))
            empty.append(docno)
        documents.append(bow)

    corpus = BowCorpus(documents, vocabulary, empty_documents=empty)
    if empty:
        logger.warning(
            "%i out of %i documents encoded to an empty bag-of-words, first positions: %s",
            len(empty), len(documents), empty[:10]
        )
        warnings.warn(
            "%i of %i documents have an empty bag-of-words" % (len(empty), len(documents)),
            BowEncodingWarning, stacklevel=2,
        )
    logger.info("encoded %s", corpus)
    return corpus
