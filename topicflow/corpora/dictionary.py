#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""This module implements the Vocabulary: a bijection between normalized terms and dense integer ids.

Ids are assigned in order of first occurrence across the ordered document collection (first document,
first token), so the same documents in the same order always give the same ids. Document-frequency pruning
removes terms entirely and then compacts the ids, keeping first-occurrence order among the survivors.

"""

from collections import Counter
from collections.abc import Mapping
import logging
import math
from types import MappingProxyType
from typing import List, Optional, Tuple

from topicflow import utils


logger = logging.getLogger(__name__)

_STATISTICS = ('token2id', 'id2token', 'cfs', 'dfs')


class Vocabulary(utils.SaveLoad, Mapping):
    """Mapping between normalized terms and their integer ids, plus corpus statistics.

    Attributes
    ----------
    token2id : dict of (str, int)
        term -> term_id. The reverse mapping to `self[term_id]`.
    id2token : dict of (int, str)
        term_id -> term.
    cfs : dict of (int, int)
        Collection frequencies: term_id -> how many instances of this term are contained in the documents.
    dfs : dict of (int, int)
        Document frequencies: term_id -> how many documents contain this term.
    num_docs : int
        Number of documents processed.
    num_pos : int
        Total number of corpus positions (number of processed tokens).
    num_nnz : int
        Total number of non-zeroes in the BOW matrix (sum of the number of unique
        terms per document over the entire corpus).

    """
    def __init__(self, documents=None):
        """

        Parameters
        ----------
        documents : iterable of iterable of str, optional
            Token sequences used to initialize the mapping and collect corpus statistics.

        Examples
        --------
        .. sourcecode:: pycon

            >>> from topicflow.corpora import Vocabulary
            >>>
            >>> vocab = Vocabulary([['cat', 'meow'], ['car', 'cat']])
            >>> vocab.token2id
            {'cat': 0, 'meow': 1, 'car': 2}
            >>> vocab.doc2bow(['cat', 'dog', 'cat'])
            [(0, 2)]

        """
        self.token2id = {}
        self.id2token = {}
        self.cfs = {}
        self.dfs = {}

        self.num_docs = 0
        self.num_pos = 0
        self.num_nnz = 0
        self.frozen = False

        if documents is not None:
            self.add_documents(documents)

    @classmethod
    def build(cls, documents, min_df=None, max_df=None, keep_n=None):
        """Build a frozen vocabulary from `documents`, optionally pruned by document frequency.

        See :meth:`~topicflow.corpora.dictionary.Vocabulary.filter_extremes` for the meaning of the pruning options.

        """
        vocab = cls(documents)
        if min_df is not None or max_df is not None or keep_n is not None:
            vocab.filter_extremes(min_df=min_df, max_df=max_df, keep_n=keep_n)
        return vocab.freeze()

    def __getitem__(self, tokenid):
        """Get the term that corresponds to `tokenid`.

        Raises
        ------
        KeyError
            If this Vocabulary doesn't contain such `tokenid`.

        """
        return self.id2token[tokenid]

    def __iter__(self):
        """Iterate over all term ids, in ascending order."""
        return iter(range(len(self.token2id)))

    def keys(self):
        """Get all term ids, in ascending order."""
        return list(range(len(self.token2id)))

    def __len__(self):
        """Get the number of stored terms."""
        return len(self.token2id)

    def __contains__(self, tokenid):
        return tokenid in self.id2token

    def __str__(self):
        some_keys = [self.id2token[i] for i in range(min(len(self), 5))]
        return "%s<%i unique tokens: %s%s>" % (
            self.__class__.__name__, len(self), some_keys, '...' if len(self) > 5 else ''
        )

    def freeze(self):
        """Make the vocabulary read-only. Ids never change afterwards. Returns `self`.

        The term mappings and frequency statistics are replaced by read-only views.

        """
        if not self.frozen:
            for attrib in _STATISTICS:
                setattr(self, attrib, MappingProxyType(dict(getattr(self, attrib))))
            self.frozen = True
        return self

    def __getstate__(self):
        state = self.__dict__.copy()
        for attrib in _STATISTICS:
            if attrib in state:
                state[attrib] = dict(state[attrib])  # mapping proxies do not pickle
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        if state.get('frozen'):
            self.frozen = False
            self.freeze()

    def _check_mutable(self):
        if self.frozen:
            raise RuntimeError("%s is frozen, build a new vocabulary instead of mutating it" % self.__class__.__name__)

    def add_documents(self, documents):
        """Update the vocabulary from a collection of documents.

        New terms get the next free ids in order of first occurrence.

        Parameters
        ----------
        documents : iterable of iterable of str
            Input token sequences.

        Raises
        ------
        RuntimeError
            If the vocabulary is frozen.

        """
        self._check_mutable()
        for docno, document in enumerate(documents):
            # log progress, once every 10k docs
            if docno % 10000 == 0:
                logger.info("adding document #%i to %s", docno, self)

            if isinstance(document, str):
                raise TypeError("add_documents expects an array of unicode tokens on input, not a single string")

            counter = Counter()
            for token in document:
                if token not in self.token2id:
                    tokenid = len(self.token2id)
                    self.token2id[token] = tokenid
                    self.id2token[tokenid] = token
                counter[token] += 1

            for token, frequency in counter.items():
                tokenid = self.token2id[token]
                self.cfs[tokenid] = self.cfs.get(tokenid, 0) + frequency
                self.dfs[tokenid] = self.dfs.get(tokenid, 0) + 1

            self.num_docs += 1
            self.num_pos += sum(counter.values())
            self.num_nnz += len(counter)

        logger.info(
            "built %s from %i documents (total %i corpus positions)",
            self, self.num_docs, self.num_pos
        )

    def doc2bow(self, document, return_missing=False):
        """Convert `document` into the bag-of-words (BoW) format = list of `(term_id, term_count)` tuples.

        Terms that are not in the vocabulary are dropped.

        Parameters
        ----------
        document : list of str
            Input token sequence.
        return_missing : bool, optional
            Return the counts of dropped (out-of-vocabulary) terms as well?

        Returns
        -------
        list of (int, int)
            BoW representation of `document`, sorted by ascending term id.
        list of (int, int), dict of (str, int)
            If `return_missing` is True, return BoW representation of `document` + dictionary with missing
            tokens and their frequencies.

        """
        if isinstance(document, str):
            raise TypeError("doc2bow expects an array of unicode tokens on input, not a single string")

        counter = Counter()
        missing = Counter()
        for token in document:
            tokenid = self.token2id.get(token)
            if tokenid is None:
                missing[token] += 1
            else:
                counter[tokenid] += 1

        result = sorted(counter.items())
        if return_missing:
            return result, dict(missing)
        return result

    def doc2idx(self, document, unknown_word_index=-1):
        """Convert `document` (a list of terms) into a list of term ids, `unknown_word_index` for unknown terms.

        Examples
        --------
        .. sourcecode:: pycon

            >>> from topicflow.corpora import Vocabulary
            >>>
            >>> vocab = Vocabulary([["a", "a", "b"], ["a", "c"]])
            >>> vocab.doc2idx(["a", "a", "c", "not_in_vocabulary", "c"])
            [0, 0, 2, -1, 2]

        """
        if isinstance(document, str):
            raise TypeError("doc2idx expects an array of unicode tokens on input, not a single string")
        return [self.token2id.get(token, unknown_word_index) for token in document]

    def _absolute_bounds(self, min_df, max_df):
        """Convert `min_df` / `max_df` (absolute counts or fractions of `num_docs`) to inclusive df bounds."""
        if min_df is None:
            min_abs = 1
        elif isinstance(min_df, float):
            min_abs = int(math.ceil(min_df * self.num_docs - 1e-9))
        else:
            min_abs = int(min_df)

        if max_df is None:
            max_abs = self.num_docs
        elif isinstance(max_df, float):
            max_abs = int(math.floor(max_df * self.num_docs + 1e-9))
            if max_df < 1.0:
                # a term present in every document never survives a fractional cap
                max_abs = min(max_abs, self.num_docs - 1)
        else:
            max_abs = int(max_df)
        return min_abs, max_abs

    def filter_extremes(self, min_df=None, max_df=None, keep_n=None):
        """Remove terms by document frequency, then compact the ids.

        Parameters
        ----------
        min_df : {int, float}, optional
            Keep terms contained in at least `min_df` documents (int) or in at least this fraction
            of all documents (float).
        max_df : {int, float}, optional
            Keep terms contained in no more than `max_df` documents (int) or in no more than this fraction
            of all documents (float). With a fraction below 1.0, a term found in every document is always removed.
        keep_n : int, optional
            After the frequency filters, keep only the `keep_n` most frequent terms, ties by ascending id.

        Notes
        -----
        Ids of the surviving terms are renumbered to `[0, len(self))`, in their original first-occurrence order,
        so the result is identical to a vocabulary built from documents that never contained the removed terms.

        Examples
        --------
        .. sourcecode:: pycon

            >>> from topicflow.corpora import Vocabulary
            >>>
            >>> vocab = Vocabulary([["cat", "the", "meow"], ["the", "car"], ["the", "cat"]])
            >>> vocab.filter_extremes(max_df=0.9)
            >>> vocab.token2id
            {'cat': 0, 'meow': 1, 'car': 2}

        """
        self._check_mutable()
        min_abs, max_abs = self._absolute_bounds(min_df, max_df)

        good_ids = [tokenid for tokenid in self.keys() if min_abs <= self.dfs.get(tokenid, 0) <= max_abs]
        if keep_n is not None:
            good_ids.sort(key=lambda tokenid: (-self.dfs.get(tokenid, 0), tokenid))
            good_ids = good_ids[:keep_n]

        bad_words = [(self[tokenid], self.dfs.get(tokenid, 0)) for tokenid in sorted(set(self.keys()) - set(good_ids))]
        logger.info("discarding %i tokens: %s...", len(bad_words), bad_words[:10])
        logger.info(
            "keeping %i tokens which were in no less than %i and no more than %i documents",
            len(good_ids), min_abs, max_abs
        )

        self.filter_tokens(good_ids=good_ids)
        logger.info("resulting vocabulary: %s", self)

    def filter_tokens(self, bad_ids=None, good_ids=None):
        """Remove the selected `bad_ids` terms, or keep only `good_ids`, then compact the ids.

        Parameters
        ----------
        bad_ids : iterable of int, optional
            Collection of term ids to be removed.
        good_ids : iterable of int, optional
            Keep selected collection of term ids and remove the rest.

        """
        self._check_mutable()
        keep = set(self.keys())
        if bad_ids is not None:
            keep -= set(bad_ids)
        if good_ids is not None:
            keep &= set(good_ids)
        self.compactify(sorted(keep))

    def compactify(self, kept_ids=None):
        """Renumber the terms in `kept_ids` (default: all) to `[0, len(kept_ids))` in ascending old-id order."""
        self._check_mutable()
        if kept_ids is None:
            kept_ids = self.keys()
        idmap = {old: new for new, old in enumerate(sorted(kept_ids))}
        logger.debug("rebuilding vocabulary, shrinking gaps")

        self.token2id = {self.id2token[old]: new for old, new in idmap.items()}
        self.id2token = utils.revdict(self.token2id)
        self.dfs = {idmap[old]: freq for old, freq in self.dfs.items() if old in idmap}
        self.cfs = {idmap[old]: freq for old, freq in self.cfs.items() if old in idmap}

    def most_common(self, n: Optional[int] = None) -> List[Tuple[str, int]]:
        """Return a list of the n most common terms and their collection frequencies, most common first.

        Terms with equal counts are ordered by ascending id.

        """
        most_common = sorted(self.cfs.items(), key=lambda item: (-item[1], item[0]))
        if n is not None:
            most_common = most_common[:n]
        return [(self[tokenid], count) for tokenid, count in most_common]

    def save_as_text(self, fname):
        """Save the vocabulary to a text file.

        Notes
        -----
        Format::

            num_docs
            id_1[TAB]term_1[TAB]document_frequency_1[NEWLINE]
            id_2[TAB]term_2[TAB]document_frequency_2[NEWLINE]
            ....

        Lines are in ascending id order. Paths ending in `.gz` or `.bz2` are compressed transparently.
        Collection frequencies are not part of the format; use :meth:`save` to store the entire object.

        """
        logger.info("saving vocabulary mapping to %s", fname)
        with utils.open(fname, 'wb') as fout:
            fout.write(("%d\n" % self.num_docs).encode('utf8'))
            for tokenid in self.keys():
                line = "%i\t%s\t%i\n" % (tokenid, self[tokenid], self.dfs.get(tokenid, 0))
                fout.write(line.encode('utf8'))

    @classmethod
    def load_from_text(cls, fname):
        """Load a frozen vocabulary from a text file written by :meth:`save_as_text`.

        Raises
        ------
        ValueError
            If a line is malformed, a term is duplicated or the ids are not dense.

        """
        result = cls()
        with utils.open(fname, 'rb') as f:
            for lineno, line in enumerate(f):
                line = line.decode('utf8')
                if lineno == 0:
                    if line.strip().isdigit():
                        # Older versions of save_as_text may not write num_docs on first line.
                        result.num_docs = int(line.strip())
                        continue
                    else:
                        logger.warning("Text does not contain num_docs on the first line.")
                try:
                    wordid, word, docfreq = line[:-1].split('\t')
                except Exception:
                    raise ValueError("invalid line in vocabulary file %s: %s" % (fname, line.strip()))
                wordid = int(wordid)
                if word in result.token2id:
                    raise ValueError("term %s is defined as ID %d and as ID %d" % (word, wordid, result.token2id[word]))
                result.token2id[word] = wordid
                result.dfs[wordid] = int(docfreq)
        result.id2token = utils.revdict(result.token2id)
        if sorted(result.id2token) != list(range(len(result.token2id))):
            raise ValueError("term ids in %s are not dense" % fname)
        return result.freeze()


def build_vocabulary(token_sequences, min_df=None, max_df=None, keep_n=None):
    """Build a frozen :class:`Vocabulary` from an ordered collection of token sequences.

    Parameters
    ----------
    token_sequences : iterable of list of str
        Normalized documents, in corpus order.
    min_df, max_df : {int, float}, optional
        Document-frequency bounds, absolute counts (int) or fractions of the collection (float).
    keep_n : int, optional
        Keep only the most frequent terms after the frequency filters.

    Returns
    -------
    :class:`Vocabulary`
        Frozen vocabulary with ids in first-occurrence order.

    """
    return Vocabulary.build(token_sequences, min_df=min_df, max_df=max_df, keep_n=keep_n)
