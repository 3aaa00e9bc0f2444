#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""General utility functions: persistence, chunking, seeding and text helpers."""

import itertools
import logging
import numbers
import os
import pickle as _pickle

import numpy as np
from smart_open import open  # noqa:F401

logger = logging.getLogger(__name__)


def get_random_state(seed):
    """Generate :class:`numpy.random.RandomState` based on input seed.

    Parameters
    ----------
    seed : {None, int, :class:`numpy.random.RandomState`}
        Seed for random state. None gives a fresh, OS-seeded generator.

    Returns
    -------
    :class:`numpy.random.RandomState`
        Random state.

    Raises
    ------
    ValueError
        If seed is not {None, int, RandomState}.

    """
    if seed is None:
        return np.random.RandomState()
    if isinstance(seed, (numbers.Integral, np.integer)):
        return np.random.RandomState(seed)
    if isinstance(seed, np.random.RandomState):
        return seed
    raise ValueError('%r cannot be used to seed a np.random.RandomState instance' % seed)


def to_unicode(text, encoding='utf8', errors='replace'):
    """Convert `text` (bytestring in given encoding or unicode) to unicode.

    Parameters
    ----------
    text : {bytes, str, None}
        Input text. None gives an empty string.
    encoding : str, optional
        Encoding used to decode bytes.
    errors : str, optional
        Error handling behaviour when `text` is a bytestring.

    Returns
    -------
    str

    """
    if text is None:
        return ''
    if isinstance(text, str):
        return text
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode(encoding, errors=errors)
    return str(text)


class SaveLoad(object):
    """Objects which inherit from this class have save/load functions, which un/pickle them to disk.

    Large numpy arrays are stored beside the pickle as separate `.npy` files (`.npz` for compressed paths),
    which keeps the pickle small and lets them be memory-mapped back.

    Warnings
    --------
    This uses pickle for de/serializing, so objects must not contain unpicklable attributes,
    such as lambda functions etc.

    """
    @classmethod
    def load(cls, fname, mmap=None):
        """Load a previously saved object (using :meth:`~topicflow.utils.SaveLoad.save`) from file.

        Parameters
        ----------
        fname : str
            Path to file that contains needed object.
        mmap : str, optional
            Memory-map option for arrays stored separately, e.g. `mmap='r'`.
            Must be None for compressed ('.gz' or '.bz2') files.

        Returns
        -------
        object
            Object loaded from `fname`.

        """
        logger.info("loading %s object from %s", cls.__name__, fname)

        compress, subname = SaveLoad._adapt_by_suffix(fname)

        obj = unpickle(fname)
        obj._load_specials(fname, mmap, compress, subname)
        logger.info("loaded %s", fname)
        return obj

    def _load_specials(self, fname, mmap, compress, subname):
        """Load arrays that were stored separately by :meth:`_save_specials`."""
        for attrib in getattr(self, '__numpys', []):
            path = subname(fname, attrib)
            logger.info("loading %s from %s with mmap=%s", attrib, path, mmap)
            if compress:
                if mmap:
                    raise IOError(
                        'Cannot mmap compressed object %s in file %s. '
                        'Use `load(fname, mmap=None)` or uncompress files manually.' % (attrib, path)
                    )
                with np.load(path) as f:
                    val = f['val']
            else:
                val = np.load(path, mmap_mode=mmap)
            setattr(self, attrib, val)

        for attrib in getattr(self, '__ignoreds', []):
            logger.info("setting ignored attribute %s to None", attrib)
            setattr(self, attrib, None)

    @staticmethod
    def _adapt_by_suffix(fname):
        """Give the compress flag and a filename formula for arrays stored beside `fname`."""
        compress, suffix = (True, 'npz') if fname.endswith('.gz') or fname.endswith('.bz2') else (False, 'npy')
        return compress, lambda *args: '.'.join(args + (suffix,))

    def _save_specials(self, fname, separately, sep_limit, ignore, compress, subname):
        """Set aside large arrays and ignored attributes, store the arrays, return what to restore afterwards."""
        if separately is None:
            separately = [
                attrib for attrib, val in self.__dict__.items()
                if isinstance(val, np.ndarray) and val.size >= sep_limit
            ]

        asides = {}
        for attrib in list(separately) + list(ignore):
            if hasattr(self, attrib):
                asides[attrib] = getattr(self, attrib)
                delattr(self, attrib)

        try:
            numpys, ignoreds = [], []
            for attrib, val in asides.items():
                if isinstance(val, np.ndarray) and attrib not in ignore:
                    numpys.append(attrib)
                    logger.info("storing np array '%s' to %s", attrib, subname(fname, attrib))
                    if compress:
                        np.savez_compressed(subname(fname, attrib), val=np.ascontiguousarray(val))
                    else:
                        np.save(subname(fname, attrib), np.ascontiguousarray(val))
                else:
                    logger.info("not storing attribute %s", attrib)
                    ignoreds.append(attrib)
            self.__dict__['__numpys'] = numpys
            self.__dict__['__ignoreds'] = ignoreds
        except Exception:
            for attrib, val in asides.items():
                setattr(self, attrib, val)
            raise
        return asides

    def save(self, fname, separately=None, sep_limit=10 * 1024**2, ignore=frozenset(), pickle_protocol=4):
        """Save the object to file.

        Parameters
        ----------
        fname : str
            Path to output file, any path :func:`smart_open.open` understands.
        separately : list of str, optional
            Attributes to store in separate files. If None, numpy arrays with at least `sep_limit` elements
            are detected automatically.
        sep_limit : int, optional
            Size limit for the automatic detection.
        ignore : frozenset of str, optional
            Attributes that won't be stored; they are set to None on load.
        pickle_protocol : int, optional
            Protocol number for pickle.

        See Also
        --------
        :meth:`~topicflow.utils.SaveLoad.load`

        """
        logger.info("saving %s object under %s, separately %s", self.__class__.__name__, fname, separately)

        compress, subname = SaveLoad._adapt_by_suffix(fname)
        asides = self._save_specials(fname, separately, sep_limit, ignore, compress, subname)
        try:
            pickle(self, fname, protocol=pickle_protocol)
        finally:
            for attrib, val in asides.items():
                setattr(self, attrib, val)
            for attrib in ('__numpys', '__ignoreds'):
                self.__dict__.pop(attrib, None)
        logger.info("saved %s", fname)


def chunkize_serial(iterable, chunksize):
    """Give elements from the iterable in `chunksize`-ed lists.
    The last returned element may be smaller (if length of collection is not divisible by `chunksize`).

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.utils import grouper
        >>> print(list(grouper(range(10), 3)))
        [[0, 1, 2], [3, 4, 5], [6, 7, 8], [9]]

    """
    it = iter(iterable)
    while True:
        chunk = list(itertools.islice(it, int(chunksize)))
        if not chunk:
            break
        yield chunk


grouper = chunkize_serial


def split_evenly(sequence, parts):
    """Split `sequence` into at most `parts` contiguous, non-empty slices of near-equal length, in order."""
    parts = max(1, min(int(parts), len(sequence)))
    size, extra = divmod(len(sequence), parts)
    result, start = [], 0
    for i in range(parts):
        end = start + size + (1 if i < extra else 0)
        result.append(sequence[start:end])
        start = end
    return [part for part in result if len(part)]


def smart_extension(fname, ext):
    """Append `ext` to `fname`, keeping a trailing '.gz' or '.bz2' compression suffix last."""
    fname, oext = os.path.splitext(fname)
    if oext.endswith('.bz2'):
        fname = fname + oext[:-4] + ext + '.bz2'
    elif oext.endswith('.gz'):
        fname = fname + oext[:-3] + ext + '.gz'
    else:
        fname = fname + oext + ext
    return fname


def pickle(obj, fname, protocol=4):
    """Pickle object `obj` to file `fname`, any path :func:`smart_open.open` understands."""
    with open(fname, 'wb') as fout:
        _pickle.dump(obj, fout, protocol=protocol)


def unpickle(fname):
    """Load a pickled object from `fname`."""
    with open(fname, 'rb') as f:
        return _pickle.load(f, encoding='latin1')


def revdict(d):
    """Reverse a dictionary mapping, i.e. `{1: 2, 3: 4}` -> `{2: 1, 4: 3}`.

    When two keys map to the same value, only one of them will be kept in the result
    (which one is kept is arbitrary).

    """
    return {v: k for (k, v) in dict(d).items()}


def is_corpus(obj):
    """Check whether `obj` looks like a bag-of-words corpus.

    Parameters
    ----------
    obj : object
        Something `iterable of iterable` that contains (int, number).

    Returns
    -------
    (bool, object)
        Pair of (is `obj` a corpus, `obj` with peeked element restored).

    Warnings
    --------
    An "empty" corpus (empty input sequence) is ambiguous, so in this case
    the result is forcefully defined as (False, `obj`).

    """
    try:
        if 'Corpus' in obj.__class__.__name__:
            return True, obj
    except Exception:
        pass
    try:
        if hasattr(obj, 'next') or hasattr(obj, '__next__'):
            # the input is an iterator object, meaning once we call next()
            # that element could be gone forever. we must be careful to put
            # whatever we retrieve back again
            doc1 = next(obj)
            obj = itertools.chain([doc1], obj)
        else:
            doc1 = next(iter(obj))
        if len(doc1) == 0:
            return True, obj
        id1, val1 = next(iter(doc1))
        id1, val1 = int(id1), float(val1)
    except Exception:
        return False, obj
    return True, obj


def strided_windows(ndarray, window_size):
    """Produce a numpy.ndarray of windows, as from a sliding window.

    Since this uses striding, the individual arrays are views rather than copies of `ndarray`.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.utils import strided_windows
        >>> strided_windows(np.arange(5), 2)
        array([[0, 1],
               [1, 2],
               [2, 3],
               [3, 4]])

    """
    ndarray = np.asarray(ndarray)
    if window_size == ndarray.shape[0]:
        return np.array([ndarray])
    elif window_size > ndarray.shape[0]:
        return np.ndarray((0, 0))

    stride = ndarray.strides[0]
    return np.lib.stride_tricks.as_strided(
        ndarray, shape=(ndarray.shape[0] - window_size + 1, window_size),
        strides=(stride, stride))


def iter_windows(texts, window_size, copy=False, ignore_below_size=True, include_doc_num=False):
    """Produce a generator over the given texts using a sliding window of `window_size`.

    Parameters
    ----------
    texts : iterable of sequence
        Documents, each a sequence (typically a numpy array of term ids).
    window_size : int
        Size of sliding window.
    copy : bool, optional
        If True - produce deep copies instead of views.
    ignore_below_size : bool, optional
        If True - skip documents shorter than `window_size`, otherwise yield them whole.
    include_doc_num : bool, optional
        If True - yield `(doc_num, window)` pairs.

    """
    for doc_num, document in enumerate(texts):
        for window in _iter_windows(document, window_size, copy, ignore_below_size):
            if include_doc_num:
                yield (doc_num, window)
            else:
                yield window


def _iter_windows(document, window_size, copy=False, ignore_below_size=True):
    doc_windows = strided_windows(document, window_size)
    if doc_windows.shape[0] == 0:
        if not ignore_below_size:
            yield document.copy() if copy else document
    else:
        for doc_window in doc_windows:
            yield doc_window.copy() if copy else doc_window
