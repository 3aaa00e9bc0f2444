#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Math helpers shared by the topic model and the evaluators."""

import logging

import numpy as np
from scipy.special import psi  # gamma function utils

logger = logging.getLogger(__name__)


def argsort(x, topn=None, reverse=False):
    """Calculate indices of the `topn` smallest elements in array `x`, ties broken by ascending index.

    Parameters
    ----------
    x : array_like
        Array to get the smallest element indices from.
    topn : int, optional
        Number of indices of the smallest (greatest) elements to be returned.
        If not given, indices of all elements will be returned in ascending (descending) order.
    reverse : bool, optional
        Return the `topn` greatest elements in descending order,
        instead of smallest elements in ascending order?

    Returns
    -------
    numpy.ndarray
        Array of `topn` indices that sort the array in the requested order.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.matutils import argsort
        >>> argsort([0.2, 0.5, 0.2, 0.1], topn=3, reverse=True).tolist()
        [1, 0, 2]

    """
    x = np.asarray(x)  # unify code path for when `x` is not a np array (list, tuple...)
    if topn is None:
        topn = x.size
    if topn <= 0:
        return np.array([], dtype=np.intp)
    if reverse:
        x = -x
    # a stable sort keeps equal values in index order
    return np.argsort(x, kind='stable')[:topn]


def logsumexp(x):
    """Log of sum of exponentials of all elements of `x`, computed without overflow."""
    x_max = np.max(x)
    x = np.log(np.sum(np.exp(x - x_max)))
    x += x_max
    return x


def mean_absolute_difference(a, b):
    """Mean absolute difference between two arrays, `mean(abs(a - b))`."""
    return np.mean(np.abs(a - b))


def dirichlet_expectation(alpha):
    """Expected value of log(theta) where theta is drawn from a Dirichlet distribution.

    Parameters
    ----------
    alpha : numpy.ndarray
        Dirichlet parameter 2d matrix or 1d vector, if 2d - each row is treated as a separate parameter vector.

    Returns
    -------
    numpy.ndarray
        Log of expected values, dimension same as `alpha.ndim`.

    """
    if len(alpha.shape) == 1:
        result = psi(alpha) - psi(np.sum(alpha))
    else:
        result = psi(alpha) - psi(np.sum(alpha, 1))[:, np.newaxis]
    return result.astype(alpha.dtype, copy=False)  # keep the same precision as input


def normalize_rows(matrix):
    """Divide every row of a 2d array by its sum, giving row-stochastic output."""
    matrix = np.asarray(matrix)
    return matrix / matrix.sum(axis=1)[:, np.newaxis]


def read_only(array):
    """Mark a numpy array non-writeable in place and return it."""
    array.flags.writeable = False
    return array
