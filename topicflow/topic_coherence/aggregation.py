#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""This module contains functions to perform aggregation on a list of values obtained from the confirmation measure."""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def arithmetic_mean(confirmed_measures):
    """Arithmetic mean of the per-topic confirmation values.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.topic_coherence.aggregation import arithmetic_mean
        >>> arithmetic_mean([1.1, 2.2, 3.3, 4.4])
        2.75

    """
    return float(np.mean(confirmed_measures))
