#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Exceptions and warnings raised by topicflow.

Configuration problems are fatal and surface as :class:`InvalidConfiguration` before any work starts.
Data-quality problems are absorbed: they are reported through the :mod:`warnings` machinery
and the module loggers, and processing continues with degraded-but-valid output.

"""


class InvalidConfiguration(ValueError):
    """A hyperparameter or option is out of range, unknown, or the input leaves nothing to train on."""


class BowEncodingWarning(UserWarning):
    """One or more documents encoded to an empty bag-of-words."""


class NumericalGuardTriggered(RuntimeWarning):
    """A smoothing constant was needed to keep a logarithm or a division finite."""
