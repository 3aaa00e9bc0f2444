#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Validated configuration records.

Every stage of the pipeline is configured by a frozen :class:`pydantic.BaseModel`, built once and never
changed afterwards. Records validate themselves on construction and raise
:class:`~topicflow.exceptions.InvalidConfiguration` listing every bad value. :meth:`PipelineConfig.from_options`
accepts the flat option names used on the command line and by :class:`~topicflow.pipeline.TopicPipeline`,
and rejects names it does not know.

Examples
--------
.. sourcecode:: pycon

    >>> from topicflow.config import PipelineConfig
    >>> config = PipelineConfig.from_options({'num_topics': 2, 'max_passes': 20, 'random_seed': 42})
    >>> config.training.max_passes
    20

"""

import numbers
from typing import Any, Callable, FrozenSet, Literal, Mapping, Optional, Union

from pydantic import (BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt, StrictFloat, StrictInt,
                      ValidationError, field_validator)

from topicflow.exceptions import InvalidConfiguration


NUMERIC_POLICIES = ('keep', 'drop_numeric', 'drop_mixed')
STEMMERS = ('porter', 'snowball')
LEMMATIZERS = ('wordnet',)
DTYPES = ('float32', 'float64')
COHERENCE_MEASURES = ('u_mass', 'c_uci', 'c_npmi')

# absolute document count, or fraction of the corpus
Frequency = Optional[Union[StrictInt, StrictFloat]]


def _describe(error):
    """One line per failed field, e.g. `max_passes: Input should be greater than or equal to 1`."""
    return "; ".join(
        "%s: %s" % (".".join(str(part) for part in detail['loc']) or "value", detail['msg'])
        for detail in error.errors()
    )


class _Record(BaseModel):
    """Frozen record that rejects unknown fields and reports bad values as InvalidConfiguration."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    def __init__(self, **options):
        try:
            super().__init__(**options)
        except ValidationError as err:
            raise InvalidConfiguration("invalid %s: %s" % (self.__class__.__name__, _describe(err))) from err

    @classmethod
    def from_options(cls, options):
        return cls(**dict(options))


class NormalizerConfig(_Record):
    """Options of :class:`~topicflow.parsing.preprocessing.TextNormalizer`.

    Attributes
    ----------
    stopwords : frozenset of str, optional
        Lowercase stop words to remove. None means the built-in English list.
    min_length : int
        Tokens shorter than this (after stemming and lemmatization) are dropped.
    numeric : {'drop_numeric', 'drop_mixed', 'keep'}
        Drop digit-only tokens, drop every token containing a digit, or keep them all.
    stemmer : {'porter', 'snowball', None} or callable
        Applied to every surviving token before the lemmatizer.
    lemmatizer : {None, 'wordnet'} or callable
        Applied to every stemmed token.

    """
    stopwords: Optional[FrozenSet[str]] = None
    min_length: NonNegativeInt = 3
    numeric: Literal['keep', 'drop_numeric', 'drop_mixed'] = 'drop_numeric'
    stemmer: Union[str, Callable[[str], str], None] = 'porter'
    lemmatizer: Union[str, Callable[[str], str], None] = None

    @field_validator('stopwords', mode='before')
    @classmethod
    def lowercase_stopwords(cls, value):
        if value is None:
            return value
        if isinstance(value, str):
            raise ValueError("stopwords must be a collection of words, not a string")
        try:
            return frozenset(word.lower() if isinstance(word, str) else word for word in value)
        except TypeError:
            return value  # not iterable, the frozenset type check reports it

    @field_validator('stemmer', 'lemmatizer')
    @classmethod
    def known_name_or_callable(cls, value, info):
        names = STEMMERS if info.field_name == 'stemmer' else LEMMATIZERS
        if isinstance(value, str) and value not in names:
            raise ValueError("must be one of %s, None or a callable, got %r" % (names, value))
        return value


class VocabularyConfig(_Record):
    """Document-frequency pruning applied by :func:`~topicflow.corpora.dictionary.build_vocabulary`.

    `min_df` and `max_df` accept an absolute document count (int) or a fraction of the corpus (float).
    `keep_n` keeps only the most frequent terms after the frequency filters.

    """
    min_df: Frequency = None
    max_df: Frequency = None
    keep_n: Optional[PositiveInt] = None

    @field_validator('min_df', 'max_df')
    @classmethod
    def count_or_fraction(cls, value):
        if isinstance(value, int) and value < 1:
            raise ValueError("an absolute document count must be >= 1, got %r" % value)
        if isinstance(value, float) and not 0.0 < value <= 1.0:
            raise ValueError("a fraction of documents must be in (0, 1], got %r" % value)
        return value


class TrainingConfig(_Record):
    """Options of the online variational LDA training loop, see :func:`topicflow.models.ldamodel.fit`."""
    max_passes: int = Field(10, ge=1)
    chunk_size: int = Field(2000, ge=1)
    random_seed: Optional[NonNegativeInt] = None
    convergence_tolerance: float = Field(0.0, ge=0.0)
    iterations: int = Field(50, ge=1)
    gamma_threshold: float = Field(0.001, ge=0.0)
    decay: float = Field(0.5, gt=0.0, le=1.0)
    offset: float = Field(1.0, gt=0.0)
    workers: int = Field(1, ge=1)
    dtype: Literal['float32', 'float64'] = 'float64'

    @classmethod
    def coerce(cls, config):
        """Accept a :class:`TrainingConfig`, a mapping of option names, or None (all defaults)."""
        if config is None:
            return cls()
        if isinstance(config, cls):
            return config
        if isinstance(config, Mapping):
            return cls.from_options(config)
        raise InvalidConfiguration("training config must be a TrainingConfig or a mapping, got %r" % (config,))


class PipelineConfig(_Record):
    """Complete configuration of :class:`~topicflow.pipeline.TopicPipeline`."""
    num_topics: int = Field(10, ge=1)
    alpha: Any = 'symmetric'
    eta: Any = 'symmetric'
    coherence_measure: Literal['u_mass', 'c_uci', 'c_npmi'] = 'u_mass'
    top_n: int = Field(10, ge=2)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)
    vocabulary: VocabularyConfig = Field(default_factory=VocabularyConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)

    @field_validator('alpha', 'eta')
    @classmethod
    def positive_scalar_prior(cls, value):
        # vectors and named priors are checked when the model builds them
        if isinstance(value, numbers.Real) and not isinstance(value, bool) and not value > 0:
            raise ValueError("a scalar prior must be > 0, got %r" % value)
        return value

    @classmethod
    def from_options(cls, options):
        """Build a configuration from flat option names, e.g. `{'num_topics': 5, 'max_df': 0.5}`.

        Raises
        ------
        :class:`~topicflow.exceptions.InvalidConfiguration`
            If an option name is unknown or any value is invalid.

        """
        options = dict(options)
        groups = {
            'normalizer': NormalizerConfig,
            'vocabulary': VocabularyConfig,
            'training': TrainingConfig,
        }
        kwargs = {}
        for group, record in groups.items():
            kwargs[group] = record(**{name: options.pop(name) for name in record.model_fields if name in options})
        # whatever is left belongs to the pipeline itself, unknown names are rejected there
        kwargs.update(options)
        return cls(**kwargs)
