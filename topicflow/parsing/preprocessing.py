#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Licensed under the GNU LGPL v2.1 - https://www.gnu.org/licenses/old-licenses/lgpl-2.1.en.html

"""Turn raw document text into a clean token sequence.

The normalizer applies a fixed chain of steps: strip everything that is not a letter, digit or whitespace,
drop numeric tokens, lowercase, split, remove stop words, stem and lemmatize, and drop short tokens.
For a fixed :class:`~topicflow.config.NormalizerConfig` the output is a pure function of the input, and
normalizing the output again gives it back unchanged.

Examples
--------
.. sourcecode:: pycon

    >>> from topicflow.parsing.preprocessing import normalize
    >>> normalize("The cats were running_home in 2019!")
    ['cat', 'run', 'home']
    >>> normalize(None)
    []

"""

import logging
import re

from topicflow import utils
from topicflow.config import NormalizerConfig
from topicflow.exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)


STOPWORDS = frozenset([
    'all', 'six', 'just', 'less', 'being', 'indeed', 'over', 'move', 'anyway', 'four', 'not', 'own', 'through',
    'using', 'fifty', 'where', 'mill', 'only', 'find', 'before', 'one', 'whose', 'system', 'how', 'somewhere',
    'much', 'thick', 'show', 'had', 'enough', 'should', 'to', 'must', 'whom', 'seeming', 'yourselves', 'under',
    'ours', 'two', 'has', 'might', 'thereafter', 'latterly', 'do', 'them', 'his', 'around', 'than', 'get', 'very',
    'de', 'none', 'cannot', 'every', 'un', 'they', 'front', 'during', 'thus', 'now', 'him', 'nor', 'name', 'regarding',
    'several', 'hereafter', 'did', 'always', 'who', 'didn', 'whither', 'this', 'someone', 'either', 'each', 'become',
    'thereupon', 'sometime', 'side', 'towards', 'therein', 'twelve', 'because', 'often', 'ten', 'our', 'doing', 'km',
    'eg', 'some', 'back', 'used', 'up', 'go', 'namely', 'computer', 'are', 'further', 'beyond', 'ourselves', 'yet',
    'out', 'even', 'will', 'what', 'still', 'for', 'bottom', 'mine', 'since', 'please', 'forty', 'per', 'its',
    'everything', 'behind', 'does', 'various', 'above', 'between', 'it', 'neither', 'seemed', 'ever', 'across', 'she',
    'somehow', 'be', 'we', 'full', 'never', 'sixty', 'however', 'here', 'otherwise', 'were', 'whereupon', 'nowhere',
    'although', 'found', 'alone', 're', 'along', 'quite', 'fifteen', 'by', 'both', 'about', 'last', 'would',
    'anything', 'via', 'many', 'could', 'thence', 'put', 'against', 'keep', 'etc', 'amount', 'became', 'ltd', 'hence',
    'onto', 'or', 'con', 'among', 'already', 'co', 'afterwards', 'formerly', 'within', 'seems', 'into', 'others',
    'while', 'whatever', 'except', 'down', 'hers', 'everyone', 'done', 'least', 'another', 'whoever', 'moreover',
    'couldnt', 'throughout', 'anyhow', 'yourself', 'three', 'from', 'her', 'few', 'together', 'top', 'there', 'due',
    'been', 'next', 'anyone', 'eleven', 'cry', 'call', 'therefore', 'interest', 'then', 'thru', 'themselves',
    'hundred', 'really', 'sincere', 'empty', 'more', 'himself', 'elsewhere', 'mostly', 'on', 'fire', 'am', 'becoming',
    'hereby', 'amongst', 'else', 'part', 'everywhere', 'too', 'kg', 'herself', 'former', 'those', 'he', 'me', 'myself',
    'made', 'twenty', 'these', 'was', 'bill', 'cant', 'us', 'until', 'besides', 'nevertheless', 'below', 'anywhere',
    'nine', 'can', 'whether', 'of', 'your', 'toward', 'my', 'say', 'something', 'and', 'whereafter', 'whenever',
    'give', 'almost', 'wherever', 'is', 'describe', 'beforehand', 'herein', 'doesn', 'an', 'as', 'itself', 'at',
    'have', 'in', 'seem', 'whence', 'ie', 'any', 'fill', 'again', 'hasnt', 'inc', 'thereby', 'thin', 'no', 'perhaps',
    'latter', 'meanwhile', 'when', 'detail', 'same', 'wherein', 'beside', 'also', 'that', 'other', 'take', 'which',
    'becomes', 'you', 'if', 'nobody', 'unless', 'whereas', 'see', 'though', 'may', 'after', 'upon', 'most', 'hereupon',
    'eight', 'but', 'serious', 'nothing', 'such', 'why', 'off', 'a', 'don', 'whereby', 'third', 'i', 'whole', 'noone',
    'sometimes', 'well', 'amoungst', 'yours', 'their', 'rather', 'without', 'so', 'five', 'the', 'first', 'with',
    'make', 'once'
])


RE_NONALNUM = re.compile(r"[\W_]+", re.UNICODE)
RE_NUMERIC_TOKEN = re.compile(r"(?<!\S)\d+(?!\S)", re.UNICODE)
RE_MIXED_TOKEN = re.compile(r"(?<!\S)\S*\d\S*(?!\S)", re.UNICODE)
RE_WHITESPACE = re.compile(r"(\s)+", re.UNICODE)


def strip_non_alphanum(s):
    """Replace every run of characters that are not letters or digits with a single space.

    Underscore counts as punctuation here, unlike in the regex `\\w` class.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.parsing.preprocessing import strip_non_alphanum
        >>> strip_non_alphanum("if-you#can%read$this&then@this_method^works")
        'if you can read this then this method works'

    """
    s = utils.to_unicode(s)
    return RE_NONALNUM.sub(" ", s)


def remove_numeric_tokens(s, policy='drop_numeric'):
    """Remove numeric tokens from the whitespace-separated string `s`.

    Parameters
    ----------
    s : str
    policy : {'drop_numeric', 'drop_mixed', 'keep'}
        'drop_numeric' removes tokens made of digits only, 'drop_mixed' also removes tokens
        that contain any digit (such as "b2b" or "mp3"), 'keep' returns `s` unchanged.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.parsing.preprocessing import remove_numeric_tokens
        >>> remove_numeric_tokens("top 10 mp3 players")
        'top  mp3 players'
        >>> remove_numeric_tokens("top 10 mp3 players", policy='drop_mixed')
        'top   players'

    """
    s = utils.to_unicode(s)
    if policy == 'drop_numeric':
        return RE_NUMERIC_TOKEN.sub("", s)
    if policy == 'drop_mixed':
        return RE_MIXED_TOKEN.sub("", s)
    if policy == 'keep':
        return s
    raise InvalidConfiguration("unknown numeric policy %r" % (policy,))


def strip_multiple_whitespaces(s):
    """Collapse runs of whitespace characters (spaces, tabs, line breaks) into a single space."""
    s = utils.to_unicode(s)
    return RE_WHITESPACE.sub(" ", s)


def split_on_space(s):
    return [word for word in utils.to_unicode(s).split() if word]


def remove_stopword_tokens(tokens, stopwords=None):
    """Remove stop words from a list of lowercase tokens.

    Parameters
    ----------
    tokens : iterable of str
    stopwords : iterable of str, optional
        If None - use :const:`~topicflow.parsing.preprocessing.STOPWORDS`.

    """
    if stopwords is None:
        stopwords = STOPWORDS
    return [token for token in tokens if token not in stopwords]


def remove_short_tokens(tokens, minsize=3):
    return [token for token in tokens if len(token) >= minsize]


def _load_stemmer(stemmer):
    if stemmer is None or callable(stemmer):
        return stemmer
    if stemmer == 'porter':
        from nltk.stem.porter import PorterStemmer
        return PorterStemmer().stem
    if stemmer == 'snowball':
        from nltk.stem.snowball import SnowballStemmer
        return SnowballStemmer('english').stem
    raise InvalidConfiguration("unknown stemmer %r" % (stemmer,))


def _load_lemmatizer(lemmatizer):
    if lemmatizer is None or callable(lemmatizer):
        return lemmatizer
    if lemmatizer == 'wordnet':
        from nltk.stem import WordNetLemmatizer
        wordnet = WordNetLemmatizer()
        try:
            wordnet.lemmatize('tests')
        except LookupError as err:
            raise InvalidConfiguration(
                "the 'wordnet' lemmatizer needs the NLTK WordNet data, "
                "install it with `python -m nltk.downloader wordnet`: %s" % err
            )
        return wordnet.lemmatize
    raise InvalidConfiguration("unknown lemmatizer %r" % (lemmatizer,))


class TextNormalizer(object):
    """Callable turning one raw document into a token sequence, configured once.

    Parameters
    ----------
    config : :class:`~topicflow.config.NormalizerConfig`, optional
        Normalization options. None means the defaults.

    Raises
    ------
    :class:`~topicflow.exceptions.InvalidConfiguration`
        If a named stemmer or lemmatizer cannot be loaded.

    Examples
    --------
    .. sourcecode:: pycon

        >>> from topicflow.config import NormalizerConfig
        >>> from topicflow.parsing.preprocessing import TextNormalizer
        >>> normalizer = TextNormalizer(NormalizerConfig(stemmer=None, min_length=2))
        >>> normalizer("Cats purr; dogs bark at 3 AM.")
        ['cats', 'purr', 'dogs', 'bark']

    """
    def __init__(self, config=None):
        if config is None:
            config = NormalizerConfig()
        self.config = config
        self.stopwords = STOPWORDS if config.stopwords is None else config.stopwords
        self.stem = _load_stemmer(config.stemmer)
        self.lemmatize = _load_lemmatizer(config.lemmatizer)
        self._roots = {}

    def __call__(self, raw_text):
        return self.normalize(raw_text)

    def _reduce(self, token):
        if self.stem is not None:
            token = self.stem(token)
        if self.lemmatize is not None:
            token = self.lemmatize(token)
        return token

    def root(self, token):
        """Stem then lemmatize `token` repeatedly, until the result stops changing.

        Porter, for one, is not idempotent ("agreed" -> "agre" -> "agr"), so a single reduction would
        not survive a second normalization. Results are cached per normalizer.

        """
        root = self._roots.get(token)
        if root is None:
            root, seen = token, set()
            while root not in seen:  # stop at a fixed point, or on a cycle of a custom callable
                seen.add(root)
                root = self._reduce(root)
            self._roots[token] = root
        return root

    def normalize(self, raw_text):
        """Normalize one document, see :func:`~topicflow.parsing.preprocessing.normalize`."""
        if not raw_text:
            return []
        s = strip_non_alphanum(raw_text)
        s = remove_numeric_tokens(s, self.config.numeric)
        s = s.lower()
        tokens = remove_stopword_tokens(split_on_space(s), self.stopwords)
        if self.stem is not None or self.lemmatize is not None:
            tokens = [self.root(token) for token in tokens]
            # a reduced token can turn numeric ("10s" -> "10") or into a stop word ("ones" -> "one")
            tokens = split_on_space(remove_numeric_tokens(normalize_as_text(tokens), self.config.numeric))
            tokens = remove_stopword_tokens(tokens, self.stopwords)
        return remove_short_tokens(tokens, self.config.min_length)

    def __str__(self):
        return "%s<stemmer=%r, lemmatizer=%r, min_length=%i, numeric=%s>" % (
            self.__class__.__name__, self.config.stemmer, self.config.lemmatizer,
            self.config.min_length, self.config.numeric,
        )


def normalize(raw_text, config=None):
    """Turn one raw document string into a list of normalized tokens.

    Parameters
    ----------
    raw_text : {str, bytes, None}
        Document text. None and empty input give an empty list. Bytes are decoded as UTF-8,
        undecodable bytes are replaced.
    config : :class:`~topicflow.config.NormalizerConfig`, optional
        Normalization options.

    Returns
    -------
    list of str
        Tokens in document order.

    """
    return TextNormalizer(config).normalize(raw_text)


def normalize_as_text(tokens):
    """Join tokens back into a single space-separated string."""
    return " ".join(tokens)


def preprocess_documents(docs, config=None):
    """Normalize a collection of raw documents with one shared :class:`TextNormalizer`.

    Parameters
    ----------
    docs : iterable of {str, bytes, None}
    config : :class:`~topicflow.config.NormalizerConfig`, optional

    Returns
    -------
    list of list of str
        One token sequence per input document, in input order.

    """
    normalizer = TextNormalizer(config)
    return [normalizer(doc) for doc in docs]
