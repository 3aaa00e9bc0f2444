"""This package contains functions to normalize raw text into token sequences."""

from .preprocessing import (  # noqa:F401
    STOPWORDS,
    TextNormalizer,
    normalize,
    normalize_as_text,
    preprocess_documents,
    remove_numeric_tokens,
    remove_short_tokens,
    remove_stopword_tokens,
    strip_multiple_whitespaces,
    strip_non_alphanum,
)
