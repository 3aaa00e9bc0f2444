"""
This package contains the vocabulary and the bag-of-words corpus encoder.
"""

from .dictionary import Vocabulary, build_vocabulary  # noqa:F401
from .bowcorpus import BowCorpus, encode, encode_corpus  # noqa:F401
