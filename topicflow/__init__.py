"""
This package contains functionality to discover the topics of a collection of raw text documents:
normalization, vocabulary building, bag-of-words encoding, online LDA and model evaluation.

"""

__version__ = "0.1.0.dev0"

import logging

from topicflow import (  # noqa:F401
    config,
    corpora,
    exceptions,
    matutils,
    models,
    parsing,
    utils,
)
from topicflow.pipeline import Document, TopicPipeline  # noqa:F401

logger = logging.getLogger("topicflow")
if not logger.handlers:  # To ensure reload() doesn't add another one
    logger.addHandler(logging.NullHandler())
