"""
This package contains the online LDA topic model and the tools to evaluate it.
"""

# bring model classes directly into package namespace, to save some typing
from .ldamodel import LdaModel, LdaState, fit  # noqa:F401
from .coherencemodel import CoherenceModel  # noqa:F401
from . import evaluation  # noqa:F401
