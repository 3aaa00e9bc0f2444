"""
This package contains the pipeline stages of topic coherence: segmentation, probability estimation,
confirmation measures and aggregation.
"""
