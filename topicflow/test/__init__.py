"""
This package contains automated code tests for all other topicflow packages.
"""
