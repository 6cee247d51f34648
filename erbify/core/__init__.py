"""
Conversion pipeline: per-file converter, retry policy and batch scheduler.
"""
