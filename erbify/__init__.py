"""
erbify: convert template files to ERB through a text-generation service.
"""

__version__ = "1.0.0"
