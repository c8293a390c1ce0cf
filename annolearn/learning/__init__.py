"""
Feature encoding, data writers, classifiers and annotators
"""

# License: BSD3

from .features import Feature, Instance
from .writers import make_data_writer
from .classifiers import load_classifier
