"""
annolearn setup: annolearn is a library for training statistical
annotators over text and evaluating the spans they produce
"""

from setuptools import setup, find_packages

REQS = [
    'numpy',
    'scipy',
    'scikit-learn < 1.9',
    'joblib',
    'tabulate',
    'pandas >= 0.17',
]

TEST_REQS = [
    'pytest',
]


setup(name='annolearn',
      version='0.1',
      packages=find_packages(),
      install_requires=REQS,
      extras_require={'test': TEST_REQS})
