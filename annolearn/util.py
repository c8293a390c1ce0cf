# License: BSD3

"""
Miscellaneous utility functions
"""

from itertools import chain


def concat_l(items):
    ":: [[a]] -> [a]"
    return list(chain.from_iterable(items))
