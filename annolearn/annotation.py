"""
Low-level representation of annotation spans.

Spans are produced either by gold-standard annotation (read by some
external corpus reader) or by a classifier's decisions over a document.
Both sides are represented the same way so that they can be aligned
against each other during evaluation.
"""

# License: BSD3

# pylint: disable=too-few-public-methods


class Span(object):
    """
    What portion of text an annotation corresponds to.
    Assumed to be in terms of character offsets

    The way we interpret spans amounts to how Python
    interprets array slice indices.

    One way to understand them is to think of offsets as
    sitting in between individual characters ::

          h   o   w   d   y
        0   1   2   3   4   5

    So `(0,5)` covers the whole word above, and `(1,2)`
    picks out the letter "o"
    """
    def __init__(self, start, end):
        self.char_start = start
        self.char_end = end

    def __str__(self):
        return '(%d,%d)' % (self.char_start, self.char_end)

    def __repr__(self):
        return 'Span(%d, %d)' % (self.char_start, self.char_end)

    def __lt__(self, other):
        return self.char_start < other.char_start or\
            (self.char_start == other.char_start and
             self.char_end < other.char_end)

    def __eq__(self, other):
        return\
            self.char_start == other.char_start and\
            self.char_end == other.char_end

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return (self.char_start, self.char_end).__hash__()

    def offsets(self):
        """
        The `(start, end)` pair; this is what exact span matching
        compares
        """
        return (self.char_start, self.char_end)

    def encloses(self, other):
        """
        Return True if this span includes the argument

        Note that `x.encloses(x) == True`

        Corner case: `x.encloses(None) == False`
        """
        if other is None:
            return False
        else:
            return\
                self.char_start <= other.char_start and\
                self.char_end >= other.char_end


class AnnotationSpan(Span):
    """
    A span of text together with the category it was annotated
    with (eg. `PER` for a named entity mention).

    Two annotation spans are equal if they have the same offsets
    and the same category. Use `offsets()` if you only care about
    the positional part.
    """
    def __init__(self, start, end, category):
        super(AnnotationSpan, self).__init__(start, end)
        self.category = category

    def __str__(self):
        return '(%d,%d) [%s]' % (self.char_start, self.char_end,
                                 self.category)

    def __repr__(self):
        return 'AnnotationSpan(%d, %d, %r)' % (self.char_start,
                                               self.char_end,
                                               self.category)

    def __eq__(self, other):
        return\
            super(AnnotationSpan, self).__eq__(other) and\
            self.category == getattr(other, 'category', None)

    def __lt__(self, other):
        if self.offsets() == other.offsets():
            return str(self.category) < str(getattr(other, 'category', ''))
        return super(AnnotationSpan, self).__lt__(other)

    def __hash__(self):
        return hash((self.char_start, self.char_end, self.category))

    @classmethod
    def from_tuple(cls, triple):
        """
        Build an annotation span from a `(begin, end, category)`
        triple
        """
        start, end, category = triple
        return cls(start, end, category)

    def as_tuple(self):
        "`(begin, end, category)`"
        return (self.char_start, self.char_end, self.category)
