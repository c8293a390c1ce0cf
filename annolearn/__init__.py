"""
The annolearn library connects annotation pipelines to machine
learning backends, and evaluates the result.  It has a three-layer
structure:

* base layer (annotation spans, utilities)
* learning layer (annolearn.learning): feature and outcome encoders,
  data writers that build models, classifiers that load them, and
  annotators that tie these to feature extraction

* evaluation layer (annolearn.metrics, annolearn.evaluation): scoring
  of predicted spans against gold spans, holdout and cross-validation

Feature extraction proper (tokens, syntax, parts of speech) is left to
the host pipeline: annolearn only sees lists of named feature values ::

          evaluation  ->  metrics
              |
              v
           learning                     [learning layer]
              |
              v
          annotation                    [base layer]

Learning backends are pluggable; each consists of a data writer and a
classifier (see `annolearn.learning.writers` and
`annolearn.learning.classifiers`).
"""
