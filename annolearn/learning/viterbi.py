"""
Joint decoding of label sequences.

Given per-position label scores and label-to-label transition scores
(all in log space), find the label sequence with the highest total
score. The dynamic programming table is filled left to right with
explicit back-pointers.
"""

# License: BSD3

import numpy as np


def viterbi(emissions, transitions, start=None):
    """Best label path through a sequence.

    Parameters
    ----------
    emissions: array of float, shape=[n_positions, n_labels]
        Score of each label at each position
    transitions: array of float, shape=[n_labels, n_labels]
        `transitions[i, j]` is the score of label j following label i
    start: array of float, shape=[n_labels], optional
        Score of each label at the first position

    Returns
    -------
    path: list of int
        Label index for each position (empty if there are no positions)
    score: float
        Total score of the path
    """
    emissions = np.asarray(emissions, dtype=float)
    n_pos, n_labels = emissions.shape
    if n_pos == 0:
        return [], 0.0

    # best[t, j]: score of the best path ending at position t with label j
    best = np.empty((n_pos, n_labels))
    # backptr[t, j]: label at t - 1 on that path
    backptr = np.zeros((n_pos, n_labels), dtype=int)
    label_ids = np.arange(n_labels)

    best[0] = emissions[0]
    if start is not None:
        best[0] += start
    for t in range(1, n_pos):
        # candidates[i, j]: come from label i, go to label j
        candidates = best[t - 1][:, np.newaxis] + transitions
        backptr[t] = np.argmax(candidates, axis=0)
        best[t] = candidates[backptr[t], label_ids] + emissions[t]

    last = int(np.argmax(best[-1]))
    score = float(best[-1, last])
    path = [last]
    for t in range(n_pos - 1, 0, -1):
        path.append(int(backptr[t, path[-1]]))
    path.reverse()
    return path, score
