"""
Jet grouping combinatorics.

Enumerates the ways of splitting N jets into a subset of size 1..N/2
and its complement. The number of groupings grows as 2^(N-1), so events
with very many jets dominate the run time.
"""

import itertools
from functools import lru_cache

import numpy as np


def combinations(n, r):
    """
    All size-r subsets of range(n), as ascending tuples in
    lexicographic order.
    """
    return list(itertools.combinations(range(n), r))


def bipartitions(n):
    """
    Pool the subsets of size 1..n//2 into one list.

    For even n the subsets of size n/2 contain every split twice
    (once from each side), both are kept.
    """
    combos = []
    for r in range(1, n // 2 + 1):
        combos.extend(combinations(n, r))
    return combos


def complement(combo, n):
    members = set(combo)
    return tuple(i for i in range(n) if i not in members)


@lru_cache(maxsize=None)
def bipartition_masks(n):
    """
    Boolean matrix of shape (n_combinations, n).

    Row i flags the jets of group A for bipartitions(n)[i]; the
    complement of the row is group B.
    """
    combos = bipartitions(n)
    masks = np.zeros((len(combos), n), dtype=bool)
    for row, combo in enumerate(combos):
        masks[row, list(combo)] = True
    # shared across calls, keep it read-only
    masks.flags.writeable = False
    return masks
