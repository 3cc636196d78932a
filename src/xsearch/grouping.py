"""
Evaluation of jet bipartitions against the boson mass window.

For every event the jets are split in all ways given by
`combinatorics.bipartitions`, both groups are summed, and a grouping
is accepted when both group masses fall in the window. Every accepted
grouping contributes the mass of the full system X = A + B.
"""

import numpy as np
import awkward as ak

from src.xsearch.combinatorics import (
    bipartitions,
    bipartition_masks,
    complement,
)
from src.xsearch.physics import invariant_mass, four_momentum_matrix
from src.xsearch.selection import accept_pair


# event x grouping cells per dense block, about 8 MB of group sums
MAX_BLOCK_CELLS = 1 << 17


def _mass(p4):
    return invariant_mass(p4[..., 3], p4[..., 0], p4[..., 1], p4[..., 2])


def group_sums(p4, masks):
    """
    Four-vector sums of both groups for every bipartition.

    Parameters
    ----------
    p4 : np.ndarray
        (n_events, n_jets, 4) array of (px, py, pz, E).
    masks : np.ndarray
        (n_combinations, n_jets) boolean membership of group A.

    Returns
    -------
    tuple of np.ndarray
        Group A and group B sums, each (n_events, n_combinations, 4).
    """
    members = masks.astype(float)
    group_a = np.einsum("cj,ejk->eck", members, p4)
    group_b = np.einsum("cj,ejk->eck", 1.0 - members, p4)
    return group_a, group_b


def _accepted_groupings(p4, reference_mass, margin, first_match_only):
    n_jets = p4.shape[1]
    masks = bipartition_masks(n_jets)
    group_a, group_b = group_sums(p4, masks)
    m_a = _mass(group_a)
    m_b = _mass(group_b)

    accepted = accept_pair(m_a, m_b, reference_mass, margin)
    if first_match_only:
        accepted = accepted & (np.cumsum(accepted, axis=1) == 1)

    m_x = _mass(p4.sum(axis=1))
    return accepted, m_a, m_b, m_x


def evaluate_event(p4, reference_mass, margin, first_match_only=False):
    """
    Evaluate all bipartitions of a single event.

    Parameters
    ----------
    p4 : array-like
        (n_jets, 4) array of jet (px, py, pz, E), n_jets >= 2.
    reference_mass, margin : float
        Centre and half-width of the open mass window [GeV].
    first_match_only : bool
        Stop recording after the first accepted grouping.

    Returns
    -------
    list of dict
        One entry per accepted grouping with keys 'combination',
        'complement', 'm_a', 'm_b' and 'm_x'.
    """
    p4 = np.asarray(p4, dtype=float)
    n_jets = p4.shape[0]
    accepted, m_a, m_b, m_x = _accepted_groupings(
        p4[np.newaxis], reference_mass, margin, first_match_only
    )

    combos = bipartitions(n_jets)
    candidates = []
    for row in np.flatnonzero(accepted[0]):
        combo = combos[row]
        candidates.append(
            {
                "combination": combo,
                "complement": complement(combo, n_jets),
                "m_a": float(m_a[0, row]),
                "m_b": float(m_b[0, row]),
                "m_x": float(m_x[0]),
            }
        )
    return candidates


def events_per_block(n_combinations, max_cells=MAX_BLOCK_CELLS):
    """
    Events evaluated together so that a block holds at most `max_cells`
    event x grouping cells; always at least one event.
    """
    return max(1, max_cells // max(1, n_combinations))


def evaluate_events(
    jets, reference_mass, margin, first_match_only=False, max_cells=MAX_BLOCK_CELLS
):
    """
    Columnar evaluation of a jagged Momentum4D jet array.

    Events are grouped by jet multiplicity and evaluated in dense
    blocks of at most `max_cells` event x grouping cells. A single event
    with more groupings than that is still evaluated on its own.
    Events with fewer than two jets contribute nothing.

    Returns
    -------
    tuple
        (m_x, n_matches): flat NumPy array with one X mass per accepted
        grouping, in event order, and the number of accepted groupings
        per event.
    """
    n_jets = ak.to_numpy(ak.num(jets, axis=1))
    n_matches = np.zeros(len(n_jets), dtype=np.int64)
    m_x_per_event = np.zeros(len(n_jets), dtype=float)

    for n in np.unique(n_jets):
        if n < 2:
            continue
        rows = np.flatnonzero(n_jets == n)
        step = events_per_block(len(bipartition_masks(int(n))), max_cells)
        for start in range(0, len(rows), step):
            block = rows[start:start + step]
            p4 = four_momentum_matrix(jets[block])
            accepted, _, _, m_x = _accepted_groupings(
                p4, reference_mass, margin, first_match_only
            )
            n_matches[block] = accepted.sum(axis=1)
            m_x_per_event[block] = m_x

    return np.repeat(m_x_per_event, n_matches), n_matches
