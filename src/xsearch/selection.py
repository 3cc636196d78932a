"""
Selection logic for the photon + di-Z jet search.

This module defines the event-level multiplicity selection and the
Z boson mass window applied to each jet grouping.
"""

import awkward as ak


def single_photon_dijet_selection(arrays, n_photons=1, min_jets=2):
    """
    Keep only events with exactly `n_photons` photons and at least
    `min_jets` jets.
    """
    photon_n = ak.num(arrays["photon_pt"], axis=1)
    jet_n = ak.num(arrays["jet_pt"], axis=1)
    event_mask = (photon_n == n_photons) & (jet_n >= min_jets)
    return arrays[event_mask]


def in_mass_window(mass, reference, margin):
    """
    Open interval test: reference - margin < mass < reference + margin.
    Works element-wise on arrays.
    """
    return (reference - margin < mass) & (mass < reference + margin)


def accept_pair(m_a, m_b, reference, margin):
    """
    Both groups of a bipartition must look like the reference boson.
    """
    return in_mass_window(m_a, reference, margin) & in_mass_window(
        m_b, reference, margin
    )
