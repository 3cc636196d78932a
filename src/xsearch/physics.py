"""
Physics utilities for the jet grouping search.

This module provides jet four-vectors and invariant mass
calculations using NumPy, Awkward Arrays and vector.
"""

import numpy as np
import awkward as ak
import vector


def invariant_mass(E, px, py, pz):
    """
    Compute invariant mass m = sqrt(E^2 - |p|^2) with c = 1.

    Parameters
    ----------
    E, px, py, pz : array-like
        Components of the four-vector(s). NumPy or Awkward Arrays;
        the leading axes are kept.

    Returns
    -------
    array-like
        Invariant mass values with the same structure as the inputs.
    """
    p2 = px**2 + py**2 + pz**2
    m2 = E**2 - p2
    # guard against small negative values from numerical precision
    m2 = np.maximum(m2, 0)
    return np.sqrt(m2)


def jet_four_vectors(arrays):
    """
    Jagged Momentum4D array of the jets, in detection order.
    """
    return vector.Array(
        ak.zip(
            {
                "pt": arrays["jet_pt"],
                "eta": arrays["jet_eta"],
                "phi": arrays["jet_phi"],
                "mass": arrays["jet_mass"],
            }
        )
    )


def four_momentum_matrix(jets):
    """
    Stack a block of events with equal jet multiplicity into a
    NumPy array of shape (n_events, n_jets, 4) holding (px, py, pz, E).
    """
    components = [
        ak.to_numpy(ak.to_regular(getattr(jets, name), axis=1))
        for name in ("px", "py", "pz", "E")
    ]
    return np.stack(components, axis=-1).astype(float)
