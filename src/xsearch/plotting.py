"""
Rendering of the X candidate mass histogram.
"""

import os

import numpy as np
import matplotlib.pyplot as plt

from src.xsearch.accumulator import MASS_LABEL, COUNT_LABEL


TITLE = 'Particle "X" Invariant Mass Histogram'


def save_histogram_arrays(h, outdir, stem="m_x"):
    """
    Save histogram counts and bin edges as numpy arrays.
    """
    os.makedirs(outdir, exist_ok=True)
    counts = h.values()
    edges = h.axes[0].edges
    np.save(os.path.join(outdir, f"{stem}_counts.npy"), counts)
    np.save(os.path.join(outdir, f"{stem}_edges.npy"), edges)
    return counts, edges


def plot_mass_histogram(h, outdir, show=False, stem="m_x"):
    """
    Draw the histogram with Poisson error bars and save it as PNG.

    Returns the path of the written image.
    """
    os.makedirs(outdir, exist_ok=True)
    counts = h.values()
    edges = h.axes[0].edges

    # Bin centres and statistical (Poisson) errors
    centers = 0.5 * (edges[:-1] + edges[1:])
    errors = np.sqrt(counts)

    fig, ax = plt.subplots()
    ax.step(edges[:-1], counts, where="post", label="Candidates")
    ax.errorbar(
        centers,
        counts,
        yerr=errors,
        fmt=".",
        markersize=2,
        linewidth=0.5,
        label="Statistical errors",
    )
    ax.set_xlim(edges[0], edges[-1])
    ax.set_xlabel(MASS_LABEL)
    ax.set_ylabel(COUNT_LABEL)
    ax.set_title(TITLE)
    ax.legend(loc="best", frameon=False)
    fig.tight_layout()

    path = os.path.join(outdir, f"{stem}.png")
    fig.savefig(path)
    if show:
        plt.show()
    plt.close(fig)
    return path
