# -*- coding: utf-8 -*-
"""
Model Order Estimation - Number of sources from covariance eigenvalues.

For a candidate order ``k`` the log-likelihood term compares the
arithmetic and geometric means of the ``Nc - k`` smallest eigenvalues::

    L(k) = Nsnap * (Nc - k) * log(mean(lambda_n) / gmean(lambda_n))

and ``p(k) = k * (2*Nc - k)`` counts the free real parameters of a rank
``k`` complex signal model. Each penalized criterion is minimized over
``k = 0 .. Nc-1``:

=======  =================================================================
NT       count of eigenvalues exceeding ``penalty_nt`` times the smallest
AIC      ``2L + 2p``
HQ       ``2L + 2p*log(log(Nsnap))``
MDL      ``L + p*log(Nsnap)/2``
AICc     ``AIC + 2p(p+1)/(Nsnap-p-1)``
KICvc    ``2L + 3p + 2p(p+1)/(Nsnap-p-1)``
WIC      weighted average ``(Nsnap*AICc + log(Nsnap)*BIC)/(Nsnap + log(Nsnap))``
=======  =================================================================

where ``BIC = 2L + p*log(Nsnap)``. Small-sample corrections become
infinite once ``p + 1 >= Nsnap``.

References
----------
M. Wax and T. Kailath, "Detection of signals by information theoretic
criteria," IEEE Transactions on Acoustics, Speech, and Signal Processing,
vol. 33, pp. 387-392, 1985.

Dependencies
------------
numpy - Eigenvalue statistics

License
-------
MIT License
Copyright (c) 2024 geoint.org

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

# Standard library
from typing import Dict, Sequence

# Third-party
import numpy as np

# GRDL
from grdl.exceptions import ValidationError

# Internal
from grdl_arrayproc.processing.config import MOE_CRITERIA


def sorted_eigenvalues(rxx: np.ndarray) -> np.ndarray:
    """Real eigenvalues of a Hermitian covariance, descending, floored at tiny."""
    eigvals = np.linalg.eigvalsh(rxx)[::-1]
    return np.maximum(eigvals, np.finfo(np.float64).tiny)


def _log_likelihood(eigvals: np.ndarray, nsnap: int) -> np.ndarray:
    nc = eigvals.size
    out = np.empty(nc)
    for k in range(nc):
        tail = eigvals[k:]
        arith = np.mean(tail)
        geo = np.exp(np.mean(np.log(tail)))
        out[k] = nsnap * (nc - k) * np.log(arith / geo)
    return out


def _small_sample(p: np.ndarray, nsnap: int) -> np.ndarray:
    denom = nsnap - p - 1
    return np.where(denom > 0, 2.0 * p * (p + 1) / np.maximum(denom, 1), np.inf)


def criterion_scores(
    eigvals: np.ndarray,
    nsnap: int,
    criterion: str
) -> np.ndarray:
    """
    Criterion value for every candidate order ``0 .. Nc-1``.

    Parameters
    ----------
    eigvals : np.ndarray
        Eigenvalues sorted in descending order.
    nsnap : int
        Number of snapshots behind the covariance.
    criterion : str
        One of ``AIC``, ``HQ``, ``MDL``, ``AICc``, ``KICvc``, ``WIC``.

    Returns
    -------
    np.ndarray
        Shape (Nc,). The estimated order is its argmin.
    """
    nc = eigvals.size
    k = np.arange(nc, dtype=np.float64)
    p = k * (2 * nc - k)
    like = _log_likelihood(eigvals, nsnap)
    log_n = np.log(max(nsnap, 2))

    if criterion == 'AIC':
        return 2 * like + 2 * p
    if criterion == 'HQ':
        return 2 * like + 2 * p * np.log(max(log_n, 1.0))
    if criterion == 'MDL':
        return like + 0.5 * p * log_n
    if criterion == 'AICc':
        return 2 * like + 2 * p + _small_sample(p, nsnap)
    if criterion == 'KICvc':
        return 2 * like + 3 * p + _small_sample(p, nsnap)
    if criterion == 'WIC':
        aicc = 2 * like + 2 * p + _small_sample(p, nsnap)
        bic = 2 * like + p * log_n
        return (nsnap * aicc + log_n * bic) / (nsnap + log_n)
    raise ValidationError(f"Unknown model order criterion {criterion!r}")


def estimate_order(
    eigvals: np.ndarray,
    nsnap: int,
    criterion: str,
    penalty_nt: float = 10.0
) -> int:
    """
    Number of sources selected by one criterion.

    Parameters
    ----------
    eigvals : np.ndarray
        Eigenvalues sorted in descending order.
    nsnap : int
        Number of snapshots.
    criterion : str
        Name from :data:`MOE_CRITERIA`.
    penalty_nt : float
        Eigenvalue ratio threshold of the ``NT`` test.

    Returns
    -------
    int
    """
    if criterion == 'NT':
        ratio = eigvals / eigvals[-1]
        return int(np.count_nonzero(ratio[:-1] > penalty_nt))
    scores = criterion_scores(eigvals, nsnap, criterion)
    return int(np.argmin(scores))


def estimate_model_order(
    rxx: np.ndarray,
    nsnap: int,
    criteria: Sequence[str],
    max_order: int,
    penalty_nt: float = 10.0,
    all_criteria: bool = False
):
    """
    Model order of one pixel.

    Parameters
    ----------
    rxx : np.ndarray
        Covariance matrix, shape (Nc, Nc).
    nsnap : int
        Number of snapshots behind *rxx*.
    criteria : sequence of str
        Criteria whose maximum sets the order.
    max_order : int
        Cap on the returned order (configured number of sources).
    penalty_nt : float
        ``NT`` threshold.
    all_criteria : bool
        Also evaluate every criterion in :data:`MOE_CRITERIA`.

    Returns
    -------
    order : int
        ``min(max(order over criteria), max_order)``.
    per_criterion : dict
        Order (uncapped) per evaluated criterion.
    """
    eigvals = sorted_eigenvalues(rxx)
    names = MOE_CRITERIA if all_criteria else tuple(criteria)
    per_criterion: Dict[str, int] = {
        name: estimate_order(eigvals, nsnap, name, penalty_nt) for name in names
    }
    selected = [per_criterion[name] for name in criteria]
    order = max(selected) if selected else max_order
    return min(order, max_order), per_criterion


__all__ = [
    "sorted_eigenvalues",
    "criterion_scores",
    "estimate_order",
    "estimate_model_order",
]
