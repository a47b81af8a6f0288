"""
Numba-accelerated core functions for state-space smoothing.

This module provides the Kalman filter and the fixed-interval state smoother
used by the structural models. The recursions are written for a univariate
measurement equation without measurement error (``y_t = Z alpha_t``) and a
transition ``alpha_{t+1} = T alpha_t + eta_t`` with ``Var(eta_t) = Q``.
Missing observations (NaN) skip the update step. The functions are accelerated
using Numba's just-in-time (JIT) compilation.
"""

import logging
from typing import Tuple

import numpy as np
from numba import jit

# Set up module-level logger
logger = logging.getLogger("sts.models.structural._numba_core")


@jit(nopython=True, cache=True)
def kalman_filter(y: np.ndarray,
                  z: np.ndarray,
                  t: np.ndarray,
                  q: np.ndarray,
                  a0: np.ndarray,
                  p0: np.ndarray,
                  tolerance: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Run the Kalman filter in prediction form.

    Args:
        y: Observations (NaN for missing values)
        z: Measurement vector
        t: Transition matrix
        q: State disturbance covariance
        a0: Mean of the initial state
        p0: Covariance of the initial state
        tolerance: Innovation variances below this value skip the update

    Returns:
        Tuple of predicted states (n, m), predicted covariances (n, m, m),
        innovations (n), innovation variances (n), Kalman gains T P Z' / F
        (n, m) and a boolean vector flagging the observations used in an
        update (n)
    """
    n = y.shape[0]
    m = z.shape[0]
    a_pred = np.zeros((n, m))
    p_pred = np.zeros((n, m, m))
    v = np.zeros(n)
    f = np.zeros(n)
    k = np.zeros((n, m))
    used = np.zeros(n, dtype=np.bool_)

    a = a0.copy()
    p = p0.copy()
    for i in range(n):
        a_pred[i] = a
        p_pred[i] = p

        pz = np.dot(p, z)
        fi = np.dot(z, pz)
        f[i] = fi
        if np.isnan(y[i]) or fi < tolerance:
            a = np.dot(t, a)
            p = np.dot(np.dot(t, p), t.T) + q
        else:
            vi = y[i] - np.dot(z, a)
            v[i] = vi
            used[i] = True
            # Filtered state, then prediction
            a_filt = a + pz * (vi / fi)
            p_filt = p - np.outer(pz, pz) / fi
            k[i] = np.dot(t, pz) / fi
            a = np.dot(t, a_filt)
            p = np.dot(np.dot(t, p_filt), t.T) + q
        # Enforce symmetry
        p = 0.5 * (p + p.T)

    return a_pred, p_pred, v, f, k, used


@jit(nopython=True, cache=True)
def state_smoother(z: np.ndarray,
                   t: np.ndarray,
                   a_pred: np.ndarray,
                   p_pred: np.ndarray,
                   v: np.ndarray,
                   f: np.ndarray,
                   k: np.ndarray,
                   used: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Fixed-interval smoother (backward r/N recursion).

    Args:
        z: Measurement vector
        t: Transition matrix
        a_pred: Predicted states from the filter
        p_pred: Predicted covariances from the filter
        v: Innovations
        f: Innovation variances
        k: Kalman gains
        used: Observations used in an update

    Returns:
        Tuple of smoothed states (n, m) and smoothed state variances (n, m)
    """
    n = a_pred.shape[0]
    m = z.shape[0]
    states = np.zeros((n, m))
    variances = np.zeros((n, m))

    r = np.zeros(m)
    nmat = np.zeros((m, m))
    for i in range(n - 1, -1, -1):
        if used[i]:
            l = t - np.outer(k[i], z)
            r = z * (v[i] / f[i]) + np.dot(l.T, r)
            nmat = np.outer(z, z) / f[i] + np.dot(np.dot(l.T, nmat), l)
        else:
            r = np.dot(t.T, r)
            nmat = np.dot(np.dot(t.T, nmat), t)
        p = p_pred[i]
        states[i] = a_pred[i] + np.dot(p, r)
        vmat = p - np.dot(np.dot(p, nmat), p)
        for j in range(m):
            variances[i, j] = vmat[j, j]

    return states, variances
