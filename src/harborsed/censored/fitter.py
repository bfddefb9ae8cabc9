"""
Maximum-likelihood lognormal fit for left-censored concentration data.

Exact observations contribute the normal log-density of log(value); non-detects
contribute the normal log-CDF at log(limit), i.e. the probability that the true
value lies below its reporting limit. The two parameters are optimised jointly
with L-BFGS-B on (mu - mu0, log sigma), where mu0 is the mean of all log values.
Centring on mu0 keeps the fit scale covariant: multiplying every value and limit
by k shifts mu by log(k) and leaves sigma unchanged.

Degenerate inputs
-----------------
- No exact observations: the likelihood increases monotonically as mu -> -inf,
  so there is no maximum. The seed distribution (mu0, sigma0) is returned with
  method="seeded".
- Fewer than two distinct exact values: the likelihood is unbounded as
  sigma -> 0. sigma is held at sigma0 and only mu is optimised
  (method="mle_fixed_sigma").
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np
from scipy import optimize
from scipy.stats import norm

from ..config import EstimationConfig, DEFAULT_CONFIG
from ..exceptions import FitDivergedError, InsufficientDataError
from .models import AnalyteGroup, FittedDistribution

logger = logging.getLogger(__name__)

__all__ = ["CensoredLognormalFitter", "fit_censored_lognormal", "initial_parameters"]


def initial_parameters(log_values: np.ndarray, seed_sigma: float) -> Tuple[float, float]:
    """
    Starting point for the optimizer: mean and sample SD of log values.

    Detection limits are treated as if they were values here. A zero or undefined
    SD (one observation, identical values) is replaced by `seed_sigma`.
    """
    mu0 = float(np.mean(log_values))
    sigma0 = float(np.std(log_values, ddof=1)) if log_values.size > 1 else 0.0
    if not np.isfinite(sigma0) or sigma0 <= 0:
        sigma0 = float(seed_sigma)
    return mu0, sigma0


def _nll_and_grad(params: np.ndarray, z_exact: np.ndarray, z_limit: np.ndarray) -> Tuple[float, np.ndarray]:
    shift, log_sigma = params
    sigma = np.exp(log_sigma)

    r = (z_exact - shift) / sigma
    a = (z_limit - shift) / sigma
    log_cdf = norm.logcdf(a)

    ll = np.sum(norm.logpdf(r)) - z_exact.size * log_sigma + np.sum(log_cdf)

    # inverse Mills ratio pdf(a)/cdf(a), in log space for far-tail limits
    mills = np.exp(norm.logpdf(a) - log_cdf)
    d_shift = np.sum(r) / sigma - np.sum(mills) / sigma
    d_log_sigma = np.sum(r ** 2 - 1.0) - np.sum(mills * a)
    return -float(ll), -np.array([d_shift, d_log_sigma])


def _nll_and_grad_fixed_sigma(params: np.ndarray, sigma: float,
                              z_exact: np.ndarray, z_limit: np.ndarray) -> Tuple[float, np.ndarray]:
    nll, grad = _nll_and_grad(np.array([params[0], np.log(sigma)]), z_exact, z_limit)
    return nll, grad[:1]


class CensoredLognormalFitter:
    """
    Fit a lognormal distribution to a mix of exact values and detection limits.

    Args:
        config: EstimationConfig with iteration cap, tolerance and seed sigma
    """

    def __init__(self, config: Optional[EstimationConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def fit(self, group: AnalyteGroup) -> FittedDistribution:
        if not isinstance(group, AnalyteGroup):
            group = AnalyteGroup.from_pairs(group)
        if len(group) == 0:
            raise InsufficientDataError(
                f"cannot fit a distribution to an empty group (analyte={group.analyte!r})"
            )

        y = np.log(group.values)
        censored = group.censored
        mu0, sigma0 = initial_parameters(y, self.config.seed_sigma)
        n, n_cens = len(group), int(censored.sum())

        z_exact = y[~censored] - mu0
        z_limit = y[censored] - mu0

        if z_exact.size == 0:
            logger.debug("analyte %s: all %d observations censored, using seed distribution "
                         "(mu=%.4f, sigma=%.4f)", group.analyte, n, mu0, sigma0)
            return FittedDistribution(mu0, sigma0, n_observations=n, n_censored=n_cens,
                                      method="seeded", iterations=0)

        options = {"maxiter": self.config.max_iterations, "gtol": self.config.gradient_tolerance}

        if np.unique(z_exact).size < 2:
            res = optimize.minimize(
                _nll_and_grad_fixed_sigma, x0=np.array([0.0]), jac=True,
                args=(sigma0, z_exact, z_limit), method="L-BFGS-B", options=options,
            )
            self._check(res, group)
            shift, sigma, method = float(res.x[0]), sigma0, "mle_fixed_sigma"
        else:
            res = optimize.minimize(
                _nll_and_grad, x0=np.array([0.0, np.log(sigma0)]), jac=True,
                args=(z_exact, z_limit), method="L-BFGS-B", options=options,
            )
            self._check(res, group)
            shift, sigma, method = float(res.x[0]), float(np.exp(res.x[1])), "mle"

        fitted = FittedDistribution(mu0 + shift, sigma, n_observations=n, n_censored=n_cens,
                                    method=method, iterations=int(res.nit))
        logger.debug("analyte %s: %s fit mu=%.4f sigma=%.4f (%d obs, %d censored, %d iterations)",
                     group.analyte, method, fitted.mu, fitted.sigma, n, n_cens, fitted.iterations)
        return fitted

    @staticmethod
    def _check(res: optimize.OptimizeResult, group: AnalyteGroup) -> None:
        if not res.success or not np.all(np.isfinite(res.x)) or not np.isfinite(res.fun):
            raise FitDivergedError(
                f"likelihood optimisation failed for analyte {group.analyte!r}: {res.message}",
                iterations=int(getattr(res, "nit", 0)),
            )


def fit_censored_lognormal(group: AnalyteGroup, *, config: Optional[EstimationConfig] = None) -> FittedDistribution:
    """Functional form of CensoredLognormalFitter(config).fit(group)."""
    return CensoredLognormalFitter(config).fit(group)
