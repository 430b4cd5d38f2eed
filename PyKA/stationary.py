# -*- coding: utf-8 -*-
r"""
Aggregated stationary distribution
----------------------------------

The aggregated stationary vector :math:`\pi_{st}` is the eigenvector of
:math:`{\bf \Pi}` whose eigenvalue :math:`\lambda` minimizes :math:`|\lambda-1|`, scaled such
that its disaggregation :math:`\tilde{p}_{st}={\bf A}\pi_{st}` has unit
:math:`L_1` norm,

.. math::

	\|{\bf A}\pi_{st}\|_1 = 1

The overall sign is fixed such that :math:`\sum_j(\tilde{p}_{st})_j\geq0`.
A complex eigenpair signals that the Krylov basis is still too small; no real
part is taken.
"""
import numpy as np

from .errors import NotConverged
from .tools import nearest_eigenpair


def estimate(Pi, A, out=None):
	r"""Estimate the aggregated stationary distribution.

	Parameters
	----------
	Pi : (k,k) array-like
		aggregated step matrix

	A : (N,k) array-like
		disaggregation matrix

	out : (k,) array, optional
		buffer receiving the result. Left untouched on failure.

	Returns
	-------
	pi_st : (k,) array
		real aggregated stationary distribution with :math:`\|{\bf A}\pi_{st}\|_1=1`

	Raises
	------
	NotConverged
		if the eigenpair nearest 1 is complex

	"""
	nu, v = nearest_eigenpair(Pi, 1.0)
	if nu.imag != 0.0 or np.any(v.imag != 0.0):
		raise NotConverged(nu)
	v = v.real
	lift = A @ v
	norm = np.abs(lift).sum()
	if not norm > 0.0:
		raise NotConverged(nu, "disaggregated eigenvector vanishes (eigenvalue %s)" % str(nu))
	if lift.sum() < 0.0:
		norm = -norm
	if out is None:
		return v / norm
	np.divide(v, norm, out=out)
	return out
