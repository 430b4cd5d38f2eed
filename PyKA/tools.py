# -*- coding: utf-8 -*-
r"""
Linear algebra helpers for Arnoldi aggregation
----------------------------------------------

Thin wrappers around ``numpy`` and ``scipy`` used throughout ``PyKA``.

Convention: the transition matrix :math:`{\bf P}` is row-stochastic, with
:math:`P_{ij}` the probability of the :math:`i\to j` transition, so a row
distribution evolves as :math:`p_{t+1}=p_t{\bf P}`. All Krylov computations
act on the column propagator

.. math::

	{\bf M} = {\bf P}^\top,\quad p_{t+1} = {\bf M}p_t

"""
import numpy as np
import scipy.linalg as spla
from scipy.sparse import issparse, csr_matrix

from .errors import DimensionError


def propagator(P):
	r"""Return the column propagator :math:`{\bf M}={\bf P}^\top` of a
	row-stochastic transition matrix.

	Parameters
	----------
	P : (N,N) dense or sparse matrix
		row-stochastic transition matrix

	Returns
	-------
	M : (N,N) csr matrix or C-contiguous float64 array
		same storage type (sparse/dense) as input

	"""
	if P.ndim != 2 or P.shape[0] != P.shape[1]:
		raise DimensionError("transition matrix must be square, got shape %s" % str(P.shape))
	if issparse(P):
		return csr_matrix(P.transpose(), dtype=np.float64)
	return np.ascontiguousarray(np.asarray(P, dtype=np.float64).T)


def check_stochastic(P, tol=1.0E-10):
	r"""Check that :math:`{\bf P}` is nonnegative with unit row sums.

	Parameters
	----------
	P : (N,N) dense or sparse matrix

	tol : float, optional
		Tolerance on row sums. Default = 1e-10

	Returns
	-------
	success, bool
		Self-explanatory
	"""
	if issparse(P):
		P = csr_matrix(P)
		if P.nnz > 0 and P.data.min() < 0.0:
			return False
	else:
		P = np.asarray(P)
		if P.min() < 0.0:
			return False
	rs = np.ravel(P.sum(axis=1))
	return np.abs(rs-1.0).max() < tol


def nearest_eigenpair(M, target=1.0):
	r"""Wrapper of ``scipy.linalg.eig`` returning the eigenpair whose
	eigenvalue lies nearest ``target``, i.e. minimizing :math:`|\lambda-t|`.

	Parameters
	----------
	M : (k,k) dense matrix

	target : float, optional
		Default = 1.0

	Returns
	-------
	nu : complex
		eigenvalue
	w : (k,) array-like, complex
		right eigenvector, unit 2-norm

	"""
	nu, w = spla.eig(M)
	ind = np.abs(nu-target).argmin()
	return nu[ind], w[:, ind]


def matvec_into(M, x, out):
	r"""Compute ``M @ x`` into ``out``.

	Dense operators are multiplied without allocation. Sparse operators
	allocate one temporary which is copied into ``out``.
	"""
	if issparse(M):
		out[:] = M @ x
	else:
		np.dot(M, x, out=out)
	return out


def l1_diff(a, b):
	r""" :math:`\|a-b\|_1` """
	return np.abs(a-b).sum()


def residual_matrix(M, A, Pi):
	r"""Elementwise absolute commutation residual
	:math:`|{\bf A}{\bf \Pi}-{\bf M}{\bf A}|` of shape (N,k).

	Parameters
	----------
	M : (N,N) dense or sparse matrix
		column propagator

	A : (N,k) array-like
		disaggregation (basis) matrix

	Pi : (k,k) array-like
		aggregated step matrix

	"""
	return np.abs(A @ Pi - np.asarray(M @ A))
