# -*- coding: utf-8 -*-
r"""
Incremental Arnoldi factorization of a Markov chain propagator
--------------------------------------------------------------

Builds an orthonormal basis :math:`{\bf A}=[v_1,\dots,v_k]` of the Krylov
subspace

.. math::

	\mathcal{K}_k({\bf M},p_0) = {\rm span}\{p_0,{\bf M}p_0,\dots,{\bf M}^{k-1}p_0\}

one vector at a time, where :math:`{\bf M}={\bf P}^\top` is the column
propagator of the row-stochastic transition matrix :math:`{\bf P}`. Alongside
the basis the upper Hessenberg projection
:math:`{\bf \Pi}={\bf A}^\top{\bf M}{\bf A}` is accumulated, so that

.. math::

	{\bf M}{\bf A} = {\bf A}{\bf \Pi} + r\,e_k^\top

with residual :math:`r` orthogonal to the basis. Orthogonalization is by
modified Gram-Schmidt with one re-orthogonalization pass.

All storage is allocated once at ``capacity``; the basis and projection are
exposed as bounded views of these buffers and are never resized.

.. code-block:: python

	import PyKA
	fact = PyKA.arnoldi.initialize(P, p0, capacity=50)
	for _ in range(9):
		PyKA.arnoldi.expand(fact)
	A, Pi = fact.basis(), fact.rayleighquotient()

"""
import numpy as np

from .errors import DimensionError, DegenerateInputError, BreakdownError
from .tools import propagator

DEFAULT_MAX_SIZE = 2000
BREAKDOWN_TOL = 1.0E-12


class ArnoldiFactorization(object):
	r"""Running Arnoldi factorization with preallocated storage.

	Not thread safe: a single owner mutates it in place through
	:func:`expand`.

	Attributes
	----------
	M : (N,N) csr matrix or array
		column propagator :math:`{\bf P}^\top`
	V : (N,capacity) array
		basis buffer, Fortran ordered so basis vectors are contiguous
	H : (capacity,capacity) array
		Hessenberg buffer
	r : (N,) array
		current residual
	size : int
		current number of basis vectors
	"""
	def __init__(self, M, capacity, reorthogonalize=True, breakdown_tol=BREAKDOWN_TOL):
		self.M = M
		self.N = M.shape[0]
		self.capacity = capacity
		self.reorthogonalize = reorthogonalize
		self.breakdown_tol = breakdown_tol

		self.V = np.zeros((self.N, capacity), order='F')
		self.H = np.zeros((capacity, capacity))
		self.r = np.zeros(self.N)
		self.size = 0
		self.residual_norm = 0.0
		self._wnorm = 0.0

	def _orthogonalize(self, w, k):
		h = np.zeros(k)
		for sweep in range(1 + int(self.reorthogonalize)):
			for i in range(k):
				vi = self.V[:, i]
				c = vi @ w
				w -= c * vi
				h[i] += c
		return h

	def _extend(self):
		# new Hessenberg column and residual for the last basis vector
		k = self.size
		w = self.M @ self.V[:, k-1]
		w = np.array(w, dtype=np.float64).ravel()
		self._wnorm = np.linalg.norm(w)
		self.H[:k, k-1] = self._orthogonalize(w, k)
		self.r[:] = w
		self.residual_norm = np.linalg.norm(w)

	def basis(self):
		r"""Read-only (N,k) view of the orthonormal basis :math:`{\bf A}`"""
		A = self.V[:, :self.size]
		A.flags.writeable = False
		return A

	def rayleighquotient(self):
		r"""Read-only (k,k) view of the projected operator :math:`{\bf \Pi}`"""
		Pi = self.H[:self.size, :self.size]
		Pi.flags.writeable = False
		return Pi

	def __len__(self):
		return self.size


def initialize(P, p0, capacity=None, reorthogonalize=True, breakdown_tol=BREAKDOWN_TOL):
	r"""
	Seed an Arnoldi factorization with :math:`v_1=p_0/\|p_0\|_2`.

	Parameters
	----------
	P : (N,N) dense or sparse matrix
		Row-stochastic transition matrix

	p0 : (N,) array-like
		Initial distribution

	capacity : int, optional
		Maximum number of basis vectors; all storage is allocated up front.
		Default = min(N, ``DEFAULT_MAX_SIZE``)

	reorthogonalize : bool, optional
		Perform a second Gram-Schmidt pass. Default = True

	breakdown_tol : float, optional
		Relative residual below which :func:`expand` reports breakdown.
		Default = 1e-12

	Returns
	-------
	factorization : ArnoldiFactorization
		factorization of size 1, with :math:`{\bf \Pi}=[v_1^\top{\bf M}v_1]`

	"""
	M = propagator(P)
	N = M.shape[0]
	p0 = np.ravel(np.asarray(p0, dtype=np.float64))
	if p0.size != N:
		raise DimensionError("initial distribution has length %d, transition matrix is %dx%d" % (p0.size, N, N))
	if capacity is None:
		capacity = min(N, DEFAULT_MAX_SIZE)
	if capacity < 1:
		raise DimensionError("capacity must be at least 1, got %d" % capacity)

	beta = np.linalg.norm(p0)
	if not beta > 0.0:
		raise DegenerateInputError("initial distribution has zero norm")

	fact = ArnoldiFactorization(M, capacity, reorthogonalize=reorthogonalize, breakdown_tol=breakdown_tol)
	fact.V[:, 0] = p0 / beta
	fact.size = 1
	fact._extend()
	return fact


def expand(fact):
	r"""
	Append one basis vector to ``fact`` in place.

	The normalized residual becomes :math:`v_{k+1}`, its norm fills the
	subdiagonal entry :math:`\Pi_{k+1,k}`, and the new column
	:math:`\Pi_{:,k+1}` is obtained by orthogonalizing
	:math:`{\bf M}v_{k+1}` against the whole basis.

	Raises
	------
	BreakdownError
		if the residual is numerically zero. ``fact`` is unchanged and its
		current size should be treated as final.
	DimensionError
		if the preallocated capacity is exhausted
	"""
	k = fact.size
	if fact.residual_norm <= fact.breakdown_tol * fact._wnorm:
		raise BreakdownError(k, fact.residual_norm)
	if k >= fact.capacity:
		raise DimensionError("factorization capacity %d exhausted" % fact.capacity)

	fact.V[:, k] = fact.r / fact.residual_norm
	fact.H[k, k-1] = fact.residual_norm
	fact.size = k + 1
	fact._extend()
	return fact


def basis(fact):
	return fact.basis()


def rayleighquotient(fact):
	return fact.rayleighquotient()
