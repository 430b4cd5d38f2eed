# -*- coding: utf-8 -*-
r"""
Time evolution of an Arnoldi aggregation
----------------------------------------

:class:`ArnoldiAggregation` holds a frozen aggregation
:math:`({\bf \Pi},{\bf A},\pi_{st},\pi_0)` and propagates the aggregated
transient distribution

.. math::

	\pi_{t+1} = {\bf \Pi}\pi_t,\quad \tilde{p}_t = {\bf A}\pi_t \approx p_t

in place, using two preallocated buffers whose roles are swapped after each
step. Only the current state is kept, there is no history.

:class:`ArnoldiAggregationData` wraps an :class:`ArnoldiAggregation` and
evolves the exact distribution :math:`p_{t+1}={\bf P}^\top p_t` in lock-step
in order to measure the approximation error. With
:math:`{\bf D}=|{\bf A}{\bf \Pi}-{\bf P}^\top{\bf A}|` it reports

	- ``err`` : :math:`\|{\bf D}\|_1` (maximum column sum)
	- ``err_st`` : :math:`\|\tilde{p}_{st}-{\bf P}^\top\tilde{p}_{st}\|_1` with :math:`\tilde{p}_{st}={\bf A}\pi_{st}`
	- ``err_pi_st`` : :math:`\langle|\pi_{st}|,{\bf 1}^\top{\bf D}\rangle`
	- ``err_k`` : :math:`\|\tilde{p}_t-p_t\|_1`
	- ``err_k_bnd`` : :math:`\sum_{s<t}\langle|\pi_s|,{\bf 1}^\top{\bf D}\rangle`, an upper bound on ``err_k``

The bound telescopes from :math:`t=0` and is only valid when every step is
taken through :meth:`ArnoldiAggregationData.step_all` (or
:meth:`ArnoldiAggregationData.measure_dynamic_error`) from the initial state.
It is meant for validating aggregations, not for speed.

.. code-block:: python

	import PyKA
	algo = PyKA.sizing.arnoldi_with_pi_dynamic(1e-12, [1 + 10*i for i in range(100)])
	aggregation = PyKA.aggregation.ArnoldiAggregation.from_algorithm(P, p0, algo)
	for _ in range(100000):
		aggregation.step()

"""
import numpy as np

from .errors import DimensionError
from .tools import propagator, matvec_into, l1_diff, residual_matrix


class ArnoldiAggregation(object):
	r"""Bare aggregated chain, built for speed.

	Not thread safe; :meth:`step` mutates the transient state in place.

	Parameters
	----------
	P : (N,N) dense or sparse matrix
		row-stochastic transition matrix

	Pi : (k,k) array-like
		aggregated step matrix

	A : (N,k) array-like
		disaggregation matrix

	pi_st : (k,) array-like or None
		aggregated stationary distribution

	pi_0 : (k,) array-like
		aggregated initial distribution

	"""
	def __init__(self, P, Pi, A, pi_st, pi_0):
		self.P = P
		self.Pi = np.array(Pi, dtype=np.float64, order='C')
		self.A = np.asarray(A, dtype=np.float64)
		k = self.Pi.shape[0]
		if self.Pi.shape != (k, k) or self.A.shape != (P.shape[0], k):
			raise DimensionError("inconsistent aggregation shapes: P %s, Pi %s, A %s" % \
				(str(P.shape), str(self.Pi.shape), str(self.A.shape)))
		self.Pi.flags.writeable = False

		self.pi_st = None if pi_st is None else np.ravel(np.asarray(pi_st, dtype=np.float64))
		self.pi_0 = np.array(np.ravel(pi_0), dtype=np.float64)
		if self.pi_0.size != k:
			raise DimensionError("aggregated initial distribution has length %d, expected %d" % (self.pi_0.size, k))

		self._buffers = (self.pi_0.copy(), np.zeros(k))
		self._current = 0
		self.time = 0

	@classmethod
	def from_algorithm(cls, P, p0, algo):
		r"""Build the aggregation of ``(P, p0)`` with an algorithm from
		`PyKA.sizing`, e.g. ``arnoldi_with_pi_dynamic(eps, checkpoints)``
		"""
		Pi, A, pi_st, pi_0 = algo(P, p0)
		return cls(P, Pi, A, pi_st, pi_0)

	@property
	def size(self):
		return self.Pi.shape[0]

	@property
	def pi_k(self):
		r"""Current aggregated transient distribution (read-only view)"""
		pi_k = self._buffers[self._current][:]
		pi_k.flags.writeable = False
		return pi_k

	def step(self):
		r"""Advance to the next aggregated transient distribution, :math:`\pi\leftarrow{\bf \Pi}\pi`"""
		np.dot(self.Pi, self._buffers[self._current], out=self._buffers[1-self._current])
		self._current = 1 - self._current
		self.time += 1

	def disaggregate(self, pi=None):
		r"""Lift an aggregated vector, :math:`{\bf A}\pi`. Default is the current state."""
		if pi is None:
			pi = self._buffers[self._current]
		return self.A @ pi

	def reset(self):
		r"""Return to :math:`\pi_0`"""
		self._buffers[0][:] = self.pi_0
		self._current = 0
		self.time = 0


class ArnoldiAggregationData(object):
	r"""Arnoldi aggregation evolved alongside the exact chain, to collect
	error data.

	Parameters
	----------
	base : ArnoldiAggregation
		aggregation to instrument, must be at :math:`t=0`

	p0 : (N,) array-like
		initial distribution of the full chain

	Attributes
	----------
	diff : (N,k) array
		:math:`|{\bf A}{\bf \Pi}-{\bf P}^\top{\bf A}|`
	p_st : (N,) array or None
		disaggregated stationary distribution :math:`{\bf A}\pi_{st}`
	err, err_st, err_pi_st, err_k, err_k_bnd : float
		see module documentation. ``err_st`` and ``err_pi_st`` are NaN when
		the aggregation carries no stationary distribution.

	"""
	def __init__(self, base, p0):
		if base.time != 0:
			raise ValueError("error bound requires an aggregation at t=0, got t=%d" % base.time)
		self.base = base
		self.M = propagator(base.P)
		N = self.M.shape[0]

		p0 = np.array(np.ravel(p0), dtype=np.float64)
		if p0.size != N:
			raise DimensionError("initial distribution has length %d, transition matrix is %dx%d" % (p0.size, N, N))
		self._p_buffers = (p0, np.zeros(N))
		self._p_current = 0
		self.p_tilde_k = np.zeros(N)

		self.diff = residual_matrix(self.M, base.A, base.Pi)
		self._diff_colsum = self.diff.sum(axis=0)
		self.err = np.linalg.norm(self.diff, 1)

		if base.pi_st is None:
			self.p_st = None
			self.err_st = np.nan
			self.err_pi_st = np.nan
		else:
			self.p_st = base.A @ base.pi_st
			self.err_st = l1_diff(self.p_st, self.M @ self.p_st)
			self.err_pi_st = np.abs(base.pi_st) @ self._diff_colsum

		self.err_k = 0.0
		self.err_k_bnd = 0.0

	@classmethod
	def from_algorithm(cls, P, p0, algo):
		return cls(ArnoldiAggregation.from_algorithm(P, p0, algo), p0)

	@property
	def p_k(self):
		r"""Current exact transient distribution (read-only view)"""
		p_k = self._p_buffers[self._p_current][:]
		p_k.flags.writeable = False
		return p_k

	@property
	def pi_k(self):
		return self.base.pi_k

	def step(self):
		r"""Aggregated step only. The exact distribution is not advanced, so
		later error measurements are out of sync.
		"""
		self.base.step()

	def step_all(self):
		r"""Advance aggregated and exact distributions by one step and
		accumulate the dynamic error bound from the pre-step aggregated state.
		"""
		self.err_k_bnd += np.abs(self.base.pi_k) @ self._diff_colsum
		self.base.step()
		matvec_into(self.M, self._p_buffers[self._p_current], self._p_buffers[1-self._p_current])
		self._p_current = 1 - self._p_current

	def measure_dynamic_error(self):
		r"""Set ``err_k`` to :math:`\|{\bf A}\pi_t-p_t\|_1` for the current
		(pre-step) state, then call :meth:`step_all`. Use exclusively, not mixed
		with direct :meth:`step_all` calls, to obtain a per-step error trace.

		Returns
		-------
		err_k : float
		"""
		np.dot(self.base.A, self.base._buffers[self.base._current], out=self.p_tilde_k)
		self.err_k = l1_diff(self.p_tilde_k, self._p_buffers[self._p_current])
		self.step_all()
		return self.err_k
