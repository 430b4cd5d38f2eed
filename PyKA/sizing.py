# -*- coding: utf-8 -*-
r"""
Adaptive selection of the aggregation size
------------------------------------------

Grows a single Arnoldi factorization (see `PyKA.arnoldi`) over an ascending
schedule of checkpoint sizes and stops at the first checkpoint :math:`k`
where the aggregated stationary vector :math:`\pi_{st}` is real and the
stationary-weighted commutation residual

.. math::

	c(k) = \sum_i |\pi_{st,i}| \sum_j \left|({\bf A}{\bf \Pi}-{\bf M}{\bf A})_{ji}\right|

satisfies :math:`c(k)\leq\epsilon`. The basis is never rebuilt: storage for
the basis, the projection and :math:`\pi_{st}` is allocated once at the
size cap ``max_size`` and checkpoints work on prefixes of these buffers.

When no checkpoint meets the tolerance the aggregation at the largest size
reached is returned anyway, flagged ``certified=False`` and accompanied by
a :class:`PyKA.errors.SoftFailure` warning. If the Krylov subspace saturates
(:class:`PyKA.errors.BreakdownError`) growth stops and the saturated size is
evaluated as final.

The module also provides the algorithm factories ``naive_arnoldi``,
``arnoldi_with_pi`` and ``arnoldi_with_pi_dynamic``, each returning a
callable ``algo(P, p0)`` suitable for
:meth:`PyKA.aggregation.ArnoldiAggregation.from_algorithm`.

.. note::

	A bisection between the last two checkpoints could shrink the accepted
	size further. It is not implemented.

"""
import time
import warnings
import numpy as np

from . import arnoldi
from . import stationary
from .arnoldi import DEFAULT_MAX_SIZE
from .errors import BreakdownError, NotConverged, SoftFailure
from .tools import propagator, residual_matrix

""" test for ipython environment (is this being loaded from a notebook) """
try:
	__IPYTHON__
except NameError:
	in_notebook = False
else:
	in_notebook = True

if in_notebook:
	from tqdm.notebook import tqdm
else:
	from tqdm import tqdm


def _freeze(x):
	if x is None:
		return None
	x = np.array(x, dtype=np.float64, order='C')
	x.flags.writeable = False
	return x


class Aggregation(object):
	r"""Frozen result of an Arnoldi aggregation.

	Unpacks as ``Pi, A, pi_st, pi_0 = aggregation``.

	Attributes
	----------
	Pi : (k,k) array
		aggregated step matrix
	A : (N,k) array
		disaggregation matrix with orthonormal columns
	pi_st : (k,) array or None
		aggregated stationary distribution, None if not computed or not converged
	pi_0 : (k,) array
		aggregated initial distribution :math:`[\|p_0\|_2,0,\dots,0]`
	size : int
		aggregation size k
	criterion : float
		:math:`c(k)`, NaN if ``pi_st`` is None
	certified : bool
		whether :math:`c(k)\leq\epsilon` was met
	saturated : bool
		whether the Krylov subspace broke down before the requested size
	trace : list of (int, float)
		(size, criterion) at every checkpoint evaluated
	"""
	def __init__(self, Pi, A, pi_st, pi_0, criterion=np.nan, certified=False, saturated=False, trace=None):
		self.Pi = _freeze(Pi)
		self.A = _freeze(A)
		self.pi_st = _freeze(pi_st)
		self.pi_0 = _freeze(pi_0)
		self.size = self.Pi.shape[0]
		self.criterion = criterion
		self.certified = certified
		self.saturated = saturated
		self.trace = [] if trace is None else list(trace)

	def __iter__(self):
		return iter((self.Pi, self.A, self.pi_st, self.pi_0))

	def __repr__(self):
		return "Aggregation(size=%d, criterion=%.3e, certified=%s, saturated=%s)" % \
			(self.size, self.criterion, self.certified, self.saturated)


def aggregated_initial(p0, k):
	r""" :math:`\pi_0=[\|p_0\|_2,0,\dots,0]` of length k """
	pi_0 = np.zeros(k)
	pi_0[0] = np.linalg.norm(np.ravel(p0))
	return pi_0


def _criterion(M, A, Pi, pi_st):
	return np.abs(pi_st) @ residual_matrix(M, A, Pi).sum(axis=0)


def criterion(P, A, Pi, pi_st):
	r"""Stationary-weighted :math:`L_1` commutation residual

	.. math::

		c(k) = \sum_i |\pi_{st,i}| \sum_j \left|({\bf A}{\bf \Pi}-{\bf P}^\top{\bf A})_{ji}\right|

	Parameters
	----------
	P : (N,N) dense or sparse matrix
		row-stochastic transition matrix

	A : (N,k) array-like
		disaggregation matrix

	Pi : (k,k) array-like
		aggregated step matrix

	pi_st : (k,) array-like
		aggregated stationary distribution

	Returns
	-------
	c : float

	"""
	return _criterion(propagator(P), A, Pi, pi_st)


def _check_schedule(checkpoints, max_size):
	checkpoints = np.ravel(np.asarray(checkpoints))
	if checkpoints.size == 0:
		raise ValueError("checkpoint schedule is empty")
	if not np.all(checkpoints == np.round(checkpoints)):
		raise ValueError("checkpoints must be integers")
	checkpoints = checkpoints.astype(int)
	if checkpoints[0] < 1:
		raise ValueError("checkpoints must be at least 1")
	if np.any(np.diff(checkpoints) <= 0):
		raise ValueError("checkpoints must be strictly ascending")
	if max_size <= checkpoints[-1]:
		raise ValueError("max_size=%d must exceed the largest checkpoint %d" % (max_size, checkpoints[-1]))
	return [int(c) for c in checkpoints]


def select_size(P, p0, eps, checkpoints, max_size=DEFAULT_MAX_SIZE, screen=False, **kwargs):
	r"""
	Find the smallest checkpoint size whose Arnoldi aggregation satisfies
	:math:`c(k)\leq\epsilon` with a real :math:`\pi_{st}`.

	Parameters
	----------
	P : (N,N) dense or sparse matrix
		row-stochastic transition matrix

	p0 : (N,) array-like
		initial distribution

	eps : float
		tolerance on :math:`c(k)`, must be positive. ``np.inf`` accepts the
		first checkpoint with a real stationary vector.

	checkpoints : (S,) array-like, int
		strictly ascending sizes at which the criterion is evaluated

	max_size : int, optional
		size cap; storage of order N*max_size is allocated up front.
		Must exceed the largest checkpoint. Default = 2000

	screen : bool, optional
		Whether to print progress. Default = False

	kwargs :
		passed to :func:`PyKA.arnoldi.initialize` (``reorthogonalize``,
		``breakdown_tol``)

	Returns
	-------
	aggregation : Aggregation
		``certified=False`` (with a ``SoftFailure`` warning) if no checkpoint
		met the tolerance

	"""
	if not eps > 0.0:
		raise ValueError("tolerance must be positive, got %s" % str(eps))
	checkpoints = _check_schedule(checkpoints, max_size)

	fact = arnoldi.initialize(P, p0, capacity=max_size, **kwargs)
	M = fact.M
	pi_st = np.zeros(max_size)

	trace = []
	certified = False
	saturated = False
	have_st = False
	crit = np.nan

	if screen:
		t = time.time()
		pbar = tqdm(total=checkpoints[-1], initial=1, leave=True, mininterval=0.0, desc='Arnoldi')

	for size in checkpoints:
		while fact.size < size:
			try:
				arnoldi.expand(fact)
			except BreakdownError as err:
				saturated = True
				if screen:
					pbar.write("Krylov subspace saturated at size %d (residual %.3e)" % (err.size, err.residual))
				break
			if screen:
				pbar.update(1)

		k = fact.size
		if saturated and len(trace) > 0 and trace[-1][0] == k:
			# already evaluated at this size
			break

		A, Pi = fact.basis(), fact.rayleighquotient()
		try:
			stationary.estimate(Pi, A, out=pi_st[:k])
		except NotConverged as err:
			have_st = False
			crit = np.nan
			trace.append((k, crit))
			if screen:
				pbar.write("size %d: %s" % (k, err))
			if saturated:
				break
			continue

		have_st = True
		crit = _criterion(M, A, Pi, pi_st[:k])
		trace.append((k, crit))
		if screen:
			pbar.write("size %d: criterion = %.3e" % (k, crit))
		if crit <= eps:
			certified = True
			break
		if saturated:
			break

	if screen:
		pbar.close()

	k = fact.size
	result = Aggregation(fact.rayleighquotient(), fact.basis(),
		pi_st[:k] if have_st else None, aggregated_initial(p0, k),
		criterion=crit, certified=certified, saturated=saturated, trace=trace)

	if screen:
		print("Arnoldi sizing done in %2.2g seconds: %s" % (time.time()-t, repr(result)))

	if not certified:
		warnings.warn("no checkpoint up to size %d met eps=%g (criterion=%.3e); aggregation is uncertified" \
			% (k, eps, crit), SoftFailure, stacklevel=2)

	return result


def _fixed_size(P, p0, k, with_pi=True, screen=False, **kwargs):
	fact = arnoldi.initialize(P, p0, capacity=k, **kwargs)
	saturated = False
	# starts with size 1, so k-1 expansions
	for _ in range(k-1):
		try:
			arnoldi.expand(fact)
		except BreakdownError as err:
			saturated = True
			if screen:
				print("Krylov subspace saturated at size %d (residual %.3e)" % (err.size, err.residual))
			break

	A, Pi = fact.basis(), fact.rayleighquotient()
	pi_st = None
	crit = np.nan
	if with_pi:
		try:
			pi_st = stationary.estimate(Pi, A)
			crit = _criterion(fact.M, A, Pi, pi_st)
		except NotConverged:
			if screen:
				print("Bad convergence of eigenpair at aggregation size %d" % fact.size)

	return Aggregation(Pi, A, pi_st, aggregated_initial(p0, fact.size),
		criterion=crit, saturated=saturated, trace=[(fact.size, crit)])


def naive_arnoldi(k, **kwargs):
	r"""Return ``algo(P, p0)`` computing the Arnoldi aggregation of fixed
	size ``k`` without a stationary estimate (``pi_st=None``).
	"""
	return lambda P, p0: _fixed_size(P, p0, k, with_pi=False, **kwargs)


def arnoldi_with_pi(k, **kwargs):
	r"""Return ``algo(P, p0)`` computing the Arnoldi aggregation of fixed
	size ``k`` and its aggregated stationary distribution. ``pi_st`` is None
	if the eigenpair has not converged at this size.
	"""
	return lambda P, p0: _fixed_size(P, p0, k, with_pi=True, **kwargs)


def arnoldi_with_pi_dynamic(eps, checkpoints, max_size=DEFAULT_MAX_SIZE, **kwargs):
	r"""Return ``algo(P, p0)`` running :func:`select_size` with tolerance
	``eps`` over ``checkpoints``.
	"""
	return lambda P, p0: select_size(P, p0, eps, checkpoints, max_size=max_size, **kwargs)
