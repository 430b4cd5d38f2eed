# -*- coding: utf-8 -*-
r"""
Exceptions and warnings raised during Arnoldi aggregation
---------------------------------------------------------

Only violations of the input contract (:class:`DimensionError`,
:class:`DegenerateInputError`) are fatal. Saturation of the Krylov subspace
(:class:`BreakdownError`) and a complex dominant eigenpair
(:class:`NotConverged`) are recoverable and are handled inside
:func:`PyKA.sizing.select_size`. An aggregation that does not meet the
requested tolerance before the size cap is returned with a
:class:`SoftFailure` warning rather than an exception.
"""


class AggregationError(Exception):
	"""Base class of all PyKA errors"""


class DimensionError(AggregationError, ValueError):
	"""Shapes of transition matrix, initial distribution or buffers disagree"""


class DegenerateInputError(AggregationError, ValueError):
	"""Initial distribution has zero norm"""


class BreakdownError(AggregationError, ArithmeticError):
	r"""Krylov subspace is invariant under the propagator.

	The residual after orthogonalization is numerically zero, so no further
	basis vector can be appended. The factorization is left untouched and
	its current size should be treated as final.

	Attributes
	----------
	size : int
		basis size at which the breakdown was detected
	residual : float
		norm of the residual that triggered the breakdown
	"""
	def __init__(self, size, residual):
		self.size = size
		self.residual = residual
		super().__init__("Krylov subspace saturated at size %d (residual=%.3e)" % (size, residual))


class NotConverged(AggregationError):
	r"""Eigenpair of the aggregated operator nearest 1 is complex.

	Attributes
	----------
	eigenvalue : complex
		the offending eigenvalue
	"""
	def __init__(self, eigenvalue, msg=None):
		self.eigenvalue = eigenvalue
		if msg is None:
			msg = "stationary eigenpair not converged (eigenvalue %s)" % str(eigenvalue)
		super().__init__(msg)


class SoftFailure(UserWarning):
	"""Size cap reached without meeting the tolerance; result is usable but uncertified"""
