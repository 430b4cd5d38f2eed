r"""
PyKA - Krylov aggregation of Markov chains in Python
---------------------------------------------------------------------------------------------

**Arnoldi aggregation reduces a discrete-time Markov chain with a very large
number of states to a small dense chain reproducing its transient and
stationary behaviour.**

Simplest possible usage with a row-stochastic transition matrix :math:`P_{ij}`
(probability of the :math:`i\to j` transition) and initial distribution ``p0``:

	.. code-block:: python

		import PyKA
		P = PyKA.io.load_transition_matrix("chain.tra")
		agg = PyKA.sizing.select_size(P, p0, eps=1e-12, checkpoints=[1 + 10*i for i in range(100)])
		chain = PyKA.aggregation.ArnoldiAggregation(P, *agg)
		for _ in range(100000):
			chain.step()
		p_t = chain.disaggregate()

The aggregation is built from an orthonormal basis :math:`{\bf A}` of the
Krylov subspace :math:`{\rm span}\{p_0,{\bf P}^\top p_0,({\bf P}^\top)^2p_0,\dots\}`
(`PyKA.arnoldi`) together with the projected step matrix
:math:`{\bf \Pi}={\bf A}^\top{\bf P}^\top{\bf A}`. The aggregation size is chosen
adaptively over a schedule of checkpoint sizes (`PyKA.sizing`), using the
aggregated stationary distribution (`PyKA.stationary`) to weight the residual
:math:`|{\bf A}{\bf \Pi}-{\bf P}^\top{\bf A}|`. The aggregated chain is then evolved
in place (`PyKA.aggregation`), optionally in lock-step with the exact chain to
measure the approximation error.

"""
__version__ = "0.1.0"

from . import errors

from . import tools

from . import arnoldi

from . import stationary

from . import sizing

from . import aggregation

from . import io
