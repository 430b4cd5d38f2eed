"""
Tests for PyKA.sizing module.
"""

import warnings
import numpy as np
import pytest
from scipy.sparse import csr_matrix

from PyKA import sizing, stationary
from PyKA.sizing import select_size, criterion, Aggregation
from PyKA.errors import NotConverged, SoftFailure, DegenerateInputError


CHECKPOINTS = list(range(2, 42, 2))


class TestScenario:

	def test_two_state(self, two_state):
		P, p0 = two_state
		agg = select_size(P, p0, 1e-10, [1, 2], max_size=10)
		assert agg.size == 2
		assert agg.certified
		assert not agg.saturated
		assert np.allclose(agg.pi_st, [0.8333, 0.1667], atol=1e-4)
		assert agg.criterion < 1e-12
		assert agg.trace[0][0] == 1
		assert np.isclose(agg.trace[0][1], 0.1)
		assert np.allclose(agg.Pi, P.T)
		assert np.allclose(agg.pi_0, [1.0, 0.0])

	def test_saturation_falls_back(self, two_state):
		P, p0 = two_state
		agg = select_size(P, p0, 1e-10, [1, 3, 5], max_size=10)
		assert agg.saturated
		assert agg.certified
		assert agg.size == 2
		assert [k for k, _ in agg.trace] == [1, 2]

	def test_absorbing(self, absorbing):
		P, p0 = absorbing
		agg = select_size(P, p0, 1e-10, [2, 4], max_size=10)
		assert agg.saturated
		assert agg.size == 1
		assert np.allclose(agg.pi_st, [1.0])
		assert agg.criterion < 1e-12


class TestSelectSize:

	def test_infinite_tolerance(self, bd_chain):
		P, p0 = bd_chain
		agg = select_size(P, p0, np.inf, CHECKPOINTS, max_size=50)
		assert agg.size == CHECKPOINTS[0]
		assert agg.certified
		assert len(agg.trace) == 1

	def test_criterion_met(self, bd_chain):
		P, p0 = bd_chain
		agg = select_size(P, p0, 1e-6, CHECKPOINTS, max_size=50)
		assert agg.certified
		assert agg.criterion <= 1e-6
		assert np.isclose(criterion(P, agg.A, agg.Pi, agg.pi_st), agg.criterion)
		# checkpoints before the accepted one failed
		assert all(c > 1e-6 for _, c in agg.trace[:-1])

	@pytest.mark.filterwarnings("ignore::PyKA.errors.SoftFailure")
	def test_monotone_in_tolerance(self, bd_chain):
		P, p0 = bd_chain
		sizes = [select_size(P, p0, eps, CHECKPOINTS, max_size=50).size \
			for eps in [1e-12, 1e-9, 1e-6, 1e-3, 1e-1, np.inf]]
		assert all(a >= b for a, b in zip(sizes[:-1], sizes[1:]))
		assert sizes[0] > sizes[-1]

	@pytest.mark.filterwarnings("ignore::PyKA.errors.SoftFailure")
	def test_bounds(self, dense_chain):
		P, p0 = dense_chain
		for eps in [1e-14, 1e-4, 1.0]:
			agg = select_size(P, p0, eps, [3, 5, 7], max_size=8)
			assert 3 <= agg.size <= 7
			assert agg.A.shape == (p0.size, agg.size)
			assert agg.Pi.shape == (agg.size, agg.size)

	def test_soft_failure(self, bd_chain):
		P, p0 = bd_chain
		with pytest.warns(SoftFailure):
			agg = select_size(P, p0, 1e-300, [2, 4], max_size=5)
		assert not agg.certified
		assert agg.size == 4
		assert agg.pi_st is not None
		assert len(agg.trace) == 2

	def test_aggregated_initial(self, dense_chain):
		P, p0 = dense_chain
		agg = select_size(P, p0, np.inf, [4], max_size=5)
		assert np.isclose(agg.pi_0[0], np.linalg.norm(p0))
		assert np.all(agg.pi_0[1:] == 0.0)
		assert np.allclose(agg.A @ agg.pi_0, p0)

	def test_result_frozen(self, bd_chain):
		P, p0 = bd_chain
		agg = select_size(P, p0, np.inf, [3], max_size=5)
		with pytest.raises(ValueError):
			agg.Pi[0, 0] = 0.0
		Pi, A, pi_st, pi_0 = agg
		assert Pi.flags['C_CONTIGUOUS']

	def test_dense_and_sparse_agree(self, bd_chain):
		P, p0 = bd_chain
		a = select_size(P, p0, 1e-6, CHECKPOINTS, max_size=50)
		b = select_size(P.toarray(), p0, 1e-6, CHECKPOINTS, max_size=50)
		assert a.size == b.size
		assert np.allclose(a.pi_st, b.pi_st)

	def test_screen(self, bd_chain, capsys):
		P, p0 = bd_chain
		select_size(P, p0, 1e-3, CHECKPOINTS, max_size=50, screen=True)
		assert "Arnoldi sizing done" in capsys.readouterr().out


class TestNotConverged:

	def test_skips_checkpoint(self, bd_chain, monkeypatch):
		real_estimate = stationary.estimate
		calls = []

		def flaky(Pi, A, out=None):
			calls.append(Pi.shape[0])
			if len(calls) == 1:
				raise NotConverged(0.5+0.5j)
			return real_estimate(Pi, A, out=out)

		monkeypatch.setattr(stationary, "estimate", flaky)
		P, p0 = bd_chain
		agg = select_size(P, p0, np.inf, [2, 4, 6], max_size=10)
		assert calls == [2, 4]
		assert agg.size == 4
		assert np.isnan(agg.trace[0][1])

	def test_never_converged(self, bd_chain, monkeypatch):
		def never(Pi, A, out=None):
			raise NotConverged(1j)

		monkeypatch.setattr(stationary, "estimate", never)
		P, p0 = bd_chain
		with pytest.warns(SoftFailure):
			agg = select_size(P, p0, np.inf, [2, 4], max_size=10)
		assert agg.pi_st is None
		assert agg.size == 4
		assert not agg.certified
		assert np.isnan(agg.criterion)


class TestValidation:

	@pytest.mark.parametrize("checkpoints", [[], [5, 3], [2, 2], [0, 2], [1.5, 3]])
	def test_bad_schedule(self, bd_chain, checkpoints):
		with pytest.raises(ValueError):
			select_size(*bd_chain, 1e-3, checkpoints, max_size=50)

	def test_cap_must_exceed_checkpoints(self, bd_chain):
		with pytest.raises(ValueError):
			select_size(*bd_chain, 1e-3, [2, 10], max_size=10)

	@pytest.mark.parametrize("eps", [0.0, -1.0])
	def test_bad_tolerance(self, bd_chain, eps):
		with pytest.raises(ValueError):
			select_size(*bd_chain, eps, [2], max_size=10)

	def test_degenerate_input(self, bd_chain):
		P, p0 = bd_chain
		with pytest.raises(DegenerateInputError):
			select_size(P, np.zeros_like(p0), 1e-3, [2], max_size=10)


class TestAlgorithms:

	def test_naive(self, dense_chain):
		P, p0 = dense_chain
		Pi, A, pi_st, pi_0 = sizing.naive_arnoldi(5)(P, p0)
		assert Pi.shape == (5, 5)
		assert A.shape == (p0.size, 5)
		assert pi_st is None

	def test_with_pi(self, bd_chain):
		P, p0 = bd_chain
		agg = sizing.arnoldi_with_pi(10)(P, p0)
		assert agg.size == 10
		assert np.isclose(np.abs(agg.A @ agg.pi_st).sum(), 1.0)
		assert not agg.certified

	def test_with_pi_saturates(self, two_state):
		agg = sizing.arnoldi_with_pi(5)(*two_state)
		assert agg.saturated
		assert agg.size == 2

	def test_dynamic(self, bd_chain):
		P, p0 = bd_chain
		algo = sizing.arnoldi_with_pi_dynamic(1e-6, CHECKPOINTS, max_size=50)
		assert algo(P, p0).size == select_size(P, p0, 1e-6, CHECKPOINTS, max_size=50).size
