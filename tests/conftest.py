"""
Shared fixtures for the PyKA test suite.
"""

import numpy as np
import pytest
import sys
import os
from scipy.sparse import csr_matrix, diags

# Ensure project root is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


def birth_death(N, up=0.2, down=0.5):
	"""Reflecting birth-death chain drifting towards state 0, row-stochastic."""
	P = diags([np.full(N-1, down), np.full(N, 1.0-up-down), np.full(N-1, up)], [-1, 0, 1]).tolil()
	P[0, 0] = 1.0 - up
	P[N-1, N-1] = 1.0 - down
	return csr_matrix(P)


@pytest.fixture
def rng():
	"""Fixed random state for reproducibility."""
	return np.random.RandomState(42)


@pytest.fixture
def two_state():
	"""P = [[0.9,0.1],[0.5,0.5]] started in state 0; stationary [5/6, 1/6]."""
	P = np.array([[0.9, 0.1],
				  [0.5, 0.5]])
	p0 = np.array([1.0, 0.0])
	return P, p0


@pytest.fixture
def absorbing():
	"""Three states, state 0 absorbing, started in state 0."""
	P = np.array([[1.0, 0.0, 0.0],
				  [0.2, 0.5, 0.3],
				  [0.1, 0.1, 0.8]])
	p0 = np.array([1.0, 0.0, 0.0])
	return P, p0


@pytest.fixture
def bd_chain():
	"""Sparse 60 state birth-death chain started in state 0."""
	N = 60
	p0 = np.zeros(N)
	p0[0] = 1.0
	return birth_death(N), p0


@pytest.fixture
def dense_chain(rng):
	"""Dense random 30 state chain with random initial distribution."""
	N = 30
	P = rng.rand(N, N)
	P /= P.sum(axis=1)[:, None]
	p0 = rng.rand(N)
	p0 /= p0.sum()
	return P, p0
