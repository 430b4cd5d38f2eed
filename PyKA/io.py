# -*- coding: utf-8 -*-
r"""
This module reads in transition matrices of discrete-time Markov chains.

Transition matrix files
-----------------------
\*.tra: multi-column, (num_transitions + 1, )
	First line contains two fields, the first is ignored and the second is
	the number of transitions. Each subsequent line contains the source state
	[int], target state [int] (both 0-indexed) and transition probability
	[float].

	Example:

	.. code-block:: none

		3 5 # (states) number of transitions
		0 0 0.9
		0 1 0.1
		1 0 0.5
		1 1 0.5
		2 2 1.0

The matrix is returned row-stochastic, with :math:`P_{ij}` the
:math:`i\to j` transition probability. Zero entries are dropped and
repeated entries are summed.

"""
import numpy as np
from scipy.sparse import csr_matrix


def load_transition_matrix(path, screen=False):
	r""" Load a transition matrix from a coordinate (.tra) file.

	Parameters
	----------
	path : str or Path object
		path to the .tra file

	screen : bool, optional
		whether to print a summary. Default = False

	Returns
	-------
	P : (N,N) csr matrix
		sparse row-stochastic transition matrix, N = largest state index + 1

	"""
	with open(path, 'r') as f:
		header = f.readline().split()
		if len(header) < 2:
			raise ValueError("%s: header must read '<ignored> <num_transitions>'" % str(path))
		num_transitions = int(header[1])
		if num_transitions < 1:
			raise ValueError("%s: no transitions" % str(path))
		TRA = np.loadtxt(f, dtype={'names': ('S','T','P'), 'formats': (int,int,float)}, \
			max_rows=num_transitions, ndmin=1)

	if TRA.size != num_transitions:
		raise ValueError("%s: expected %d transitions, found %d" % (str(path), num_transitions, TRA.size))
	if min(TRA['S'].min(), TRA['T'].min()) < 0:
		raise ValueError("%s: negative state index" % str(path))

	N = max(TRA['S'].max(), TRA['T'].max()) + 1
	P = csr_matrix((TRA['P'], (TRA['S'], TRA['T'])), shape=(N,N))
	P.eliminate_zeros()

	if screen:
		print("Loaded %d states, %d nonzero transitions from %s" % (N, P.nnz, str(path)))
	return P
