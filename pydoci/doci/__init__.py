#!/usr/bin/env python
# Copyright 2014-2019 The PySCF Developers. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

'''
Doubly occupied configuration interaction

Simple usage::

    >>> from pydoci import integrals, doci
    >>> mol = integrals.load_molecule('mo-integrals.h5')
    >>> ham = doci.DOCIHamiltonian(mol)
    >>> e, civec = ham.kernel()
    >>> dm2 = doci.make_rdm2(ham)
    >>> print(e + mol.get_nucl_rep(), dm2.trace())
'''

from pydoci.doci import permutation
from pydoci.doci.permutation import BitPermutation, CapacityError, \
        calc_combinations, make_strings
from pydoci.doci import sparse
from pydoci.doci.sparse import SparseMatrixCRS
from pydoci.doci import hamiltonian
from pydoci.doci.hamiltonian import DOCIHamiltonian
from pydoci.doci import rdm
from pydoci.doci.rdm import DM2, TwoParticleIndex, make_rdm2
from pydoci.doci import jacobi
from pydoci.doci.local_minimizer import LocalMinimizer
from pydoci.doci.simulated_annealing import SimulatedAnnealing
