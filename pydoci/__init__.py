# Copyright 2014-2022 The PySCF Developers. All Rights Reserved.
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
*******************************************************************
pydoci  Exact doubly occupied configuration interaction and orbital
        optimization
*******************************************************************

How to use
----------

    >>> from pydoci import integrals, doci
    >>> mol = integrals.load_molecule('mo-integrals.h5')
    >>> ham = doci.DOCIHamiltonian(mol)
    >>> e, civec = ham.kernel()
    >>> rdm = doci.make_rdm2(ham)
    >>> print(e + mol.get_nucl_rep(), rdm.trace())

'''

__version__ = '0.4.0'

from pydoci import __config__
from pydoci import lib

# Whether to enable debug mode. When this flag is set, some modules may run
# extra debug code.
DEBUG = __config__.DEBUG
