# Copyright 2014-2020 The PySCF Developers. All Rights Reserved.
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
pydoci environment variables and numerical constants are defined in this
module.


Threads
-------

The builders of the DOCI Hamiltonian and of the 2-RDM split the rows of the
Hamiltonian over :data:`MAX_THREADS` worker threads.  The default value is
the number of CPUs.  It can be overwritten by the environment variable
``PYDOCI_NUM_THREADS`` or in the global configuration file
``.pydoci_conf.py``.


Bit register
------------

Basis states are stored as unsigned integers of :data:`BIT_REGISTER_WIDTH`
bits.  One bit stands for one doubly occupied spatial orbital, so at most 64
spatial orbitals can be handled.
'''

from pydoci import __config__

MAX_THREADS = getattr(__config__, 'MAX_THREADS', 1)
BIT_REGISTER_WIDTH = 64

# Matrix elements smaller than this are not kept in the sparse Hamiltonian
SPARSE_ZERO_TOL = getattr(__config__, 'SPARSE_ZERO_TOL', 1e-14)
LOOSE_ZERO_TOL = getattr(__config__, 'LOOSE_ZERO_TOL', 1e-9)

VERBOSE_DEBUG  = 5
VERBOSE_INFO   = 4
VERBOSE_NOTICE = 3
VERBOSE_WARN   = 2
VERBOSE_QUIET  = 0
