#!/usr/bin/env python
# Copyright 2014-2018 The PySCF Developers. All Rights Reserved.
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

import numpy
from pydoci import lib

def _stand_sym_code(sym):
    if isinstance(sym, int):
        return str(sym)
    elif 's' == sym[0] or 'a' == sym[0]:
        return sym[1:]
    else:
        return sym

def restore(symmetry, eri, norb):
    r'''Convert the 2e integrals (in Chemist's notation) between different
    level of permutation symmetry (8-fold, 4-fold, or no symmetry)

    Args:
        symmetry : int or str
            code to present the target symmetry of 2e integrals

            | 's8' or '8' or 8 : 8-fold symmetry
            | 's4' or '4' or 4 : 4-fold symmetry
            | 's1' or '1' or 1 : no symmetry

        eri : ndarray
            The symmetry of eri is determined by the size of eri and norb
        norb : int
            The symmetry of eri is determined by the size of eri and norb

    Returns:
        ndarray.  The shape depends on the target symmetry.

            | 8 : (norb*(norb+1)/2)*(norb*(norb+1)/2+1)/2
            | 4 : (norb*(norb+1)/2, norb*(norb+1)/2)
            | 1 : (norb, norb, norb, norb)

    Examples:

    >>> eri1 = numpy.random.random((4,4,4,4))
    >>> eri8 = ao2mo.restore(8, eri1, 4)
    >>> print(eri8.shape)
    (55,)
    >>> print(ao2mo.restore(1, eri8, 4).shape)
    (4, 4, 4, 4)
    '''
    targetsym = _stand_sym_code(symmetry)
    if targetsym not in ('8', '4', '1'):
        raise ValueError('symmetry = %s' % symmetry)

    eri = numpy.asarray(eri, dtype=numpy.double, order='C')
    npair = norb*(norb+1)//2
    if eri.size == norb**4:
        eri = eri.reshape(norb,norb,norb,norb)
        if targetsym == '1':
            return eri
        eri4 = lib.pack_tril(eri)                  # (ij,kl) -> i,j,kl
        eri4 = lib.pack_tril(eri4.transpose(2,0,1)).T
        if targetsym == '4':
            return numpy.ascontiguousarray(eri4)
        return lib.pack_tril(eri4)

    elif eri.size == npair**2:
        eri4 = eri.reshape(npair,npair)
        if targetsym == '4':
            return eri4
        elif targetsym == '8':
            return lib.pack_tril(eri4)
        return _s4_to_s1(eri4, norb)

    elif eri.size == npair*(npair+1)//2:
        eri8 = eri.ravel()
        if targetsym == '8':
            return eri8
        eri4 = lib.unpack_tril(eri8)
        if targetsym == '4':
            return eri4
        return _s4_to_s1(eri4, norb)

    else:
        raise RuntimeError('eri.size = %d, norb = %d' % (eri.size, norb))

def _s4_to_s1(eri4, norb):
    eri1 = lib.unpack_tril(eri4)                   # ij,k,l
    eri1 = lib.unpack_tril(eri1.transpose(1,2,0))  # k,l,i,j
    return numpy.ascontiguousarray(eri1.transpose(2,3,0,1))

def full(eri, mo_coeff, compact=False):
    r'''Transform the 2e integrals in the one-fold storage with the orbital
    coefficients mo_coeff,

    (pq|rs) = \sum_{ijkl} C_{ip} C_{jq} (ij|kl) C_{kr} C_{ls}

    Kwargs:
        compact : bool
            Return the 4-fold symmetric storage if True.
    '''
    norb = mo_coeff.shape[0]
    eri = restore(1, eri, norb)
    eri = numpy.einsum('ijkl,ip->pjkl', eri, mo_coeff, optimize=True)
    eri = numpy.einsum('pjkl,jq->pqkl', eri, mo_coeff, optimize=True)
    eri = numpy.einsum('pqkl,kr->pqrl', eri, mo_coeff, optimize=True)
    eri = numpy.einsum('pqrl,ls->pqrs', eri, mo_coeff, optimize=True)
    if compact:
        return restore(4, eri, mo_coeff.shape[1])
    return eri
