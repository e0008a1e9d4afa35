#!/usr/bin/env python
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
Extension to numpy and scipy
'''

import numpy

HERMITIAN = 1
ANTIHERMI = 2

_M1 = numpy.uint64(0x5555555555555555)
_M2 = numpy.uint64(0x3333333333333333)
_M4 = numpy.uint64(0x0f0f0f0f0f0f0f0f)
_ONE = numpy.uint64(1)

def popcount(x):
    '''Number of set bits of each element of an unsigned 64-bit integer array.

    Examples:

    >>> popcount(numpy.array([0, 1, 3, 0b1011], dtype=numpy.uint64))
    array([0, 1, 2, 3])
    '''
    x = numpy.array(x, dtype=numpy.uint64, ndmin=1)
    x = x - ((x >> _ONE) & _M1)
    x = (x & _M2) + ((x >> numpy.uint64(2)) & _M2)
    x = (x + (x >> numpy.uint64(4))) & _M4
    x = x + (x >> numpy.uint64(8))
    x = x + (x >> numpy.uint64(16))
    x = x + (x >> numpy.uint64(32))
    return (x & numpy.uint64(0x7f)).astype(numpy.int64)

def lowest_bit(x):
    '''Isolate the lowest set bit of each element (0 for 0).'''
    x = numpy.array(x, dtype=numpy.uint64, ndmin=1)
    return x & (~x + _ONE)

def lowest_bit_index(x):
    '''Position of the lowest set bit of each element.  Elements equal to 0
    give 64.
    '''
    return popcount(lowest_bit(x) - _ONE)

def bit_indices(string):
    '''Positions of the set bits of an integer, in increasing order.

    Examples:

    >>> bit_indices(0b10110)
    [1, 2, 4]
    '''
    string = int(string)
    idx = []
    i = 0
    while string:
        if string & 1:
            idx.append(i)
        string >>= 1
        i += 1
    return idx

def pack_tril(mat):
    '''flatten the lower triangular part of a square matrix (or a stack of
    them along the leading axes) in the row-major order i*(i+1)/2+j.
    '''
    mat = numpy.asarray(mat)
    nd = mat.shape[-1]
    idx, idy = numpy.tril_indices(nd)
    return mat[..., idx, idy]

def unpack_tril(tril, filltriu=HERMITIAN):
    '''Reversed operation of pack_tril.

    Kwargs:
        filltriu : int

            | 1 (default) Transpose the lower triangular part to fill the upper triangular part
            | 2           Similar to filltriu=1, negative of the lower triangular part is assign
                          to the upper triangular part to make the matrix anti-hermitian

    Examples:

    >>> unpack_tril(numpy.arange(6.))
    [[ 0. 1. 3.]
     [ 1. 2. 4.]
     [ 3. 4. 5.]]
    '''
    tril = numpy.asarray(tril)
    npair = tril.shape[-1]
    nd = int(numpy.sqrt(npair*2))
    if nd*(nd+1)//2 != npair:
        raise ValueError('Size %d is not a triangular number' % npair)
    out = numpy.zeros(tril.shape[:-1] + (nd,nd), dtype=tril.dtype)
    idx, idy = numpy.tril_indices(nd)
    out[..., idx, idy] = tril
    if filltriu == ANTIHERMI:
        out[..., idy, idx] = -tril
    else:
        out[..., idy, idx] = tril
    return out
