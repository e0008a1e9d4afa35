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
Enumeration of the DOCI basis.

A DOCI determinant is a bit string in which bit i is set when spatial
orbital i is doubly occupied.  The strings with npair bits set are
enumerated in increasing order of their unsigned integer value.  The
position of a string in this order is the row/column index in the DOCI
Hamiltonian.
'''

import math
import numpy
from pydoci.lib import parameters as param

UINT64_MAX = (1 << 64) - 1

class CapacityError(OverflowError):
    '''The requested basis does not fit in the bit register'''


def calc_combinations(norb, npair):
    '''Binomial coefficient C(norb, npair), the dimension of the DOCI space.

    The product is accumulated term by term and divided by the common divisor
    at each step.  CapacityError is raised when an intermediate or the result
    exceeds the unsigned 64-bit range.

    Examples:

    >>> calc_combinations(4, 2)
    6
    '''
    if npair < 0 or norb < 0:
        raise ValueError('Negative arguments norb=%s npair=%s' % (norb, npair))
    if npair > norb:
        return 0
    npair = min(npair, norb - npair)

    result = 1
    for d in range(1, npair+1):
        nom = norb - npair + d
        g = math.gcd(result, d)
        result //= g
        denom = d // g
        g = math.gcd(nom, denom)
        nom //= g
        denom //= g
        if result > UINT64_MAX // nom:
            raise CapacityError('C(%d,%d) overflows the 64-bit range' %
                                (norb, npair))
        result = result * nom // denom
    return result

class BitPermutation:
    '''Generate the patterns of npair set bits in a register of nbits bits, in
    strictly increasing order.

    Attributes:
        npair : int
            Number of set bits (doubly occupied orbitals).
        nbits : int
            Width of the bit register.  At most 64 for the numpy based
            Hamiltonian builders.

    Examples:

    >>> perm = BitPermutation(2)
    >>> [bin(perm.get())] + [bin(perm.next()) for i in range(3)]
    ['0b11', '0b101', '0b110', '0b1001']
    '''
    def __init__(self, npair, nbits=param.BIT_REGISTER_WIDTH):
        if npair < 0:
            raise ValueError('Number of set bits must be non-negative')
        if npair > nbits:
            raise CapacityError('%d set bits do not fit in a %d-bit register'
                                % (npair, nbits))
        self.npair = npair
        self.nbits = nbits
        self._max = (1 << nbits) - 1
        self.reset()

    def reset(self):
        '''Set the npair lowest bits'''
        self.perm = (1 << self.npair) - 1
        return self.perm

    def get(self):
        return self.perm

    def next(self):
        '''Step to the next larger integer with the same number of set bits
        and return it.
        '''
        v = self.perm
        if v == 0:
            raise CapacityError('No further pattern with 0 set bits')
        t = v | (v - 1)
        ctz = (v & -v).bit_length() - 1
        w = (t + 1) | (((~t & (t + 1)) - 1) >> (ctz + 1))
        if w > self._max:
            raise CapacityError('Pattern %s has no successor in a %d-bit register'
                                % (bin(v), self.nbits))
        self.perm = w
        return w

    def skip(self, n):
        '''Advance n steps'''
        for i in range(n):
            self.next()
        return self.perm

    def copy(self):
        new = self.__class__.__new__(self.__class__)
        new.__dict__.update(self.__dict__)
        return new
    __copy__ = copy

    def __eq__(self, other):
        return (isinstance(other, BitPermutation) and
                self.npair == other.npair and self.perm == other.perm)

    def __repr__(self):
        return '%s(npair=%d, state=%s)' % (self.__class__.__name__, self.npair,
                                           bin(self.perm))

    @staticmethod
    def calc_combinations(norb, npair):
        return calc_combinations(norb, npair)


def make_strings(norb, npair):
    '''All strings of npair doubly occupied orbitals among norb orbitals, in
    the order of :class:`BitPermutation`.

    Returns:
        uint64 array.  The lowest (right-most) bit corresponds to orbital 0.

    Examples:

    >>> [bin(x) for x in make_strings(4, 2)]
    ['0b11', '0b101', '0b110', '0b1001', '0b1010', '0b1100']
    '''
    if norb > param.BIT_REGISTER_WIDTH:
        raise CapacityError('%d orbitals do not fit in a %d-bit register' %
                            (norb, param.BIT_REGISTER_WIDTH))
    if npair < 0 or npair > norb:
        return numpy.zeros(0, dtype=numpy.uint64)
    if npair == 0:
        return numpy.zeros(1, dtype=numpy.uint64)

    def gen_str_iter(orb_list, nelec):
        if nelec == 1:
            res = [(1 << i) for i in orb_list]
        elif nelec >= len(orb_list):
            n = 0
            for i in orb_list:
                n = n | (1 << i)
            res = [n]
        else:
            restorb = orb_list[:-1]
            thisorb = 1 << orb_list[-1]
            res = gen_str_iter(restorb, nelec)
            for n in gen_str_iter(restorb, nelec-1):
                res.append(n | thisorb)
        return res
    strings = gen_str_iter(list(range(norb)), npair)
    assert len(strings) == calc_combinations(norb, npair)
    return numpy.asarray(strings, dtype=numpy.uint64)
