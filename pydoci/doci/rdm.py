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
Two-particle reduced density matrix of a DOCI wave function

The 2-RDM over the M = 2L spin orbitals (0..L-1 alpha, L..2L-1 beta) has
only two kinds of nonzero elements for a seniority zero wave function:

* the L x L block between the pairs (a, a+L), the pair occupations on the
  diagonal and the pair hopping amplitudes off the diagonal;
* the diagonal elements of the pairs (a,b) with a%L != b%L.  They depend only
  on the spatial orbitals and are stored once per unordered pair, every
  stored value standing for four spin combinations.
'''

import functools
import numpy
import h5py
from pydoci import lib
from pydoci.lib import logger
from pydoci.doci import permutation
from pydoci.doci.hamiltonian import connected_kets
from pydoci.doci import jacobi
from pydoci import __config__


class TwoParticleIndex:
    '''Map between ordered pairs of spin orbitals and two-particle indices.

    The pairs are numbered in five consecutive blocks

    ========= =================================== =============
    block     pairs                               size
    --------- ----------------------------------- -------------
    (i)       (a, a+L), a < L                     L
    (ii)      (a, b), a < b < L                   L(L-1)/2
    (iii)     (a, b), L <= a < b                  L(L-1)/2
    (iv)      (a, b+L), a < b < L                 L(L-1)/2
    (v)       (a+L, b), a < b < L                 L(L-1)/2
    ========= =================================== =============

    Within the blocks (ii)-(v) the pairs follow the same order of the spatial
    orbitals, so (index - L) % (L(L-1)/2) is the same for all four.

    Attributes:
        sp2tp : (2L,2L) int array
            Two-particle index of (a,b), symmetric, -1 on the diagonal.
        tp2sp : (L(2L-1),2) int array
            The pair (a,b), a < b, of every two-particle index.
    '''
    def __init__(self, norb):
        L = norb
        M = 2 * L
        n_tp = M * (M-1) // 2
        sp2tp = numpy.full((M,M), -1, dtype=int)
        tp2sp = numpy.full((n_tp,2), -1, dtype=int)

        pairs = [(a, a+L) for a in range(L)]
        pairs += [(a, b) for a in range(L) for b in range(a+1, L)]
        pairs += [(a, b) for a in range(L, M) for b in range(a+1, M)]
        pairs += [(a, b) for a in range(L) for b in range(L+a+1, M)]
        pairs += [(a, b) for a in range(L, M) for b in range(a%L+1, L)]
        assert len(pairs) == n_tp

        for idx, (a, b) in enumerate(pairs):
            sp2tp[a,b] = sp2tp[b,a] = idx
            tp2sp[idx] = min(a, b), max(a, b)

        sp2tp.setflags(write=False)
        tp2sp.setflags(write=False)
        self.norb = L
        self.sp2tp = sp2tp
        self.tp2sp = tp2sp

    @property
    def n_tp(self):
        return self.tp2sp.shape[0]

    def pair_index(self):
        '''Position in the vector of the degenerate elements for every pair of
        spatial orbitals (r,s), r != s.  -1 on the diagonal.
        '''
        L = self.norb
        ndiag = L * (L-1) // 2
        idx = self.sp2tp[:L,:L].copy()
        if ndiag > 0:
            idx = (idx - L) % ndiag
        idx[numpy.diag_indices(L)] = -1
        return idx

@functools.lru_cache(maxsize=None)
def get_index(norb):
    '''Shared :class:`TwoParticleIndex` of norb spatial orbitals'''
    return TwoParticleIndex(norb)


def make_rdm2_parts(strings, civec, p0, p1, perm, pair_index):
    '''Contribution of the rows p0 .. p1 to the block and to the vector.  perm
    has to point at the string of row p0.
    '''
    norb = pair_index.shape[0]
    block = numpy.zeros((norb,norb))
    diag = numpy.zeros(norb*(norb-1)//2)
    for i in range(p0, p1):
        bra = perm.get()
        ci = civec[i]
        w = ci * ci
        occ = numpy.asarray(lib.bit_indices(bra), dtype=int)
        block[occ,occ] += w
        if occ.size > 1:
            s, r = numpy.triu_indices(occ.size, 1)
            diag[pair_index[occ[s],occ[r]]] += w

        idx, r, s = connected_kets(bra, strings[i+1:])
        v = ci * civec[idx+i+1]
        numpy.add.at(block, (r, s), v)
        numpy.add.at(block, (s, r), v)

        if i + 1 < p1:
            perm.next()
    return block, diag


class DM2:
    '''Compressed 2-RDM of a DOCI wave function

    Args:
        norb : int
            Number of spatial orbitals L
        nelec : int
            Number of electrons N

    Attributes:
        block : (L,L) array
        diag : (L(L-1)/2,) array
            Every element stands for four degenerate spin combinations.
    '''

    verbose = getattr(__config__, 'VERBOSE', logger.NOTE)
    stdout = lib.StreamObject.stdout

    def __init__(self, norb, nelec, index=None):
        self.norb = int(norb)
        self.nelec = int(nelec)
        if index is None:
            index = get_index(self.norb)
        elif index.norb != self.norb:
            raise ValueError('Two-particle index of %d orbitals for a DM2 of %d'
                             % (index.norb, self.norb))
        self.index = index
        self.block = numpy.zeros((self.norb,self.norb))
        self.diag = numpy.zeros(self.norb*(self.norb-1)//2)
        self.nthreads = None

    @classmethod
    def from_molecule(cls, mol):
        dm2 = cls(mol.get_n_sp(), mol.get_n_electrons())
        dm2.verbose = mol.verbose
        dm2.stdout = mol.stdout
        return dm2

    def get_n_sp(self):
        return self.norb

    def get_n_electrons(self):
        return self.nelec

    def __call__(self, a, b, c, d):
        '''Element Gamma(ab;cd) over spin orbitals 0 .. 2L-1'''
        if a == b or c == d:
            return 0.
        sign = 1
        if a > b:
            sign = -sign
        if c > d:
            sign = -sign
        L = self.norb
        i = self.index.sp2tp[a,b]
        j = self.index.sp2tp[c,d]
        if i < L and j < L:
            return sign * self.block[i,j]
        elif i == j:
            return sign * self.diag[(i-L) % self.diag.size]
        return 0.

    def build(self, perm, civec):
        '''Fill the 2-RDM from the DOCI vector civec.  The strings are the ones
        generated by perm (reset before use).
        '''
        log = logger.new_logger(self)
        cput0 = (logger.process_clock(), logger.perf_counter())
        civec = numpy.asarray(civec, dtype=numpy.double).ravel()
        strings = permutation.make_strings(self.norb, perm.npair)
        dim = strings.size
        if civec.size != dim:
            raise ValueError('Vector of size %d for a basis of %d strings'
                             % (civec.size, dim))
        pair_index = self.index.pair_index()

        nthreads = self.nthreads
        if nthreads is None:
            nthreads = lib.num_threads()
        nthreads = max(1, min(nthreads, dim))
        workload = lib.triangular_partition(dim, nthreads)
        log.info('Running with %d threads.', nthreads)

        perm = perm.copy()
        perm.reset()

        def build_part(me):
            t0 = (logger.process_clock(), logger.perf_counter())
            p0, p1 = workload[me], workload[me+1]
            my_perm = perm.copy()
            if p0 < p1:
                my_perm.skip(p0)
            res = make_rdm2_parts(strings, civec, p0, p1, my_perm, pair_index)
            log.timer_debug1('2-RDM rows %d-%d on thread %d' % (p0, p1, me), *t0)
            return res

        parts = lib.map_in_threads(build_part, [(me,) for me in range(nthreads)],
                                   nthreads)
        self.block[:] = 0
        self.diag[:] = 0
        for block, diag in parts:
            self.block += block
            self.diag += diag
        log.timer('2-RDM', *cput0)
        return self

    def _hamiltonian_element(self, i, j, mol):
        L = self.norb
        N = self.nelec
        a, b = self.index.tp2sp[i]
        c, d = self.index.tp2sp[j]
        a_, b_, c_, d_ = a % L, b % L, c % L, d % L

        result = 0.
        if i == j:
            result += (mol.get_t(a_,a_) + mol.get_t(b_,b_)) / (N - 1.)

        # a abar ; c cbar
        if b == a + L and d == c + L:
            result += mol.get_v(a_,b_,c_,d_)

        # same spin: a b ; a b
        if i == j and a//L == b//L and a != b:
            result += mol.get_v(a_,b_,c_,d_) - mol.get_v(a_,b_,d_,c_)

        # opposite spin, different orbitals: a bbar ; a bbar
        if i == j and a//L != b//L and a_ != b_:
            result += mol.get_v(a_,b_,c_,d_)
        return result

    def build_hamiltonian(self, mol):
        '''Store the reduced Hamiltonian of mol, such that its dot product with
        a 2-RDM is the electronic energy.
        '''
        L = self.norb
        if mol.get_n_sp() != L:
            raise ValueError('Molecule with %d orbitals for a DM2 of %d'
                             % (mol.get_n_sp(), L))
        if self.nelec < 2:
            raise ValueError('The reduced Hamiltonian needs at least 2 electrons')
        for i in range(L):
            for j in range(i, L):
                self.block[i,j] = self.block[j,i] = \
                        self._hamiltonian_element(i, j, mol)
        # each vector element stands for 4 spin combinations, the aa and the
        # ab elements are averaged
        for i in range(self.diag.size):
            self.diag[i] = (.5 * self._hamiltonian_element(L+i, L+i, mol) +
                            .5 * self._hamiltonian_element(L*L+i, L*L+i, mol))
        return self

    def dot(self, other):
        return (numpy.dot(self.block.ravel(), other.block.ravel()) +
                4 * numpy.dot(self.diag, other.diag))

    def trace(self):
        '''Sum of the diagonal elements over the ordered spin orbital pairs,
        N(N-1)
        '''
        return 2 * (self.block.trace() + 4 * self.diag.sum())

    def _check_compatible(self, other):
        if self.norb != other.norb or self.nelec != other.nelec:
            raise ValueError('DM2 of (L=%d, N=%d) and (L=%d, N=%d) do not match'
                             % (self.norb, self.nelec, other.norb, other.nelec))

    def __iadd__(self, other):
        self._check_compatible(other)
        self.block += other.block
        self.diag += other.diag
        return self

    def __add__(self, other):
        new = self.copy()
        new += other
        return new

    def __eq__(self, other):
        return (isinstance(other, DM2) and self.norb == other.norb and
                self.nelec == other.nelec and
                numpy.array_equal(self.block, other.block) and
                numpy.array_equal(self.diag, other.diag))

    def copy(self):
        new = DM2(self.norb, self.nelec, self.index)
        new.block = self.block.copy()
        new.diag = self.diag.copy()
        new.verbose = self.verbose
        new.stdout = self.stdout
        new.nthreads = self.nthreads
        return new

    def energy(self, mol):
        '''Electronic energy of mol with this 2-RDM'''
        ham = DM2(self.norb, self.nelec, self.index).build_hamiltonian(mol)
        return self.dot(ham)

    def calc_rotate(self, k, l, theta, mol):
        '''Energy when the orbitals k and l of mol are rotated over theta and
        the 2-RDM is kept fixed
        '''
        return jacobi.JacobiEnergy(self, mol).calc_rotate(k, l, theta)

    def find_min_angle(self, k, l, start_angle, mol):
        '''Newton-Raphson search for the rotation angle of (k,l) which
        minimizes :meth:`calc_rotate`.

        Returns:
            theta, and True if theta is a minimum
        '''
        return jacobi.JacobiEnergy(self, mol).find_min_angle(
            k, l, start_angle, verbose=logger.new_logger(self))

    def write_to_file(self, filename):
        with h5py.File(filename, 'w') as f:
            grp = f.create_group('RDM')
            grp.create_dataset('Block', data=self.block.ravel())
            grp.create_dataset('Vector', data=self.diag)
            grp.attrs['L'] = numpy.uint32(self.norb)
            grp.attrs['N'] = numpy.uint32(self.nelec)
        return self

    @classmethod
    def read_from_file(cls, filename):
        with h5py.File(filename, 'r') as f:
            grp = f['RDM']
            dm2 = cls(int(grp.attrs['L']), int(grp.attrs['N']))
            block = grp['Block'][()]
            diag = grp['Vector'][()]
        if block.size != dm2.norb**2 or diag.size != dm2.diag.size:
            raise ValueError('Inconsistent 2-RDM data in %s' % filename)
        dm2.block[:] = block.reshape(dm2.norb, dm2.norb)
        dm2.diag[:] = diag
        return dm2

    def dump(self, verbose=logger.DEBUG):
        '''Print the block and the vector with their spin orbital pairs'''
        log = logger.new_logger(self, verbose)
        L = self.norb
        tp2sp = self.index.tp2sp
        log.info('Block:')
        for i in range(L):
            for j in range(i, L):
                log.info('%d\t%d\t|\t%d  %d ; %d  %d\t\t%.12g', i, j,
                         tp2sp[i,0], tp2sp[i,1], tp2sp[j,0], tp2sp[j,1],
                         self.block[i,j])
        log.info('Vector (4x):')
        for i in range(self.diag.size):
            log.info('%d\t|\t%d  %d\t\t%.12g', i, tp2sp[L+i,0], tp2sp[L+i,1],
                     self.diag[i])
        return self


def make_rdm2(ham, civec=None):
    '''2-RDM of the lowest eigenvector of a :class:`DOCIHamiltonian`'''
    if civec is None:
        civec = ham.ci
    dm2 = DM2.from_molecule(ham.mol)
    dm2.nthreads = ham.nthreads
    return dm2.build(ham.perm, civec)
