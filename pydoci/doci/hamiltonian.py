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
Doubly occupied configuration interaction (DOCI) Hamiltonian

The Hamiltonian is built row by row in a sparse symmetric matrix (upper
triangle only).  Two determinants couple when they differ by moving one
electron pair, i.e. when their bit strings differ in exactly two bits.  The
lowest eigenpair is found with the implicitly restarted Lanczos method of
ARPACK through scipy.sparse.linalg.eigsh.
'''

import numpy
import scipy.linalg
import scipy.sparse.linalg
from pydoci import lib
from pydoci.lib import logger
from pydoci.lib import parameters as param
from pydoci.doci import permutation
from pydoci.doci.permutation import BitPermutation, CapacityError
from pydoci.doci.sparse import SparseMatrixCRS, concatenate
from pydoci import __config__

NCV = getattr(__config__, 'doci_hamiltonian_ncv', 42)
CONV_TOL = getattr(__config__, 'doci_hamiltonian_conv_tol', 0)
# Matrices up to this dimension are diagonalized densely
DENSE_DIM = getattr(__config__, 'doci_hamiltonian_dense_dim', 16)


def _unpack_nelec(mol):
    nelec = mol.get_n_electrons()
    norb = mol.get_n_sp()
    if nelec % 2 != 0:
        raise ValueError('DOCI needs an even number of electrons, got %d' % nelec)
    npair = nelec // 2
    if npair > norb:
        raise ValueError('%d electron pairs do not fit in %d orbitals'
                         % (npair, norb))
    if norb > param.BIT_REGISTER_WIDTH:
        raise CapacityError('%d orbitals do not fit in a %d-bit register'
                            % (norb, param.BIT_REGISTER_WIDTH))
    return norb, npair

def get_pair_integrals(mol):
    '''Integrals which enter the DOCI matrix elements.

    Returns:
        h0 : 1D array, 2 T(s,s) + V(s,s,s,s), the energy of pair s
        w : 2D array, 4 V(r,s,r,s) - 2 V(r,s,s,r) for r != s, 0 on the diagonal
        x : 2D array, V(s,s,r,r), coupling of pair s and pair r
    '''
    norb = mol.get_n_sp()
    idx = numpy.arange(norb)
    r = idx[:,None]
    s = idx[None,:]
    h0 = 2 * mol.get_t(idx, idx) + mol.get_v(idx, idx, idx, idx)
    w = 4 * mol.get_v(r, s, r, s) - 2 * mol.get_v(r, s, s, r)
    w[idx,idx] = 0
    x = numpy.array(mol.get_v(s, s, r, r), dtype=numpy.double)
    return h0, w, x

def diagonal_element(bra, h0, w):
    '''<bra|H|bra> for the bit string bra'''
    occ = lib.bit_indices(bra)
    return h0[occ].sum() + w[numpy.ix_(occ,occ)].sum() * .5

def make_hdiag(mol, strings=None):
    '''Diagonal of the DOCI Hamiltonian'''
    norb, npair = _unpack_nelec(mol)
    if strings is None:
        strings = permutation.make_strings(norb, npair)
    h0, w = get_pair_integrals(mol)[:2]
    occ = ((strings[:,None] >> numpy.arange(norb, dtype=numpy.uint64))
           & numpy.uint64(1)).astype(numpy.double)
    return occ.dot(h0) + numpy.einsum('ir,rs,is->i', occ, w, occ) * .5

def connected_kets(bra, kets):
    '''Find the strings in kets which differ from bra by moving one pair.

    Returns:
        idx : positions in kets
        r, s : the two orbitals which differ, r < s
    '''
    diff = kets ^ numpy.uint64(bra)
    idx = numpy.where(lib.popcount(diff) == 2)[0]
    diff = diff[idx]
    low = lib.lowest_bit(diff)
    r = lib.lowest_bit_index(low)
    s = lib.lowest_bit_index(diff ^ low)
    return idx, r, s

def build_rows(perm, strings, p0, p1, pair_integrals):
    '''Rows p0 .. p1 of the Hamiltonian.  perm has to point at the string of
    row p0 and is advanced to the last row.
    '''
    dim = strings.size
    h0, w, x = pair_integrals
    shard = SparseMatrixCRS(dim, p0, p1-p0)
    for i in range(p0, p1):
        bra = perm.get()
        shard.new_row()
        shard.push_to_row_next(i, diagonal_element(bra, h0, w))

        idx, r, s = connected_kets(bra, strings[i+1:])
        val = x[s,r]
        mask = abs(val) > param.SPARSE_ZERO_TOL
        shard.push_to_row_next(idx[mask] + i + 1, val[mask])

        if i + 1 < p1:
            perm.next()
    shard.new_row()
    return shard

def build(mol, perm=None, nthreads=None, verbose=None):
    '''Build the sparse DOCI Hamiltonian of the integrals in mol.

    The rows are split over worker threads such that each thread handles the
    same number of (bra, ket) pairs.  Every thread walks through its own
    copy of the enumerator.
    '''
    log = logger.new_logger(mol, verbose)
    cput0 = (logger.process_clock(), logger.perf_counter())
    norb, npair = _unpack_nelec(mol)
    if perm is None:
        perm = BitPermutation(npair)
    strings = permutation.make_strings(norb, npair)
    dim = strings.size
    pair_integrals = get_pair_integrals(mol)

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
        shard = build_rows(my_perm, strings, p0, p1, pair_integrals)
        log.timer_debug1('rows %d-%d on thread %d' % (p0, p1, me), *t0)
        return shard

    shards = lib.map_in_threads(build_part, [(me,) for me in range(nthreads)],
                                nthreads)
    mat = concatenate(shards, dim)
    log.timer('DOCI Hamiltonian (dim %d, nnz %d)' % (dim, mat.nnz), *cput0)
    return mat


def eigh_full(mat):
    '''Complete spectrum by dense diagonalization.  For verification and small
    systems only.

    Returns:
        eigenvalues in ascending order, eigenvectors as columns
    '''
    return scipy.linalg.eigh(mat.convert_to_matrix())

def eigsh_lowest(mat, nroots=1, eigvec=True, tol=CONV_TOL, ncv=NCV,
                 maxiter=None, verbose=logger.NOTE):
    '''Lowest eigenvalue(s) of the sparse symmetric matrix by ARPACK.

    Non-convergence is reported as a warning and the approximate eigenpairs
    are returned.

    Returns:
        e : 1D array of nroots eigenvalues, ascending
        c : (n, nroots) array of eigenvectors if eigvec is True
    '''
    log = logger.new_logger(verbose=verbose)
    n = mat.n
    if nroots >= n - 1 or n <= DENSE_DIM:
        log.debug('Dimension %d is too small for the Lanczos solver. '
                  'Dense diagonalization is used', n)
        e, c = eigh_full(mat)
        if eigvec:
            return e[:nroots], c[:,:nroots]
        return e[:nroots]

    ncv = min(n, max(ncv, 2*nroots+1))
    if maxiter is None:
        maxiter = 3 * n
    op = scipy.sparse.linalg.LinearOperator((n, n), matvec=mat.mvprod,
                                            dtype=numpy.double)
    try:
        res = scipy.sparse.linalg.eigsh(op, k=nroots, which='SA', tol=tol,
                                        ncv=ncv, maxiter=maxiter,
                                        return_eigenvectors=eigvec)
    except scipy.sparse.linalg.ArpackNoConvergence as err:
        log.warn('Maximum number of Lanczos iterations reached. '
                 '%d of %d eigenpairs converged.',
                 len(err.eigenvalues), nroots)
        if len(err.eigenvalues) == 0:
            raise
        if eigvec:
            res = (err.eigenvalues, err.eigenvectors)
        else:
            res = err.eigenvalues

    if eigvec:
        e, c = res
        idx = numpy.argsort(e)
        return e[idx], c[:,idx]
    return numpy.sort(res)


class DOCIHamiltonian(lib.StreamObject):
    '''DOCI Hamiltonian of the integrals of a Molecule.

    Attributes:
        verbose : int
            Print level.
        nthreads : int or None
            Number of threads for :meth:`build`.  Default is
            :func:`lib.num_threads`.
        conv_tol : float
            Tolerance of the Lanczos solver.  0 means machine precision.
        ncv : int
            Number of Lanczos vectors.  Default is 42.

    Saved results

        mat : :class:`SparseMatrixCRS`
            The Hamiltonian (upper triangle)
        e : float
            Lowest eigenvalue, without nuclear repulsion
        ci : 1D array
            Lowest eigenvector

    Examples:

    >>> ham = DOCIHamiltonian(mol)
    >>> e, civec = ham.kernel()
    >>> print(e + mol.get_nucl_rep())
    '''

    conv_tol = CONV_TOL
    ncv = NCV

    _keys = {'mol', 'perm', 'mat', 'dim', 'nthreads', 'conv_tol', 'ncv',
             'e', 'ci'}

    def __init__(self, mol, perm=None):
        norb, npair = _unpack_nelec(mol)
        self.mol = mol
        self.verbose = getattr(mol, 'verbose', self.verbose)
        self.stdout = getattr(mol, 'stdout', self.stdout)
        if perm is None:
            perm = BitPermutation(npair)
        elif perm.npair != npair:
            raise ValueError('Permutation with %d pairs for %d electrons'
                             % (perm.npair, mol.get_n_electrons()))
        self.perm = perm
        self.dim = permutation.calc_combinations(norb, npair)
        self.nthreads = None
        self.mat = None
        self.e = None
        self.ci = None

    def dump_flags(self, verbose=None):
        log = logger.new_logger(self, verbose)
        log.info('')
        log.info('******** %s ********', self.__class__)
        log.info('number of orbitals = %d', self.mol.get_n_sp())
        log.info('number of electrons = %d', self.mol.get_n_electrons())
        log.info('dimension = %d', self.dim)
        log.info('conv_tol = %g', self.conv_tol)
        log.info('ncv = %d', self.ncv)
        return self

    def get_molecule(self):
        return self.mol

    def get_permutation(self):
        return self.perm

    def get_dim(self):
        return self.dim
    getdim = get_dim

    def build(self):
        self.mat = build(self.mol, self.perm, self.nthreads,
                         logger.new_logger(self))
        return self.mat

    def _check_built(self):
        if self.mat is None:
            raise RuntimeError('Hamiltonian is not built. Call build() first')

    def diagonalize(self):
        '''Lowest eigenvalue and its normalized eigenvector'''
        self._check_built()
        e, c = eigsh_lowest(self.mat, 1, True, self.conv_tol, self.ncv,
                            verbose=logger.new_logger(self))
        self.e = e[0]
        self.ci = c[:,0]
        return self.e, self.ci

    def calc_energy(self, nroots=None):
        '''Lowest eigenvalue, or the nroots lowest eigenvalues, without the
        eigenvectors.
        '''
        self._check_built()
        if nroots is None:
            return eigsh_lowest(self.mat, 1, False, self.conv_tol, self.ncv,
                                verbose=logger.new_logger(self))[0]
        return eigsh_lowest(self.mat, nroots, False, self.conv_tol, self.ncv,
                            verbose=logger.new_logger(self))

    def diagonalize_full(self):
        '''All eigenvalues and eigenvectors by dense diagonalization'''
        self._check_built()
        return eigh_full(self.mat)

    def kernel(self):
        '''Build the Hamiltonian and solve for the lowest eigenpair'''
        self.dump_flags()
        self.check_sanity()
        self.build()
        return self.diagonalize()

    @property
    def e_tot(self):
        return self.e + self.mol.get_nucl_rep()

    def make_hdiag(self):
        return make_hdiag(self.mol)

    def get_strings(self):
        return permutation.make_strings(self.mol.get_n_sp(), self.perm.npair)

    def save_to_file(self, filename):
        self._check_built()
        self.mat.write_to_file(filename, 'ham')

    def read_from_file(self, filename):
        mat = SparseMatrixCRS.read_from_file(filename, 'ham')
        if mat.n != self.dim:
            raise ValueError('Hamiltonian in %s has dimension %d, expected %d'
                             % (filename, mat.n, self.dim))
        self.mat = mat
        return self.mat
