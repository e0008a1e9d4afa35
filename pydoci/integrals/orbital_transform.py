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
Orbital rotations

A Jacobi (Givens) rotation over the angle theta mixes the orbitals k and l::

    phi'_k =  cos(theta) phi_k + sin(theta) phi_l
    phi'_l = -sin(theta) phi_k + cos(theta) phi_l

The accumulated orthogonal transformation of the starting orbitals is kept
in :class:`UnitaryMatrix`, the columns being the coefficients of the new
orbitals.
'''

import numpy
from pydoci import lib
from pydoci.lib import logger
from pydoci import ao2mo


def rotation_matrix(theta):
    '''2x2 matrix R with phi'_a = sum_b R[a,b] phi_b for (a,b) in (k,l)'''
    c = numpy.cos(theta)
    s = numpy.sin(theta)
    return numpy.array([[c, s], [-s, c]])

def _rotate_axis(a, axis, k, l, c, s):
    ak = a.take(k, axis=axis)
    al = a.take(l, axis=axis)
    idx = [slice(None)] * a.ndim
    idx[axis] = k
    a[tuple(idx)] = c * ak + s * al
    idx[axis] = l
    a[tuple(idx)] = c * al - s * ak

def jacobi_rotate(h1e, eri, k, l, theta):
    '''Rotate the one- and two-electron integrals (1-fold eri) over the orbital
    pair (k,l) in place.
    '''
    c = numpy.cos(theta)
    s = numpy.sin(theta)
    for axis in range(2):
        _rotate_axis(h1e, axis, k, l, c, s)
    for axis in range(4):
        _rotate_axis(eri, axis, k, l, c, s)
    return h1e, eri


class UnitaryMatrix:
    '''Orthogonal transformation of the orbitals, identity at start.

    Attributes:
        unitary : (L,L) array
            Column i holds the coefficients of orbital i in the starting
            basis.
    '''
    def __init__(self, norb):
        self.norb = norb
        self.unitary = numpy.eye(norb)

    def reset(self):
        self.unitary = numpy.eye(self.norb)
        return self

    def jacobi_rotation(self, k, l, theta):
        '''U <- U G with G the Givens rotation over (k,l)'''
        c = numpy.cos(theta)
        s = numpy.sin(theta)
        _rotate_axis(self.unitary, 1, k, l, c, s)
        return self

    def get_unitary(self):
        return self.unitary

    def check_orthogonal(self, tol=lib.param.LOOSE_ZERO_TOL):
        '''True if U^T U equals the identity within tol'''
        err = abs(self.unitary.T.dot(self.unitary) - numpy.eye(self.norb)).max()
        return err < tol

    def copy(self):
        new = UnitaryMatrix(self.norb)
        new.unitary = self.unitary.copy()
        return new

    def save(self, filename):
        lib.chkfile.dump(filename, 'unitary', self.unitary)
        return self
    saveU = save

    def load(self, filename):
        unitary = lib.chkfile.load(filename, 'unitary')
        if unitary is None:
            raise KeyError('No unitary matrix found in %s' % filename)
        unitary = numpy.asarray(unitary)
        if unitary.shape != (self.norb, self.norb):
            raise ValueError('Unitary matrix in %s has shape %s, expected %s'
                             % (filename, unitary.shape, (self.norb,)*2))
        self.unitary = unitary
        return self
    loadU = load


class OrbitalTransform:
    '''Keep the integrals of the starting orbitals and the accumulated
    rotation, and produce the integrals of the rotated orbitals.

    Args:
        mol : :class:`Molecule`
            The integrals of the starting orbitals.  They are copied.
    '''
    def __init__(self, mol):
        self.h1e0 = mol.h1e.copy()
        self.eri0 = mol.eri.copy()
        self.unitary = UnitaryMatrix(mol.get_n_sp())
        self.verbose = mol.verbose
        self.stdout = mol.stdout

    def get_unitary(self):
        return self.unitary

    def do_jacobi_rotation(self, mol, k, l, theta):
        '''Rotate the orbital pair (k,l) in the integrals of mol and in the
        tracked unitary.
        '''
        jacobi_rotate(mol.h1e, mol.eri, k, l, theta)
        self.unitary.jacobi_rotation(k, l, theta)
        return mol

    def fill_ham(self, mol):
        '''Overwrite the integrals of mol by the starting integrals transformed
        with the current unitary.
        '''
        t0 = (logger.process_clock(), logger.perf_counter())
        u = self.unitary.unitary
        mol.h1e[:] = u.T.dot(self.h1e0).dot(u)
        mol.eri[:] = ao2mo.full(self.eri0, u)
        logger.timer_debug1(self, 'orbital transformation', *t0)
        return mol
    fill_ham_ci = fill_ham

    def get_rotated_molecule(self, mol):
        '''A copy of mol with the integrals of the current orbitals'''
        return self.fill_ham(mol.copy())
