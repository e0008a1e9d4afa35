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
Integral providers

The one-electron integrals T(a,b) and the two-electron integrals in
physicists' notation V(a,b,c,d) = <ab|cd> = (ac|bd) of an orthonormal set of
spatial orbitals.  Internally the two-electron integrals are kept in
chemists' notation without permutation symmetry, eri[p,q,r,s] = (pq|rs).

HDF5 layout (group /integrals)::

    OEI        L x L
    TEI        L^2 x L^2, TEI[a*L+b, c*L+d] = <ab|cd>
    orbsym     (optional) irrep of every orbital
    attrs:  nelectrons, sp_dim, nuclear_repulsion_energy
'''

import copy
import numpy
import h5py
from pydoci import lib
from pydoci.lib import logger
from pydoci import ao2mo


class Molecule(lib.StreamObject):
    '''Integrals without point group symmetry

    Args:
        h1e : (L,L) array
            One-electron integrals
        eri : array
            Two-electron integrals (pq|rs) in 1-fold, 4-fold or 8-fold
            storage
        nelectron : int
            Number of electrons
        ecore : float
            Nuclear repulsion (or any constant) energy

    Examples:

    >>> mol = Molecule(h1e, eri, 4, ecore=1.2)
    >>> mol.get_v(0, 1, 0, 1)  # (00|11)
    '''

    _keys = {'h1e', 'eri', 'nelectron', 'ecore'}

    def __init__(self, h1e, eri, nelectron, ecore=0.):
        h1e = numpy.array(h1e, dtype=numpy.double)
        if h1e.ndim != 2 or h1e.shape[0] != h1e.shape[1]:
            raise ValueError('h1e must be a square matrix, got shape %s'
                             % (h1e.shape,))
        norb = h1e.shape[0]
        self.h1e = h1e
        self.eri = numpy.array(ao2mo.restore(1, eri, norb), dtype=numpy.double)
        self.nelectron = int(nelectron)
        self.ecore = float(ecore)

    @property
    def norb(self):
        return self.h1e.shape[0]

    def get_n_sp(self):
        '''Number of spatial orbitals'''
        return self.h1e.shape[0]

    def get_n_electrons(self):
        return self.nelectron

    def get_nucl_rep(self):
        return self.ecore
    energy_nuc = get_nucl_rep

    def get_t(self, a, b):
        '''<a|T|b>.  Accepts integers or numpy index arrays.'''
        return self.h1e[a,b]
    getT = get_t

    def get_v(self, a, b, c, d):
        '''<ab|V|cd> = (ac|bd).  Accepts integers or numpy index arrays.'''
        return self.eri[a,c,b,d]
    getV = get_v

    def get_tei(self):
        '''Two-electron integrals as the L^2 x L^2 matrix <ab|cd>'''
        norb = self.norb
        return self.eri.transpose(0,2,1,3).reshape(norb*norb, norb*norb)

    def hf_energy(self):
        '''Energy of the determinant with the N/2 lowest orbitals doubly
        occupied, including the nuclear repulsion.
        '''
        occ = numpy.arange(self.nelectron // 2)
        e1 = 2 * self.h1e[occ,occ].sum()
        j = numpy.einsum('iijj->ij', self.eri)[numpy.ix_(occ,occ)]
        k = numpy.einsum('ijji->ij', self.eri)[numpy.ix_(occ,occ)]
        return e1 + (2*j - k).sum() + self.ecore

    def copy(self):
        '''Deep copy.  The integral arrays are not shared.'''
        new = copy.copy(self)
        new.h1e = self.h1e.copy()
        new.eri = self.eri.copy()
        return new

    def save(self, filename):
        '''Write the integrals in the /integrals group of a HDF5 file'''
        with h5py.File(filename, 'w') as f:
            grp = f.create_group('integrals')
            grp.attrs['nelectrons'] = numpy.uint32(self.nelectron)
            grp.attrs['sp_dim'] = numpy.uint32(self.norb)
            grp.attrs['nuclear_repulsion_energy'] = self.ecore
            grp.create_dataset('OEI', data=self.h1e)
            grp.create_dataset('TEI', data=self.get_tei())
            orbsym = getattr(self, 'orbsym', None)
            if orbsym is not None:
                grp.create_dataset('orbsym', data=numpy.asarray(orbsym))
        logger.debug(self, 'Integrals saved in %s', filename)
        return self
    write_to_file = save

    @classmethod
    def load(cls, filename):
        '''Read the integrals from the /integrals group of a HDF5 file'''
        with h5py.File(filename, 'r') as f:
            grp = f['integrals']
            nelec = int(grp.attrs['nelectrons'])
            norb = int(grp.attrs['sp_dim'])
            ecore = float(grp.attrs['nuclear_repulsion_energy'])
            h1e = grp['OEI'][()].reshape(norb, norb)
            tei = grp['TEI'][()].reshape(norb, norb, norb, norb)
            if 'orbsym' in grp:
                orbsym = grp['orbsym'][()]
            else:
                orbsym = None
        eri = tei.transpose(0,2,1,3)
        if issubclass(cls, SymMolecule):
            return cls(h1e, eri, nelec, ecore, orbsym)
        return cls(h1e, eri, nelec, ecore)

    def dump_flags(self, verbose=None):
        log = logger.new_logger(self, verbose)
        log.info('number of orbitals = %d', self.norb)
        log.info('number of electrons = %d', self.nelectron)
        log.info('nuclear repulsion = %.15g', self.ecore)
        return self


class SymMolecule(Molecule):
    '''Integrals of orbitals which carry point group irreps

    Attributes:
        orbsym : 1D int array
            0-based irrep label of every orbital.  All zeros (C1) if not
            given.
    '''

    _keys = {'orbsym'}

    def __init__(self, h1e, eri, nelectron, ecore=0., orbsym=None):
        Molecule.__init__(self, h1e, eri, nelectron, ecore)
        if orbsym is None:
            orbsym = numpy.zeros(self.norb, dtype=int)
        orbsym = numpy.asarray(orbsym, dtype=int)
        if orbsym.shape != (self.norb,):
            raise ValueError('orbsym has %d entries for %d orbitals'
                             % (orbsym.size, self.norb))
        self.orbsym = orbsym

    @property
    def n_irreps(self):
        return int(self.orbsym.max()) + 1 if self.orbsym.size else 0

    def get_orbital_irrep(self, idx):
        return int(self.orbsym[idx])

    def copy(self):
        new = Molecule.copy(self)
        new.orbsym = self.orbsym.copy()
        return new

    @classmethod
    def from_molecule(cls, mol, orbsym=None):
        return cls(mol.h1e, mol.eri, mol.nelectron, mol.ecore, orbsym)

    @classmethod
    def from_fcidump(cls, filename):
        from pydoci.tools import fcidump
        result = fcidump.read(filename)
        norb = result['NORB']
        orbsym = numpy.asarray(result['ORBSYM'], dtype=int) - 1
        return cls(result['H1'], ao2mo.restore(1, result['H2'], norb),
                   result['NELEC'], result['ECORE'], orbsym)

    def dump_flags(self, verbose=None):
        Molecule.dump_flags(self, verbose)
        logger.new_logger(self, verbose).info('orbital irreps = %s', self.orbsym)
        return self


def load_molecule(filename):
    '''Read integrals from a HDF5 or a FCIDUMP file.  The returned object is a
    :class:`SymMolecule` (with C1 labels if the file has no irreps).
    '''
    if h5py.is_hdf5(filename):
        return SymMolecule.load(filename)
    return SymMolecule.from_fcidump(filename)
