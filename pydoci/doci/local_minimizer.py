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
Orbital optimization of DOCI by successive Jacobi rotations

Every iteration scans all orbital pairs of equal irrep.  For each pair the
rotation angle minimizing the energy of the current 2-RDM is found by
Newton-Raphson, one of the pairs is rotated, and the DOCI problem is solved
again in the new orbitals.
'''

import os
import numpy
from pydoci import lib
from pydoci.lib import logger
from pydoci.doci.hamiltonian import DOCIHamiltonian
from pydoci.doci.rdm import DM2
from pydoci.doci import jacobi
from pydoci.integrals.orbital_transform import OrbitalTransform
from pydoci import __config__

CONV_CRIT = getattr(__config__, 'doci_local_minimizer_conv_crit', 1e-6)
CONV_STEPS = getattr(__config__, 'doci_local_minimizer_conv_steps', 25)
MAX_ITER = getattr(__config__, 'doci_local_minimizer_max_iter', 1000)
START_ANGLE = getattr(__config__, 'doci_local_minimizer_start_angle', 0.3)
RETRY_ANGLE = getattr(__config__, 'doci_local_minimizer_retry_angle', 0.01)
SAVE_H5_PATH = getattr(__config__, 'SAVE_H5_PATH', '.')
ALLOWED_IRREPS = getattr(__config__, 'DOCI_ALLOWED_IRREPS', '')


def get_orbsym(mol):
    '''Irrep of every orbital.  Integrals without symmetry are C1.'''
    orbsym = getattr(mol, 'orbsym', None)
    if orbsym is None:
        return numpy.zeros(mol.get_n_sp(), dtype=int)
    return numpy.asarray(orbsym)

def parse_irreps(irreps, n_irreps, verbose=None):
    '''Parse the comma separated list of irreps.  Entries which are no
    integers or which are out of range are skipped.
    '''
    log = logger.new_logger(verbose=verbose)
    allowed = []
    for elem in irreps.split(','):
        elem = elem.strip()
        if not elem:
            continue
        try:
            irrep = int(elem)
        except ValueError:
            log.warn('Invalid value %s in the list of allowed irreps', elem)
            continue
        if 0 <= irrep < n_irreps:
            allowed.append(irrep)
    return sorted(set(allowed))


class LocalMinimizer(lib.StreamObject):
    '''Jacobi rotation based orbital optimizer

    Attributes:
        conv_crit : float
            Energy change below which an iteration counts as converged.
            Default is 1e-6.
        conv_steps : int
            Number of consecutive converged iterations to stop.  Default is
            25.
        max_iter : int
            Maximum number of iterations.  Default is 1000.
        allow_irreps : list
            Only the orbital pairs of these irreps are rotated.  All irreps
            if empty.  Read from the environment variable
            v2DM_DOCI_ALLOWED_IRREPS.
        save_h5_path : str
            Directory of the checkpoint files.

    Saved results

        energy : float
            Electronic energy of the current orbitals
        rdm : :class:`DM2`
            2-RDM of the current orbitals

    Examples:

    >>> opt = LocalMinimizer(mol)
    >>> opt.minimize()
    >>> print(opt.get_energy())
    '''

    conv_crit = CONV_CRIT
    conv_steps = CONV_STEPS
    max_iter = MAX_ITER
    start_angle = START_ANGLE
    retry_angle = RETRY_ANGLE
    save_h5_path = SAVE_H5_PATH

    _keys = {'mol', 'ham', 'rdm', 'orbtrans', 'energy', 'allow_irreps',
             'conv_crit', 'conv_steps', 'max_iter', 'start_angle',
             'retry_angle', 'save_h5_path', 'rng', 'iters'}

    def __init__(self, mol, seed=None):
        self.verbose = mol.verbose
        self.stdout = mol.stdout
        self.mol = mol.copy()
        self.orbtrans = OrbitalTransform(self.mol)
        self.ham = DOCIHamiltonian(self.mol)
        self.rdm = DM2.from_molecule(self.mol)
        self.energy = 0.
        self.iters = 0
        self.rng = numpy.random.default_rng(seed)

        orbsym = get_orbsym(self.mol)
        self.allow_irreps = []
        if ALLOWED_IRREPS:
            self.allow_irreps = parse_irreps(ALLOWED_IRREPS,
                                             int(orbsym.max()) + 1,
                                             logger.new_logger(self))
            logger.note(self, 'Allowed irreps: %s', self.allow_irreps)

    def dump_flags(self, verbose=None):
        log = logger.new_logger(self, verbose)
        log.info('')
        log.info('******** %s ********', self.__class__)
        log.info('conv_crit = %g', self.conv_crit)
        log.info('conv_steps = %d', self.conv_steps)
        log.info('max_iter = %d', self.max_iter)
        log.info('allowed irreps = %s', self.allow_irreps or 'all')
        log.info('checkpoint directory = %s', self.save_h5_path)
        return self

    def get_energy(self):
        '''Energy including the nuclear repulsion'''
        return self.energy + self.mol.get_nucl_rep()

    def get_optimal_unitary(self):
        return self.orbtrans.get_unitary()

    def get_ham(self):
        return self.mol

    def get_orbital_tf(self):
        return self.orbtrans

    def get_dm2(self):
        return self.rdm

    def _solve(self):
        log = logger.new_logger(self)
        self.ham.build()
        t0 = (logger.process_clock(), logger.perf_counter())
        e, civec = self.ham.diagonalize()
        log.info('E = %.15g', e + self.mol.get_nucl_rep())
        log.timer('diagonalization', *t0)
        self.rdm.build(self.ham.get_permutation(), civec)
        return e

    def calc_energy(self):
        '''Solve the DOCI problem with the current integrals'''
        self.energy = self._solve()
        return self.energy

    def calc_new_energy(self, new_mol=None):
        '''Solve the DOCI problem with the integrals of the current unitary, or
        with the integrals of new_mol if given.
        '''
        if new_mol is None:
            self.orbtrans.fill_ham(self.mol)
        else:
            self.mol.h1e[:] = new_mol.h1e
            self.mol.eri[:] = new_mol.eri
        return self._solve()

    def scan_orbitals(self):
        '''Optimal rotation of every allowed orbital pair.

        Returns:
            A list of (k, l, theta, energy), energy without nuclear repulsion
        '''
        log = logger.new_logger(self)
        t0 = (logger.process_clock(), logger.perf_counter())
        orbsym = get_orbsym(self.mol)
        norb = orbsym.size
        functional = jacobi.JacobiEnergy(self.rdm, self.mol)

        pos_rotations = []
        for k in range(norb):
            for l in range(k+1, norb):
                if orbsym[k] != orbsym[l]:
                    continue
                if self.allow_irreps and orbsym[k] not in self.allow_irreps:
                    continue

                poly = functional.polynomial(k, l)
                theta, is_min = poly.find_min_angle(self.start_angle,
                                                    verbose=log)
                if not is_min:
                    # hit a maximum
                    theta, is_min = poly.find_min_angle(self.retry_angle,
                                                        verbose=log)
                if not is_min:
                    continue
                if abs(theta) > numpy.pi / 2:
                    continue

                new_en = functional.calc_rotate(k, l, theta)
                pos_rotations.append((k, l, theta, new_en))

        log.timer('orbital scanning', *t0)
        return pos_rotations

    def choose_orbitalpair(self, orbs):
        '''Draw one of the candidates orbs (output of :meth:`scan_orbitals`),
        with a probability proportional to the energy it gains.

        Returns:
            index in orbs
        '''
        choice = self.rng.random()
        gains = numpy.array([self.energy - x[3] for x in orbs])
        norm = gains.sum()
        if norm <= 0:
            return 0
        cum = numpy.cumsum(gains / norm)
        idx = numpy.searchsorted(cum, choice, side='right')
        return int(min(idx, len(orbs) - 1))

    def _save(self, fn, filename):
        try:
            fn(filename)
        except OSError as err:
            logger.warn(self, 'Failed to write %s: %s', filename, err)

    def _checkpoint(self, iters):
        if iters % 10 == 0:
            self._save(self.orbtrans.get_unitary().save,
                       os.path.join(self.save_h5_path, 'unitary-%d.h5' % iters))
        if iters % 25 == 0:
            self._save(self.mol.save,
                       os.path.join(self.save_h5_path, 'ham-%d.h5' % iters))
            self._save(self.rdm.write_to_file,
                       os.path.join(self.save_h5_path, 'rdm-%d.h5' % iters))

    def minimize(self, dist_choice=False):
        '''Rotate orbital pairs until the energy is converged.

        Kwargs:
            dist_choice : bool
                Draw the pair with :meth:`choose_orbitalpair` instead of
                taking the one with the lowest energy.

        Returns:
            The energy including the nuclear repulsion
        '''
        log = logger.new_logger(self)
        cput0 = (logger.process_clock(), logger.perf_counter())
        nuc = self.mol.get_nucl_rep()
        self.dump_flags()
        self.check_sanity()

        converged = 0
        self.energy = self.calc_new_energy()
        prev_pair = (0, 0)
        iters = 1

        while converged < self.conv_steps:
            list_rots = self.scan_orbitals()
            if not list_rots:
                log.note('No orbital rotation found to lower the energy, stopping')
                break
            list_rots.sort(key=lambda x: x[3])
            for k, l, theta, e in list_rots:
                log.debug('%d\t%d\t%.15g\t%g', k, l, e + nuc, theta)

            idx = 0
            if dist_choice:
                idx = self.choose_orbitalpair(list_rots)
                if list_rots[idx][:2] == prev_pair:
                    idx = self.choose_orbitalpair(list_rots)
                if list_rots[idx][:2] == prev_pair:
                    idx = 0

            # never the same pair twice in a row
            if list_rots[idx][:2] == prev_pair:
                idx += 1
            if idx >= len(list_rots):
                log.note('Only the previous orbital pair can be rotated, stopping')
                break

            k, l, theta, e_rot = list_rots[idx]
            prev_pair = (k, l)
            if dist_choice:
                log.note('%d (%d) Chosen: %d', iters, converged, idx)

            self.orbtrans.do_jacobi_rotation(self.mol, k, l, theta)
            new_energy = self.calc_new_energy()

            self._checkpoint(iters)

            if abs(self.energy - new_energy) < self.conv_crit:
                converged += 1
            else:
                converged = 0

            log.note('%d (%d)\tRotation between %d  %d over %g E_rot = %.15g  '
                     'E = %.15g\t%g', iters, converged, k, l, theta, e_rot + nuc,
                     new_energy + nuc, abs(self.energy - new_energy))

            self.energy = new_energy
            self.iters = iters
            iters += 1
            if iters > self.max_iter:
                log.note('Done %d steps, quitting', self.max_iter)
                break

        log.timer('orbital minimization', *cput0)
        self._save(self.get_optimal_unitary().save,
                   os.path.join(self.save_h5_path, 'optimale-uni.h5'))
        return self.get_energy()

    def kernel(self, dist_choice=False):
        return self.minimize(dist_choice)
