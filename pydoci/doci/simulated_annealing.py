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
Orbital optimization of DOCI by simulated annealing over random Jacobi
rotations
'''

import os
import numpy
from pydoci import lib
from pydoci.lib import logger
from pydoci.doci.hamiltonian import DOCIHamiltonian
from pydoci.doci.local_minimizer import get_orbsym
from pydoci.integrals.orbital_transform import OrbitalTransform
from pydoci import __config__

START_TEMP = getattr(__config__, 'doci_annealing_start_temp', 0.1)
DELTA_TEMP = getattr(__config__, 'doci_annealing_delta_temp', 0.99)
MAX_ANGLE = getattr(__config__, 'doci_annealing_max_angle', 1.3)
DELTA_ANGLE = getattr(__config__, 'doci_annealing_delta_angle', 0.999)
MAX_STEPS = getattr(__config__, 'doci_annealing_max_steps', 20000)
MAX_UNACCEPTED = getattr(__config__, 'doci_annealing_max_unaccepted', 1500)
SAVE_H5_PATH = getattr(__config__, 'SAVE_H5_PATH', '.')


class SimulatedAnnealing(lib.StreamObject):
    '''Metropolis walk over random orbital rotations with a decreasing
    temperature.

    Attributes:
        start_temp : float
            Starting temperature.  Default is 0.1.
        delta_temp : float
            Factor by which the temperature drops every step.  Default is
            0.99.
        max_angle : float
            Largest rotation angle at the start.  Default is 1.3.
        delta_angle : float
            Factor by which max_angle drops every step.  Default is 0.999.
        max_steps : int
            Number of trials.  Default is 20000.
        max_unaccepted : int
            Stop when more trials are rejected.  Default is 1500.

    Saved results

        energy : float
            Electronic energy of the current orbitals
        lowest_energy : float
            Lowest electronic energy seen during the walk
        steps : int
            Number of trials done
    '''

    start_temp = START_TEMP
    delta_temp = DELTA_TEMP
    max_angle = MAX_ANGLE
    delta_angle = DELTA_ANGLE
    max_steps = MAX_STEPS
    max_unaccepted = MAX_UNACCEPTED
    save_h5_path = SAVE_H5_PATH

    _keys = {'mol', 'ham', 'orbtrans', 'energy', 'lowest_energy', 'steps',
             'start_temp', 'delta_temp', 'max_angle', 'delta_angle',
             'max_steps', 'max_unaccepted', 'save_h5_path', 'rng',
             'cur_temp', 'sample_pairs'}

    def __init__(self, mol, seed=None):
        self.verbose = mol.verbose
        self.stdout = mol.stdout
        self.mol = mol.copy()
        self.ham = DOCIHamiltonian(self.mol)
        self.orbtrans = OrbitalTransform(self.mol)
        self.rng = numpy.random.default_rng(seed)
        self.energy = 0.
        self.lowest_energy = None
        self.steps = 0
        self.cur_temp = self.start_temp
        self.sample_pairs = None

    def dump_flags(self, verbose=None):
        log = logger.new_logger(self, verbose)
        log.info('')
        log.info('******** %s ********', self.__class__)
        log.info('start_temp = %g', self.start_temp)
        log.info('delta_temp = %g', self.delta_temp)
        log.info('max_angle = %g', self.max_angle)
        log.info('delta_angle = %g', self.delta_angle)
        log.info('max_steps = %d', self.max_steps)
        return self

    def get_energy(self):
        '''Energy including the nuclear repulsion'''
        return self.energy + self.mol.get_nucl_rep()

    def get_ham(self):
        return self.ham

    def get_orbital_tf(self):
        return self.orbtrans

    def calc_energy(self):
        self.ham.build()
        self.energy = self.ham.calc_energy()
        return self.energy

    def calc_new_energy(self):
        '''Lowest eigenvalue with the integrals of the current unitary'''
        self.orbtrans.fill_ham(self.mol)
        self.ham.build()
        return self.ham.calc_energy()

    def accept_function(self, e_new):
        '''Metropolis criterion at the current temperature'''
        if e_new < self.energy:
            return True
        chance = numpy.exp((self.energy - e_new) / self.cur_temp)
        return self.rng.random() * (1 + chance) <= chance

    def optimize(self):
        '''Run the annealing.

        Returns:
            The final energy including the nuclear repulsion
        '''
        log = logger.new_logger(self)
        cput0 = (logger.process_clock(), logger.perf_counter())
        self.dump_flags()
        self.check_sanity()
        nuc = self.mol.get_nucl_rep()
        orbsym = get_orbsym(self.mol)
        norb = orbsym.size
        unitary = self.orbtrans.get_unitary()

        self.energy = self.calc_new_energy()
        log.note('Starting energy = %.15g', self.get_energy())
        self.lowest_energy = self.energy
        self.cur_temp = self.start_temp
        max_angle = self.max_angle

        sample_pairs = numpy.zeros((norb,norb), dtype=int)
        sample_pairs[orbsym[:,None] != orbsym[None,:]] = -1

        unaccepted = 0
        steps = self.max_steps
        for i in range(self.max_steps):
            orb1, orb2 = [int(x) for x in self.rng.integers(0, norb, size=2)]
            if orb1 == orb2 or orbsym[orb1] != orbsym[orb2]:
                continue

            sample_pairs[orb1,orb2] += 1
            sample_pairs[orb2,orb1] += 1

            # between -1 and 1, most likely close to 0
            cur_angle = max_angle * (self.rng.random() - self.rng.random())
            log.info('%d\tT=%g\tOrb1=%d\tOrb2=%d  Over %g', i, self.cur_temp,
                     orb1, orb2, cur_angle)

            unitary.jacobi_rotation(orb1, orb2, cur_angle)
            new_energy = self.calc_new_energy()
            self.lowest_energy = min(self.lowest_energy, new_energy)

            if self.accept_function(new_energy):
                log.info('T=%g\tNew energy = %.15g\t Old energy = %.15g\t'
                         '=> Accepted', self.cur_temp, new_energy + nuc,
                         self.get_energy())
                self.energy = new_energy
            else:
                unaccepted += 1
                log.info('T=%g\tNew energy = %.15g\t Old energy = %.15g\t'
                         '=> Unaccepted, %d', self.cur_temp, new_energy + nuc,
                         self.get_energy(), unaccepted)
                unitary.jacobi_rotation(orb1, orb2, -cur_angle)

            self.cur_temp *= self.delta_temp
            max_angle *= self.delta_angle

            if unaccepted > self.max_unaccepted:
                log.note('Too many unaccepted, stopping')
                steps = i
                break

        self.steps = steps
        self.sample_pairs = sample_pairs
        # the integrals of the last rejected trial are still in mol
        self.orbtrans.fill_ham(self.mol)

        log.note('Bottom was %.15g', self.lowest_energy + nuc)
        log.note('Final energy = %.15g', self.get_energy())
        log.timer('simulated annealing', *cput0)

        filename = os.path.join(self.save_h5_path,
                                'unitary-final-%d.h5' % steps)
        try:
            unitary.save(filename)
        except OSError as err:
            log.warn('Failed to write %s: %s', filename, err)

        for i in range(norb):
            for j in range(i+1, norb):
                if sample_pairs[i,j] >= 0:
                    log.debug('%d\t%d\t%d\t%d', orbsym[i], i, j, sample_pairs[i,j])
        return self.get_energy()

    def kernel(self):
        return self.optimize()
