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
Exact DOCI solver

Usage::

    python -m pydoci.tools.doci_exact -i mo-integrals.h5 -o rdm.h5

The sparse Hamiltonian is read from / saved to the files named by the
environment variables READ_SPARSE_H5_FILE and SAVE_SPARSE_H5_FILE.
'''

import sys
import argparse
from pydoci import lib
from pydoci.lib import logger
from pydoci import integrals
from pydoci.integrals.orbital_transform import OrbitalTransform
from pydoci.doci.hamiltonian import DOCIHamiltonian
from pydoci.doci.rdm import DM2
from pydoci.doci.local_minimizer import LocalMinimizer
from pydoci.doci.simulated_annealing import SimulatedAnnealing
from pydoci import __config__


def cmd_args(argv=None):
    '''
    get input from cmdline
    '''
    parser = argparse.ArgumentParser(prog='doci_exact')
    parser.add_argument('-i', '--integrals', dest='integrals',
                        default='mo-integrals.h5', metavar='FILE',
                        help='set the input integrals file (HDF5 or FCIDUMP)')
    parser.add_argument('-o', '--output', dest='output', default='rdm.h5',
                        metavar='FILE', help='set the output filename for the RDM')
    parser.add_argument('-u', '--unitary', dest='unitary', metavar='FILE',
                        help='use this unitary to calc energy')
    parser.add_argument('-s', '--optimize', action='store_true', dest='optimize',
                        default=False,
                        help='use simulated annealing to find lowest energy')
    parser.add_argument('-l', '--local', action='store_true', dest='local',
                        default=False,
                        help='use local minimization by Jacobi rotations')
    parser.add_argument('-r', '--random', action='store_true', dest='random',
                        default=False,
                        help='choose the orbital pair of the local minimizer '
                        'by the distribution of the energy gains')
    parser.add_argument('-t', '--threads', type=int, dest='threads',
                        metavar='NUM', help='number of threads')
    parser.add_argument('-v', '--verbose', action='count', dest='verbose',
                        default=0, help='make lots of noise')
    parser.add_argument('-q', '--quiet', action='store_true', dest='quiet',
                        default=False, help='be very quiet')

    opts = parser.parse_args(argv)
    if opts.optimize and opts.local:
        parser.error('options --optimize and --local are mutually exclusive')

    if opts.quiet:
        opts.verbose = logger.QUIET
    else:
        opts.verbose = logger.NOTE + opts.verbose
    return opts


def report_rdm(mol, ham, civec, output, log):
    '''Build the 2-RDM, print its energy and trace and save it'''
    nuc = mol.get_nucl_rep()
    t0 = (logger.process_clock(), logger.perf_counter())
    rdm = DM2.from_molecule(mol)
    rdm.nthreads = ham.nthreads
    rdm.build(ham.get_permutation(), civec)
    log.timer('building 2DM', *t0)

    rdm_ham = DM2.from_molecule(mol).build_hamiltonian(mol)
    log.note('DM2 Energy = %.10f', rdm.dot(rdm_ham) + nuc)
    log.note('DM2 Trace = %.10f', rdm.trace())
    rdm.write_to_file(output)
    return rdm

def run_exact(mol, opts, log):
    if opts.unitary:
        log.note('Reading unitary %s', opts.unitary)
        orbtrans = OrbitalTransform(mol)
        orbtrans.get_unitary().load(opts.unitary)
        orbtrans.fill_ham(mol)

    nuc = mol.get_nucl_rep()
    log.note('RHF energy = %.10f', mol.hf_energy())

    ham = DOCIHamiltonian(mol)
    t0 = (logger.process_clock(), logger.perf_counter())
    read_file = getattr(__config__, 'READ_SPARSE_H5_FILE', None)
    save_file = getattr(__config__, 'SAVE_SPARSE_H5_FILE', None)
    if read_file:
        ham.read_from_file(read_file)
    else:
        ham.build()
    if save_file:
        ham.save_to_file(save_file)
    log.timer('building', *t0)

    t0 = (logger.process_clock(), logger.perf_counter())
    e, civec = ham.diagonalize()
    log.timer('diagonalization', *t0)
    log.note('E = %.10f', e + nuc)

    report_rdm(mol, ham, civec, opts.output, log)
    return e + nuc

def run_annealing(mol, opts, log):
    opt = SimulatedAnnealing(mol)
    if opts.unitary:
        log.note('Reading unitary %s', opts.unitary)
        opt.get_orbital_tf().get_unitary().load(opts.unitary)

    t0 = (logger.process_clock(), logger.perf_counter())
    opt.optimize()
    log.note('E = %.10f', opt.get_energy())
    log.timer('optimization', *t0)

    opt.calc_new_energy()
    ham = opt.get_ham()
    e, civec = ham.diagonalize()
    e += mol.get_nucl_rep()
    log.note('E = %.10f', e)

    report_rdm(opt.mol, ham, civec, opts.output, log)
    return e

def run_local(mol, opts, log):
    opt = LocalMinimizer(mol)
    if opts.unitary:
        log.note('Reading unitary %s', opts.unitary)
        opt.get_orbital_tf().get_unitary().load(opts.unitary)

    t0 = (logger.process_clock(), logger.perf_counter())
    e = opt.minimize(opts.random)
    log.timer('optimization', *t0)
    log.note('E = %.10f', e)

    report_rdm(opt.mol, opt.ham, opt.ham.ci, opts.output, log)
    return e

def main(argv=None):
    opts = cmd_args(argv)
    log = logger.Logger(sys.stdout, opts.verbose)

    log.note('Reading: %s', opts.integrals)
    mol = integrals.load_molecule(opts.integrals)
    mol.verbose = opts.verbose

    with lib.with_threads(opts.threads):
        if opts.optimize:
            return run_annealing(mol, opts, log)
        elif opts.local:
            return run_local(mol, opts, log)
        else:
            return run_exact(mol, opts, log)


if __name__ == '__main__':
    main()
