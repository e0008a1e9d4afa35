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
FCIDUMP functions (write, read) for real Hamiltonian
'''

import re
import numpy
from pydoci import ao2mo
from pydoci import __config__

DEFAULT_FLOAT_FORMAT = getattr(__config__, 'fcidump_float_format', ' %.16g')
TOL = getattr(__config__, 'fcidump_write_tol', 1e-15)


def write_head(fout, nmo, nelec, ms=0, orbsym=None):
    if not isinstance(nelec, (int, numpy.number)):
        ms = abs(nelec[0] - nelec[1])
        nelec = nelec[0] + nelec[1]
    fout.write(' &FCI NORB=%4d,NELEC=%2d,MS2=%d,\n' % (nmo, nelec, ms))
    if orbsym is not None and len(orbsym) > 0:
        fout.write('  ORBSYM=%s\n' % ','.join([str(x) for x in orbsym]))
    else:
        fout.write('  ORBSYM=%s\n' % ('1,' * nmo))
    fout.write('  ISYM=1,\n')
    fout.write(' &END\n')


def write_eri(fout, eri, nmo, tol=TOL, float_format=DEFAULT_FLOAT_FORMAT):
    '''Two-electron integrals (ij|kl) with 8-fold permutation symmetry, one
    line per unique integral, orbital indices starting at 1.
    '''
    output_format = float_format + ' %4d %4d %4d %4d\n'
    eri = ao2mo.restore(8, eri, nmo)
    ijkl = 0
    for i in range(nmo):
        for j in range(0, i+1):
            for k in range(0, i+1):
                lmax = j+1 if k == i else k+1
                for l in range(0, lmax):
                    if abs(eri[ijkl]) > tol:
                        fout.write(output_format % (eri[ijkl], i+1, j+1, k+1, l+1))
                    ijkl += 1

def write_hcore(fout, h, nmo, tol=TOL, float_format=DEFAULT_FLOAT_FORMAT):
    h = h.reshape(nmo,nmo)
    output_format = float_format + ' %4d %4d  0  0\n'
    for i in range(nmo):
        for j in range(0, i+1):
            if abs(h[i,j]) > tol:
                fout.write(output_format % (h[i,j], i+1, j+1))


def from_integrals(output, h1e, h2e, nmo, nelec, nuc=0, ms=0, orbsym=None,
                   tol=TOL, float_format=DEFAULT_FLOAT_FORMAT):
    '''Convert the given 1-electron and 2-electron integrals to FCIDUMP format'''
    with open(output, 'w') as fout:
        write_head(fout, nmo, nelec, ms, orbsym)
        write_eri(fout, h2e, nmo, tol=tol, float_format=float_format)
        write_hcore(fout, h1e, nmo, tol=tol, float_format=float_format)
        output_format = float_format + '  0  0  0  0\n'
        fout.write(output_format % nuc)

def from_molecule(output, mol, tol=TOL, float_format=DEFAULT_FLOAT_FORMAT):
    '''Write the integrals of a :class:`Molecule` in FCIDUMP format'''
    orbsym = getattr(mol, 'orbsym', None)
    if orbsym is not None:
        orbsym = [x+1 for x in orbsym]
    from_integrals(output, mol.h1e, mol.eri, mol.get_n_sp(),
                   mol.get_n_electrons(), mol.get_nucl_rep(), 0, orbsym,
                   tol, float_format)


def read(filename):
    '''Parse FCIDUMP.  Return a dictionary to hold the integrals and
    parameters with keys:  H1, H2, ECORE, NORB, NELEC, MS2, ORBSYM, ISYM

    H2 is stored with 8-fold permutation symmetry.  ORBSYM keeps the 1-based
    irrep labels of the file.
    '''
    with open(filename, 'r') as finp:
        data = []
        for line in finp:
            data.append(line)
            if re.search(r'&END|/\s*$', line.upper()):
                break
        head = ' '.join(data).replace('\n', ' ')
        head = re.sub(r'&FCI|&END', ' ', head, flags=re.IGNORECASE)

        result = {'ISYM': 1, 'MS2': 0}
        for key, val in re.findall(r'(\w+)\s*=\s*([^=]*?)(?=\s*\w+\s*=|\s*/?\s*$)',
                                   head):
            key = key.upper()
            vals = [x for x in re.split(r'[\s,]+', val) if x]
            if key == 'ORBSYM':
                result[key] = [int(x) for x in vals]
            elif vals:
                result[key] = int(vals[0])
        if 'NORB' not in result or 'NELEC' not in result:
            raise ValueError('NORB or NELEC not found in the header of %s'
                             % filename)
        norb = result['NORB']
        if 'ORBSYM' not in result:
            result['ORBSYM'] = [1] * norb
        result['ORBSYM'] = result['ORBSYM'][:norb]

        npair = norb * (norb+1) // 2
        h1e = numpy.zeros((norb,norb))
        h2e = numpy.zeros(npair*(npair+1)//2)
        ecore = 0.
        for line in finp:
            dat = line.split()
            if len(dat) < 5:
                continue
            v = float(dat[0].replace('D', 'E').replace('d', 'e'))
            i, j, k, l = [int(x) for x in dat[1:5]]
            if k != 0:
                ij = _pair_index(i-1, j-1)
                kl = _pair_index(k-1, l-1)
                h2e[_pair_index(ij, kl)] = v
            elif j != 0:
                h1e[i-1,j-1] = h1e[j-1,i-1] = v
            else:
                ecore = v
    result['H1'] = h1e
    result['H2'] = h2e
    result['ECORE'] = ecore
    return result

def _pair_index(i, j):
    if i < j:
        i, j = j, i
    return i*(i+1)//2 + j

def to_molecule(filename):
    '''Read FCIDUMP and return a :class:`SymMolecule`'''
    from pydoci.integrals import molecule
    return molecule.SymMolecule.from_fcidump(filename)


if __name__ == '__main__':
    import sys
    # fcidump.py FCIDUMP output.h5
    mol = to_molecule(sys.argv[1])
    mol.save(sys.argv[2])
