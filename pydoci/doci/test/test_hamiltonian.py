#!/usr/bin/env python

import unittest
import tempfile
import numpy
from pydoci import lib
from pydoci.integrals import Molecule
from pydoci.doci import hamiltonian
from pydoci.doci import permutation
from pydoci.doci.hamiltonian import DOCIHamiltonian


def make_mol(norb, nelec, seed):
    numpy.random.seed(seed)
    h1e = numpy.random.random((norb,norb)) * .1
    h1e = h1e + h1e.T + numpy.diag(numpy.arange(norb) * .5 - 2)
    npair = norb * (norb+1) // 2
    eri = numpy.random.random(npair*(npair+1)//2) * .1
    mol = Molecule(h1e, eri, nelec, ecore=.5)
    mol.verbose = 0
    return mol

def ham_ref(mol):
    strings = permutation.make_strings(mol.norb, mol.nelectron//2)
    h = mol.h1e
    eri = mol.eri
    dim = strings.size
    ref = numpy.zeros((dim,dim))
    for i, bra in enumerate(strings):
        occ = lib.bit_indices(bra)
        e = 0
        for s in occ:
            e += 2 * h[s,s] + eri[s,s,s,s]
            for r in occ:
                if r < s:
                    e += 4 * eri[r,r,s,s] - 2 * eri[r,s,s,r]
        ref[i,i] = e
        for j, ket in enumerate(strings):
            diff = int(bra) ^ int(ket)
            if bin(diff).count('1') == 2:
                r, s = lib.bit_indices(diff)
                ref[i,j] = eri[r,s,r,s]
    return ref

def setUpModule():
    global mol
    mol = make_mol(8, 6, 12)

def tearDownModule():
    global mol
    del mol


class KnowValues(unittest.TestCase):
    def test_build(self):
        ham = DOCIHamiltonian(mol)
        ham.verbose = 0
        self.assertEqual(ham.get_dim(), 56)
        mat = ham.build()
        h = mat.convert_to_matrix()
        self.assertTrue(numpy.allclose(h, h.T))
        self.assertAlmostEqual(abs(h - ham_ref(mol)).max(), 0, 12)
        self.assertAlmostEqual(abs(ham.make_hdiag() - h.diagonal()).max(), 0, 12)

    def test_threads(self):
        mat1 = hamiltonian.build(mol, nthreads=1, verbose=0)
        mat3 = hamiltonian.build(mol, nthreads=3, verbose=0)
        mat9 = hamiltonian.build(mol, nthreads=9, verbose=0)
        self.assertEqual(mat1, mat3)
        self.assertEqual(mat1, mat9)

    def test_lowest_eigenpair(self):
        ham = DOCIHamiltonian(mol)
        ham.verbose = 0
        e, c = ham.kernel()
        e_ref, c_ref = numpy.linalg.eigh(ham_ref(mol))
        self.assertAlmostEqual(e, e_ref[0], 8)
        self.assertAlmostEqual(abs(c.dot(c_ref[:,0])), 1, 7)
        self.assertAlmostEqual(numpy.linalg.norm(c), 1, 9)
        self.assertAlmostEqual(ham.e_tot, e_ref[0] + .5, 8)

        es = ham.calc_energy(nroots=3)
        self.assertAlmostEqual(abs(es - e_ref[:3]).max(), 0, 8)
        self.assertAlmostEqual(ham.calc_energy(), e_ref[0], 8)

        e_full = ham.diagonalize_full()[0]
        self.assertAlmostEqual(abs(e_full - e_ref).max(), 0, 9)

    def test_two_orbitals(self):
        h1e = numpy.diag([-1., -.5])
        eri = numpy.zeros((2,2,2,2))
        eri[0,0,0,0] = .6
        eri[1,1,1,1] = .5
        eri[0,0,1,1] = eri[1,1,0,0] = .3
        eri[0,1,0,1] = eri[1,0,1,0] = eri[0,1,1,0] = eri[1,0,0,1] = .2
        mol2 = Molecule(h1e, eri, 2)
        mol2.verbose = 0
        ham = DOCIHamiltonian(mol2)
        e = ham.kernel()[0]
        self.assertAlmostEqual(e, -.95 - numpy.sqrt(.2025 + .04), 12)
        self.assertAlmostEqual(ham.mat(0, 1), .2, 14)

    def test_no_interaction(self):
        h1e = numpy.diag([-2., -1.5, -1., -.5])
        mol4 = Molecule(h1e, numpy.zeros((4,4,4,4)), 4)
        mol4.verbose = 0
        ham = DOCIHamiltonian(mol4)
        self.assertEqual(ham.getdim(), 6)
        e, c = ham.kernel()
        self.assertAlmostEqual(e, -7, 12)
        self.assertAlmostEqual(abs(c[0]), 1, 12)
        self.assertEqual(ham.mat.nnz, 6)

    def test_file(self):
        ham = DOCIHamiltonian(mol)
        ham.verbose = 0
        ham.build()
        ftmp = tempfile.NamedTemporaryFile()
        ham.save_to_file(ftmp.name)
        ham1 = DOCIHamiltonian(mol)
        ham1.read_from_file(ftmp.name)
        self.assertEqual(ham1.mat, ham.mat)

        mol1 = make_mol(8, 4, 12)
        self.assertRaises(ValueError, DOCIHamiltonian(mol1).read_from_file,
                          ftmp.name)

    def test_errors(self):
        self.assertRaises(ValueError, DOCIHamiltonian, make_mol(4, 3, 1))
        self.assertRaises(ValueError, DOCIHamiltonian, make_mol(2, 6, 1))
        ham = DOCIHamiltonian(mol)
        self.assertRaises(RuntimeError, ham.diagonalize)
        self.assertRaises(ValueError, DOCIHamiltonian, mol,
                          permutation.BitPermutation(2))


if __name__ == "__main__":
    print("Full Tests for the DOCI Hamiltonian")
    unittest.main()
