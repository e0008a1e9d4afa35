#!/usr/bin/env python

import unittest
import tempfile
import numpy
from pydoci.integrals import Molecule
from pydoci.doci import rdm
from pydoci.doci import jacobi
from pydoci.doci.hamiltonian import DOCIHamiltonian
from pydoci.doci.rdm import DM2, TwoParticleIndex


def make_mol(norb, nelec, seed):
    numpy.random.seed(seed)
    h1e = numpy.random.random((norb,norb)) * .1
    h1e = h1e + h1e.T + numpy.diag(numpy.arange(norb) * .5 - 2)
    npair = norb * (norb+1) // 2
    eri = numpy.random.random(npair*(npair+1)//2) * .1
    mol = Molecule(h1e, eri, nelec, ecore=.5)
    mol.verbose = 0
    return mol

def setUpModule():
    global mol, ham, dm2
    mol = make_mol(6, 6, 7)
    ham = DOCIHamiltonian(mol)
    ham.kernel()
    dm2 = rdm.make_rdm2(ham)

def tearDownModule():
    global mol, ham, dm2
    del mol, ham, dm2


class KnowValues(unittest.TestCase):
    def test_index(self):
        L = 4
        index = TwoParticleIndex(L)
        ndiag = L * (L-1) // 2
        self.assertEqual(index.n_tp, 28)
        self.assertTrue(numpy.array_equal(index.sp2tp, index.sp2tp.T))
        self.assertTrue(numpy.all(index.sp2tp.diagonal() == -1))
        for i, (a, b) in enumerate(index.tp2sp):
            self.assertTrue(a < b)
            self.assertEqual(index.sp2tp[a,b], i)
        for i in range(L):
            self.assertEqual(index.tp2sp[i].tolist(), [i, i+L])
        for i in range(ndiag):
            pairs = [sorted(index.tp2sp[L+k*ndiag+i] % L) for k in range(4)]
            self.assertEqual(pairs[1:], pairs[:1] * 3)

        pair_index = index.pair_index()
        self.assertTrue(numpy.array_equal(pair_index, pair_index.T))
        self.assertTrue(numpy.all(pair_index.diagonal() == -1))
        counts = numpy.bincount(pair_index[pair_index >= 0])
        self.assertEqual(counts.tolist(), [2] * ndiag)
        self.assertTrue(rdm.get_index(4) is rdm.get_index(4))

    def test_trace(self):
        self.assertAlmostEqual(dm2.trace(), 30, 9)
        self.assertAlmostEqual(dm2.block.trace(), 3, 9)
        self.assertTrue(numpy.allclose(dm2.block, dm2.block.T))

    def test_energy(self):
        rdm_ham = DM2.from_molecule(mol).build_hamiltonian(mol)
        self.assertAlmostEqual(dm2.dot(rdm_ham), ham.e, 8)
        self.assertAlmostEqual(rdm_ham.dot(dm2), ham.e, 8)
        self.assertAlmostEqual(dm2.energy(mol), ham.e, 8)
        self.assertAlmostEqual(jacobi.rdm_energy(dm2, mol.h1e, mol.eri),
                               dm2.dot(rdm_ham), 10)

    def test_elements(self):
        L = 6
        self.assertAlmostEqual(dm2(0, L, 0, L), dm2.block[0,0], 14)
        self.assertAlmostEqual(dm2(L, 0, 1, 1+L), -dm2.block[0,1], 14)
        self.assertEqual(dm2(2, 2, 0, 1), 0)
        self.assertEqual(dm2(0, 1, 0, 2), 0)
        numpy.random.seed(3)
        for a, b, c, d in numpy.random.randint(0, 2*L, (20,4)):
            self.assertAlmostEqual(dm2(a,b,c,d), -dm2(b,a,c,d), 14)
            self.assertAlmostEqual(dm2(a,b,c,d), -dm2(a,b,d,c), 14)
            self.assertAlmostEqual(dm2(a,b,c,d), dm2(c,d,a,b), 14)
        # the four spin combinations of the orbitals 1,3
        ref = dm2(1, 3, 1, 3)
        self.assertAlmostEqual(dm2(1+L, 3+L, 1+L, 3+L), ref, 14)
        self.assertAlmostEqual(dm2(1, 3+L, 1, 3+L), ref, 14)
        self.assertAlmostEqual(dm2(1+L, 3, 1+L, 3), ref, 14)

    def test_threads(self):
        dm2a = DM2.from_molecule(mol)
        dm2a.nthreads = 1
        dm2a.build(ham.get_permutation(), ham.ci)
        dm2b = DM2.from_molecule(mol)
        dm2b.nthreads = 4
        dm2b.build(ham.get_permutation(), ham.ci)
        self.assertAlmostEqual(abs(dm2a.block - dm2b.block).max(), 0, 13)
        self.assertAlmostEqual(abs(dm2a.diag - dm2b.diag).max(), 0, 13)
        self.assertRaises(ValueError, dm2a.build, ham.get_permutation(),
                          ham.ci[:5])

    def test_add(self):
        dm2a = dm2 + dm2
        self.assertAlmostEqual(dm2a.trace(), 60, 8)
        dm2a += dm2
        self.assertAlmostEqual(dm2a.trace(), 90, 8)
        self.assertRaises(ValueError, dm2a.__iadd__, DM2(6, 4))
        self.assertEqual(dm2.copy(), dm2)

    def test_file(self):
        ftmp = tempfile.NamedTemporaryFile()
        dm2.write_to_file(ftmp.name)
        dm2a = DM2.read_from_file(ftmp.name)
        self.assertEqual(dm2a, dm2)
        self.assertEqual(dm2a.get_n_sp(), 6)
        self.assertEqual(dm2a.get_n_electrons(), 6)

    def test_build_hamiltonian_errors(self):
        self.assertRaises(ValueError, DM2(4, 6).build_hamiltonian, mol)
        self.assertRaises(ValueError, DM2(6, 1).build_hamiltonian, mol)


if __name__ == "__main__":
    print("Full Tests for the DOCI 2-RDM")
    unittest.main()
