#!/usr/bin/env python

import unittest
import tempfile
import numpy
from pydoci import ao2mo
from pydoci import integrals
from pydoci.integrals import Molecule, SymMolecule
from pydoci.tools import fcidump


def make_mol(norb, nelec, seed, cls=Molecule, **kwargs):
    numpy.random.seed(seed)
    h1e = numpy.random.random((norb,norb))
    h1e = h1e + h1e.T
    npair = norb * (norb+1) // 2
    eri = numpy.random.random(npair*(npair+1)//2)
    mol = cls(h1e, eri, nelec, ecore=1.25, **kwargs)
    mol.verbose = 0
    return mol

def setUpModule():
    global mol
    mol = make_mol(5, 4, 3)

def tearDownModule():
    global mol
    del mol


class KnowValues(unittest.TestCase):
    def test_integrals(self):
        self.assertEqual(mol.get_n_sp(), 5)
        self.assertEqual(mol.norb, 5)
        self.assertEqual(mol.get_n_electrons(), 4)
        self.assertAlmostEqual(mol.get_nucl_rep(), 1.25, 14)
        eri = mol.eri
        self.assertAlmostEqual(abs(eri - eri.transpose(1,0,2,3)).max(), 0, 14)
        self.assertAlmostEqual(abs(eri - eri.transpose(2,3,0,1)).max(), 0, 14)
        self.assertAlmostEqual(mol.get_t(1, 3), mol.h1e[3,1], 14)
        # <ab|cd> = (ac|bd)
        self.assertAlmostEqual(mol.get_v(0, 1, 2, 3), eri[0,2,1,3], 14)
        self.assertAlmostEqual(mol.getV(0, 1, 2, 3), mol.get_v(1, 0, 3, 2), 14)
        self.assertAlmostEqual(mol.get_v(0, 1, 2, 3), mol.get_v(2, 1, 0, 3), 14)
        tei = mol.get_tei()
        self.assertEqual(tei.shape, (25, 25))
        self.assertAlmostEqual(tei[0*5+1,2*5+3], mol.get_v(0, 1, 2, 3), 14)
        self.assertAlmostEqual(abs(tei - tei.T).max(), 0, 14)

    def test_hf_energy(self):
        h1e = numpy.diag([-1., -.5, .2])
        eri = numpy.zeros((3,3,3,3))
        eri[0,0,0,0] = .7
        eri[0,0,1,1] = eri[1,1,0,0] = .4
        eri[0,1,1,0] = eri[1,0,0,1] = eri[0,1,0,1] = eri[1,0,1,0] = .1
        mol1 = Molecule(h1e, eri, 4, ecore=.3)
        # 2(h00+h11) + J00 + J11 + 2(2 J01 - K01)
        self.assertAlmostEqual(mol1.hf_energy(), -3 + .7 + 2*(.8-.1) + .3, 13)

    def test_copy(self):
        mol1 = mol.copy()
        mol1.h1e[0,0] += 1
        mol1.eri[0,0,0,0] += 1
        self.assertAlmostEqual(mol1.h1e[0,0] - mol.h1e[0,0], 1, 13)
        self.assertAlmostEqual(mol1.eri[0,0,0,0] - mol.eri[0,0,0,0], 1, 13)

    def test_file(self):
        ftmp = tempfile.NamedTemporaryFile()
        mol.save(ftmp.name)
        mol1 = Molecule.load(ftmp.name)
        self.assertEqual(mol1.get_n_electrons(), 4)
        self.assertAlmostEqual(mol1.get_nucl_rep(), 1.25, 14)
        self.assertAlmostEqual(abs(mol1.h1e - mol.h1e).max(), 0, 14)
        self.assertAlmostEqual(abs(mol1.eri - mol.eri).max(), 0, 14)

        mol2 = integrals.load_molecule(ftmp.name)
        self.assertTrue(isinstance(mol2, SymMolecule))
        self.assertEqual(mol2.orbsym.tolist(), [0] * 5)

    def test_sym_file(self):
        smol = make_mol(5, 4, 3, SymMolecule, orbsym=[0, 2, 1, 0, 2])
        self.assertEqual(smol.n_irreps, 3)
        self.assertEqual(smol.get_orbital_irrep(1), 2)
        ftmp = tempfile.NamedTemporaryFile()
        smol.write_to_file(ftmp.name)
        smol1 = SymMolecule.load(ftmp.name)
        self.assertEqual(smol1.orbsym.tolist(), [0, 2, 1, 0, 2])
        self.assertAlmostEqual(abs(smol1.eri - smol.eri).max(), 0, 14)

        self.assertRaises(ValueError, SymMolecule, smol.h1e, smol.eri, 4,
                          orbsym=[0, 1])

    def test_fcidump(self):
        smol = make_mol(5, 4, 3, SymMolecule, orbsym=[0, 2, 1, 0, 2])
        ftmp = tempfile.NamedTemporaryFile()
        fcidump.from_molecule(ftmp.name, smol)
        mol1 = integrals.load_molecule(ftmp.name)
        self.assertEqual(mol1.orbsym.tolist(), [0, 2, 1, 0, 2])
        self.assertEqual(mol1.get_n_electrons(), 4)
        self.assertAlmostEqual(mol1.get_nucl_rep(), 1.25, 14)
        self.assertAlmostEqual(abs(mol1.h1e - smol.h1e).max(), 0, 13)
        self.assertAlmostEqual(abs(mol1.eri - smol.eri).max(), 0, 13)

    def test_errors(self):
        self.assertRaises(ValueError, Molecule, numpy.zeros((3,4)),
                          numpy.zeros(21), 2)
        self.assertRaises(RuntimeError, Molecule, numpy.zeros((3,3)),
                          numpy.zeros(7), 2)

    def test_restore(self):
        eri4 = ao2mo.restore(4, mol.eri, 5)
        self.assertEqual(eri4.shape, (15, 15))
        eri8 = ao2mo.restore('s8', eri4, 5)
        self.assertEqual(eri8.shape, (120,))
        self.assertAlmostEqual(abs(ao2mo.restore(1, eri8, 5) - mol.eri).max(), 0, 14)
        self.assertAlmostEqual(abs(ao2mo.restore(8, mol.eri, 5) - eri8).max(), 0, 14)
        self.assertRaises(ValueError, ao2mo.restore, 2, eri8, 5)


if __name__ == "__main__":
    print("Full Tests for the integral providers")
    unittest.main()
