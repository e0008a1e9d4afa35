#!/usr/bin/env python

import unittest
import numpy
from pydoci.integrals import Molecule
from pydoci.integrals.orbital_transform import jacobi_rotate
from pydoci.doci import jacobi
from pydoci.doci import rdm
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

def setUpModule():
    global mol, dm2
    mol = make_mol(5, 4, 21)
    ham = DOCIHamiltonian(mol)
    ham.kernel()
    dm2 = rdm.make_rdm2(ham)

def tearDownModule():
    global mol, dm2
    del mol, dm2


class KnowValues(unittest.TestCase):
    def test_polynomial(self):
        poly = jacobi.RotationPolynomial((.3, -1., .4, 0., 0.))
        theta, is_min = poly.find_min_angle(.3, verbose=0)
        self.assertTrue(is_min)
        self.assertAlmostEqual(theta, .5 * numpy.arctan2(-.4, 1), 10)
        self.assertAlmostEqual(poly.gradient(theta), 0, 12)

        coeffs = (1.2, -.3, .2, .05, -.1)
        poly = jacobi.RotationPolynomial(coeffs)
        poly1 = jacobi.RotationPolynomial.from_function(poly)
        self.assertAlmostEqual(abs(poly1.coeffs - coeffs).max(), 0, 12)
        t = .37
        h = 1e-5
        self.assertAlmostEqual(poly.gradient(t),
                               (poly(t+h) - poly(t-h)) / (2*h), 7)
        self.assertAlmostEqual(poly.hessian(t),
                               (poly.gradient(t+h) - poly.gradient(t-h)) / (2*h), 6)

    def test_start_angle_flip(self):
        # E = .2 + .5 sin(2t): rising at 0, Newton from +.3 climbs to the
        # maximum at pi/4 unless the start angle is flipped
        poly = jacobi.RotationPolynomial((.2, 0., .5, 0., 0.))
        theta = .3
        for i in range(20):
            theta -= poly.gradient(theta) / poly.hessian(theta)
        self.assertAlmostEqual(theta, numpy.pi / 4, 10)
        self.assertTrue(poly.hessian(theta) < 0)

        theta, is_min = poly.find_min_angle(.3, verbose=0)
        self.assertTrue(is_min)
        self.assertAlmostEqual(theta, -numpy.pi / 4, 10)
        self.assertAlmostEqual(poly(theta), -.3, 12)

        theta, is_min = poly.find_min_angle(-.3, verbose=0)
        self.assertTrue(is_min)
        self.assertAlmostEqual(theta, -numpy.pi / 4, 10)

    def test_energy_matrices(self):
        n, p, q = jacobi.energy_matrices(dm2)
        self.assertAlmostEqual(n.sum(), 2, 9)
        self.assertTrue(numpy.allclose(p, p.T))
        self.assertTrue(numpy.allclose(q, q.T))
        self.assertAlmostEqual(abs(q.diagonal()).max(), 0, 14)
        self.assertAlmostEqual(jacobi.rdm_energy(dm2, mol.h1e, mol.eri),
                               dm2.energy(mol), 10)

    def test_calc_rotate(self):
        functional = jacobi.JacobiEnergy(dm2, mol)
        self.assertAlmostEqual(functional.e0, dm2.energy(mol), 10)
        for k, l, theta in [(0, 1, .3), (1, 4, -.7), (3, 2, 1.1)]:
            mol1 = mol.copy()
            jacobi_rotate(mol1.h1e, mol1.eri, k, l, theta)
            ref = dm2.energy(mol1)
            self.assertAlmostEqual(functional.calc_rotate(k, l, theta), ref, 10)
            self.assertAlmostEqual(dm2.calc_rotate(k, l, theta, mol), ref, 10)
        self.assertAlmostEqual(functional.calc_rotate(0, 3, 0.), functional.e0, 12)
        self.assertRaises(ValueError, functional.calc_rotate, 2, 2, .1)

    def test_rotation_polynomial(self):
        functional = jacobi.JacobiEnergy(dm2, mol)
        poly = functional.polynomial(1, 3)
        for theta in (-1.3, -.2, .45, 2.1):
            self.assertAlmostEqual(poly(theta),
                                   functional.calc_rotate(1, 3, theta), 10)

    def test_find_min_angle(self):
        functional = jacobi.JacobiEnergy(dm2, mol)
        nmin = 0
        for k, l in [(0, 1), (1, 2), (0, 4), (2, 3), (1, 4)]:
            theta, is_min = dm2.find_min_angle(k, l, .3, mol)
            if not is_min:
                continue
            nmin += 1
            poly = functional.polynomial(k, l)
            self.assertAlmostEqual(poly.gradient(theta), 0, 7)
            e = functional.calc_rotate(k, l, theta)
            self.assertTrue(e <= functional.calc_rotate(k, l, theta+1e-3))
            self.assertTrue(e <= functional.calc_rotate(k, l, theta-1e-3))
        self.assertTrue(nmin > 0)


if __name__ == "__main__":
    print("Full Tests for the energy of rotated orbitals")
    unittest.main()
