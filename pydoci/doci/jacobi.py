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
Energy of a fixed DOCI 2-RDM under a Jacobi rotation of two orbitals

With the pair occupations n_p, the block B and the pair correlations D_pq of
the 2-RDM the electronic energy reads

    E = 2 sum_p n_p h_pp + sum_pq P_pq (pq|pq) + sum_pq Q_pq (pp|qq)

where P = B - D and Q = 2 D (D with zero diagonal).  Rotating the orbitals k
and l over theta changes only the terms with an index k or l.  They are
polynomials of second (one-electron, mixed) and fourth (k,l only) order in
cos(theta) and sin(theta), so

    E(theta) = A0 + A2 cos(2 theta) + B2 sin(2 theta)
                  + A4 cos(4 theta) + B4 sin(4 theta)

The five coefficients follow exactly from five evaluations at
theta = m pi/5.
'''

import numpy
from pydoci.lib import logger
from pydoci.integrals.orbital_transform import rotation_matrix
from pydoci import __config__

MAX_ITER = getattr(__config__, 'doci_jacobi_max_iter', 20)
CONV_TOL = getattr(__config__, 'doci_jacobi_conv_tol', 1e-12)


def energy_matrices(dm2):
    '''n, P, Q of the energy expression for the 2-RDM dm2'''
    L = dm2.norb
    n = dm2.block.diagonal().copy()
    dfull = numpy.zeros((L,L))
    if L > 1:
        pair_index = dm2.index.pair_index()
        mask = pair_index >= 0
        dfull[mask] = dm2.diag[pair_index[mask]]
    return n, dm2.block - dfull, 2 * dfull

def get_jk_diag(h1e, eri):
    '''h_pp, J_pq = (pp|qq) and K_pq = (pq|pq)'''
    return (h1e.diagonal(), numpy.einsum('ppqq->pq', eri),
            numpy.einsum('pqpq->pq', eri))

def rdm_energy(dm2, h1e, eri):
    '''Electronic energy of the 2-RDM with the integrals h1e and eri (1-fold)'''
    n, p, q = energy_matrices(dm2)
    hd, j, k = get_jk_diag(h1e, eri)
    return 2 * n.dot(hd) + (p * k).sum() + (q * j).sum()


class RotationPolynomial:
    '''E(theta) = A0 + A2 cos2t + B2 sin2t + A4 cos4t + B4 sin4t

    Attributes:
        coeffs : (A0, A2, B2, A4, B4)
    '''
    def __init__(self, coeffs):
        self.coeffs = numpy.asarray(coeffs, dtype=numpy.double)

    @classmethod
    def from_function(cls, fn):
        '''Fit the coefficients to the energy function fn(theta)'''
        theta = numpy.arange(5) * numpy.pi / 5
        f = numpy.array([fn(t) for t in theta])
        phi = 2 * theta
        return cls((f.mean(),
                    .4 * f.dot(numpy.cos(phi)), .4 * f.dot(numpy.sin(phi)),
                    .4 * f.dot(numpy.cos(2*phi)), .4 * f.dot(numpy.sin(2*phi))))

    def __call__(self, theta):
        a0, a2, b2, a4, b4 = self.coeffs
        return (a0 + a2 * numpy.cos(2*theta) + b2 * numpy.sin(2*theta)
                + a4 * numpy.cos(4*theta) + b4 * numpy.sin(4*theta))

    def gradient(self, theta):
        a0, a2, b2, a4, b4 = self.coeffs
        return (-2 * a2 * numpy.sin(2*theta) + 2 * b2 * numpy.cos(2*theta)
                - 4 * a4 * numpy.sin(4*theta) + 4 * b4 * numpy.cos(4*theta))

    def hessian(self, theta):
        a0, a2, b2, a4, b4 = self.coeffs
        return (-4 * a2 * numpy.cos(2*theta) - 4 * b2 * numpy.sin(2*theta)
                - 16 * a4 * numpy.cos(4*theta) - 16 * b4 * numpy.sin(4*theta))

    def find_min_angle(self, start_angle, max_iter=MAX_ITER, conv_tol=CONV_TOL,
                       verbose=None):
        '''Newton-Raphson search for a stationary angle near start_angle.  The
        sign of start_angle is flipped when the quadratic model at 0 predicts
        an increase of the energy in that direction.

        Returns:
            theta, and True if the hessian at theta is positive
        '''
        log = logger.new_logger(verbose=verbose)
        theta = start_angle
        g0 = self.gradient(0.)
        h0 = self.hessian(0.)
        if theta * g0 + theta * theta * h0 * .5 > 0:
            theta = -theta

        for it in range(max_iter):
            h = self.hessian(theta)
            if h == 0:
                log.debug('Zero hessian at theta = %g', theta)
                break
            step = self.gradient(theta) / h
            theta -= step
            if abs(step) < conv_tol:
                break
        else:
            log.warn('Newton-Raphson did not converge in %d steps, theta = %g',
                     max_iter, theta)
        return theta, self.hessian(theta) > 0


class JacobiEnergy:
    '''Energy of the fixed 2-RDM dm2 with the integrals of mol rotated over
    one orbital pair.

    Attributes:
        e0 : float
            Electronic energy without rotation
    '''
    def __init__(self, dm2, mol):
        if dm2.norb != mol.get_n_sp():
            raise ValueError('DM2 of %d orbitals for a molecule with %d'
                             % (dm2.norb, mol.get_n_sp()))
        self.n, self.p, self.q = energy_matrices(dm2)
        self.h1e = mol.h1e
        self.eri = mol.eri
        hd, j, k = get_jk_diag(self.h1e, self.eri)
        self.e0 = 2 * self.n.dot(hd) + (self.p * k).sum() + (self.q * j).sum()

    def _pair_terms(self, k, l):
        '''Energy terms with an index k or l as function of theta'''
        if k == l:
            raise ValueError('Rotation of orbital %d with itself' % k)
        norb = self.n.size
        kl = numpy.array([k, l])
        r = numpy.arange(norb)
        others = numpy.ones(norb, dtype=bool)
        others[kl] = False

        h2 = self.h1e[numpy.ix_(kl,kl)]
        # (bc|pp) and (bp|cp) for b,c in (k,l)
        x = self.eri[kl[:,None,None], kl[None,:,None], r, r]
        y = self.eri[kl[:,None,None], r, kl[None,:,None], r]
        sub = self.eri[numpy.ix_(kl,kl,kl,kl)]

        n = self.n[kl]
        p_out = self.p[kl][:,others]
        q_out = self.q[kl][:,others]
        p_in = self.p[numpy.ix_(kl,kl)]
        q_in = self.q[numpy.ix_(kl,kl)]
        x = x[:,:,others]
        y = y[:,:,others]

        def terms(theta):
            u = rotation_matrix(theta)
            hnew = numpy.einsum('ab,ac,bc->a', u, u, h2)
            jr = numpy.einsum('ab,ac,bcp->ap', u, u, x)
            kr = numpy.einsum('ab,ac,bcp->ap', u, u, y)
            t = numpy.einsum('ai,bj,ck,dl,ijkl->abcd', u, u, u, u, sub)
            jin = numpy.einsum('aabb->ab', t)
            kin = numpy.einsum('abab->ab', t)
            return (2 * n.dot(hnew)
                    + 2 * ((p_out * kr).sum() + (q_out * jr).sum())
                    + (p_in * kin).sum() + (q_in * jin).sum())
        return terms

    def calc_rotate(self, k, l, theta):
        terms = self._pair_terms(k, l)
        return self.e0 - terms(0.) + terms(theta)

    def polynomial(self, k, l):
        '''The :class:`RotationPolynomial` of the pair (k,l)'''
        terms = self._pair_terms(k, l)
        shift = self.e0 - terms(0.)
        return RotationPolynomial.from_function(lambda t: shift + terms(t))

    def find_min_angle(self, k, l, start_angle, verbose=None):
        return self.polynomial(k, l).find_min_angle(start_angle, verbose=verbose)
