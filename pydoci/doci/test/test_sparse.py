#!/usr/bin/env python

import unittest
import tempfile
import numpy
from pydoci.doci import sparse
from pydoci.doci.sparse import SparseMatrixCRS


def random_symmetric(n, density=.5, seed=4):
    numpy.random.seed(seed)
    a = numpy.random.random((n,n)) - .5
    a[numpy.random.random((n,n)) > density] = 0
    return a + a.T

class KnowValues(unittest.TestCase):
    def test_build_rows(self):
        mat = SparseMatrixCRS(3)
        mat.new_row()
        mat.push_to_row_next(0, 1.)
        mat.push_to_row_next([1, 2], [.5, .25])
        mat.new_row()
        mat.push_to_row_next(2, -1.)
        mat.new_row()
        mat.push_to_row_next(2, 3.)
        mat.new_row()
        self.assertEqual(mat.nnz, 5)
        self.assertEqual(mat.row.tolist(), [0, 3, 4, 5])
        self.assertEqual(mat.col.tolist(), [0, 1, 2, 2, 2])
        ref = numpy.array([[1., .5, .25],
                           [.5, 0., -1.],
                           [.25, -1., 3.]])
        self.assertTrue(numpy.array_equal(mat.convert_to_matrix(), ref))
        self.assertAlmostEqual(mat(2, 1), -1., 14)
        self.assertAlmostEqual(mat(1, 1), 0., 14)
        self.assertRaises(RuntimeError, mat.new_row)
        self.assertEqual(mat.row.tolist(), [0, 3, 4, 5])

    def test_push_to_row(self):
        mat = SparseMatrixCRS(4)
        mat.new_row()
        mat.push_to_row(3, 1.)
        mat.push_to_row(1, 2.)
        mat.push_to_row(3, .5)
        mat.push_to_row(2, 1e-15)
        mat.push_to_row(1, -2.)
        for i in range(4):
            mat.new_row()
        self.assertEqual(mat.col.tolist(), [3])
        self.assertAlmostEqual(mat.data[0], 1.5, 14)

    def test_push_errors(self):
        mat = SparseMatrixCRS(3)
        self.assertRaises(RuntimeError, mat.push_to_row_next, 0, 1.)
        mat.new_row()
        mat.new_row()
        self.assertRaises(ValueError, mat.push_to_row_next, 0, 1.)
        mat.push_to_row_next(2, 1.)
        self.assertRaises(ValueError, mat.push_to_row_next, 2, 1.)
        self.assertRaises(ValueError, mat.push_to_row_next, [3], [1.])
        self.assertRaises(ValueError, mat.push_to_row, 0, 1.)

    def test_dense_round_trip(self):
        a = random_symmetric(7)
        mat = SparseMatrixCRS(1).convert_from_matrix(a)
        self.assertEqual(mat.n, 7)
        self.assertTrue(numpy.array_equal(mat.convert_to_matrix(), a))
        self.assertEqual(mat.nnz, numpy.count_nonzero(numpy.triu(a)))

    def test_mvprod(self):
        a = random_symmetric(9, .7)
        mat = SparseMatrixCRS(9).convert_from_matrix(a)
        x = numpy.random.random(9)
        self.assertTrue(numpy.allclose(mat.mvprod(x), a.dot(x)))
        y = numpy.random.random(9)
        ref = .5 * y + a.dot(x)
        self.assertTrue(numpy.allclose(mat.mvprod(x, y, .5), ref))
        self.assertTrue(numpy.allclose(y, ref))

        y = numpy.array([5., 5.])
        mat = SparseMatrixCRS(2).convert_from_matrix([[2., 1.], [1., 3.]])
        out = mat.mvprod([1., 1.], y, 0.)
        self.assertTrue(out is y)
        self.assertTrue(numpy.allclose(y, [3., 4.]))

    def test_file(self):
        a = random_symmetric(6)
        mat = SparseMatrixCRS(6).convert_from_matrix(a)
        ftmp = tempfile.NamedTemporaryFile()
        mat.write_to_file(ftmp.name, 'ham')
        mat1 = SparseMatrixCRS.read_from_file(ftmp.name, 'ham')
        self.assertEqual(mat, mat1)
        self.assertTrue(numpy.array_equal(mat1.convert_to_matrix(), a))

    def test_concatenate(self):
        a = random_symmetric(8, .6)
        ref = SparseMatrixCRS(8).convert_from_matrix(a)
        shards = []
        for p0, p1 in [(0, 2), (2, 2), (2, 5), (5, 8), (8, 8)]:
            shard = SparseMatrixCRS(8, p0, p1-p0)
            for i in range(p0, p1):
                shard.new_row()
                cols = numpy.arange(i, 8)
                vals = a[i,i:]
                mask = vals != 0
                shard.push_to_row_next(cols[mask], vals[mask])
            shard.new_row()
            shards.append(shard)
        mat = sparse.concatenate(shards, 8)
        self.assertEqual(mat, ref)

        self.assertRaises(ValueError, sparse.concatenate, shards[2:], 8)


if __name__ == "__main__":
    print("Full Tests for the CRS matrix")
    unittest.main()
