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
Compressed row storage of a real symmetric matrix.  Only the diagonal and the
strict upper triangle are stored.
'''

import numpy
import scipy.sparse
import h5py
from pydoci.lib import parameters as param

ZERO_TOL = param.SPARSE_ZERO_TOL


class SparseMatrixCRS:
    '''Upper triangle of a symmetric n x n matrix in CRS format.

    Rows are filled one after another::

        mat = SparseMatrixCRS(3)
        for i in range(3):
            mat.new_row()
            mat.push_to_row_next(cols, values)
        mat.new_row()

    new_row() is called n+1 times: once to open every row and once more to
    close the last one.

    Attributes:
        n : int
            Dimension of the matrix.
        data : 1D array
            Nonzero values, row after row.
        col : 1D array
            Column index of every value in data.
        row : 1D array
            Offsets of the rows in data, n+1 elements when finished.
    '''
    def __init__(self, n, row_start=0, nrow=None):
        self.n = int(n)
        self.row_start = int(row_start)
        if nrow is None:
            nrow = self.n - self.row_start
        self.nrow = int(nrow)
        self._data_chunks = []
        self._col_chunks = []
        self._row = []
        self._nnz = 0
        # the row which is currently filled
        self._cur_col = []
        self._cur_data = []
        self._csr = None

    def new_row(self):
        '''Close the current row and open the next one.  Exactly nrow+1 calls
        are allowed, the last one closes the final row.
        '''
        if len(self._row) >= self.nrow + 1:
            raise RuntimeError('All %d rows are already closed' % self.nrow)
        self._flush_row()
        self._row.append(self._nnz)
        self._csr = None

    def _flush_row(self):
        if self._cur_col:
            col = numpy.asarray(self._cur_col, dtype=numpy.int64)
            data = numpy.asarray(self._cur_data, dtype=numpy.double)
            self._col_chunks.append(col)
            self._data_chunks.append(data)
            self._nnz += col.size
            self._cur_col = []
            self._cur_data = []

    def _check_open_row(self):
        if not self._row or len(self._row) > self.nrow:
            raise RuntimeError('No open row. Call new_row() first')

    def _current_row(self):
        return self.row_start + len(self._row) - 1

    def push_to_row(self, col, value):
        '''Add value to element (current row, col).  The element is inserted
        at the right position if it does not exist yet.  Elements whose
        magnitude drops below 1e-14 are removed.
        '''
        self._check_open_row()
        cur_row = self._current_row()
        if col < cur_row or col >= self.n:
            raise ValueError('Column %d out of the upper triangle of row %d'
                             % (col, cur_row))
        pos = numpy.searchsorted(self._cur_col, col)
        if pos < len(self._cur_col) and self._cur_col[pos] == col:
            self._cur_data[pos] += value
        else:
            self._cur_col.insert(pos, col)
            self._cur_data.insert(pos, value)
        if abs(self._cur_data[pos]) < ZERO_TOL:
            del self._cur_col[pos]
            del self._cur_data[pos]

    def push_to_row_next(self, col, value):
        '''Append element(s) at the end of the current row.  The columns have
        to be strictly larger than any column already in the row.  col and
        value can be scalars or 1D arrays.
        '''
        self._check_open_row()
        col = numpy.asarray(col, dtype=numpy.int64).ravel()
        value = numpy.asarray(value, dtype=numpy.double).ravel()
        if col.size != value.size:
            raise ValueError('Different number of columns and values')
        if col.size == 0:
            return
        last = self._cur_col[-1] if self._cur_col else self._current_row() - 1
        if col[0] <= last or numpy.any(col[1:] <= col[:-1]):
            raise ValueError('Columns must be strictly increasing in a row')
        if col[-1] >= self.n:
            raise ValueError('Column %d out of range %d' % (col[-1], self.n))
        self._cur_col.extend(col.tolist())
        self._cur_data.extend(value.tolist())

    def _finished(self):
        return len(self._row) == self.nrow + 1

    @property
    def data(self):
        self._compact()
        return self._data_chunks[0]

    @property
    def col(self):
        self._compact()
        return self._col_chunks[0]

    @property
    def row(self):
        return numpy.asarray(self._row, dtype=numpy.int64)

    @property
    def nnz(self):
        return self._nnz + len(self._cur_col)

    def _compact(self):
        if len(self._data_chunks) != 1:
            if self._data_chunks:
                self._data_chunks = [numpy.hstack(self._data_chunks)]
                self._col_chunks = [numpy.hstack(self._col_chunks)]
            else:
                self._data_chunks = [numpy.zeros(0)]
                self._col_chunks = [numpy.zeros(0, dtype=numpy.int64)]

    def __call__(self, i, j):
        '''Element (i,j) of the symmetric matrix'''
        if i > j:
            i, j = j, i
        if not self._finished():
            raise RuntimeError('Matrix is not finished')
        p0, p1 = self._row[i], self._row[i+1]
        cols = self.col[p0:p1]
        pos = numpy.searchsorted(cols, j)
        if pos < cols.size and cols[pos] == j:
            return self.data[p0+pos]
        return 0.

    def upper(self):
        '''The stored upper triangle as a scipy.sparse.csr_matrix'''
        if self._csr is None:
            if not self._finished():
                raise RuntimeError('Matrix is not finished. %d rows of %d'
                                   % (len(self._row)-1, self.n))
            self._csr = scipy.sparse.csr_matrix(
                (self.data, self.col, self.row), shape=(self.n, self.n))
        return self._csr

    def diagonal(self):
        return self.upper().diagonal()

    def mvprod(self, x, y=None, beta=0.):
        '''y = beta*y + A*x with A the symmetric matrix'''
        upper = self.upper()
        x = numpy.asarray(x, dtype=numpy.double).ravel()
        ax = upper.dot(x) + upper.T.dot(x) - upper.diagonal() * x
        if y is None:
            return ax
        if beta == 0:
            y[:] = ax
        else:
            y *= beta
            y += ax
        return y

    def convert_from_matrix(self, mat):
        '''Fill from a dense symmetric matrix.  Elements smaller than 1e-14 are
        dropped.
        '''
        mat = numpy.asarray(mat, dtype=numpy.double)
        n = mat.shape[0]
        self.__init__(n)
        for i in range(n):
            self.new_row()
            cols = numpy.arange(i, n)
            vals = mat[i,i:]
            mask = abs(vals) > ZERO_TOL
            self.push_to_row_next(cols[mask], vals[mask])
        self.new_row()
        return self

    def convert_to_matrix(self):
        '''Dense symmetric matrix'''
        upper = self.upper().toarray()
        return upper + upper.T - numpy.diag(upper.diagonal())
    to_dense = convert_to_matrix

    def write_to_file(self, filename, name, append=False):
        '''Save the matrix in the HDF5 group name.  With append=True the
        group is added to an existing file.
        '''
        mode = 'a' if append else 'w'
        with h5py.File(filename, mode) as f:
            if name in f:
                del (f[name])
            grp = f.create_group(name)
            dset = grp.create_dataset('data', data=self.data)
            dset.attrs['size'] = self.data.size
            dset = grp.create_dataset('col', data=self.col.astype(numpy.uint32))
            dset.attrs['size'] = self.col.size
            grp.create_dataset('row', data=self.row.astype(numpy.uint64))
            grp.create_dataset('n', data=numpy.uint32(self.n))

    @classmethod
    def read_from_file(cls, filename, name):
        with h5py.File(filename, 'r') as f:
            grp = f[name]
            mat = cls(int(grp['n'][()]))
            data = grp['data'][()]
            col = grp['col'][()].astype(numpy.int64)
            row = grp['row'][()].astype(numpy.int64)
        if data.size != col.size or row.size != mat.n + 1:
            raise ValueError('Inconsistent CRS data in %s:%s' % (filename, name))
        mat._data_chunks = [data]
        mat._col_chunks = [col]
        mat._row = row.tolist()
        mat._nnz = data.size
        return mat

    def append(self, other):
        '''Append the closed rows of the shard other to self.  other has to
        start at the row which is open in self.
        '''
        if other.nrow == 0:
            return self
        self._flush_row()
        if self._finished():
            raise RuntimeError('Matrix is already finished')
        if self._row and self._row[-1] != self._nnz:
            raise RuntimeError('Row %d of the matrix is not empty'
                               % self._current_row())
        if other.nrow and not other._finished():
            raise RuntimeError('Shard starting at row %d is not finished'
                               % other.row_start)
        next_row = self._current_row() if self._row else self.row_start
        if other.row_start != next_row:
            raise ValueError('Shard starts at row %d, expected %d'
                             % (other.row_start, next_row))
        offsets = other.row
        if offsets.size < 2:
            return self
        if not self._row:
            self._row.append(self._nnz)
        base = self._nnz - int(offsets[0])
        self._data_chunks.extend(other._data_chunks)
        self._col_chunks.extend(other._col_chunks)
        self._nnz += int(offsets[-1] - offsets[0])
        self._row.extend((offsets[1:] + base).tolist())
        self._csr = None
        return self

    def __eq__(self, other):
        return (isinstance(other, SparseMatrixCRS) and self.n == other.n and
                numpy.array_equal(self.row, other.row) and
                numpy.array_equal(self.col, other.col) and
                numpy.array_equal(self.data, other.data))

    def __repr__(self):
        return '<%s n=%d nnz=%d>' % (self.__class__.__name__, self.n, self.nnz)


def concatenate(shards, n):
    '''Merge the row blocks built by independent workers into one matrix of
    dimension n.  Every shard holds the rows of a contiguous range and
    carries the row offsets of its own data starting at 0, with one closing
    offset.
    '''
    mat = SparseMatrixCRS(n)
    for shard in shards:
        mat.append(shard)
    if not mat._finished():
        raise RuntimeError('Merged matrix has %d rows instead of %d'
                           % (len(mat._row)-1, n))
    return mat
