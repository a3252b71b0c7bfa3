import numpy as np
import scipy.sparse


class CooMatrix:
    '''
    Sparse matrix in the coordinate format.

    Similar to scipy.sparse.coo_matrix, but without any densification API.

    Args:
        values (numpy.ndarray): Vector of the nnz non zero values.
        indices (numpy.ndarray): Matrix of shape (len(shape), nnz). There is
            one column per non zero value and one row per dimension.
        shape (tuple): The dimensions of the matrix, as if it was dense.
    '''
    def __init__(self, values, indices, shape):
        self.values = np.array(values, dtype=np.float64).reshape(-1)
        self.shape = tuple(int(s) for s in shape)
        self.indices = np.array(indices, dtype=np.int64)
        if self.indices.size == 0:
            self.indices = self.indices.reshape(len(self.shape), 0)
        elif self.indices.ndim != 2 or self.indices.shape[0] != len(self.shape):
            raise ValueError(f'Indices must have shape (len(shape), nnz) = ({len(self.shape)}, nnz), got {self.indices.shape}.')
        self._check()

    @classmethod
    def empty(cls, shape):
        return cls(np.empty(0), np.empty((len(shape), 0)), shape)

    @classmethod
    def from_triplets(cls, rows, cols, values, shape):
        return cls(values, np.vstack([np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64)]), shape)

    def _check(self):
        if self.indices.shape[1] != self.values.shape[0]:
            raise ValueError(f'Got {self.values.shape[0]} values but {self.indices.shape[1]} index columns.')
        if self.nnz > int(np.prod(self.shape, dtype=np.int64)):
            raise ValueError(f'Got {self.nnz} non zeros for a matrix of shape {self.shape}.')
        if self.nnz == 0:
            return
        if (self.indices < 0).any() or (self.indices >= np.array(self.shape)[:, None]).any():
            raise ValueError(f'Indices out of bounds for a matrix of shape {self.shape}.')
        if np.unique(self.indices, axis=1).shape[1] != self.nnz:
            raise ValueError('Duplicate coordinates in sparse matrix.')

    @property
    def nnz(self):
        return self.values.shape[0]

    def to_scipy(self):
        '''Returns an equivalent scipy.sparse.coo_matrix (2D matrices only).'''
        if len(self.shape) != 2:
            raise ValueError(f'Cannot convert a {len(self.shape)}D sparse matrix to scipy.')
        return scipy.sparse.coo_matrix((self.values, (self.indices[0], self.indices[1])), shape=self.shape)

    def copy(self):
        return CooMatrix(self.values.copy(), self.indices.copy(), self.shape)

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()

    def __getstate__(self):
        return {'values': self.values, 'indices': self.indices, 'shape': self.shape}

    def __setstate__(self, state):
        self.values = np.array(state['values'], dtype=np.float64)
        self.indices = np.array(state['indices'], dtype=np.int64)
        self.shape = tuple(state['shape'])

    def __eq__(self, other):
        if not isinstance(other, CooMatrix):
            return NotImplemented
        return (self.shape == other.shape
                and np.array_equal(self.indices, other.indices)
                and np.array_equal(self.values, other.values, equal_nan=True))

    def __repr__(self):
        return f'CooMatrix(nnz={self.nnz}, shape={self.shape})'
