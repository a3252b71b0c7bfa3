"""
Unit tests for the sparse coordinate container and the entity index.

Run with: pytest tests/test_coo_matrix.py -v
"""

import copy
import pickle

import numpy as np
import pytest

from bnb_observations.src.errors import ModelQueryError
from bnb_observations.src.observations.coo_matrix import CooMatrix
from bnb_observations.src.observations.entity_index import EntityIndex, variable_index

from conftest import make_variable, knapsack_model


class TestCooMatrix:
    """Test construction invariants and value semantics of CooMatrix"""

    def test_nnz_matches_values(self):
        """Test that nnz is the number of values and indices have one row per dimension"""
        matrix = CooMatrix([1., 2.], [[0, 1], [2, 0]], (2, 3))

        assert matrix.nnz == 2
        assert matrix.indices.shape == (2, 2)
        assert matrix.values.dtype == np.float64

    def test_empty_matrix(self):
        """Test that a matrix without non zeros keeps its shape"""
        matrix = CooMatrix.empty((4, 5))

        assert matrix.nnz == 0
        assert matrix.shape == (4, 5)
        assert matrix.indices.shape == (2, 0)

    def test_length_mismatch_rejected(self):
        """Test that values and indices must have the same length"""
        with pytest.raises(ValueError):
            CooMatrix([1., 2.], [[0], [0]], (2, 2))

    def test_transposed_indices_rejected(self):
        """Test that indices given as (nnz, 2) instead of (2, nnz) are not silently reshaped"""
        with pytest.raises(ValueError):
            CooMatrix([1., 2., 3.], [[0, 1], [2, 0], [1, 2]], (3, 3))

    def test_out_of_bounds_rejected(self):
        """Test that indices must lie inside the shape"""
        with pytest.raises(ValueError):
            CooMatrix([1.], [[2], [0]], (2, 2))
        with pytest.raises(ValueError):
            CooMatrix([1.], [[0], [-1]], (2, 2))

    def test_duplicate_coordinates_rejected(self):
        """Test that a coordinate cannot hold two values"""
        with pytest.raises(ValueError):
            CooMatrix([1., 2.], [[0, 0], [1, 1]], (2, 2))

    def test_copy_is_independent(self):
        """Test that copies do not share arrays with the original"""
        matrix = CooMatrix.from_triplets([0, 1], [1, 0], [3., 4.], (2, 2))
        for duplicate in (matrix.copy(), copy.copy(matrix), copy.deepcopy(matrix)):
            duplicate.values[0] = -1.
            assert matrix.values[0] == 3.
            assert duplicate != matrix

    def test_pickle_round_trip(self):
        """Test that unpickling reproduces the same triple"""
        matrix = CooMatrix.from_triplets([0, 1, 1], [2, 0, 1], [1.5, np.nan, -2.], (2, 3))
        restored = pickle.loads(pickle.dumps(matrix))

        assert restored == matrix
        np.testing.assert_array_equal(restored.indices, matrix.indices)
        assert restored.shape == matrix.shape

    def test_to_scipy(self):
        """Test conversion to a scipy sparse matrix keeps the coordinates"""
        matrix = CooMatrix.from_triplets([0, 1], [2, 0], [5., 6.], (2, 3))
        scipy_matrix = matrix.to_scipy()

        assert scipy_matrix.shape == (2, 3)
        assert scipy_matrix.nnz == 2
        assert scipy_matrix.tocsr()[0, 2] == 5.


class TestEntityIndex:
    """Test the key to position bijection"""

    def test_index_follows_positions(self):
        """Test that indices are the positions reported by the model, not the key order"""
        variables = [make_variable('b', 1), make_variable('c', 2), make_variable('a', 0)]
        index = EntityIndex.from_entities(variables)

        assert len(index) == 3
        assert [index[key] for key in ('a', 'b', 'c')] == [0, 1, 2]
        assert index.keys() == ['a', 'b', 'c']
        np.testing.assert_array_equal(index.take(['c', 'a']), [2, 0])

    def test_bijection(self):
        """Test that every index in [0, n) is hit exactly once"""
        index = variable_index(knapsack_model())

        assert sorted(index[key] for key in index.keys()) == list(range(len(index)))

    def test_idempotent_within_state(self):
        """Test that two builds on the same model state give the same mapping"""
        model = knapsack_model()

        assert variable_index(model) == variable_index(model)

    def test_duplicate_keys_rejected(self):
        """Test that a key reported twice is a model error"""
        with pytest.raises(ModelQueryError):
            EntityIndex(['a', 'a'])

    def test_non_contiguous_positions_rejected(self):
        """Test that positions must form a permutation of [0, n)"""
        with pytest.raises(ModelQueryError):
            EntityIndex.from_entities([make_variable('a', 0), make_variable('b', 2)])
