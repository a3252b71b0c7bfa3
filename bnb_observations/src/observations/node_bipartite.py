from bnb_observations.src.observations.observation_function import ObservationFunction, require_solved_lp
from bnb_observations.src.observations.observation_value import ObservationValue
from bnb_observations.src.observations.feature_cache import FeatureCache
from bnb_observations.src.observations.entity_index import EntityIndex
from bnb_observations.src.observations.coo_matrix import CooMatrix
from bnb_observations.utils import is_eq, feas_frac, norm_or_one

import enum
from dataclasses import dataclass

import numpy as np


@dataclass(eq=False)
class NodeBipartiteObs(ObservationValue):
    '''
    Bipartite graph observation for branch-and-bound nodes.

    The optimisation problem is represented as an heterogenous bipartite graph.
    On one side, a node is associated with one variable, on the other side a node
    is associated with one LP row. There exists an edge between a variable and a
    row if the variable appears in the row with a non zero coefficient.

    Args:
        variable_features (numpy.ndarray): One row per variable, ordered by position
            in the original problem, one column per VariableFeatures.
        row_features (numpy.ndarray): One row per LP row, one column per RowFeatures.
        edge_features (CooMatrix): The LP matrix with rows for LP rows and columns
            for variables.
    '''
    variable_features: np.ndarray
    row_features: np.ndarray
    edge_features: CooMatrix

    class VariableFeatures(enum.IntEnum):
        objective = 0
        is_type_binary = 1
        is_type_integer = 2
        is_type_implicit_integer = 3
        is_type_continuous = 4
        has_lower_bound = 5
        has_upper_bound = 6
        normed_reduced_cost = 7
        solution_value = 8
        solution_frac = 9
        is_solution_at_lower_bound = 10
        is_solution_at_upper_bound = 11
        scaled_age = 12
        incumbent_value = 13
        average_incumbent_value = 14
        is_basis_lower = 15
        is_basis_basic = 16
        is_basis_upper = 17
        is_basis_zero = 18

    class RowFeatures(enum.IntEnum):
        bias = 0
        objective_cosine_similarity = 1
        is_tight = 2
        dual_solution_value = 3
        scaled_age = 4


VAR = NodeBipartiteObs.VariableFeatures
ROW = NodeBipartiteObs.RowFeatures

_TYPE_FEATURE = {'BINARY': VAR.is_type_binary,
                 'INTEGER': VAR.is_type_integer,
                 'IMPLINT': VAR.is_type_implicit_integer,
                 'CONTINUOUS': VAR.is_type_continuous}

_BASIS_FEATURE = {'lower': VAR.is_basis_lower,
                  'basic': VAR.is_basis_basic,
                  'upper': VAR.is_basis_upper,
                  'zero': VAR.is_basis_zero}


def row_orientation(lhs, rhs, constant=0.):
    '''
    Expresses a row lhs <= a.x + constant <= rhs as sign * a.x <= side.

    Rows with a finite right hand side keep their orientation (sign 1),
    rows with only a left hand side are negated (sign -1). Free rows get a
    side of 0.
    '''
    if np.isfinite(rhs):
        return 1., rhs - constant
    if np.isfinite(lhs):
        return -1., -(lhs - constant)
    return 1., 0.


def build_edge_features(rows, row_idx, var_idx, signs=None):
    '''
    Sparse matrix of shape (len(row_idx), len(var_idx)) holding the non zero
    coefficients of rows, multiplied by the sign of their row. Non zeros are
    laid out row after row, in index order.
    '''
    edge_rows, edge_cols, edge_vals = [], [], []
    for row in sorted(rows, key=lambda r: row_idx[r.key]):
        i = row_idx[row.key]
        sign = 1. if signs is None else signs[i]
        for var_key, value in zip(row.var_keys, row.values):
            if value != 0:
                edge_rows.append(i)
                edge_cols.append(var_idx[var_key])
                edge_vals.append(sign * value)
    return CooMatrix.from_triplets(edge_rows, edge_cols, edge_vals, (len(row_idx), len(var_idx)))


class NodeBipartite(ObservationFunction):
    '''
    Bipartite graph observation function on branch-and-bound nodes.

    Extracts a NodeBipartiteObs from the LP relaxation of the focus node.

    Args:
        cache (bool): Whether or not to cache static features (indices, objective,
            variable types, row biases, objective similarities and the edge
            matrix) within an episode. This is only correct when the LP rows do
            not change during the episode, e.g. when cutting planes are
            disabled past the root node.
    '''
    def __init__(self, cache=False):
        super().__init__()
        self.cache = cache
        self.static_features = FeatureCache(name='NodeBipartite')

    def before_reset(self, model):
        super().before_reset(model)
        self.static_features.clear()

    def _extract(self, model, done):
        require_solved_lp(model)
        variables = model.get_variables()
        rows = model.get_lp_rows()

        if self.cache:
            self.static_features.validate((len(variables), tuple(row.key for row in sorted(rows, key=lambda r: r.position))))
            static = self.static_features.get('static', lambda: self._extract_static(variables, rows))
        else:
            static = self._extract_static(variables, rows)

        variable_features = self._extract_variable_features(model, variables, static)
        row_features = self._extract_row_features(model, rows, static)

        return NodeBipartiteObs(variable_features=variable_features,
                                row_features=row_features,
                                edge_features=static['edge_features'].copy())

    def _extract_static(self, variables, rows):
        var_idx = EntityIndex.from_entities(variables)
        row_idx = EntityIndex.from_entities(rows)

        objective = np.zeros(len(var_idx))
        for var in variables:
            objective[var_idx[var.key]] = var.objective
        obj_norm = norm_or_one(objective)

        var_static = np.zeros((len(var_idx), len(VAR)))
        var_static[:, VAR.objective] = objective / obj_norm
        for var in variables:
            var_static[var_idx[var.key], _TYPE_FEATURE[var.vtype]] = 1.

        row_static = np.zeros((len(row_idx), len(ROW)))
        row_signs = np.ones(len(row_idx))
        row_norms = np.ones(len(row_idx))
        for row in rows:
            i = row_idx[row.key]
            values = np.asarray(row.values, dtype=np.float64)
            sign, side = row_orientation(row.lhs, row.rhs, row.constant)
            row_norm = norm_or_one(values)
            row_signs[i], row_norms[i] = sign, row_norm
            row_static[i, ROW.bias] = side / row_norm
            row_obj = objective[var_idx.take(row.var_keys)]
            row_static[i, ROW.objective_cosine_similarity] = sign * values.dot(row_obj) / (row_norm * obj_norm)

        return {'var_idx': var_idx,
                'row_idx': row_idx,
                'obj_norm': obj_norm,
                'var_static': var_static,
                'row_static': row_static,
                'row_signs': row_signs,
                'row_norms': row_norms,
                'edge_features': build_edge_features(rows, row_idx, var_idx, signs=row_signs)}

    def _extract_variable_features(self, model, variables, static):
        var_idx, obj_norm = static['var_idx'], static['obj_norm']
        features = static['var_static'].copy()
        vtypes = np.empty(len(var_idx), dtype=object)

        incumbent = model.get_incumbent_values()
        avg_sol = model.get_average_solution_values()
        for var in variables:
            i = var_idx[var.key]
            vtypes[i] = var.vtype
            features[i, VAR.has_lower_bound] = float(np.isfinite(var.lower_bound))
            features[i, VAR.has_upper_bound] = float(np.isfinite(var.upper_bound))
            features[i, VAR.incumbent_value] = np.nan if incumbent is None else incumbent.get(var.key, np.nan)
            features[i, VAR.average_incumbent_value] = avg_sol.get(var.key, np.nan)

        age_scale = model.get_n_lps() + 5
        for col in model.get_lp_columns():
            i = var_idx[col.var_key]
            sol = col.solution_value
            features[i, VAR.has_lower_bound] = float(np.isfinite(col.lower_bound))
            features[i, VAR.has_upper_bound] = float(np.isfinite(col.upper_bound))
            features[i, VAR.normed_reduced_cost] = col.reduced_cost / obj_norm
            features[i, VAR.solution_value] = sol
            features[i, VAR.solution_frac] = 0. if vtypes[i] == 'CONTINUOUS' else feas_frac(sol)
            features[i, VAR.is_solution_at_lower_bound] = float(np.isfinite(col.lower_bound) and is_eq(sol, col.lower_bound))
            features[i, VAR.is_solution_at_upper_bound] = float(np.isfinite(col.upper_bound) and is_eq(sol, col.upper_bound))
            features[i, VAR.scaled_age] = col.age / age_scale
            features[i, _BASIS_FEATURE[col.basis_status]] = 1.

        return features

    def _extract_row_features(self, model, rows, static):
        row_idx, obj_norm = static['row_idx'], static['obj_norm']
        features = static['row_static'].copy()

        age_scale = model.get_n_lps() + 5
        for row in rows:
            i = row_idx[row.key]
            at_lhs = np.isfinite(row.lhs) and is_eq(row.activity, row.lhs)
            at_rhs = np.isfinite(row.rhs) and is_eq(row.activity, row.rhs)
            features[i, ROW.is_tight] = float(at_lhs or at_rhs)
            features[i, ROW.dual_solution_value] = static['row_signs'][i] * row.dual_value / (static['row_norms'][i] * obj_norm)
            features[i, ROW.scaled_age] = row.age / age_scale

        return features
