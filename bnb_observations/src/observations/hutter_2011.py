from bnb_observations.src.observations.observation_function import ObservationFunction
from bnb_observations.src.observations.observation_value import ObservationValue
from bnb_observations.src.observations.entity_index import EntityIndex
from bnb_observations.src.observations.node_bipartite import build_edge_features
from bnb_observations.utils import safe_div

import enum
from dataclasses import dataclass

import numpy as np


_FEATURES = [
    'nb_variables', 'nb_constraints', 'nb_nonzero_coefs',
    'variable_node_degree_mean', 'variable_node_degree_max', 'variable_node_degree_min', 'variable_node_degree_std',
    'constraint_node_degree_mean', 'constraint_node_degree_max', 'constraint_node_degree_min', 'constraint_node_degree_std',
    'node_degree_mean', 'node_degree_max', 'node_degree_min', 'node_degree_std', 'node_degree_25q', 'node_degree_75q',
    'edge_density',
    'lp_slack_mean', 'lp_slack_max', 'lp_slack_l2',
    'lp_objective_value',
    'objective_coef_m_std', 'objective_coef_n_std', 'objective_coef_sqrtn_std',
    'constraint_coef_mean', 'constraint_coef_std',
    'constraint_var_coef_mean', 'constraint_var_coef_std',
    'discrete_vars_support_size_mean', 'discrete_vars_support_size_std',
    'ratio_unbounded_discrete_vars', 'ratio_continuous_vars',
]


@dataclass(eq=False)
class Hutter2011Obs(ObservationValue):
    '''
    Instance features from Hutter et al. (2011).

    Hutter, Frank, Holger H. Hoos, and Kevin Leyton-Brown.
    "Sequential model-based optimization for general algorithm configuration."
    International Conference on Learning and Intelligent Optimization. 2011.

    Args:
        features (numpy.ndarray): A vector of instance features, one entry per
            Features. Undefined statistics are NaN.
    '''
    features: np.ndarray

    Features = enum.IntEnum('Features', [(name, i) for i, name in enumerate(_FEATURES)])


F = Hutter2011Obs.Features


def _mean_max_min_std(values):
    if len(values) == 0:
        return [np.nan] * 4
    return [np.mean(values), np.max(values), np.min(values), np.std(values)]


def _mean_std(values):
    if len(values) == 0:
        return [np.nan] * 2
    return [np.mean(values), np.std(values)]


def _variation_coefficients(matrix, scale):
    '''
    Variation coefficient (std / |mean|) of every row of matrix once divided
    by scale, for the non empty rows with a non zero scale.
    '''
    coefs = []
    for i in range(matrix.shape[0]):
        start, end = matrix.indptr[i], matrix.indptr[i + 1]
        if start == end or scale[i] == 0:
            continue
        values = matrix.data[start:end] / scale[i]
        coefs.append(safe_div(np.std(values), abs(np.mean(values))))
    return np.array([c for c in coefs if not np.isnan(c)])


class Hutter2011(ObservationFunction):
    '''
    Instance features from Hutter et al. (2011).

    Features are computed from the linear constraints of the current problem.
    The LP features (slack and objective value) are read from the focus node
    LP and are NaN when no LP has been solved.
    '''
    def _extract(self, model, done):
        variables = model.get_variables()
        constraints = model.get_constraints()
        var_idx = EntityIndex.from_entities(variables)
        cons_idx = EntityIndex.from_entities(constraints)
        n_vars, n_conss = len(var_idx), len(cons_idx)

        features = np.full(len(F), np.nan)
        matrix = build_edge_features(constraints, cons_idx, var_idx).to_scipy()
        csr, csc = matrix.tocsr(), matrix.tocsc()
        nnz = csr.nnz

        features[F.nb_variables] = n_vars
        features[F.nb_constraints] = n_conss
        features[F.nb_nonzero_coefs] = nnz

        var_degrees = np.diff(csc.indptr).astype(np.float64)
        cons_degrees = np.diff(csr.indptr).astype(np.float64)
        node_degrees = np.concatenate([var_degrees, cons_degrees])
        features[F.variable_node_degree_mean:F.variable_node_degree_std + 1] = _mean_max_min_std(var_degrees)
        features[F.constraint_node_degree_mean:F.constraint_node_degree_std + 1] = _mean_max_min_std(cons_degrees)
        features[F.node_degree_mean:F.node_degree_std + 1] = _mean_max_min_std(node_degrees)
        if len(node_degrees) > 0:
            features[F.node_degree_25q], features[F.node_degree_75q] = np.percentile(node_degrees, [25, 75])
        features[F.edge_density] = safe_div(nnz, n_vars * n_conss)

        self._extract_lp(model, var_idx, variables, features)

        objective = np.zeros(n_vars)
        discrete = np.zeros(n_vars, dtype=bool)
        lower, upper = np.zeros(n_vars), np.zeros(n_vars)
        for var in variables:
            j = var_idx[var.key]
            objective[j] = var.objective
            discrete[j] = var.vtype != 'CONTINUOUS'
            lower[j], upper[j] = var.lower_bound, var.upper_bound

        if n_conss > 0 and n_vars > 0:
            features[F.objective_coef_m_std] = np.std(objective / n_conss)
        has_degree = var_degrees > 0
        if has_degree.any():
            features[F.objective_coef_n_std] = np.std(objective[has_degree] / var_degrees[has_degree])
            features[F.objective_coef_sqrtn_std] = np.std(objective[has_degree] / np.sqrt(var_degrees[has_degree]))

        # constraints are scaled by their finite side, preferring the right hand side
        sides = np.zeros(n_conss)
        for cons in constraints:
            side = cons.rhs if np.isfinite(cons.rhs) else cons.lhs
            sides[cons_idx[cons.key]] = side if np.isfinite(side) else 0.
        features[F.constraint_coef_mean:F.constraint_coef_std + 1] = _mean_std(_variation_coefficients(csr, sides))
        features[F.constraint_var_coef_mean:F.constraint_var_coef_std + 1] = _mean_std(
            _variation_coefficients(csc.T.tocsr(), objective))

        bounded = discrete & np.isfinite(lower) & np.isfinite(upper)
        features[F.discrete_vars_support_size_mean:F.discrete_vars_support_size_std + 1] = _mean_std(
            upper[bounded] - lower[bounded] + 1)
        features[F.ratio_unbounded_discrete_vars] = safe_div(np.count_nonzero(discrete & ~bounded),
                                                             np.count_nonzero(discrete))
        features[F.ratio_continuous_vars] = safe_div(np.count_nonzero(~discrete), n_vars)

        return Hutter2011Obs(features=features)

    def _extract_lp(self, model, var_idx, variables, features):
        if not model.is_lp_solved():
            return
        features[F.lp_objective_value] = model.get_lp_objective_value()

        discrete_keys = {var.key for var in variables if var.vtype != 'CONTINUOUS'}
        slacks = []
        for col in model.get_lp_columns():
            if col.var_key in discrete_keys:
                x = col.solution_value
                slacks.append(min(x - np.floor(x), np.ceil(x) - x))
        if len(slacks) > 0:
            slacks = np.array(slacks)
            features[F.lp_slack_mean] = slacks.mean()
            features[F.lp_slack_max] = slacks.max()
            features[F.lp_slack_l2] = np.linalg.norm(slacks)
