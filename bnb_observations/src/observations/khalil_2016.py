from bnb_observations.src.observations.observation_function import ObservationFunction, require_solved_lp
from bnb_observations.src.observations.observation_value import ObservationValue
from bnb_observations.src.observations.feature_cache import FeatureCache
from bnb_observations.src.observations.entity_index import EntityIndex
from bnb_observations.src.observations.candidates import select_candidates, fill_candidates
from bnb_observations.src.observations.node_bipartite import row_orientation, build_edge_features
from bnb_observations.src.scip.model import BranchDirection
from bnb_observations.utils import is_eq, safe_div, summary_stats

import enum
from dataclasses import dataclass

import numpy as np


_STATIC_FEATURES = [
    'obj_coef', 'obj_coef_pos_part', 'obj_coef_neg_part',
    'n_rows', 'rows_deg_mean', 'rows_deg_stddev', 'rows_deg_min', 'rows_deg_max',
    'rows_pos_coefs_count', 'rows_pos_coefs_mean', 'rows_pos_coefs_stddev', 'rows_pos_coefs_min', 'rows_pos_coefs_max',
    'rows_neg_coefs_count', 'rows_neg_coefs_mean', 'rows_neg_coefs_stddev', 'rows_neg_coefs_min', 'rows_neg_coefs_max',
]

_DYNAMIC_FEATURES = [
    'slack', 'ceil_dist',
    'pseudocost_up', 'pseudocost_down', 'pseudocost_ratio', 'pseudocost_sum', 'pseudocost_product',
    'n_cutoff_up', 'n_cutoff_down', 'n_cutoff_up_ratio', 'n_cutoff_down_ratio',
    'rows_dynamic_deg_mean', 'rows_dynamic_deg_stddev', 'rows_dynamic_deg_min', 'rows_dynamic_deg_max',
    'rows_dynamic_deg_mean_ratio', 'rows_dynamic_deg_min_ratio', 'rows_dynamic_deg_max_ratio',
    'coef_pos_rhs_ratio_min', 'coef_pos_rhs_ratio_max', 'coef_neg_rhs_ratio_min', 'coef_neg_rhs_ratio_max',
    'pos_coef_pos_coef_ratio_min', 'pos_coef_pos_coef_ratio_max',
    'pos_coef_neg_coef_ratio_min', 'pos_coef_neg_coef_ratio_max',
    'neg_coef_pos_coef_ratio_min', 'neg_coef_pos_coef_ratio_max',
    'neg_coef_neg_coef_ratio_min', 'neg_coef_neg_coef_ratio_max',
] + [f'active_coef_weight{w}_{stat}' for w in range(1, 5) for stat in ('count', 'sum', 'mean', 'stddev', 'min', 'max')]


@dataclass(eq=False)
class Khalil2016Obs(ObservationValue):
    '''
    Branching candidates features from Khalil et al. (2016).

    Khalil, Elias Boutros, Pierre Le Bodic, Le Song, George Nemhauser, and Bistra Dilkina.
    "Learning to branch in mixed integer programming."
    Thirtieth AAAI Conference on Artificial Intelligence. 2016.

    Args:
        features (numpy.ndarray): One row per variable, ordered by position in the
            original problem, one column per Features. The first n_static_features
            columns are static (they do not change through the episode), the
            remaining n_dynamic_features are dynamic. Rows of variables that are
            not branching candidates are NaN, as are undefined statistics.
    '''
    features: np.ndarray

    n_static_features = len(_STATIC_FEATURES)
    n_dynamic_features = len(_DYNAMIC_FEATURES)
    Features = enum.IntEnum('Features', [(name, i) for i, name in enumerate(_STATIC_FEATURES + _DYNAMIC_FEATURES)])


F = Khalil2016Obs.Features


def _min_max(values):
    if len(values) == 0:
        return np.nan, np.nan
    return np.min(values), np.max(values)


class Khalil2016(ObservationFunction):
    '''
    Branching candidates features from Khalil et al. (2016).

    Static features are computed from the LP of the first extraction of the
    episode and cached until the next before_reset. Constraint coefficients
    are taken with every LP row expressed as sign * a.x <= side (see
    node_bipartite.row_orientation).

    Args:
        pseudo_candidates (bool): Observe the pseudo branching candidates
            rather than the LP branching candidates.
    '''
    def __init__(self, pseudo_candidates=False):
        super().__init__()
        self.pseudo_candidates = pseudo_candidates
        self.static_features = FeatureCache(name='Khalil2016')

    def before_reset(self, model):
        super().before_reset(model)
        self.static_features.clear()

    def _extract(self, model, done):
        require_solved_lp(model)
        variables = model.get_variables()
        rows = model.get_lp_rows()
        var_idx = EntityIndex.from_entities(variables)
        lp = self._lp_matrix(rows, var_idx)

        self.static_features.validate(tuple(var_idx.keys()))
        static = self.static_features.get('static', lambda: self._extract_static(variables, var_idx, lp))

        positions, keys, solution_values = select_candidates(model, var_idx, pseudo_candidates=self.pseudo_candidates)

        candidate_features = self._extract_dynamic(model, variables, var_idx, lp, static, positions, keys, solution_values)
        candidate_features[:, :Khalil2016Obs.n_static_features] = static[positions]
        return Khalil2016Obs(features=fill_candidates(len(var_idx), positions, candidate_features, width=len(F)))

    def _lp_matrix(self, rows, var_idx):
        row_idx = EntityIndex.from_entities(rows)
        signs, sides = np.ones(len(row_idx)), np.zeros(len(row_idx))
        is_tight, duals = np.zeros(len(row_idx), dtype=bool), np.zeros(len(row_idx))
        for row in rows:
            i = row_idx[row.key]
            signs[i], sides[i] = row_orientation(row.lhs, row.rhs, row.constant)
            is_tight[i] = ((np.isfinite(row.lhs) and is_eq(row.activity, row.lhs))
                           or (np.isfinite(row.rhs) and is_eq(row.activity, row.rhs)))
            duals[i] = row.dual_value
        coo = build_edge_features(rows, row_idx, var_idx, signs=signs).to_scipy()
        csr, csc = coo.tocsr(), coo.tocsc()
        return {'csr': csr,
                'csc': csc,
                'sides': sides,
                'is_tight': is_tight,
                'abs_duals': np.abs(duals),
                'degrees': np.diff(csr.indptr).astype(np.float64),
                'pos_sums': np.asarray(csr.multiply(csr > 0).sum(axis=1)).ravel(),
                'neg_sums': -np.asarray(csr.multiply(csr < 0).sum(axis=1)).ravel(),
                'abs_sums': np.asarray(abs(csr).sum(axis=1)).ravel()}

    def _column(self, lp, j):
        csc = lp['csc']
        start, end = csc.indptr[j], csc.indptr[j + 1]
        return csc.indices[start:end], csc.data[start:end]

    def _extract_static(self, variables, var_idx, lp):
        static = np.full((len(var_idx), Khalil2016Obs.n_static_features), np.nan)
        for var in variables:
            j = var_idx[var.key]
            c = var.objective
            static[j, F.obj_coef] = c
            static[j, F.obj_coef_pos_part] = max(c, 0.)
            static[j, F.obj_coef_neg_part] = min(c, 0.)

            rows, coefs = self._column(lp, j)
            static[j, F.n_rows] = len(rows)
            _, _, *deg_stats = summary_stats(lp['degrees'][rows])
            static[j, F.rows_deg_mean:F.rows_deg_max + 1] = deg_stats
            count, _, *pos_stats = summary_stats(coefs[coefs > 0])
            static[j, F.rows_pos_coefs_count:F.rows_pos_coefs_max + 1] = [count, *pos_stats]
            count, _, *neg_stats = summary_stats(coefs[coefs < 0])
            static[j, F.rows_neg_coefs_count:F.rows_neg_coefs_max + 1] = [count, *neg_stats]
        return static

    def _extract_dynamic(self, model, variables, var_idx, lp, static, positions, keys, solution_values):
        '''Returns one full width row per candidate with the dynamic columns filled.'''
        out = np.full((len(keys), len(F)), np.nan)
        if len(keys) == 0:
            return out

        not_fixed = np.zeros(len(var_idx))
        for var in variables:
            not_fixed[var_idx[var.key]] = float(var.lower_bound < var.upper_bound)
        is_candidate = np.zeros(len(var_idx))
        is_candidate[positions] = 1.

        pattern = abs(lp['csr']).sign()
        dynamic_degrees = pattern @ not_fixed
        candidate_abs_sums = abs(lp['csr']) @ is_candidate

        for k, (j, key, x) in enumerate(zip(positions, keys, solution_values)):
            d = out[k]
            d[F.slack] = min(x - np.floor(x), np.ceil(x) - x)
            d[F.ceil_dist] = np.ceil(x) - x

            pc_up = model.get_pseudocost(key, BranchDirection.UPWARDS)
            pc_down = model.get_pseudocost(key, BranchDirection.DOWNWARDS)
            d[F.pseudocost_up] = pc_up
            d[F.pseudocost_down] = pc_down
            d[F.pseudocost_ratio] = safe_div(min(pc_up, pc_down), max(pc_up, pc_down))
            d[F.pseudocost_sum] = pc_up + pc_down
            d[F.pseudocost_product] = pc_up * pc_down

            cutoff_up = model.get_n_cutoffs(key, BranchDirection.UPWARDS)
            cutoff_down = model.get_n_cutoffs(key, BranchDirection.DOWNWARDS)
            d[F.n_cutoff_up] = cutoff_up
            d[F.n_cutoff_down] = cutoff_down
            d[F.n_cutoff_up_ratio] = safe_div(cutoff_up, model.get_n_branchings(key, BranchDirection.UPWARDS))
            d[F.n_cutoff_down_ratio] = safe_div(cutoff_down, model.get_n_branchings(key, BranchDirection.DOWNWARDS))

            rows, coefs = self._column(lp, j)
            _, _, dyn_mean, dyn_std, dyn_min, dyn_max = summary_stats(dynamic_degrees[rows])
            d[F.rows_dynamic_deg_mean:F.rows_dynamic_deg_max + 1] = [dyn_mean, dyn_std, dyn_min, dyn_max]
            d[F.rows_dynamic_deg_mean_ratio] = safe_div(dyn_mean, static[j, F.rows_deg_mean])
            d[F.rows_dynamic_deg_min_ratio] = safe_div(dyn_min, static[j, F.rows_deg_min])
            d[F.rows_dynamic_deg_max_ratio] = safe_div(dyn_max, static[j, F.rows_deg_max])

            sides = lp['sides'][rows]
            d[F.coef_pos_rhs_ratio_min], d[F.coef_pos_rhs_ratio_max] = _min_max(coefs[sides > 0] / sides[sides > 0])
            d[F.coef_neg_rhs_ratio_min], d[F.coef_neg_rhs_ratio_max] = _min_max(coefs[sides < 0] / sides[sides < 0])

            pos_sums, neg_sums = lp['pos_sums'][rows], lp['neg_sums'][rows]
            pos, neg = coefs > 0, coefs < 0
            d[F.pos_coef_pos_coef_ratio_min], d[F.pos_coef_pos_coef_ratio_max] = _min_max(
                coefs[pos] / pos_sums[pos])
            has_neg = pos & (neg_sums > 0)
            d[F.pos_coef_neg_coef_ratio_min], d[F.pos_coef_neg_coef_ratio_max] = _min_max(
                coefs[has_neg] / neg_sums[has_neg])
            has_pos = neg & (pos_sums > 0)
            d[F.neg_coef_pos_coef_ratio_min], d[F.neg_coef_pos_coef_ratio_max] = _min_max(
                -coefs[has_pos] / pos_sums[has_pos])
            d[F.neg_coef_neg_coef_ratio_min], d[F.neg_coef_neg_coef_ratio_max] = _min_max(
                -coefs[neg] / neg_sums[neg])

            active = lp['is_tight'][rows]
            active_rows, active_coefs = rows[active], coefs[active]
            weights = [np.ones(len(active_rows)),
                       1. / lp['abs_sums'][active_rows],
                       1. / candidate_abs_sums[active_rows],
                       lp['abs_duals'][active_rows]]
            for w, weight in enumerate(weights, start=1):
                first = F[f'active_coef_weight{w}_count']
                d[first:first + 6] = summary_stats(active_coefs * weight)

        return out
