from bnb_observations.src.observations.observation_function import ObservationFunction
from bnb_observations.src.observations.observation_value import ObservationValue
from bnb_observations.src.observations.entity_index import EntityIndex
from bnb_observations.src.observations.coo_matrix import CooMatrix
from bnb_observations.src.observations.node_bipartite import row_orientation, build_edge_features
from bnb_observations.utils import norm_or_one

import enum
from dataclasses import dataclass

import numpy as np


@dataclass(eq=False)
class MilpBipartiteObs(ObservationValue):
    '''
    Bipartite graph observation that represents the most recent MILP during presolving.

    Same graph as NodeBipartiteObs, but drawn from the linear constraints of the
    current problem instead of the LP of a node.

    Args:
        variable_features (numpy.ndarray): One row per variable, ordered by position
            in the original problem, one column per VariableFeatures.
        constraint_features (numpy.ndarray): One row per linear constraint, one column
            per ConstraintFeatures.
        edge_features (CooMatrix): The constraint matrix with rows for constraints
            and columns for variables.
    '''
    variable_features: np.ndarray
    constraint_features: np.ndarray
    edge_features: CooMatrix

    class VariableFeatures(enum.IntEnum):
        objective = 0
        is_type_binary = 1
        is_type_integer = 2
        is_type_implicit_integer = 3
        is_type_continuous = 4
        has_lower_bound = 5
        has_upper_bound = 6
        lower_bound = 7
        upper_bound = 8

    class ConstraintFeatures(enum.IntEnum):
        bias = 0


VAR = MilpBipartiteObs.VariableFeatures
CONS = MilpBipartiteObs.ConstraintFeatures

_TYPE_FEATURE = {'BINARY': VAR.is_type_binary,
                 'INTEGER': VAR.is_type_integer,
                 'IMPLINT': VAR.is_type_implicit_integer,
                 'CONTINUOUS': VAR.is_type_continuous}


class MilpBipartite(ObservationFunction):
    '''
    Bipartite graph observation function for the latest MILP during presolving.

    Nothing is cached: presolving may change the problem between two calls.

    Args:
        normalize (bool): Divide the objective column by the objective norm, and
            each constraint bias and coefficients by the constraint norm. This is
            recommended for gradient based models.
    '''
    def __init__(self, normalize=False):
        super().__init__()
        self.normalize = normalize

    def _extract(self, model, done):
        variables = model.get_variables()
        constraints = model.get_constraints()
        var_idx = EntityIndex.from_entities(variables)
        cons_idx = EntityIndex.from_entities(constraints)

        variable_features = np.zeros((len(var_idx), len(VAR)))
        for var in variables:
            i = var_idx[var.key]
            variable_features[i, VAR.objective] = var.objective
            variable_features[i, _TYPE_FEATURE[var.vtype]] = 1.
            if np.isfinite(var.lower_bound):
                variable_features[i, VAR.has_lower_bound] = 1.
                variable_features[i, VAR.lower_bound] = var.lower_bound
            if np.isfinite(var.upper_bound):
                variable_features[i, VAR.has_upper_bound] = 1.
                variable_features[i, VAR.upper_bound] = var.upper_bound
        if self.normalize:
            variable_features[:, VAR.objective] /= norm_or_one(variable_features[:, VAR.objective])

        constraint_features = np.zeros((len(cons_idx), len(CONS)))
        signs = np.ones(len(cons_idx))
        for cons in constraints:
            i = cons_idx[cons.key]
            signs[i], constraint_features[i, CONS.bias] = row_orientation(cons.lhs, cons.rhs)
            if self.normalize:
                norm = norm_or_one(np.asarray(cons.values, dtype=np.float64))
                signs[i] /= norm
                constraint_features[i, CONS.bias] /= norm

        # signs carry the normalisation so that edges are scaled like their bias
        edge_features = build_edge_features(constraints, cons_idx, var_idx, signs=signs)

        return MilpBipartiteObs(variable_features=variable_features,
                                constraint_features=constraint_features,
                                edge_features=edge_features)
