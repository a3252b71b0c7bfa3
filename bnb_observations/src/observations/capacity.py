from bnb_observations.src.observations.observation_function import ObservationFunction
from bnb_observations.src.observations.entity_index import variable_index

import numpy as np


def knapsack_constraint_per_variable(model, var_idx):
    '''
    For each variable, the first linear constraint with a finite right hand
    side in which it has a non zero coefficient, as (constraint, coefficient),
    or None.
    '''
    per_var = [None] * len(var_idx)
    for cons in sorted(model.get_constraints(), key=lambda c: c.position):
        if not np.isfinite(cons.rhs):
            continue
        for var_key, value in zip(cons.var_keys, cons.values):
            i = var_idx[var_key]
            if value != 0 and per_var[i] is None:
                per_var[i] = (cons, value)
    return per_var


class Capacity(ObservationFunction):
    '''
    Capacity of the knapsack each variable belongs to.

    Returns one value per variable, ordered by position in the original
    problem: the right hand side of the first knapsack constraint containing
    the variable, 0 for variables in no such constraint.
    '''
    def _extract(self, model, done):
        var_idx = variable_index(model)
        capacities = np.zeros(len(var_idx))
        for i, entry in enumerate(knapsack_constraint_per_variable(model, var_idx)):
            if entry is not None:
                capacities[i] = entry[0].rhs
        return capacities
