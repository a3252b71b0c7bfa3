from bnb_observations.src.observations.observation_function import ObservationFunction
from bnb_observations.src.observations.entity_index import variable_index
from bnb_observations.src.observations.capacity import knapsack_constraint_per_variable

import numpy as np


class Weight(ObservationFunction):
    '''
    Weight of each item (variable) in its knapsack constraint, 0 for
    variables in no knapsack constraint.
    '''
    def _extract(self, model, done):
        var_idx = variable_index(model)
        weights = np.zeros(len(var_idx))
        for i, entry in enumerate(knapsack_constraint_per_variable(model, var_idx)):
            if entry is not None:
                weights[i] = entry[1]
        return weights
