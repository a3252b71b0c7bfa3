from bnb_observations.src.observations.observation_function import ObservationFunction, require_solved_lp
from bnb_observations.src.observations.entity_index import variable_index
from bnb_observations.src.observations.candidates import select_candidates, fill_candidates
from bnb_observations.src.scip.model import BranchDirection

import numpy as np


class Pseudocosts(ObservationFunction):
    '''
    Pseudocosts observation function on branch-and-bound nodes.

    The pseudocost is a cheap approximation of the strong branching score,
    read from the branching history the solver maintains. For an LP candidate
    with value x, the score is the product of the expected gains
    (x - floor(x)) * pc_down and (ceil(x) - x) * pc_up.

    Returns an array with one score per variable, ordered by position in the
    original problem. Variables that are not LP candidates, or that were never
    branched on, are NaN.
    '''
    def _extract(self, model, done):
        require_solved_lp(model)
        var_idx = variable_index(model)
        positions, keys, solution_values = select_candidates(model, var_idx, pseudo_candidates=False)

        scores = np.full(len(keys), np.nan)
        for j, (key, x) in enumerate(zip(keys, solution_values)):
            n_down = model.get_pseudocost_count(key, BranchDirection.DOWNWARDS)
            n_up = model.get_pseudocost_count(key, BranchDirection.UPWARDS)
            if n_down + n_up == 0:
                continue
            scores[j] = model.get_pseudocost_score(key, x)

        return fill_candidates(len(var_idx), positions, scores)
