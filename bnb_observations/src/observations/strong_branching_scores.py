from bnb_observations.src.observations.observation_function import ObservationFunction, require_solved_lp
from bnb_observations.src.observations.entity_index import variable_index
from bnb_observations.src.observations.candidates import select_candidates, fill_candidates
from bnb_observations.utils import product_score

import numpy as np


class StrongBranchingScores(ObservationFunction):
    '''
    Strong branching score observation function on branch-and-bound nodes.

    Scores all LP or pseudo candidate variables of the focus node. The score
    measures the quality of each variable for branching (higher is better) as
    the product of the dual bound gains of its two children. This is an
    expensive observation, typically used as an expert for imitation learning.

    Returns an array with one score per variable, ordered by position in the
    original problem. Variables that are not candidates are NaN.

    Args:
        pseudo_candidates (bool): Score pseudo candidates (when True) or LP
            candidates (when False).
    '''
    def __init__(self, pseudo_candidates=False):
        super().__init__()
        self.pseudo_candidates = pseudo_candidates

    def _extract(self, model, done):
        require_solved_lp(model)
        var_idx = variable_index(model)
        positions, keys, _ = select_candidates(model, var_idx, pseudo_candidates=self.pseudo_candidates)
        if len(keys) == 0:
            return fill_candidates(len(var_idx), positions, [])

        lp_obj = model.get_lp_objective_value()
        scores = []
        for result in model.strong_branch(keys, integral=self.pseudo_candidates):
            down_gain = max(result.down_bound - lp_obj, 0.)
            up_gain = max(result.up_bound - lp_obj, 0.)
            scores.append(product_score(down_gain, up_gain))

        return fill_candidates(len(var_idx), positions, np.array(scores))
