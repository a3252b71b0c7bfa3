from bnb_observations.src.observations.observation_function import ObservationFunction
from bnb_observations.src.observations.observation_value import ObservationValue

from dataclasses import dataclass


@dataclass(eq=False)
class FocusNodeObs(ObservationValue):
    '''
    Snapshot of the focus node.

    Args:
        number: Node number, unique within the episode.
        depth: Depth of the node in the tree.
        lowerbound: Dual bound of the node.
        estimate: Estimated value of the best solution in the node subtree.
        n_added_conss: Number of constraints added at the node.
        n_vars: Number of variables of the problem at the node.
        nlpcands: Number of fractional LP branching candidates.
        npseudocands: Number of pseudo branching candidates.
        parent_number: Number of the parent node, -1 at the root.
        parent_lowerbound: Dual bound of the parent node, NaN at the root.
    '''
    number: int
    depth: int
    lowerbound: float
    estimate: float
    n_added_conss: int
    n_vars: int
    nlpcands: int
    npseudocands: int
    parent_number: int
    parent_lowerbound: float


class FocusNode(ObservationFunction):
    '''Returns a FocusNodeObs of the current node, or None when there is no focus node.'''

    def _extract(self, model, done):
        node = model.get_focus_node()
        if node is None:
            return None
        lp_cands, _ = model.get_lp_branch_candidates()
        pseudo_cands, _ = model.get_pseudo_branch_candidates()
        return FocusNodeObs(number=node.number,
                            depth=node.depth,
                            lowerbound=node.lowerbound,
                            estimate=node.estimate,
                            n_added_conss=node.n_added_conss,
                            n_vars=node.n_vars,
                            nlpcands=len(lp_cands),
                            npseudocands=len(pseudo_cands),
                            parent_number=node.parent_number,
                            parent_lowerbound=node.parent_lowerbound)
