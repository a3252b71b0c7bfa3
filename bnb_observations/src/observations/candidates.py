import numpy as np


def select_candidates(model, var_index, pseudo_candidates=False):
    '''
    Branching candidates of the focus node.

    Args:
        pseudo_candidates (bool): Use the pseudo candidates (all non-fixed
            discrete variables) rather than the fractional LP candidates.

    Returns:
        positions (numpy.ndarray): Index of each candidate in var_index.
        keys (list): Model keys of the candidates.
        solution_values (numpy.ndarray): LP value of each candidate.
    '''
    if pseudo_candidates:
        keys, solution_values = model.get_pseudo_branch_candidates()
    else:
        keys, solution_values = model.get_lp_branch_candidates()
    return var_index.take(keys), list(keys), np.asarray(solution_values, dtype=np.float64)


def fill_candidates(num_vars, positions, values, width=None):
    '''
    Scatters per candidate values into a NaN filled array with one entry
    (or one row of width entries) per variable. Non candidate variables keep
    the NaN sentinel.
    '''
    shape = (num_vars,) if width is None else (num_vars, width)
    filled = np.full(shape, np.nan, dtype=np.float64)
    if len(positions) > 0:
        filled[positions] = values
    return filled
