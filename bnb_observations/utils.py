import random

import numpy as np


# SCIP default tolerances
EPSILON = 1e-9
FEASTOL = 1e-6
SUMEPSILON = 1e-6



############################# NUMERICS #################################
def is_eq(a, b, eps=EPSILON):
    '''Relative equality test in the manner of SCIPisEQ.'''
    if np.isinf(a) or np.isinf(b):
        return a == b
    return abs(a - b) <= eps * max(1., abs(a), abs(b))


def feas_frac(x, feastol=FEASTOL):
    '''Fractional part of x, 0 if x is integral within feasibility tolerance.'''
    frac = x - np.floor(x + feastol)
    return 0. if frac < feastol else frac


def safe_div(numerator, denominator):
    '''Division returning the NaN sentinel when the denominator is zero.'''
    if denominator == 0:
        return np.nan
    return numerator / denominator


def norm_or_one(values):
    '''Euclidean norm of values, 1 if it is zero so it can be used as a divisor.'''
    norm = float(np.linalg.norm(values)) if len(values) > 0 else 0.
    return norm if norm > 0 else 1.


def product_score(down_gain, up_gain, eps=SUMEPSILON):
    '''SCIP default (product) branching score of a pair of child gains.'''
    return max(down_gain, eps) * max(up_gain, eps)


def summary_stats(values):
    '''
    Returns (count, sum, mean, stddev, min, max) of values. The statistics
    other than count and sum are NaN for an empty input.
    '''
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return 0., 0., np.nan, np.nan, np.nan, np.nan
    return float(values.size), values.sum(), values.mean(), values.std(), values.min(), values.max()



############################# EXPERIMENTS #################################
def seed_stochastic_modules_globally(default_seed=0, numpy_seed=None, random_seed=None):
    '''Seeds any stochastic modules so that fake model instances can be regenerated.'''
    if numpy_seed is None:
        numpy_seed = default_seed
    if random_seed is None:
        random_seed = default_seed
    np.random.seed(numpy_seed)
    random.seed(random_seed)
