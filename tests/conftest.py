"""
Shared fixtures: an in-memory Model standing in for a solver.

FakeModel answers every query from plain python containers so that the
observation functions can be tested without SCIP.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pytest

from bnb_observations.src.scip.model import (Model, BranchDirection, Variable, Constraint,
                                             LpColumn, LpRow, StrongBranchResult, NodeInfo)
from bnb_observations.utils import seed_stochastic_modules_globally, product_score


@dataclass
class FakeModel(Model):
    variables: List[Variable] = field(default_factory=list)
    constraints: List[Constraint] = field(default_factory=list)
    lp_columns: List[LpColumn] = field(default_factory=list)
    lp_rows: List[LpRow] = field(default_factory=list)
    lp_solved: bool = True
    lp_objective_value: float = 0.
    n_lps: int = 1
    incumbent: Optional[Dict[Any, float]] = None
    average_solution: Dict[Any, float] = field(default_factory=dict)
    lp_candidates: Tuple[list, list] = ((), ())
    pseudo_candidates: Tuple[list, list] = ((), ())
    pseudocosts: Dict[Any, float] = field(default_factory=dict)
    pseudocost_counts: Dict[Any, float] = field(default_factory=dict)
    cutoffs: Dict[Any, float] = field(default_factory=dict)
    branchings: Dict[Any, int] = field(default_factory=dict)
    strong_branch_results: Dict[Any, StrongBranchResult] = field(default_factory=dict)
    focus_node: Optional[NodeInfo] = None
    n_queries: Dict[str, int] = field(default_factory=dict)

    def _count(self, query):
        self.n_queries[query] = self.n_queries.get(query, 0) + 1

    def get_variables(self):
        self._count('get_variables')
        return list(self.variables)

    def get_constraints(self):
        return list(self.constraints)

    def get_lp_columns(self):
        return list(self.lp_columns)

    def get_lp_rows(self):
        self._count('get_lp_rows')
        return list(self.lp_rows)

    def is_lp_solved(self):
        return self.lp_solved

    def get_lp_objective_value(self):
        self._count('get_lp_objective_value')
        return self.lp_objective_value

    def get_n_lps(self):
        return self.n_lps

    def get_incumbent_values(self):
        return self.incumbent

    def get_average_solution_values(self):
        return dict(self.average_solution)

    def get_lp_branch_candidates(self):
        return list(self.lp_candidates[0]), list(self.lp_candidates[1])

    def get_pseudo_branch_candidates(self):
        return list(self.pseudo_candidates[0]), list(self.pseudo_candidates[1])

    def get_pseudocost(self, var_key, direction):
        return self.pseudocosts.get((var_key, direction), 0.)

    def get_pseudocost_count(self, var_key, direction):
        return self.pseudocost_counts.get((var_key, direction), 0.)

    def get_pseudocost_score(self, var_key, solution_value):
        down = (solution_value - np.floor(solution_value)) * self.get_pseudocost(var_key, BranchDirection.DOWNWARDS)
        up = (np.ceil(solution_value) - solution_value) * self.get_pseudocost(var_key, BranchDirection.UPWARDS)
        return product_score(down, up)

    def get_n_cutoffs(self, var_key, direction):
        return self.cutoffs.get((var_key, direction), 0.)

    def get_n_branchings(self, var_key, direction):
        return self.branchings.get((var_key, direction), 0)

    def strong_branch(self, var_keys, integral):
        self._count('strong_branch')
        return [self.strong_branch_results[key] for key in var_keys]

    def get_focus_node(self):
        return self.focus_node


def make_variable(key, position, vtype='CONTINUOUS', objective=0., lower_bound=0., upper_bound=np.inf):
    return Variable(key=key, position=position, name=f'x{position}', vtype=vtype,
                    objective=objective, lower_bound=lower_bound, upper_bound=upper_bound)


def make_constraint(key, position, coefs, lhs=-np.inf, rhs=np.inf):
    return Constraint(key=key, position=position, name=f'c{position}', lhs=lhs, rhs=rhs,
                      var_keys=tuple(coefs.keys()), values=tuple(coefs.values()))


def make_row(key, position, coefs, lhs=-np.inf, rhs=np.inf, constant=0., activity=0., dual_value=0., age=0):
    return LpRow(key=key, position=position, lhs=lhs, rhs=rhs, constant=constant,
                 var_keys=tuple(coefs.keys()), values=tuple(coefs.values()),
                 activity=activity, dual_value=dual_value, age=age)


def make_column(var_key, solution_value, reduced_cost=0., basis_status='basic', age=0,
                lower_bound=0., upper_bound=np.inf):
    return LpColumn(var_key=var_key, solution_value=solution_value, reduced_cost=reduced_cost,
                    basis_status=basis_status, age=age, lower_bound=lower_bound, upper_bound=upper_bound)


def two_variable_model():
    '''
    max x + y s.t. x + 2y <= 4, x, y in {0, 1, 2, ...} solved at the root.

    Keys are deliberately not ordered like positions.
    '''
    x, y = 'key-x', 'key-a'
    variables = [make_variable(y, 1, vtype='INTEGER', objective=-1.),
                 make_variable(x, 0, vtype='INTEGER', objective=-1.)]
    coefs = {x: 1., y: 2.}
    return FakeModel(variables=variables,
                     constraints=[make_constraint(7, 0, coefs, rhs=4.)],
                     lp_columns=[make_column(x, 4., reduced_cost=0., basis_status='basic'),
                                 make_column(y, 0., reduced_cost=1., basis_status='lower')],
                     lp_rows=[make_row(3, 0, coefs, rhs=4., activity=4., dual_value=-1.)],
                     lp_objective_value=-4.)


def knapsack_model():
    '''
    A fractional LP over three binaries and a continuous variable, with a
    knapsack row, a covering row (lhs only) and a ranged row.
    '''
    keys = [100, 101, 102, 103]
    variables = [make_variable(keys[0], 0, vtype='BINARY', objective=-5., upper_bound=1.),
                 make_variable(keys[1], 1, vtype='BINARY', objective=-4., upper_bound=1.),
                 make_variable(keys[2], 2, vtype='BINARY', objective=-3., upper_bound=1.),
                 make_variable(keys[3], 3, vtype='CONTINUOUS', objective=1.)]
    knapsack = {keys[0]: 2., keys[1]: 3., keys[2]: 1.}
    cover = {keys[1]: 1., keys[2]: 1.}
    ranged = {keys[0]: 1., keys[3]: -1.}
    constraints = [make_constraint(0, 0, knapsack, rhs=4.),
                   make_constraint(1, 1, cover, lhs=1.),
                   make_constraint(2, 2, ranged, lhs=-1., rhs=1.)]
    lp_rows = [make_row('r0', 0, knapsack, rhs=4., activity=4., dual_value=-1.5, age=2),
               make_row('r1', 1, cover, lhs=1., activity=1.5, dual_value=0.),
               make_row('r2', 2, ranged, lhs=-1., rhs=1., activity=1., dual_value=0.)]
    lp_columns = [make_column(keys[0], 1., basis_status='upper', upper_bound=1.),
                  make_column(keys[1], 0.5, basis_status='basic', upper_bound=1.),
                  make_column(keys[2], 0.5, basis_status='basic', upper_bound=1.),
                  make_column(keys[3], 0., reduced_cost=1., basis_status='lower')]
    model = FakeModel(variables=variables,
                      constraints=constraints,
                      lp_columns=lp_columns,
                      lp_rows=lp_rows,
                      lp_objective_value=-8.5,
                      n_lps=3,
                      average_solution={keys[0]: 1., keys[1]: 0., keys[2]: 1., keys[3]: 0.},
                      lp_candidates=([keys[2], keys[1]], [0.5, 0.5]),
                      pseudo_candidates=([keys[1], keys[2]], [0.5, 0.5]))
    model.strong_branch_results = {keys[1]: StrongBranchResult(down_bound=-8., up_bound=-7.),
                                   keys[2]: StrongBranchResult(down_bound=-8.25, up_bound=-9.)}
    model.pseudocosts = {(keys[1], BranchDirection.DOWNWARDS): 2.,
                         (keys[1], BranchDirection.UPWARDS): 4.}
    model.pseudocost_counts = {(keys[1], BranchDirection.DOWNWARDS): 1.,
                               (keys[1], BranchDirection.UPWARDS): 1.}
    model.cutoffs = {(keys[1], BranchDirection.UPWARDS): 1.}
    model.branchings = {(keys[1], BranchDirection.UPWARDS): 2}
    return model


@pytest.fixture
def two_var_model():
    return two_variable_model()


@pytest.fixture
def fractional_model():
    return knapsack_model()


def random_model(n_vars=6, n_rows=4, density=0.5, seed=0):
    '''A random LP state with integer variables, shuffled keys and some empty rows.'''
    seed_stochastic_modules_globally(seed)
    keys = list(np.random.permutation(1000)[:n_vars])
    variables = [make_variable(key, position, vtype='INTEGER', objective=float(np.random.randn()), upper_bound=10.)
                 for position, key in enumerate(keys)]
    lp_rows, lp_columns = [], []
    for i in range(n_rows):
        coefs = {key: float(np.random.randint(1, 5)) for key in keys if np.random.rand() < density}
        lp_rows.append(make_row(f'row{i}', i, coefs, rhs=float(np.random.randint(5, 20)), activity=0.))
    for key in keys:
        lp_columns.append(make_column(key, float(np.random.rand() * 10.), upper_bound=10.))
    np.random.shuffle(variables)
    np.random.shuffle(lp_rows)
    return FakeModel(variables=variables, lp_columns=lp_columns, lp_rows=lp_rows)
