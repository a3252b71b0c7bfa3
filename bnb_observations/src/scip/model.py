import abc
import enum
from dataclasses import dataclass
from typing import Hashable, Optional, Tuple

import numpy as np


VARIABLE_TYPES = ('BINARY', 'INTEGER', 'IMPLINT', 'CONTINUOUS')
BASIS_STATUSES = ('lower', 'basic', 'upper', 'zero')


class BranchDirection(enum.Enum):
    DOWNWARDS = 0
    UPWARDS = 1


@dataclass(frozen=True)
class Variable:
    '''
    A problem variable.

    Args:
        key: Solver handle identifying the variable for the current episode.
            Keys may be recycled by the solver across episodes and carry no
            ordering.
        position: Position of the variable in the original problem (its
            probindex), contiguous over [0, n_vars).
        vtype: One of VARIABLE_TYPES.
        lower_bound, upper_bound: Local bounds, +-inf when unbounded.
    '''
    key: Hashable
    position: int
    name: str
    vtype: str
    objective: float
    lower_bound: float
    upper_bound: float


@dataclass(frozen=True)
class Constraint:
    '''A linear constraint lhs <= sum(values * vars) <= rhs of the current problem.'''
    key: Hashable
    position: int
    name: str
    lhs: float
    rhs: float
    var_keys: Tuple[Hashable, ...]
    values: Tuple[float, ...]


@dataclass(frozen=True)
class LpColumn:
    var_key: Hashable
    solution_value: float
    reduced_cost: float
    basis_status: str
    age: int
    lower_bound: float
    upper_bound: float


@dataclass(frozen=True)
class LpRow:
    '''A row lhs <= sum(values * vars) + constant <= rhs of the focus node LP.'''
    key: Hashable
    position: int
    lhs: float
    rhs: float
    constant: float
    var_keys: Tuple[Hashable, ...]
    values: Tuple[float, ...]
    activity: float
    dual_value: float
    age: int


@dataclass(frozen=True)
class StrongBranchResult:
    down_bound: float
    up_bound: float
    down_infeasible: bool = False
    up_infeasible: bool = False


@dataclass(frozen=True)
class NodeInfo:
    '''The focus node. The root node has parent_number -1 and a NaN parent_lowerbound.'''
    number: int
    depth: int
    lowerbound: float
    estimate: float
    n_added_conss: int
    n_vars: int
    parent_number: int = -1
    parent_lowerbound: float = np.nan


class Model(abc.ABC):
    '''
    Read-only view of a solver state, as consumed by the observation functions.

    Every query answers for the state of the solver at the time of the call.
    Implementations raise bnb_observations.errors.ModelQueryError when a
    query cannot be answered in the current state. Infinite bounds and sides
    are reported as +-numpy.inf.
    '''

    @abc.abstractmethod
    def get_variables(self):
        '''Returns the list of Variable of the current problem.'''

    @abc.abstractmethod
    def get_constraints(self):
        '''Returns the list of linear Constraint of the current problem.'''

    @abc.abstractmethod
    def get_lp_columns(self):
        '''Returns the list of LpColumn of the focus node LP.'''

    @abc.abstractmethod
    def get_lp_rows(self):
        '''Returns the list of LpRow of the focus node LP.'''

    @abc.abstractmethod
    def is_lp_solved(self) -> bool:
        pass

    @abc.abstractmethod
    def get_lp_objective_value(self) -> float:
        pass

    @abc.abstractmethod
    def get_n_lps(self) -> int:
        '''Number of LPs solved so far in the episode.'''

    @abc.abstractmethod
    def get_incumbent_values(self):
        '''Mapping var_key -> value in the best known solution, or None without incumbent.'''

    @abc.abstractmethod
    def get_average_solution_values(self):
        '''Mapping var_key -> average value over the solutions found so far.'''

    @abc.abstractmethod
    def get_lp_branch_candidates(self):
        '''Returns (var_keys, solution_values) of the fractional LP candidates.'''

    @abc.abstractmethod
    def get_pseudo_branch_candidates(self):
        '''Returns (var_keys, solution_values) of the non-fixed discrete variables.'''

    @abc.abstractmethod
    def get_pseudocost(self, var_key, direction: BranchDirection) -> float:
        '''Per unit pseudocost of the variable in the given direction.'''

    @abc.abstractmethod
    def get_pseudocost_count(self, var_key, direction: BranchDirection) -> float:
        '''Number of branchings in the given direction recorded in the variable history, 0 without history.'''

    @abc.abstractmethod
    def get_pseudocost_score(self, var_key, solution_value: float) -> float:
        '''Product score of the pseudocost gains of branching on the variable at solution_value.'''

    @abc.abstractmethod
    def get_n_cutoffs(self, var_key, direction: BranchDirection) -> float:
        '''Number of cutoffs after branching in the given direction, NaN when the solver does not report it.'''

    @abc.abstractmethod
    def get_n_branchings(self, var_key, direction: BranchDirection) -> int:
        pass

    @abc.abstractmethod
    def strong_branch(self, var_keys, integral: bool):
        '''
        Runs strong branching on each variable and returns one
        StrongBranchResult per key, in the same order.

        Args:
            integral: Branch on variables with an integral LP value
                (pseudo candidates) rather than fractional ones.
        '''

    @abc.abstractmethod
    def get_focus_node(self) -> Optional[NodeInfo]:
        pass
