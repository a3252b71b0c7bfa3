from bnb_observations.src.errors import ModelQueryError
from bnb_observations.src.scip.model import (Model, BranchDirection, Variable, Constraint,
                                             LpColumn, LpRow, StrongBranchResult, NodeInfo)

import functools

import numpy as np
import pyscipopt
from pyscipopt import SCIP_BRANCHDIR, SCIP_LPSOLSTAT, SCIP_STAGE


def _translate_errors(method):
    '''Re-raises solver failures as ModelQueryError, chaining the original error.'''
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except ModelQueryError:
            raise
        except Exception as e:
            raise ModelQueryError(f'{method.__name__} failed: {e}') from e
    return wrapper


class PyScipOptModel(Model):
    '''
    Model backed by a pyscipopt.Model.

    Variable keys are SCIP variable pointers, so they are only meaningful
    while the underlying SCIP problem is alive. Variable positions are the
    positions in SCIPgetVars (the probindex) once the problem is transformed,
    and the load order of the original variables before that. LP row keys are
    SCIP row indices, which stay unique for the life of the problem, so a cut
    replacing another row at the same LP position gets a new key.
    '''
    def __init__(self, scip_model):
        self.m = scip_model
        self._vars_by_key = None

    @classmethod
    def from_ecole(cls, model):
        '''Wraps an ecole.scip.Model through its pyscipopt accessor.'''
        return cls(model.as_pyscipopt())

    def as_pyscipopt(self):
        return self.m

    def _is_transformed(self):
        return self.m.getStage() >= SCIP_STAGE.TRANSFORMED

    def _bound(self, value):
        if self.m.isInfinity(value):
            return np.inf
        if self.m.isInfinity(-value):
            return -np.inf
        return float(value)

    def _scip_vars(self):
        return self.m.getVars(transformed=self._is_transformed())

    def _check_lp_solved(self):
        if not self.is_lp_solved():
            raise ModelQueryError('The LP relaxation of the focus node is not solved.')

    def _var(self, key):
        if self._vars_by_key is None or key not in self._vars_by_key:
            self._vars_by_key = {var.ptr(): var for var in self._scip_vars()}
        return self._vars_by_key[key]

    @staticmethod
    def _direction(direction):
        if direction == BranchDirection.UPWARDS:
            return SCIP_BRANCHDIR.UPWARDS
        return SCIP_BRANCHDIR.DOWNWARDS

    @_translate_errors
    def get_variables(self):
        variables = []
        for position, var in enumerate(self._scip_vars()):
            variables.append(Variable(key=var.ptr(),
                                      position=position,
                                      name=var.name,
                                      vtype=var.vtype(),
                                      objective=float(var.getObj()),
                                      lower_bound=self._bound(var.getLbLocal()),
                                      upper_bound=self._bound(var.getUbLocal())))
        return variables

    @_translate_errors
    def get_constraints(self):
        name_to_key = {var.name: var.ptr() for var in self._scip_vars()}
        constraints = []
        for cons in self.m.getConss():
            if cons.getConshdlrName() != 'linear':
                continue
            coefs = self.m.getValsLinear(cons)
            var_keys = tuple(name_to_key[name] for name in coefs.keys())
            constraints.append(Constraint(key=len(constraints),
                                          position=len(constraints),
                                          name=cons.name,
                                          lhs=self._bound(self.m.getLhs(cons)),
                                          rhs=self._bound(self.m.getRhs(cons)),
                                          var_keys=var_keys,
                                          values=tuple(float(v) for v in coefs.values())))
        return constraints

    @_translate_errors
    def get_lp_columns(self):
        self._check_lp_solved()
        columns = []
        for col in self.m.getLPColsData():
            var = col.getVar()
            columns.append(LpColumn(var_key=var.ptr(),
                                    solution_value=float(col.getPrimsol()),
                                    reduced_cost=float(self.m.getVarRedcost(var)),
                                    basis_status=col.getBasisStatus(),
                                    age=int(col.getAge()),
                                    lower_bound=self._bound(col.getLb()),
                                    upper_bound=self._bound(col.getUb())))
        return columns

    @_translate_errors
    def get_lp_rows(self):
        self._check_lp_solved()
        rows = []
        for row in self.m.getLPRowsData():
            cols = row.getCols()
            rows.append(LpRow(key=row.getIndex(),
                              position=row.getLPPos(),
                              lhs=self._bound(row.getLhs()),
                              rhs=self._bound(row.getRhs()),
                              constant=float(row.getConstant()),
                              var_keys=tuple(col.getVar().ptr() for col in cols),
                              values=tuple(float(v) for v in row.getVals()),
                              activity=float(self.m.getRowLPActivity(row)),
                              dual_value=float(self.m.getRowDualSol(row)),
                              age=int(row.getAge())))
        return rows

    @_translate_errors
    def is_lp_solved(self):
        if self.m.getStage() != SCIP_STAGE.SOLVING:
            return False
        return self.m.getLPSolstat() == SCIP_LPSOLSTAT.OPTIMAL

    @_translate_errors
    def get_lp_objective_value(self):
        self._check_lp_solved()
        return float(self.m.getLPObjVal())

    @_translate_errors
    def get_n_lps(self):
        return int(self.m.getNLPs())

    @_translate_errors
    def get_incumbent_values(self):
        if self.m.getNSols() == 0:
            return None
        sol = self.m.getBestSol()
        return {var.ptr(): float(self.m.getSolVal(sol, var)) for var in self._scip_vars()}

    @_translate_errors
    def get_average_solution_values(self):
        return {var.ptr(): float(var.getAvgSol()) for var in self._scip_vars()}

    @_translate_errors
    def get_lp_branch_candidates(self):
        cands, cands_sol, *_ = self.m.getLPBranchCands()
        return [var.ptr() for var in cands], [float(v) for v in cands_sol]

    @_translate_errors
    def get_pseudo_branch_candidates(self):
        cands, *_ = self.m.getPseudoBranchCands()
        return [var.ptr() for var in cands], [float(var.getLPSol()) for var in cands]

    @_translate_errors
    def get_pseudocost(self, var_key, direction):
        var = self._var(var_key)
        return float(self.m.getVarPseudocost(var, self._direction(direction)))

    @_translate_errors
    def get_pseudocost_count(self, var_key, direction):
        var = self._var(var_key)
        return float(var.getNBranchings(self._direction(direction)))

    @_translate_errors
    def get_pseudocost_score(self, var_key, solution_value):
        var = self._var(var_key)
        return float(self.m.getVarPseudocostScore(var, solution_value))

    @_translate_errors
    def get_n_cutoffs(self, var_key, direction):
        var = self._var(var_key)
        # not exposed by every PySCIPOpt release
        if not hasattr(var, 'getCutoffSum'):
            return np.nan
        return float(var.getCutoffSum(self._direction(direction)))

    @_translate_errors
    def get_n_branchings(self, var_key, direction):
        var = self._var(var_key)
        return int(var.getNBranchings(self._direction(direction)))

    @_translate_errors
    def strong_branch(self, var_keys, integral):
        results = []
        self.m.startStrongbranch()
        try:
            for key in var_keys:
                down, up, _, _, down_inf, up_inf, _, _, lperror = self.m.getVarStrongbranch(
                    self._var(key), 2147483647, idempotent=True, integral=integral)
                if lperror:
                    raise ModelQueryError(f'LP error while strong branching on variable {self._var(key).name}')
                results.append(StrongBranchResult(down_bound=float(down),
                                                  up_bound=float(up),
                                                  down_infeasible=bool(down_inf),
                                                  up_infeasible=bool(up_inf)))
        finally:
            self.m.endStrongbranch()
        return results

    @_translate_errors
    def get_focus_node(self):
        if self.m.getStage() != SCIP_STAGE.SOLVING:
            return None
        node = self.m.getCurrentNode()
        if node is None:
            return None
        parent = node.getParent()
        return NodeInfo(number=node.getNumber(),
                        depth=node.getDepth(),
                        lowerbound=float(node.getLowerbound()),
                        estimate=float(node.getEstimate()),
                        n_added_conss=node.getNAddedConss(),
                        n_vars=self.m.getNVars(),
                        parent_number=-1 if parent is None else parent.getNumber(),
                        parent_lowerbound=np.nan if parent is None else float(parent.getLowerbound()))


def read_problem(path, **params):
    '''Convenience loader: reads an instance file into a fresh PyScipOptModel.'''
    m = pyscipopt.Model()
    m.hideOutput()
    if params:
        m.setParams(params)
    m.readProblem(str(path))
    return PyScipOptModel(m)
