from bnb_observations.src.scip.model import Model, Variable, Constraint, LpColumn, LpRow, StrongBranchResult, NodeInfo, BranchDirection, VARIABLE_TYPES, BASIS_STATUSES
