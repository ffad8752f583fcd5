from pathmpc.errors import MPCError, ConfigurationError, ConvergenceFailure
from pathmpc.config import MPCConfig, CostWeights
from pathmpc.state import VehicleState, ActuatorCommand, PathCoefficients
from pathmpc.layout import DecisionLayout
from pathmpc.bounds import Bounds
from pathmpc.solver import NonlinearSolver, IpoptSolver, NLPProblem, SolveResult, SolverStatus
from pathmpc.extractor import MPCSolution
from pathmpc.controller import MPC
