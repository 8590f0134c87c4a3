# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import sys
import logging
import threading
from numbers import Integral
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import errors
from . import utils
from . import initialization
from . import confinement as conf
from .constraints import ConstraintSet
from .constraints import as_constraints
from .particle import Best
from .swarm import Coefficients
from .swarm import Swarm


logger = logging.getLogger(__name__)
_IterationCallback = tp.Callable[["ParticleSwarmOptimizationSolver", int, Best, Best], None]
_STREAMS = ("stdout", "stderr")
_DEFAULT_COEFFICIENTS = Coefficients()


def get_logger(
    name: tp.Union[None, str, logging.Logger], log_level: tp.Union[None, int, str] = None
) -> logging.Logger:
    """Returns the logger to use for the solver messages: either the provided logger,
    a logger writing to "stdout" or "stderr", or the module logger if None.
    The level is only set on provided loggers.
    """
    if isinstance(name, logging.Logger):
        out = name
    elif name is None:
        out = logger
    elif name in _STREAMS:
        out = logging.getLogger(f"{__name__}.{name}")
        stream = getattr(sys, name)
        if not any(getattr(h, "stream", None) is stream for h in out.handlers):
            handler = logging.StreamHandler(stream)
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
            out.addHandler(handler)
    else:
        raise errors.ConfigurationError(f'logger must be a logging.Logger, "stdout" or "stderr" (got {name!r})')
    if log_level is not None and name is not None:  # the module logger is shared by all solvers
        out.setLevel(log_level)
    return out


class _RunState:
    """Statistics of one call to solve"""

    def __init__(self) -> None:
        self.num_iterations = 0
        self.num_evaluations = 0
        self.history: tp.List[Best] = []


class ParticleSwarmOptimizationSolver:  # pylint: disable=too-many-instance-attributes
    """Particle Swarm Optimization solver, maximizing a function over a
    continuous space with the constrained PSO variant (clamping particles within
    the constraints after each move).

    Each iteration evaluates the function on all particles, computes the swarm
    attractor (highest personal best), updates the overall best and moves the
    particles. Iterations continue until the exit condition returns True, and
    at least one iteration is always performed.

    Parameters
    ----------
    swarm_size: int or None
        number of particles. Defaults to the number of start positions if provided,
        else to 40 (SPSO 2011 recommendation)
    constraints: ConstraintSet, dict or None
        box with "min" and "max" vectors, used for initialization (if no start values nor
        random functions are provided) and for confinement
    random_position_func: callable or None
        function without argument returning a random position, called once per particle
    random_velocity_func: callable or None
        function without argument returning a random velocity, called once per particle
    start_positions: sequence of vectors or None
        initial positions (one per particle), with highest priority
    start_velocities: sequence of vectors or None
        initial velocities (one per particle), with highest priority
    exit_condition: callable or None
        function :code:`(iteration, best) -> bool` called at the end of each iteration with the
        iteration number (starting at 1) and the overall best. Returning True stops the loop.
        If None, the loop only stops through :code:`max_iterations` or a callback raising
        :code:`EarlyStopping`
    logger: logging.Logger, "stdout", "stderr" or None
        logger for the iteration messages (defaults to this module logger)
    log_level: int, str or None
        level to set to the provided logger (ignored if no logger is provided)
    quiet: bool
        whether to skip logging the attractor of each iteration
    omega: float
        inertia weight of the update rule
    phip: float
        cognitive coefficient of the update rule
    phig: float
        social coefficient of the update rule
    confinement: str or callable
        confinement policy applied to particles leaving the constraints ("clamp", "bounce" or "none")
    seed: int or None
        seed of the random state, for reproducibility

    Note
    ----
    Reference: equation 4.30 of
    J. Sun, C.-H. Lai and X.-J. Wu, Particle Swarm Optimisation: Classical and Quantum Perspectives,
    CRC Press, 2011.
    """

    DEFAULT_SWARM_SIZE = 40

    # pylint: disable=too-many-arguments,too-many-locals
    def __init__(
        self,
        swarm_size: tp.Optional[int] = None,
        constraints: tp.Union[None, ConstraintSet, tp.Mapping[str, tp.ArrayLike]] = None,
        random_position_func: tp.Optional[tp.VectorFunc] = None,
        random_velocity_func: tp.Optional[tp.VectorFunc] = None,
        start_positions: tp.Optional[tp.Sequence[tp.ArrayLike]] = None,
        start_velocities: tp.Optional[tp.Sequence[tp.ArrayLike]] = None,
        exit_condition: tp.Optional[tp.ExitCondition] = None,
        logger: tp.Union[None, str, logging.Logger] = None,  # pylint: disable=redefined-outer-name
        log_level: tp.Union[None, int, str] = None,
        quiet: bool = False,
        omega: float = _DEFAULT_COEFFICIENTS.omega,
        phip: float = _DEFAULT_COEFFICIENTS.phip,
        phig: float = _DEFAULT_COEFFICIENTS.phig,
        confinement: tp.Union[str, conf.Confinement] = conf.DEFAULT,
        seed: tp.Optional[int] = None,
    ) -> None:
        if swarm_size is None:
            swarm_size = len(start_positions) if start_positions is not None else self.DEFAULT_SWARM_SIZE
        if isinstance(swarm_size, bool) or not isinstance(swarm_size, Integral) or swarm_size <= 0:
            raise errors.ConfigurationError(f"swarm_size must be a strictly positive integer (got {swarm_size!r})")
        self.swarm_size = int(swarm_size)
        self.constraints = as_constraints(constraints)
        for name, func in [
            ("random_position_func", random_position_func),
            ("random_velocity_func", random_velocity_func),
            ("exit_condition", exit_condition),
        ]:
            if func is not None and not callable(func):
                raise errors.ConfigurationError(f"{name} must be callable (got {func!r})")
        self.random_position_func = random_position_func
        self.random_velocity_func = random_velocity_func
        self.start_positions = start_positions
        self.start_velocities = start_velocities
        self.exit_condition = exit_condition
        self.logger = get_logger(logger, log_level)
        self.quiet = quiet
        self.coefficients = Coefficients(omega=omega, phip=phip, phig=phig).check()
        conf.get_confinement(confinement)  # early check of the name
        self.confinement = confinement
        self.seed = seed
        self._random_state: tp.Optional[np.random.RandomState] = None  # lazy initialization
        self._random_state_lock = threading.Lock()
        self._callbacks: tp.Dict[str, tp.List[_IterationCallback]] = {}
        # runs in flight are tracked per thread, so that concurrent calls to solve do not mix
        self._running = threading.local()
        self._last_run = _RunState()

    @property
    def random_state(self) -> np.random.RandomState:
        """np.random.RandomState: random state used for initialization and for the update rule.
        It is seeded with the seed parameter if provided, and can be replaced.
        """
        with self._random_state_lock:
            if self._random_state is None:
                seed = self.seed if self.seed is not None else np.random.randint(2 ** 32, dtype=np.uint32)
                self._random_state = np.random.RandomState(seed)
            return self._random_state

    @random_state.setter
    def random_state(self, random_state: np.random.RandomState) -> None:
        with self._random_state_lock:
            self._random_state = random_state

    def _run(self) -> _RunState:
        run: tp.Optional[_RunState] = getattr(self._running, "run", None)
        return self._last_run if run is None else run

    @property
    def num_iterations(self) -> int:
        """int: Number of iterations performed during the current run (when called from the thread
        running it, eg. in a callback), or else during the last finished run.
        """
        return self._run().num_iterations

    @property
    def num_evaluations(self) -> int:
        """int: Number of calls to the objective function during the current or the last run."""
        return self._run().num_evaluations

    @property
    def history(self) -> tp.List[Best]:
        """list of Best: overall best at the end of each iteration of the current or the last run."""
        return self._run().history

    def register_callback(self, name: str, callback: _IterationCallback) -> None:
        """Add a callback method called at the end of each iteration, with arguments
        :code:`(solver, iteration, attractor, overall_best)`. This can be useful for custom logging.
        Raising :code:`EarlyStopping` in a callback stops the run after the current iteration.

        Parameters
        ----------
        name: str
            name of the event to register the callback for (only :code:`iteration` for now)
        callback: callable
            a callable taking the solver, the iteration number, the iteration attractor and the overall best
        """
        assert name in ["iteration"], f'Only "iteration" callbacks are supported (not {name})'
        self._callbacks.setdefault(name, []).append(callback)

    def remove_all_callbacks(self) -> None:
        """Removes all registered callables"""
        self._callbacks = {}

    def build_swarm(self) -> Swarm:
        """Resolves the initial positions and velocities and creates the swarm

        Raises
        ------
        ConfigurationError
            if there is not enough information to initialize the particles
        DimensionMismatchError
            if the initial values or the constraints do not share the same dimension
        """
        rng = self.random_state
        positions = initialization.resolve_positions(
            self.swarm_size,
            rng,
            start_positions=self.start_positions,
            random_position_func=self.random_position_func,
            constraints=self.constraints,
        )
        velocities = initialization.resolve_velocities(
            positions,
            rng,
            start_velocities=self.start_velocities,
            random_velocity_func=self.random_velocity_func,
            constraints=self.constraints,
        )
        return Swarm(
            positions,
            velocities,
            constraints=self.constraints,
            coefficients=self.coefficients,
            confinement=self.confinement,
            random_state=rng,
        )

    def solve(
        self,
        func: tp.ObjectiveFunction,
        concurrent: bool = False,
        executor: tp.Optional[tp.ExecutorLike] = None,
        max_iterations: tp.Optional[int] = None,
    ) -> Best:
        """Optimization (maximization) procedure

        Parameters
        ----------
        func: callable
            function to maximize, taking a position (np.ndarray) and returning its height (float)
        concurrent: bool
            whether to evaluate all particles at once in concurrent jobs (the function must be
            thread safe), or sequentially
        executor: Executor
            An executor object, with method :code:`submit(callable, *args, **kwargs)` and returning a Future-like object
            with method :code:`result() -> float`, used for concurrent evaluations.
            Defaults to a :code:`concurrent.futures.ThreadPoolExecutor` with one thread per particle
        max_iterations: int or None
            maximum number of iterations, in addition to the exit condition

        Returns
        -------
        Best
            the highest (position, height) found during the run

        Note
        ----
        Errors raised by the function are not caught and abort the run. In concurrent mode,
        all jobs of the iteration are waited for before the first error (in particle order) is raised.
        """
        if max_iterations is not None and max_iterations <= 0:
            raise errors.ConfigurationError(f"max_iterations must be strictly positive (got {max_iterations})")
        swarm = self.build_swarm()
        run = _RunState()
        previous = getattr(self._running, "run", None)  # solve may be called from a callback
        self._running.run = run
        try:
            return self._iterate(swarm, func, run, concurrent, executor, max_iterations)
        finally:
            self._running.run = previous
            self._last_run = run

    def _iterate(
        self,
        swarm: Swarm,
        func: tp.ObjectiveFunction,
        run: _RunState,
        concurrent: bool,
        executor: tp.Optional[tp.ExecutorLike],
        max_iterations: tp.Optional[int],
    ) -> Best:
        iteration = 0
        overall_best: tp.Optional[Best] = None
        # do-while loop: the exit conditions are only checked at the end of an iteration
        while True:
            iteration += 1
            self.logger.debug("PSO - Starting iteration %s", iteration)
            utils.evaluate(swarm.particles, func, concurrent=concurrent, executor=executor)
            run.num_evaluations += len(swarm)
            attractor = swarm.update_attractor()
            overall_best = Best.max(overall_best, attractor)
            assert overall_best is not None
            run.num_iterations = iteration
            run.history.append(overall_best)
            if not self.quiet:
                self.logger.info(
                    "> iter %s, best: %s, %s", iteration, attractor.position.tolist(), attractor.height
                )
            early_stop = False
            for callback in self._callbacks.get("iteration", []):
                try:
                    callback(self, iteration, attractor, overall_best)
                except errors.EarlyStopping:
                    self.logger.debug("Early stopping requested by %s at iteration %s", callback, iteration)
                    early_stop = True
            swarm.mutate()
            if early_stop or self._should_stop(iteration, overall_best, max_iterations):
                break
        return overall_best

    def _should_stop(self, iteration: int, best: Best, max_iterations: tp.Optional[int]) -> bool:
        if max_iterations is not None and iteration >= max_iterations:
            return True
        return self.exit_condition is not None and bool(self.exit_condition(iteration, best))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(swarm_size={self.swarm_size}, constraints={self.constraints}, "
            f"coefficients={tuple(self.coefficients)}, confinement={self.confinement!r})"
        )
