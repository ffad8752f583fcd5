"""
Closed-loop run of the path tracking MPC against a kinematic plant.

The vehicle follows a wavy reference path given as global waypoints.  Each
cycle the waypoints ahead of the vehicle are moved into its local frame,
fitted with a cubic, and handed to the controller together with the
current speed and tracking errors.

Run from the repo root:
    python scripts/closed_loop.py
    python scripts/closed_loop.py --steps 300 --v-ref 15 --debug
    python scripts/closed_loop.py --config my_config.json --log_path logs
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import Tuple

import numpy as np

import pathmpc as pm

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Closed-loop path tracking MPC demo")
    parser.add_argument("--config", type=str, default=None,
                        help="JSON file with MPCConfig fields")
    parser.add_argument("--steps", type=int, default=150,
                        help="Number of control cycles to simulate")
    parser.add_argument("--v-ref", type=float, default=None,
                        help="Override the target speed of the configuration")
    parser.add_argument("--v0", type=float, default=5.0,
                        help="Initial speed")
    parser.add_argument("--offset", type=float, default=1.5,
                        help="Initial lateral offset from the path")
    parser.add_argument("--debug", action="store_true",
                        help="Log at DEBUG level")
    parser.add_argument("--log_path", type=str, default=None,
                        help="Directory for a timestamped log file")
    return parser.parse_args()


def setup_logging(debug: bool = False, log_path: str = None):
    level = logging.DEBUG if debug else logging.INFO

    log_formatter = logging.Formatter("[%(name)-20.20s] [%(levelname)-6.6s]  %(message)s")
    console_handler = logging.StreamHandler(stream=sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger = logging.getLogger("")
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_path:
        if not os.path.isdir(log_path):
            raise FileNotFoundError(f"Logging path {log_path} does not exist.")

        date_time = datetime.today().strftime('%Y%m%d_%H%M%S')
        file_handler = logging.FileHandler(f"{log_path}/{date_time}.log")
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)


def reference_waypoints(length: float = 400.0, spacing: float = 2.0) -> np.ndarray:
    """Gently curving reference path in world coordinates."""
    xs = np.arange(0.0, length, spacing)
    ys = 4.0 * np.sin(xs / 25.0)
    return np.column_stack([xs, ys])


def to_vehicle_frame(waypoints: np.ndarray, position: np.ndarray, heading: float) -> np.ndarray:
    """Rotate and translate world waypoints into the vehicle frame."""
    shifted = waypoints - position
    cos_h, sin_h = np.cos(-heading), np.sin(-heading)
    x = shifted[:, 0] * cos_h - shifted[:, 1] * sin_h
    y = shifted[:, 0] * sin_h + shifted[:, 1] * cos_h
    return np.column_stack([x, y])


def fit_path(local_waypoints: np.ndarray, n_points: int = 12) -> pm.PathCoefficients:
    """Cubic fit of the next ``n_points`` waypoints ahead of the vehicle."""
    ahead = local_waypoints[local_waypoints[:, 0] > -2.0][:n_points]
    if len(ahead) < 4:
        raise RuntimeError("Ran out of reference waypoints")
    coeffs = np.polyfit(ahead[:, 0], ahead[:, 1], 3)
    return pm.PathCoefficients(coeffs[::-1])


def plant_step(position: np.ndarray, heading: float, speed: float,
               command: pm.ActuatorCommand, dt: float, lf: float) -> Tuple[np.ndarray, float, float]:
    """One step of the kinematic model used by the controller.

    A positive steering angle decreases the heading.
    """
    x, y = position
    x_new = x + speed * np.cos(heading) * dt
    y_new = y + speed * np.sin(heading) * dt
    heading_new = heading - speed / lf * command.delta * dt
    speed_new = speed + command.a * dt
    return np.array([x_new, y_new]), heading_new, speed_new


def run(config: pm.MPCConfig, steps: int, v0: float, offset: float):
    mpc = pm.MPC(config)
    waypoints = reference_waypoints()

    position = np.array([0.0, offset])
    heading = 0.0
    speed = v0

    cte_history = []
    for step in range(steps):
        local = to_vehicle_frame(waypoints, position, heading)
        coeffs = fit_path(local)

        # In the vehicle frame the car sits at the origin heading along +x
        cte = coeffs.evaluate(0.0)
        epsi = -np.arctan(coeffs.derivative(0.0))
        state = pm.VehicleState(0.0, 0.0, 0.0, speed, cte, epsi)

        solution = mpc.solve(state, coeffs)
        command = solution.command
        cte_history.append(abs(cte))

        logger.info("step %3d  v=%6.2f  cte=%+6.3f  epsi=%+6.3f  delta=%+6.3f  a=%+5.2f  cost=%.1f%s",
                    step, speed, cte, epsi, command.delta, command.a, solution.cost,
                    "  (fallback)" if solution.is_fallback else "")

        position, heading, speed = plant_step(position, heading, speed, command,
                                              config.dt, config.lf)

    logger.info("Mean |cte| %.3f, max |cte| %.3f over %d steps",
                float(np.mean(cte_history)), float(np.max(cte_history)), steps)


def main():
    args = parse_args()
    setup_logging(args.debug, args.log_path)

    config = pm.MPCConfig.from_json(args.config) if args.config else pm.MPCConfig(v_ref=10.0, on_failure='hold')
    if args.v_ref is not None:
        config = config.replace(v_ref=args.v_ref)
    logger.info("Running %d cycles with horizon %d, dt %.2f, v_ref %.1f",
                args.steps, config.horizon, config.dt, config.v_ref)

    run(config, args.steps, args.v0, args.offset)


if __name__ == '__main__':
    main()
