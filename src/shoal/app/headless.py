from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

_BASIC_HEADER = [
    "tick",
    "population",
    "neighbor_checks",
    "avg_speed",
    "max_speed_ratio",
    "occupied_cells",
    "target_x",
    "target_y",
    "target_z",
    "dt",
    "tick_ms",
]

_TRAJECTORY_HEADER = ["tick", "id", "x", "y", "z", "vx", "vy", "vz", "radius", "yaw", "pitch"]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.neighbor_checks,
        f"{metrics.average_speed:.4f}",
        f"{metrics.max_speed_ratio:.4f}",
        metrics.occupied_cells,
        f"{metrics.target_x:.4f}",
        f"{metrics.target_y:.4f}",
        f"{metrics.target_z:.4f}",
        f"{metrics.dt:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_trajectory_rows(world: World, tick: int) -> list[list[object]]:
    rows: list[list[object]] = []
    for boid in world.boids:
        rows.append(
            [
                tick,
                boid.id,
                f"{boid.position.x:.5f}",
                f"{boid.position.y:.5f}",
                f"{boid.position.z:.5f}",
                f"{boid.velocity.x:.5f}",
                f"{boid.velocity.y:.5f}",
                f"{boid.velocity.z:.5f}",
                f"{boid.radius:.4f}",
                f"{boid.yaw:.4f}",
                f"{boid.pitch:.4f}",
            ]
        )
    return rows


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "basic",
    summary_path: Optional[Path] = None,
    config_path: Optional[Path] = None,
    dt: Optional[float] = None,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    frame_dt = config.time_step if dt is None else dt

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "trajectory"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config)

    tick_ms_series: list[float] = []
    neighbor_checks_series: list[float] = []
    speed_series: list[float] = []

    csv_file = Path(log_path).open("w", newline="") if log_path else None
    try:
        writer = csv.writer(csv_file) if csv_file else None
        if writer:
            writer.writerow(_TRAJECTORY_HEADER if log_mode == "trajectory" else _BASIC_HEADER)

        for _ in range(steps):
            metrics = world.step(frame_dt)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            neighbor_checks_series.append(float(metrics.neighbor_checks))
            speed_series.append(metrics.average_speed)

            if writer:
                if log_mode == "trajectory":
                    writer.writerows(_format_trajectory_rows(world, metrics.tick))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        summary = {
            "steps": steps,
            "seed": config.seed,
            "boid_count": config.boid_count,
            "dt": frame_dt,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "neighbor_checks": _summary_stats(neighbor_checks_series),
            "average_speed": _summary_stats(speed_series),
            "final_target": world.snapshot().target,
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless shoal simulation")
    parser.add_argument("--steps", type=int, default=600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file overriding simulation settings")
    parser.add_argument("--dt", type=float, default=None, help="Frame time in seconds (defaults to config time_step)")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick output")
    parser.add_argument(
        "--log-format",
        choices=["basic", "trajectory"],
        default="basic",
        help="basic writes one metrics row per tick; trajectory writes one row per boid per tick.",
    )
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON file to write summary stats.")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level (DEBUG, INFO, WARNING, ...)")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        config_path=args.config,
        dt=args.dt,
    )


if __name__ == "__main__":
    main()
