"""
Main entry point for the routing simulation application.

This script handles command-line argument parsing, map file loading,
and the initialization of the main simulation loop.
"""
import os
import random
from os import path

import config
from cli import parse_arguments, debug_log
from core.errors import RoutingError
from core.fs.parser import import_map
from core.simulation import Simulation
from ui.map_image import save_map_image


def init_required_files_and_folders():
    """
    Ensures that necessary directories for storing results exist.
    """
    os.makedirs(config.RESULTS_DIR, exist_ok=True)


def run_simulation_from_file(file_path: str, max_ticks: int, tps: float = 0.0,
                             seed: int = None, save_image: bool = False) -> Simulation:
    """
    Loads a map file and runs the routing simulation.

    This function orchestrates the entire process:
    1. Parses the specified .map file to build the town, cars, spawners and events.
    2. Optionally saves a picture of the town.
    3. Creates the Simulation, adds the initial cars and schedules the events.
    4. Runs the simulation until every car arrived or max_ticks is reached.

    Args:
        file_path (str): The path to the .map file.
        max_ticks (int): Maximum number of ticks to run.
        tps (float): The number of simulation ticks to run per second, 0 for no pacing.
        seed (int): Seed for the car spawners.
        save_image (bool): If True, a PNG of the town is written to the results folder.

    Returns:
        The finished Simulation.
    """
    print(f"Loading configuration from '{file_path}'...\n")
    definition = import_map(file_path, rng=random.Random(seed))
    town = definition.town

    print(f"Town loaded: {len(town.vertices())} vertices, {len(town.edges())} roads")
    print(f"Initial cars: {len(definition.cars)}")
    print(f"Spawners: {len(definition.spawners)}")
    print(f"Scheduled events: {len(definition.events)}")

    if save_image:
        init_required_files_and_folders()
        file_name = path.basename(file_path).split('.')[0]
        image_path = path.join(config.RESULTS_DIR, f"{file_name}.png")
        save_map_image(town, image_path, title=f"Town Map: {file_name}")
        print(f"Map image saved to {image_path}")

    simulation = Simulation(town, spawners=definition.spawners)
    for tick, command in definition.events:
        simulation.schedule(tick, command)

    print("\n----- Initial Cars -----")
    for request in definition.cars:
        car = town.create_car(request.start, request.end)
        status = "stranded" if car.stranded else car.describe_path()
        print(f"Car {request.label} (id {car.id}): {status}")

    # --- Main Simulation Loop ---
    print(f"\nLaunching simulation for at most {max_ticks} ticks... (Press Ctrl+C to stop)")
    try:
        simulation.run(max_ticks, tps=tps)
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user.")
    finally:
        print(f"\nSimulation finished after {simulation.t} ticks.")
        print(f"Arrived: {simulation.arrived_count}, evicted: {simulation.evicted_count}, "
              f"still driving: {len(town.cars())}, stranded: {len(town.stranded_cars())}")
        for command in simulation.failed_commands:
            print(f"Failed: {command!r}: {command.error}")

    return simulation


def main(argv=None) -> int:
    # Parse command-line arguments.
    args = parse_arguments(argv)

    debug_log(f"Map file: {args.map}")
    debug_log(f"Ticks: {args.ticks}, TPS: {args.tps}, seed: {args.seed}")

    try:
        run_simulation_from_file(
            file_path=args.map,
            max_ticks=args.ticks,
            tps=args.tps,
            seed=args.seed,
            save_image=args.image
        )
    except (SyntaxError, RoutingError, OSError) as exc:
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
