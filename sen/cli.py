"""
Sen CLI - Command-line interface for the engine.

Usage:
    sen serve [--host H] [--port P]           Run the room host API
    sen simulate [--players N] [--seed S]     Play bot games from a seed
"""

import argparse
import logging
import sys

from .config import Settings


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Sen - Real-time dream card game engine",
        prog="sen",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP/WebSocket host")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Simulate command
    sim_parser = subparsers.add_parser("simulate", help="Play a bot game")
    sim_parser.add_argument("--players", type=int, default=2, help="Number of bots (2-5)")
    sim_parser.add_argument("--seed", type=int, default=None, help="Seed for deals and bots")
    sim_parser.add_argument("--rounds", type=int, default=20, help="Maximum rounds to play")
    sim_parser.add_argument(
        "--wake-up-chance", type=float, default=0.1,
        help="Probability a bot calls wake-up when it may",
    )

    args = parser.parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args, settings)
    elif args.command == "simulate":
        cmd_simulate(args, settings)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args, settings):
    """Run the API under uvicorn."""
    import uvicorn

    print(f"Sen engine ({settings.env}) on http://{args.host}:{args.port}")
    uvicorn.run(
        "sen.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


def cmd_simulate(args, settings):
    """Play bot rounds and print the scores."""
    from .bots import RandomPolicy, StepLimitExceeded, play_game
    from .engine_core import create_initial_state, winners

    players = [(f"bot{i + 1}", f"Bot {i + 1}") for i in range(args.players)]
    try:
        state = create_initial_state(
            "simulation", players, target_score=settings.target_score, seed=args.seed
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    policies = {
        player_id: RandomPolicy(
            seed=None if args.seed is None else args.seed + seat,
            wake_up_chance=args.wake_up_chance,
        )
        for seat, (player_id, _) in enumerate(players)
    }

    print(f"Seed: {state.random_seed}")
    try:
        state = play_game(state, policies, max_rounds=args.rounds)
    except StepLimitExceeded as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"\nAfter round {state.round_number} ({state.phase.value}):")
    for p in state.players:
        print(f"  {p.display_name:<8} round {p.round_score:>3}  total {p.total_score:>4}")
    if state.wake_up_caller_id:
        print(f"Last wake-up called by {state.wake_up_caller_id}")
    best = winners(state)
    print(f"Leading: {', '.join(p.display_name for p in best)}")


if __name__ == "__main__":
    main()
