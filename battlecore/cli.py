"""
Battlecore CLI - Command-line interface for the engine.

Usage:
    battlecore simulate [--difficulty hard] [--seed 7]   Planner vs planner battle
    battlecore stats <species> [--rarity Epic] [--vs x]  Derived stat preview
    battlecore serve [--port 8000]                       Run the REST API
"""

import argparse
import sys

from .logging_config import configure_logging


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Battlecore - Creature battle simulation engine",
        prog="battlecore",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run a planner vs planner battle")
    simulate_parser.add_argument("--difficulty", default="medium",
                                 help="Opponent tier: easy, medium, hard, expert")
    simulate_parser.add_argument("--player-difficulty", default="medium",
                                 help="Tier personality that plays the player side")
    simulate_parser.add_argument("--seed", type=int, default=0, help="Battle seed")
    simulate_parser.add_argument("--max-turns", type=int, default=60, help="Stop after this many turns")
    simulate_parser.add_argument("--quiet", action="store_true", help="Only print the result")

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Preview derived stats for a species")
    stats_parser.add_argument("species", help="Species id (e.g. emberfang)")
    stats_parser.add_argument("--rarity", default="Common", help="Common, Rare, Epic or Legendary")
    stats_parser.add_argument("--form", type=int, default=0, help="Evolution form 0-3")
    stats_parser.add_argument("--vs", help="Opponent species id for matchup odds")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API with uvicorn")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "stats":
        return cmd_stats(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Run a full battle with planners on both sides."""
    from .bots import OpponentPlanner, personality_for
    from .content import generate_opponent, generate_player_collection
    from .engine_core import SideId, apply_action, start_battle
    from .session import run_opponent_turn

    try:
        player_planner = OpponentPlanner(
            personality=personality_for(args.player_difficulty), seed=args.seed
        )
        opponent = generate_opponent(args.difficulty, seed=args.seed)
    except (KeyError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    collection = generate_player_collection(seed=args.seed)
    state = start_battle(
        player_deck=collection.deck,
        player_hand=collection.hand,
        opponent=opponent,
        player_tools=collection.tools,
        player_spells=collection.spells,
        seed=args.seed,
        battle_id=f"sim-{args.seed}",
    )
    opponent_planner = OpponentPlanner(seed=args.seed + 1)
    if not args.quiet:
        print(f"{player_planner.get_name()} vs {opponent_planner.get_name()}")

    printed = 0
    while not state.is_terminal and state.turn_number <= args.max_turns:
        if state.active_side == SideId.PLAYER:
            for action in player_planner.plan_turn(state, SideId.PLAYER):
                result = apply_action(state, action)
                if result.success:
                    state = result.new_state
                if state.is_terminal or state.active_side != SideId.PLAYER:
                    break
        else:
            state = run_opponent_turn(state, opponent_planner).state

        if not args.quiet:
            for entry in state.log[printed:]:
                print(f"[T{entry.turn}] {entry.message}")
            printed = len(state.log)

    print()
    if state.winner is None:
        print(f"No winner after {args.max_turns} turns.")
    else:
        print(f"Winner: {state.winner.value} (turn {state.turn_number})")
    return 0


def cmd_stats(args):
    """Print derived stats for a species."""
    from .content import build_creature, get_species
    from .engine_core.combat import expected_damage
    from .engine_core.stats import battle_odds, creature_power

    try:
        species = get_species(args.species)
        creature = build_creature(species, species.species_id, rarity=args.rarity, form=args.form)
    except (KeyError, ValueError) as e:
        print(f"Error: unknown species or rarity: {e}")
        sys.exit(1)

    print(f"{creature.species_name} ({creature.rarity.value}, form {creature.form})")
    for name, value in creature.stats.to_dict().items():
        print(f"  {name:<18} {value:g}")
    print(f"  {'power':<18} {creature_power(creature)}")

    if args.vs:
        try:
            other_species = get_species(args.vs)
        except KeyError:
            print(f"Error: unknown species: {args.vs}")
            sys.exit(1)
        other = build_creature(other_species, other_species.species_id)
        print(f"\nvs {other.species_name}:")
        print(f"  expected damage    {expected_damage(creature, other)}")
        print(f"  battle odds        {battle_odds(creature, other):.0%}")
    return 0


def cmd_serve(args):
    """Run the REST API."""
    import uvicorn

    uvicorn.run("battlecore.api.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    main()
