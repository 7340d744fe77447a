#!/usr/bin/env python3
"""
AI Workout Generator
Command-line entry point: generate one workout for a user and print it.
"""

import argparse
import json
import sys

from workout_generator.config import get_api_key, load_config
from workout_generator.generation_client import GenerationClient
from workout_generator.generator import WorkoutGenerator
from workout_generator.pipeline import RequestContext, generate_workout
from workout_generator.workout_db import WorkoutDB


def print_banner():
    """Print welcome banner."""
    banner = """
╔══════════════════════════════════════════════════════════════╗
║                                                              ║
║        AI WORKOUT GENERATOR                                  ║
║        Powered by Claude AI                                  ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
    """
    print(banner)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a workout with Claude AI.")
    parser.add_argument("--user", required=True, help="User id the workout belongs to")
    parser.add_argument("--muscle", action="append", default=[], help="Muscle focus (repeat, 1-4)")
    parser.add_argument("--focus", action="append", default=[], help="Workout focus (repeat)")
    parser.add_argument("--count", type=int, default=4, help="Number of exercises (1-10)")
    parser.add_argument("--instructions", default=None, help="Special instructions (max 140 characters)")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--db", default=None, help="SQLite database path (overrides config)")
    return parser.parse_args(argv)


def print_workout(db, workout_id):
    workout = db.get_workout(workout_id)
    summary = workout["workout_data"]["summary"]

    print("\n" + "=" * 60)
    print("YOUR GENERATED WORKOUT")
    print("=" * 60)
    for ex in db.get_workout_exercises(workout_id):
        print(f"\n{ex['order_index']}. {ex['name']}")
        print(f"   {ex['sets']} x {ex['reps']} | rest {ex['rest_seconds']}s | "
              f"{ex['equipment']} | {ex['movement_type']}")
        if ex["rationale"]:
            print(f"   {ex['rationale']}")

    print("\n" + "-" * 60)
    print(f"  Total sets: {summary['total_sets']}")
    print(f"  Estimated duration: {summary['estimated_duration_minutes']} min")
    print(f"  Muscles: {', '.join(summary['primary_muscles_targeted']) or '-'}")
    print(f"  Equipment: {', '.join(summary['equipment_needed']) or '-'}")
    print(f"  Model: {workout['ai_model']} | attempts: {workout['parse_attempts']}")


def main(argv=None):
    """Main application flow."""
    args = parse_args(argv)
    print_banner()

    print("Loading configuration...")
    config = load_config(args.config)

    api_key = get_api_key(config)
    if not api_key:
        api_key_env = config["claude"]["api_key_env"]
        print(f"\n❌ Error: {api_key_env} not found in environment variables!")
        print("\nPlease:")
        print("1. Copy .env.example to .env")
        print("2. Add your Anthropic API key to .env")
        print("3. Get your API key from: https://console.anthropic.com/")
        return 1

    db = WorkoutDB(args.db or config["database"]["path"])
    try:
        db.init_schema()
        generator = WorkoutGenerator(GenerationClient(api_key=api_key, config=config), config)
        context = RequestContext.for_user(db, args.user)

        payload = {
            "muscle_focus": args.muscle,
            "workout_focus": args.focus or ["hypertrophy"],
            "exercise_count": args.count,
        }
        if args.instructions:
            payload["special_instructions"] = args.instructions

        result = generate_workout(context, payload, generator, config=config)
        print("\n" + json.dumps(result))

        if not result["success"]:
            return 2 if result.get("errorType") == "rate_limit" else 1

        print_workout(db, result["workoutId"])
        print("\nGood luck with your training! 💪\n")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nExiting...")
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
