import argparse
import sys
from pathlib import Path

from jlpt_api.config import HOST, LOG_LEVEL, PORT
from jlpt_api.database import SessionLocal, init_db
from jlpt_api.errors import TrainerError
from jlpt_api.logging_setup import setup_console_logging
from jlpt_api.services.import_service import import_file
from jlpt_api.services.maintenance_service import clear_chapter
from jlpt_api.services.seed_service import seed_sample_data

setup_console_logging(LOG_LEVEL)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="JLPT N2 trainer administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create tables and seed question types")

    seed = subparsers.add_parser("seed", help="Load the demo catalog")
    seed.add_argument(
        "--force",
        action="store_true",
        help="Clear existing chapters, questions and sessions first",
    )

    importer = subparsers.add_parser("import", help="Import questions from JSON files")
    importer.add_argument("files", type=Path, nargs="+", help="JSON files to import")

    clear = subparsers.add_parser(
        "clear-chapter", help="Delete all questions and passages of a chapter"
    )
    clear.add_argument("name", help="Chapter name")

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=HOST)
    serve.add_argument("--port", type=int, default=PORT)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("jlpt_api.app:app", host=args.host, port=args.port, log_level="info")
        return 0

    init_db()
    if args.command == "init-db":
        print("Database initialized")
        return 0

    db = SessionLocal()
    try:
        if args.command == "seed":
            count = seed_sample_data(db, force=args.force)
            print(f"Seeded {count} sample questions")
        elif args.command == "import":
            failed = 0
            for path in args.files:
                try:
                    count = import_file(db, path)
                    print(f"Imported {count} questions from {path}")
                except (TrainerError, ValueError) as e:
                    failed += 1
                    print(f"Failed to import {path}: {e}", file=sys.stderr)
            return 1 if failed else 0
        elif args.command == "clear-chapter":
            counts = clear_chapter(db, args.name)
            print(
                f"Deleted {counts['questions']} questions, {counts['answers']} answers, "
                f"{counts['passages']} passages and {counts['sessions']} sessions"
            )
    except TrainerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
