"""CLI entry point for relationship health.

Usage:
    relationship-health record --user UUID --contact "Jane <jane@acme.com>" --response-hours 3
    relationship-health scores --user UUID
    relationship-health insight --user UUID --contact jane@acme.com
    relationship-health patterns --user UUID
    relationship-health recommendations list --user UUID
    relationship-health recommendations generate --user UUID
    relationship-health recommendations ack ID
    relationship-health recommendations dismiss ID
    relationship-health overview --user UUID
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from relationship_health.core.config import Config
from relationship_health.core.database import Database
from relationship_health.core.errors import HealthEngineError
from relationship_health.core.logging import configure_logging
from relationship_health.schemas.health import InteractionCreate
from relationship_health.services import (
    HealthScoreService,
    IntelligenceService,
    PredictiveInsightGenerator,
    RecommendationEngine,
    ResponsePatternLearner,
)

CommandResult = BaseModel | list[BaseModel] | None
Command = Callable[[argparse.Namespace, Config, AsyncSession], Awaitable[CommandResult]]


def _uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid UUID format: {value}") from None


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Relationship health scoring and predictive response intelligence",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in project root)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_user(p: argparse.ArgumentParser) -> None:
        p.add_argument("--user", type=_uuid, required=True, metavar="UUID", help="User ID")

    record = subparsers.add_parser("record", help="Record an interaction with a contact")
    add_user(record)
    record.add_argument("--contact", required=True, help="Contact address or 'Name <address>'")
    record.add_argument("--response-hours", type=float, default=None, help="Response time in hours")
    record.add_argument("--sentiment", type=float, default=None, help="Sentiment in [-1, 1]")
    record.add_argument("--classification-id", default=None, help="Source classification ID")

    scores = subparsers.add_parser("scores", help="List health scores with analytics")
    add_user(scores)

    insight = subparsers.add_parser("insight", help="Predict response guidance for a contact")
    add_user(insight)
    insight.add_argument("--contact", required=True, help="Contact address")

    patterns = subparsers.add_parser("patterns", help="List learned response patterns")
    add_user(patterns)
    patterns.add_argument("--limit", type=int, default=50, help="Maximum patterns (default: 50)")

    overview = subparsers.add_parser("overview", help="Show the predictive intelligence overview")
    add_user(overview)

    recs = subparsers.add_parser("recommendations", help="Manage recommendations")
    rec_sub = recs.add_subparsers(dest="rec_action", help="Recommendation actions")
    add_user(rec_sub.add_parser("list", help="List active recommendations"))
    add_user(rec_sub.add_parser("generate", help="Generate recommendations from current data"))
    for action, text in (
        ("ack", "Acknowledge a recommendation"),
        ("dismiss", "Dismiss a recommendation"),
    ):
        p = rec_sub.add_parser(action, help=text)
        p.add_argument("recommendation_id", type=_uuid, metavar="ID", help="Recommendation ID")

    return parser.parse_args(argv)


def get_env_file(args: argparse.Namespace) -> Path | None:
    """Get the .env file path from args or default location."""
    env_file = args.env_file
    if env_file is None:
        cli_module = Path(__file__).resolve()
        project_root = cli_module.parent.parent.parent
        env_file = project_root / ".env"
    return env_file if env_file.exists() else None


async def record_command(
    args: argparse.Namespace, config: Config, session: AsyncSession
) -> BaseModel:
    """Handle record command."""
    service = HealthScoreService(session, frequency_window_days=config.frequency_window_days)
    return await service.record_interaction(
        args.user,
        InteractionCreate(
            contact_email=args.contact,
            response_time_hours=args.response_hours,
            sentiment_score=args.sentiment,
            classification_id=args.classification_id,
        ),
    )


async def scores_command(
    args: argparse.Namespace, config: Config, session: AsyncSession
) -> BaseModel:
    """Handle scores command."""
    return await HealthScoreService(session).get_health_scores(args.user)


async def insight_command(
    args: argparse.Namespace, config: Config, session: AsyncSession
) -> BaseModel:
    """Handle insight command."""
    return await PredictiveInsightGenerator(session).generate(args.user, args.contact)


async def patterns_command(
    args: argparse.Namespace, config: Config, session: AsyncSession
) -> list[BaseModel]:
    """Handle patterns command."""
    return list(await ResponsePatternLearner(session).list_patterns(args.user, limit=args.limit))


async def overview_command(
    args: argparse.Namespace, config: Config, session: AsyncSession
) -> BaseModel:
    """Handle overview command."""
    return await IntelligenceService(session).get_overview(args.user)


async def recommendations_command(
    args: argparse.Namespace, config: Config, session: AsyncSession
) -> BaseModel:
    """Handle recommendations subcommands."""
    engine = RecommendationEngine(
        session,
        ttl_days=config.recommendation_ttl_days,
        outreach_after_days=config.outreach_after_days,
    )
    if args.rec_action == "list":
        return await engine.list_recommendations(args.user)
    if args.rec_action == "generate":
        return await engine.generate(args.user)
    if args.rec_action == "ack":
        return await engine.acknowledge(args.recommendation_id)
    return await engine.dismiss(args.recommendation_id)


COMMANDS: dict[str, Command] = {
    "record": record_command,
    "scores": scores_command,
    "insight": insight_command,
    "patterns": patterns_command,
    "overview": overview_command,
    "recommendations": recommendations_command,
}


def render(result: CommandResult) -> str:
    """Render a command result as JSON."""
    if result is None:
        return "null"
    if isinstance(result, list):
        return "[\n" + ",\n".join(item.model_dump_json(indent=2) for item in result) + "\n]"
    return result.model_dump_json(indent=2)


async def run_command(
    command: Command, args: argparse.Namespace, config: Config
) -> CommandResult:  # pragma: no cover
    """Run a command inside a database session."""
    database = Database(config)
    await database.connect()
    try:
        async with database.session() as session:
            return await command(args, config, session)
    finally:
        await database.disconnect()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for relationship health."""
    args = parse_args(argv)

    if args.command is None or (args.command == "recommendations" and args.rec_action is None):
        print(
            "Usage: relationship-health "
            "{record|scores|insight|patterns|overview|recommendations} ..."
        )
        sys.exit(1)

    env_file = get_env_file(args)
    try:
        config = Config.from_env(env_file)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level, config.log_json)

    try:
        result = asyncio.run(run_command(COMMANDS[args.command], args, config))
    except HealthEngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(render(result))


if __name__ == "__main__":
    main()
