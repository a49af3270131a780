"""Command line entry point: ``python -m autoupdate``.

Reads the workflow event, updates the pull requests it covers and writes the
``updated`` output. Exits with status 1 when any failure was reported.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .config import ConfigurationError, UpdaterConfig, load_config
from .events import UnknownEventError, parse_event
from .github import GitHubClient, GitHubClientConfig, TokenAuth
from .output import ActionOutput, Output
from .router import Router
from .updater import (
    BranchFanOut,
    GitHubGateway,
    PullRequestSweeper,
    UpdateOrchestrator,
)

logger = logging.getLogger(__name__)


def read_event_payload(event_path: str | Path | None) -> dict[str, Any]:
    """Load the JSON webhook payload; an absent path yields an empty payload."""
    if not event_path:
        return {}
    with open(event_path, encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"Event payload in {event_path} is not a JSON object")
    return payload


def build_router(
    config: UpdaterConfig, client: GitHubClient, outputs: ActionOutput
) -> Router:
    """Wire the updater components around one GitHub client."""
    gateway = GitHubGateway(client)
    orchestrator = UpdateOrchestrator(gateway, config, outputs)
    sweeper = PullRequestSweeper(gateway, orchestrator)
    return Router(BranchFanOut(config, sweeper, orchestrator))


async def run(
    event_name: str | None,
    event_path: str | Path | None,
    outputs: ActionOutput,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    """Handle one workflow event.

    Args:
        event_name: Name of the triggering event
        event_path: Path of the JSON event payload
        outputs: Output sink and failure channel
        config_path: Optional YAML configuration file
        env: Environment to configure from; ``os.environ`` when omitted

    Returns:
        Process exit status
    """
    try:
        config = load_config(config_path, env)
    except ConfigurationError as e:
        outputs.set_failed(f"Invalid configuration: {e}")
        return 1

    try:
        event = parse_event(event_name, read_event_payload(event_path))
    except UnknownEventError as e:
        outputs.set_failed(str(e))
        return 1
    except (OSError, ValueError) as e:
        outputs.set_failed(f"Could not read event payload: {e}")
        return 1

    if config.dry_run:
        logger.warning("DRY_RUN is enabled, no branches will be updated.")

    client_config = GitHubClientConfig(base_url=config.github_api_url)
    async with GitHubClient(TokenAuth(config.github_token), client_config) as client:
        router = build_router(config, client, outputs)
        try:
            result = await router.route(event)
        except Exception as e:
            outputs.set_failed(f"Failed to handle {event_name} event: {e}")
            return 1

    logger.info(
        f"Handled {result.event_name} event, updated {result.updated_count} "
        "pull request(s)."
    )
    outputs.set_output(Output.UPDATED, result.updated_count)
    return 1 if outputs.failed else 0


async def main() -> None:
    """Main entry point for the pull request updater."""
    parser = argparse.ArgumentParser(
        description="Keep pull requests up to date with their base branch"
    )
    parser.add_argument(
        "--event-name",
        default=os.environ.get("GITHUB_EVENT_NAME"),
        help="Triggering event name (default: $GITHUB_EVENT_NAME)",
    )
    parser.add_argument(
        "--event-path",
        default=os.environ.get("GITHUB_EVENT_PATH"),
        help="Path of the JSON event payload (default: $GITHUB_EVENT_PATH)",
    )
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument("--log-level", default="INFO", help="Log level")

    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    outputs = ActionOutput()
    try:
        status = await run(args.event_name, args.event_path, outputs, args.config)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        status = 1
    sys.exit(status)


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
