"""
Command line entry point for running an analysis.

Usage:
    python -m smurfwatch analyze "Name#TAG" [--fast] [--refresh] [--region euw1] [--matches 100]
    python -m smurfwatch analyze-puuid <puuid> [--fast] [--refresh] [--region euw1]
    python -m smurfwatch clear <puuid>
    python -m smurfwatch stats
"""

import asyncio
import json
import sys
from typing import List, Tuple

from pydantic import ValidationError as PydanticValidationError

from .core.config import get_global_settings
from .core.exceptions import ServiceException, error_payload
from .core.logging import get_logger, setup_logging
from .core.riot_api.errors import RiotAPIError
from .services.analysis import AnalysisOptions
from .services.dependencies import create_orchestrator

logger = get_logger(__name__, entrypoint="cli")


def print_usage() -> None:
    """Print usage information."""
    print("Usage:")
    print('  python -m smurfwatch analyze "Name#TAG" [options]   - Analyze by Riot ID')
    print("  python -m smurfwatch analyze-puuid <puuid> [options] - Analyze by PUUID")
    print("  python -m smurfwatch clear <puuid>                   - Drop cached analyses")
    print("  python -m smurfwatch stats                           - Show cache statistics")
    print("\nOptions: --fast, --refresh, --region <platform>, --matches <count>")


def parse_options(args: List[str]) -> Tuple[List[str], AnalysisOptions]:
    """
    Split positional arguments from analysis flags.

    :param args: Arguments after the command
    :returns: Tuple of (positional arguments, options)
    :raises SystemExit: On an unknown flag or a flag missing its value
    """
    positional: List[str] = []
    values = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--fast":
            values["fast_mode"] = True
        elif arg == "--refresh":
            values["force_refresh"] = True
        elif arg in ("--region", "--matches"):
            if i + 1 >= len(args):
                print(f"Error: {arg} needs a value\n")
                print_usage()
                sys.exit(1)
            key = "region" if arg == "--region" else "match_count"
            values[key] = args[i + 1]
            i += 1
        elif arg.startswith("--"):
            print(f"Error: Unknown option '{arg}'\n")
            print_usage()
            sys.exit(1)
        else:
            positional.append(arg)
        i += 1
    try:
        return positional, AnalysisOptions(**values)
    except PydanticValidationError as e:
        print(f"Error: Invalid options\n{e}\n")
        print_usage()
        sys.exit(1)


async def main() -> None:
    """
    Main entry point.

    :raises SystemExit: On a bad command or a failed analysis
    """
    if len(sys.argv) < 2:
        print("Error: Missing command\n")
        print_usage()
        sys.exit(1)

    settings = get_global_settings()
    setup_logging(settings.log_level, settings.log_json)

    command = sys.argv[1].lower()
    positional, options = parse_options(sys.argv[2:])
    logger.debug("Running command", command=command, region=options.region)

    orchestrator = create_orchestrator(settings)
    try:
        if command in ("analyze", "analyze-puuid"):
            if not positional:
                print("Error: Missing player\n")
                print_usage()
                sys.exit(1)
            if command == "analyze":
                options = options.model_copy(update={"riot_id": positional[0]})
                puuid = ""
            else:
                puuid = positional[0]
            result = await orchestrator.get_unified_analysis(puuid, options)
            print(result.model_dump_json(indent=2))
        elif command == "clear":
            if not positional:
                print("Error: Missing PUUID\n")
                sys.exit(1)
            removed = orchestrator.clear_player_cache(positional[0])
            print(f"Removed {removed} cached analyses")
        elif command == "stats":
            print(json.dumps(orchestrator.get_cache_stats(), indent=2))
        else:
            print(f"Error: Unknown command '{command}'\n")
            print_usage()
            sys.exit(1)
    except (ServiceException, RiotAPIError) as e:
        print(json.dumps(error_payload(e), indent=2))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user")
        sys.exit(1)
    finally:
        await orchestrator.client.close()


if __name__ == "__main__":
    asyncio.run(main())
