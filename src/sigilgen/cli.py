"""Command-line interface for sigilgen.

Bootstraps two generation-0 creatures and either previews or performs a
summon between them.
"""

import argparse
import json
import random
import sys
from dataclasses import asdict
from typing import Any

from sigilgen import __version__, configure_logging, get_logger
from sigilgen.engine import BreedingOrchestrator, create_gen0
from sigilgen.errors import IneligibleBreedingError
from sigilgen.model import ArchetypeId, CreatureProfile, format_genome, format_stats
from sigilgen.service import InMemoryProfileRepository, SummoningService

# Namespaced under sigilgen even when run as __main__
logger = get_logger(__name__)


def _describe(profile: CreatureProfile) -> str:
    return "\n".join(
        [
            f"{profile.name} [{profile.id}]",
            f"  {profile.rarity.label} {profile.archetype}/{profile.subtype}, "
            f"Gen{profile.generation}, {profile.summons_remaining}/{profile.max_summons} summons",
            f"  {format_stats(profile.stats)}",
            f"  HP {profile.max_hp} | MP {profile.max_mp} | Stamina {profile.max_stamina}",
        ]
    )


def _to_json(profile: CreatureProfile) -> dict[str, Any]:
    data = asdict(profile)
    data["rarity"] = profile.rarity.name.lower()
    return data


def main(args: list[str] | None = None) -> int:
    """Run the sigilgen CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success, 1 if the summon was refused).
    """
    parser = argparse.ArgumentParser(
        prog="sigilgen",
        description="sigilgen - creature genetics and summoning engine",
    )
    parser.add_argument(
        "command",
        choices=["preview", "summon"],
        help="Preview the summon quote or perform the summon",
    )
    parser.add_argument(
        "first",
        type=ArchetypeId,
        choices=list(ArchetypeId),
        help="Archetype of the first gen-0 parent",
    )
    parser.add_argument(
        "second",
        type=ArchetypeId,
        choices=list(ArchetypeId),
        help="Archetype of the second gen-0 parent",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible rolls")
    parser.add_argument("--name", default="Offspring", help="Offspring name (default: Offspring)")
    parser.add_argument("--owner", default="local", help="Owner identity (default: local)")
    parser.add_argument("--json", action="store_true", help="Print the summon result as JSON")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parsed = parser.parse_args(args)
    configure_logging()

    orchestrator = BreedingOrchestrator.from_defaults(rng=random.Random(parsed.seed))
    parent1 = create_gen0(orchestrator, parsed.first, f"{parsed.first.title()} Root", parsed.owner)
    parent2 = create_gen0(
        orchestrator, parsed.second, f"{parsed.second.title()} Root", parsed.owner
    )

    if parsed.command == "preview":
        print(_describe(parent1))
        print(_describe(parent2))
        print(orchestrator.format_preview(parent1, parent2))
        return 0

    repository = InMemoryProfileRepository([parent1, parent2])
    service = SummoningService(repository, orchestrator)
    try:
        result = service.summon(parent1.id, parent2.id, parsed.name, parsed.owner)
    except IneligibleBreedingError as e:
        logger.warning("Summon refused (%s)", e.category)
        print(f"Cannot summon: {e.reason}", file=sys.stderr)
        return 1

    if parsed.json:
        payload = {
            "offspring": _to_json(result.offspring),
            "receipt": asdict(result.receipt),
            "cost": result.cost,
        }
        print(json.dumps(payload, default=str, indent=2))
        return 0

    print(_describe(result.offspring))
    print(format_genome(result.offspring.genome, orchestrator.config.stat_boost_amount))
    print(f"Cost: {result.cost} $SIGIL (receipt {result.receipt.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
