#!/usr/bin/env python3
"""Load canonical factions and entities into the terminology database.

Usage:
    python backend/scripts/seed_entities.py <seed.json>

The JSON file looks like:
    {
      "factions": [{"name": "Drukhari", "slug": "drukhari"}, ...],
      "entities": [{"name": "Kabalite Cartel", "category": "detachment",
                    "faction": "Drukhari"}, ...]
    }

Factions may also be given as plain names; the slug is then derived from the
name. Entities without a faction are core rules shared by every army.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add backend/ to path so the termlens package imports without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from termlens.db import entity_store
from termlens.db.sqlite_db import init_db
from termlens.infra import config
from termlens.models.terms import CandidateEntity, parse_category
from termlens.utils.normalizer import normalize


def _slug(name: str) -> str:
    return normalize(name).replace("'", "").replace(" ", "-")


def parse_seed(data: dict) -> tuple[list[tuple[str, str]], list[CandidateEntity]]:
    factions = []
    for entry in data.get("factions", []):
        if isinstance(entry, str):
            factions.append((entry, _slug(entry)))
        else:
            factions.append((entry["name"], entry.get("slug") or _slug(entry["name"])))

    known = {name for name, _ in factions}
    entities = []
    for entry in data.get("entities", []):
        faction = entry.get("faction") or None
        if faction and faction not in known:
            factions.append((faction, _slug(faction)))
            known.add(faction)
        entities.append(CandidateEntity(
            name=entry["name"],
            category=parse_category(entry["category"]),
            faction=faction,
        ))
    return factions, entities


async def seed(path: Path) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    factions, entities = parse_seed(data)

    await init_db()
    for name, slug in factions:
        await entity_store.upsert_faction(name, slug)
    inserted = await entity_store.insert_entities(entities)

    print(f"Database: {config.DB_PATH}")
    print(f"Factions: {len(factions)}")
    print(f"Entities: {inserted} inserted, {len(entities) - inserted} already present")
    categories = sorted({e.category for e in entities}, key=lambda c: c.value)
    for category in categories:
        names = await entity_store.fetch_names_for_category(category)
        print(f"  {category.value:<12} {len(names)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the canonical entity store")
    parser.add_argument("seed_file", type=Path, help="JSON file with factions and entities")
    args = parser.parse_args()

    if not args.seed_file.is_file():
        print(f"Seed file not found: {args.seed_file}", file=sys.stderr)
        sys.exit(1)
    asyncio.run(seed(args.seed_file))


if __name__ == "__main__":
    main()
