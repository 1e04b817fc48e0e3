"""Seed script to create a demo team for local development.

This provisions, with the service role:
- A demo team
- One board with To Do / In Progress / Done lists
- A handful of unassigned tasks with story points
- Shop items to spend points on

Usage:
    python -m gello.scripts.seed_demo

Existing rows are reused, so running the script twice is harmless. Every call
to the data service is retried on transient network errors.
"""

import asyncio
from typing import Any

from gello.config import get_settings
from gello.db.supabase import Database, SupabaseProvider
from gello.middleware.logging import configure_logging
from gello.utils.retry import retry_with_backoff

DEMO_TEAM = "Demo Team"

DEMO_BOARD = {
    "name": "Sprint Board",
    "description": "Demo board showing how tasks move from To Do to Done.",
}

DEMO_LISTS = ["To Do", "In Progress", "Done"]

DEMO_TASKS = [
    {"title": "Set up the project repository", "story_points": 2},
    {"title": "Write onboarding guide", "description": "Cover local setup and the review process.", "story_points": 3},
    {"title": "Design the leaderboard page", "story_points": 5},
    {"title": "Fix flaky login test", "story_points": 1},
    {"title": "Plan the next sprint", "story_points": 2},
]

SHOP_ITEMS = [
    {"name": "Coffee voucher", "description": "One drink on the team.", "point_cost": 10, "category": "perk"},
    {"name": "Team sticker pack", "point_cost": 15, "category": "item"},
    {"name": "Pick the next team lunch", "point_cost": 40, "category": "perk"},
    {"name": "Half day off", "point_cost": 150, "category": "time_off"},
]


async def _find_or_insert(db: Database, table: str, match: dict[str, Any], values: dict[str, Any]) -> dict[str, Any]:
    existing = await retry_with_backoff(lambda: db.select(table, match=match, limit=1))
    if existing:
        return existing[0]
    return await retry_with_backoff(lambda: db.insert(table, {**match, **values}))


async def seed_demo(db: Database) -> None:
    """Create the demo team, board, lists, tasks and shop items."""
    team = await _find_or_insert(db, "teams", {"name": DEMO_TEAM}, {})
    print(f"Team: {team['name']} ({team['id']})")

    board = await _find_or_insert(
        db,
        "boards",
        {"name": DEMO_BOARD["name"], "team_id": team["id"]},
        {"description": DEMO_BOARD["description"]},
    )
    print(f"Board: {board['name']} ({board['id']})")

    lists = []
    for position, name in enumerate(DEMO_LISTS):
        lists.append(
            await _find_or_insert(db, "lists", {"board_id": board["id"], "name": name}, {"position": position})
        )
    print(f"Lists: {', '.join(item['name'] for item in lists)}")

    todo = lists[0]
    for position, task in enumerate(DEMO_TASKS):
        await _find_or_insert(
            db,
            "tasks",
            {"list_id": todo["id"], "title": task["title"]},
            {
                "description": task.get("description"),
                "story_points": task["story_points"],
                "position": position,
            },
        )
    print(f"Tasks: {len(DEMO_TASKS)}")

    for item in SHOP_ITEMS:
        await _find_or_insert(
            db,
            "shop_items",
            {"name": item["name"]},
            {
                "description": item.get("description"),
                "point_cost": item["point_cost"],
                "category": item["category"],
                "is_active": True,
            },
        )
    print(f"Shop items: {len(SHOP_ITEMS)}")


async def main() -> None:
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings)
    print("Seeding demo data...")
    print("-" * 50)

    provider = await SupabaseProvider.create(settings)
    db = provider.service_database()
    try:
        await seed_demo(db)
    finally:
        await db.aclose()


if __name__ == "__main__":
    asyncio.run(main())
