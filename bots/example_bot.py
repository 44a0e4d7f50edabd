"""Reference client that plays a full encounter against Skirmish Server.

Creates a session with a Fighter and a Rogue against two goblins, then
drives every turn through the REST API using the server's own action
policy (attack the first enemy still standing) until combat ends.

Usage:
    1. Start the server:  uvicorn main:app --reload
    2. Run this bot:      python bots/example_bot.py

Environment variables:
    SKIRMISH_URL: base URL of the server (default: "http://127.0.0.1:8000")
    SEED: encounter seed (default: 7)
"""

import os
import time
from uuid import uuid4

import httpx

from engine.npc import choose_action
from models.actions import ActionAdapter
from models.game_state import State

BASE_URL = os.environ.get("SKIRMISH_URL", "http://127.0.0.1:8000")
SEED = int(os.environ.get("SEED", "7"))


def _character(name: str, is_player: bool, hp: int, attack: int, defense: int,
               speed: int, weapon: str, damage: int) -> dict:
    """Build a roster entry in wire format."""
    return {
        "id": str(uuid4()),
        "name": name,
        "isPlayer": is_player,
        "stats": {"hp": hp, "maxHp": hp, "attack": attack, "defense": defense, "speed": speed},
        "weapons": [{"id": str(uuid4()), "name": weapon, "damage": damage, "accuracy": 80}],
        "abilities": [],
        "items": [
            {"id": str(uuid4()), "name": "Health Potion", "type": "consumable", "effect": "heal 20 HP"},
        ],
        "abilityCooldowns": {},
    }


def main() -> None:
    """Run one encounter to completion and print the log."""
    client = httpx.Client(base_url=BASE_URL, timeout=10.0)

    players = [
        _character("Gruk the Fighter", True, 40, 6, 4, 3, "Longsword", 6),
        _character("Silka the Rogue", True, 30, 5, 3, 6, "Shortsword", 4),
    ]
    enemies = [
        _character("Goblin Cutter", False, 18, 4, 2, 5, "Rusty Knife", 3),
        _character("Goblin Brute", False, 24, 5, 3, 2, "Club", 4),
    ]

    # 1. Create the session (server rolls initiative)
    print("Creating session...")
    resp = client.post(
        "/sessions",
        json={"name": "Goblin Ambush", "players": players, "enemies": enemies, "seed": SEED},
    )
    resp.raise_for_status()
    session_id = resp.json()["sessionId"]
    print(f"  Session: {session_id}")

    # 2. Game loop
    print("\n--- COMBAT ---\n")
    seed = SEED
    while True:
        resp = client.get(f"/sessions/{session_id}")
        resp.raise_for_status()
        state = State.model_validate(resp.json()["state"])

        action = choose_action(state)
        if action is None:
            winner = state.winner.value if state.winner else "none (round cap)"
            print(f"\n*** COMBAT OVER after round {state.round}! Winner: {winner} ***")
            break

        seed += 1
        resp = client.post(
            f"/sessions/{session_id}/actions",
            json={"action": ActionAdapter.dump_python(action, mode="json", by_alias=True,
                                                      exclude_none=True),
                  "seed": seed},
        )
        resp.raise_for_status()
        for line in resp.json()["logs"]:
            print(f"  [Round {state.round}] {line}")

        time.sleep(0.05)  # Small delay for readability

    # 3. Print the persisted event log
    print("\n--- EVENT LOG ---\n")
    resp = client.get(f"/sessions/{session_id}/events")
    resp.raise_for_status()
    for event in resp.json():
        print(f"  {event}")

    client.close()


if __name__ == "__main__":
    main()
