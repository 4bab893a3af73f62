#!/usr/bin/env python3
"""
Seed script: наполняет запущенный сервер демо-задачами через HTTP API.

    uvicorn sloth.main:app
    python scripts/seed_data.py

Регистрирует демо-пользователя (или входит, если он уже есть),
создаёт теги и задачи и привязывает теги к задачам.
"""

import os
from datetime import UTC, datetime, timedelta

import requests

API_URL = os.environ.get("SLOTH_API_URL", "http://localhost:8000")
DEMO_USER = {
    "name": "Demo",
    "email": os.environ.get("SLOTH_DEMO_EMAIL", "demo@sloth.local"),
    "password": os.environ.get("SLOTH_DEMO_PASSWORD", "demo-password"),
}

TAGS = [
    {"name": "Errands", "color": "#18AEF8"},
    {"name": "Work", "color": "#29335C"},
    {"name": "Home", "color": "#7EBC89"},
    {"name": "Health", "color": "#FA1855"},
    {"name": "Reading", "color": "#A491D3"},
]


def _in_days(days: int) -> str:
    return (datetime.now(UTC) + timedelta(days=days)).isoformat()


TODOS = [
    {"title": "Buy milk", "description": "2 liters", "tags": ["Errands"]},
    {"title": "Pick up dry cleaning", "due_in": 1, "tags": ["Errands"]},
    {"title": "Prepare quarterly report", "start_in": 0, "due_in": 4, "tags": ["Work"]},
    {"title": "Review pull requests", "start_in": 1, "tags": ["Work"]},
    {"title": "Fix the kitchen tap", "due_in": -2, "tags": ["Home"]},
    {"title": "Book dentist appointment", "due_in": 10, "tags": ["Health"]},
    {"title": "Finish reading 'Dune'", "start_in": 3, "tags": ["Reading", "Home"]},
    {"title": "Call grandma"},
]


def authenticate(session: requests.Session) -> None:
    """Sign up the demo user, or sign in if it already exists."""
    response = session.post(f"{API_URL}/api/auth/sign-up", json=DEMO_USER)
    if response.status_code == 409:
        response = session.post(
            f"{API_URL}/api/auth/sign-in",
            json={"email": DEMO_USER["email"], "password": DEMO_USER["password"]},
        )
    response.raise_for_status()
    token = response.json()["data"]["token"]
    session.headers["Authorization"] = f"Bearer {token}"


def ensure_tags(session: requests.Session) -> dict[str, str]:
    """Create demo tags; reuse the ones that already exist."""
    existing = {tag["name"]: tag["id"] for tag in session.get(f"{API_URL}/api/tags").json()}

    for tag_data in TAGS:
        if tag_data["name"] in existing:
            continue
        response = session.post(f"{API_URL}/api/tags", json=tag_data)
        if response.status_code == 201:
            existing[tag_data["name"]] = response.json()["data"]["id"]
            print(f"  ✅ {tag_data['name']} ({tag_data['color']})")
        else:
            print(f"Error creating tag {tag_data['name']}: {response.text}")

    return existing


def create_todo(session: requests.Session, todo_data: dict, tag_ids: dict[str, str]) -> bool:
    """Create a todo, schedule it and attach its tags."""
    payload = {"title": todo_data["title"]}
    if "description" in todo_data:
        payload["description"] = todo_data["description"]

    response = session.post(f"{API_URL}/api/todos", json=payload)
    if response.status_code != 201:
        print(f"Error creating todo {todo_data['title']}: {response.text}")
        return False
    todo_id = response.json()["data"]["id"]

    schedule = {}
    if "start_in" in todo_data:
        schedule["startAt"] = _in_days(todo_data["start_in"])
    if "due_in" in todo_data:
        schedule["dueAt"] = _in_days(todo_data["due_in"])
    if schedule:
        session.patch(f"{API_URL}/api/todos/{todo_id}", json=schedule).raise_for_status()

    for tag_name in todo_data.get("tags", []):
        session.post(
            f"{API_URL}/api/todos/{todo_id}/tags", json={"tagId": tag_ids[tag_name]}
        ).raise_for_status()

    return True


def main():
    print("=" * 60)
    print(f"Seeding {API_URL} with demo todos")
    print("=" * 60)

    session = requests.Session()
    authenticate(session)
    print(f"\n👤 Signed in as {DEMO_USER['email']}")

    print("\n🏷️  Creating tags...")
    tag_ids = ensure_tags(session)

    print("\n📋 Creating todos...")
    total = 0
    for todo_data in TODOS:
        if create_todo(session, todo_data, tag_ids):
            total += 1
            print(f"  ✅ {todo_data['title']}")

    print("\n" + "=" * 60)
    print(f"✅ Done! Created {total} todos")
    print("=" * 60)


if __name__ == "__main__":
    main()
