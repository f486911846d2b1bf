#!/usr/bin/env python3
"""
Example: calling the generation API with httpx.

Start the server first (python main.py), then run:
    python examples/generate_client.py
"""

import json
from pathlib import Path

import httpx

BASE_URL = "http://localhost:9000"
KNOWLEDGE_BASE = json.loads((Path(__file__).parent / "fourth_amendment.bset").read_text())


def example_context_preview():
    """Show which authorities a query is allowed to use."""
    print("Example 1: Authorized context preview")
    print("-" * 60)

    response = httpx.post(
        f"{BASE_URL}/v1/context",
        json={"query": "automobile exception search", "knowledge_base": KNOWLEDGE_BASE},
    )
    response.raise_for_status()
    context = response.json()["authorized_context"]

    print(f"Target node: {context['target_node']['title']}")
    print(f"Path: {' > '.join(context['path'])}")
    for idx, item in enumerate(context["items"], 1):
        print(f"  [{idx}] {item['name']}")
    print()


def example_generation():
    """Run the full generate/validate loop."""
    print("Example 2: Constrained generation")
    print("-" * 60)

    response = httpx.post(
        f"{BASE_URL}/v1/generate",
        json={
            "query": "When is a search of a phone booth conversation a search?",
            "knowledge_base": KNOWLEDGE_BASE,
            "max_iterations": 3,
        },
        timeout=180.0,
    )

    if response.status_code != 200:
        print(f"Error {response.status_code}: {response.json()['error']['message']}")
        return

    result = response.json()
    print(result["generated_text"])
    print()
    print(f"Status: {result['status']} after {result['iterations']} attempt(s)")
    for check in result["validation_report"]["validation_checks"]:
        print(f"  {check['check_type']}: {check['status']}")
    print()


if __name__ == "__main__":
    example_context_preview()
    example_generation()
