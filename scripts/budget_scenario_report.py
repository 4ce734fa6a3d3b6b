#!/usr/bin/env python3
"""
Scenario report for the Budget Model Service.

Replays budget command scenarios against a running service and prints the
headline numbers after every step, plus a JSON report of the final summaries.
"""

import argparse
import json
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

SERVICE_URL = os.getenv("BUDGET_MODEL_URL", "http://localhost:8000")
DEFAULT_TIMEOUT = 10.0

HEADLINE_KEYS = (
    "total_overhead_budgeted",
    "total_billed",
    "profit_budgeted",
    "margin_budgeted",
    "break_even_price",
    "implied_staffing",
)


class ScenarioError(Exception):
    """Raised when a scenario cannot be replayed."""


class ScenarioRunner:
    """Replays command scenarios against the Budget Model Service."""

    def __init__(self, service_url: str = SERVICE_URL, timeout: float = DEFAULT_TIMEOUT):
        self.service_url = service_url.rstrip("/")
        self.client = httpx.Client(timeout=timeout)

    def check_health(self) -> None:
        try:
            response = self.client.get(f"{self.service_url}/health")
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ScenarioError(f"Cannot reach budget model service at {self.service_url}: {e}")
        print("✓ Budget model service is healthy")

    def apply(self, project_id: str, command: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Send one command; returns the recomputed summary or None when the service rejects it."""
        response = self.client.post(f"{self.service_url}/budgets/{project_id}/commands", json=command)
        if response.status_code >= 500:
            raise ScenarioError(f"Service error on {command.get('op')}: {response.text}")

        data = response.json()
        if response.status_code != 200:
            field = f" ({data['field']})" if data.get("field") else ""
            print(f"    ✗ {command.get('op')} rejected: {data.get('error')}{field} - {data.get('details')}")
            return None

        print(f"    ✓ {command.get('op')} -> {data['version']} [{data['status']}]")
        display = data.get("display", {})
        for key in HEADLINE_KEYS:
            print(f"      {key}: {display.get(key, data.get(key))}")
        return data

    def run_scenario(self, path: Path) -> Dict[str, Any]:
        scenario = json.loads(path.read_text())
        project_id = scenario.get("project_id", "ca-45")
        commands: List[Dict[str, Any]] = scenario.get("commands", [])

        print(f"\n{'='*60}")
        print(f"Scenario: {path.name} ({project_id}, {len(commands)} command(s))")
        print(f"{'='*60}\n")

        rejected = 0
        summary: Optional[Dict[str, Any]] = None
        for command in commands:
            result = self.apply(project_id, command)
            if result is None:
                rejected += 1
            else:
                summary = result

        if summary is None:
            response = self.client.get(f"{self.service_url}/budgets/{project_id}/summary")
            response.raise_for_status()
            summary = response.json()

        return {
            "scenario": path.name,
            "project_id": project_id,
            "commands": len(commands),
            "rejected": rejected,
            "summary": summary,
        }


def main():
    parser = argparse.ArgumentParser(description="Replay budget command scenarios against the budget model service")
    parser.add_argument("scenarios", nargs="+", type=Path, help="Scenario JSON files ({project_id, commands})")
    parser.add_argument("--service", default=SERVICE_URL, help=f"Budget model service URL (default: {SERVICE_URL})")
    parser.add_argument("--output", type=Path, help="Output file for the scenario report (JSON)")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT})")

    args = parser.parse_args()

    if not args.output:
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        args.output = Path(f"scenario_report_{timestamp}.json")

    runner = ScenarioRunner(service_url=args.service, timeout=args.timeout)
    try:
        runner.check_health()
        results = [runner.run_scenario(path) for path in args.scenarios]
    except (ScenarioError, httpx.HTTPError, json.JSONDecodeError, OSError) as e:
        print(f"✗ {e}")
        sys.exit(1)

    args.output.write_text(json.dumps({"results": results}, indent=2))
    print(f"\nReport saved to: {args.output}")

    if any(result["rejected"] for result in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
