"""
Deployment Config Validator.

Checks each deployment JSON against what the evaluators need: valid
addresses, declared strategies, thresholds for every borrowing strategy.

Usage:
    python scripts/validate_deployment.py                       # bundled deployments
    python scripts/validate_deployment.py path/to/deployment.json ...
"""

import argparse
import glob
import json
import os
import sys
from typing import Dict, List

from keeper.config.deployment import validate_deployment

DEFAULT_PATTERN = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "keeper", "deployments", "*.json"
)


def validate_file(path: str) -> Dict:
    """Validate a single deployment file."""
    result = {"file": os.path.basename(path), "issues": []}
    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        result["issues"].append(f"Cannot read: {e}")
        return result

    result["name"] = raw.get("name", os.path.splitext(result["file"])[0])
    result["strategies"] = len(raw.get("strategies") or {})
    result["oracles"] = len(raw.get("oracles") or {})
    result["debt_tokens"] = len(raw.get("debt_tokens") or {})
    result["issues"] = validate_deployment(raw)
    return result


def print_validation_report(results: List[Dict]):
    """Print formatted validation report."""
    print("\n" + "=" * 80)
    print("DEPLOYMENT VALIDATION REPORT")
    print("=" * 80)

    print("\n{:<30} {:<12} {:<10} {:<12} {:<8}".format(
        "File", "Strategies", "Oracles", "Debt tokens", "Status"
    ))
    print("-" * 80)
    for result in results:
        print("{:<30} {:<12} {:<10} {:<12} {:<8}".format(
            result["file"],
            result.get("strategies", "-"),
            result.get("oracles", "-"),
            result.get("debt_tokens", "-"),
            "✅" if not result["issues"] else "❌",
        ))

    failing = [r for r in results if r["issues"]]
    if failing:
        print("\n" + "=" * 80)
        print("DETAILED ISSUES")
        print("=" * 80)
        for result in failing:
            print(f"\n{result['file']}")
            print("-" * 60)
            for issue in result["issues"]:
                print(f"  - {issue}")


def main(argv: List[str] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate keeper deployment JSON files")
    parser.add_argument("paths", nargs="*", help="Deployment files (default: bundled deployments)")
    args = parser.parse_args(argv)

    paths = args.paths or sorted(glob.glob(DEFAULT_PATTERN))
    if not paths:
        print("No deployment files found!")
        return 1

    results = [validate_file(path) for path in paths]
    print_validation_report(results)

    return 1 if any(r["issues"] for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
