#!/usr/bin/env python3
"""
Code quality checker for the Planora backend.

Runs Ruff (lint and import order), Black (formatting) and Pylint (scored
analysis) over the application packages. Install them with
``pip install -e ".[dev]"``.
"""

import re
import subprocess
import sys

PYLINT_MIN_SCORE = 9.0
SOURCE_DIRS = ["app/", "models/"]


def run_check(cmd: list[str], description: str, min_score: float | None = None) -> bool:
    """Run one tool; with ``min_score`` the Pylint rating decides instead of the exit code."""
    print(f"\n{'='*60}")
    print(f"🔍 {description}")
    print(f"Command: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        print(f"💥 Could not run {description}: {e}")
        return False

    if result.stdout:
        print("STDOUT:", result.stdout)
    if result.stderr:
        print("STDERR:", result.stderr)

    if min_score is not None:
        score_match = re.search(r"rated at ([\d.]+)/10", result.stdout or "")
        if score_match:
            score = float(score_match.group(1))
            if score >= min_score:
                print(f"✅ {description} - PASSED (Score: {score}/10)")
                return True
            print(f"⚠️ {description} - LOW SCORE (Score: {score}/10, minimum: {min_score})")
            return False

    if result.returncode == 0:
        print(f"✅ {description} - PASSED")
        return True
    print(f"❌ {description} - FAILED (exit code: {result.returncode})")
    return False


def main():
    print("🚀 Running Planora Backend Quality Checks")

    checks = [
        (["ruff", "check", *SOURCE_DIRS, "tests/"], "Ruff - Linting and import order", None),
        ([sys.executable, "-m", "black", ".", "--check"], "Black - Formatting check", None),
        (
            [sys.executable, "-m", "pylint", *SOURCE_DIRS, "--score=y"],
            "Pylint - Code analysis and scoring",
            PYLINT_MIN_SCORE,
        ),
    ]

    results = [(description, run_check(cmd, description, score)) for cmd, description, score in checks]

    print(f"\n{'='*60}")
    print("📊 QUALITY CHECK SUMMARY")
    print("=" * 60)
    for description, success in results:
        print(f"{description}: {'✅ PASSED' if success else '❌ FAILED'}")

    passed = sum(1 for _, success in results if success)
    print(f"\nOverall: {passed}/{len(results)} checks passed")

    if passed == len(results):
        print("🎉 All quality checks passed!")
        sys.exit(0)
    print("⚠️  Some quality checks failed. Please review and fix.")
    sys.exit(1)


if __name__ == "__main__":
    main()
