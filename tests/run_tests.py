#!/usr/bin/env python3
"""
Test runner for all schema generator phases.
Runs tests in order: Client → Parser → Collectors → Reconciler → Emitter → Pipeline
"""

import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def run_test(script_name, phase_name):
    """Run one test module under pytest and return success status."""
    print(f"\n{'='*60}")
    print(f"🧪 Running {phase_name}")
    print(f"{'='*60}")

    try:
        result = subprocess.run([sys.executable, "-m", "pytest", "-q", f"tests/{script_name}"],
                                cwd=PROJECT_ROOT, capture_output=True, text=True, timeout=120)

        if result.stdout:
            print(result.stdout)
        if result.stderr and result.returncode != 0:
            print("STDERR:", result.stderr)

        if result.returncode == 0:
            print(f"✅ {phase_name} PASSED")
            return True
        print(f"❌ {phase_name} FAILED (exit code: {result.returncode})")
        return False

    except subprocess.TimeoutExpired:
        print(f"⏰ {phase_name} TIMEOUT (120s)")
        return False


def main():
    """Run all tests in sequence."""
    print("🚀 Riot API Schema Test Suite")

    tests = [
        ("test_client.py", "Phase 1: HTTP Client"),
        ("test_parser.py", "Phase 2: Page and Type Parsing"),
        ("test_collectors.py", "Phase 3: Endpoint and Region Collection"),
        ("test_reconciler.py", "Phase 4: DTO Reconciliation"),
        ("test_emitter.py", "Phase 5: Spec Emission"),
        ("test_pipeline.py", "Phase 6: Full Pipeline"),
    ]

    passed = 0
    failed = 0

    for script, phase in tests:
        if run_test(script, phase):
            passed += 1
        else:
            failed += 1

    print(f"\n{'='*60}")
    print(f"📊 TEST SUMMARY")
    print(f"{'='*60}")
    print(f"✅ Passed: {passed}")
    print(f"❌ Failed: {failed}")
    print(f"📈 Success Rate: {passed}/{len(tests)} ({passed/len(tests)*100:.1f}%)")

    if failed == 0:
        print(f"\n🎉 ALL TESTS PASSED! Generator is ready to publish.")
        sys.exit(0)
    else:
        print(f"\n⚠️  {failed} test(s) failed. Check output above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
