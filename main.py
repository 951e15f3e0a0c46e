"""
Entry point for Spyglass — Competitive Intelligence Briefings.

Usage:
  # Run a quick demo (mock backend, no API key needed):
  python main.py demo

  # Start the FastAPI request-forwarding server:
  python main.py api

  # Start the Streamlit dashboard:
  python main.py dashboard

  # Run tests:
  python main.py test
"""

from __future__ import annotations

import asyncio
import os
import sys
import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("main")


def demo():
    """
    End-to-end demo run against the mock backend and an in-memory database.
    Prints each section as it is revealed, then the traffic table.
    """
    from agents.mock_service import MockGenerationService
    from agents.audio_output import MemoryAudioSink
    from db.database import create_session_factory
    from utils.pipeline import build_orchestrator, run_presentation
    from utils.report_parser import strip_heading_markers

    logger.info("=== Spyglass — Demo Run ===")

    def show(section):
        print("\n" + "-" * 70)
        print(f"  [{section.index + 1}] {section.title}")
        print("-" * 70)
        print(strip_heading_markers(section.text))

    audio = MemoryAudioSink()
    orchestrator = build_orchestrator(
        service=MockGenerationService(latency=0.05),
        session_factory=create_session_factory("sqlite://"),
        audio=audio,
        interval=0.3,
        on_reveal=show,
    )

    report = asyncio.run(run_presentation(orchestrator, ["Acme", "Globex", "Initech"]))
    if report is None:
        sys.exit(1)

    print("\n" + "=" * 70)
    print("  📊 TRAFFIC SOURCES")
    print("=" * 70)
    for record in orchestrator.scheduler.traffic_data or []:
        shares = "  ".join(f"{k}={v:.0f}%" for k, v in record.sources.items())
        print(f"  {record.competitor:<12} {shares}")
    print("=" * 70)
    print(f"  Narration snippets played: {len(audio.played)}")
    print(f"  History entries         : {len(orchestrator.history)}")
    return report


def start_api():
    """Start the FastAPI server."""
    import uvicorn
    from config.settings import settings
    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=True)


def start_dashboard():
    """Launch the Streamlit dashboard."""
    import subprocess
    dashboard_path = os.path.join(os.path.dirname(__file__), "dashboard", "app.py")
    subprocess.run(["streamlit", "run", dashboard_path], check=True)


def run_tests():
    """Run pytest."""
    import subprocess
    result = subprocess.run(
        ["pytest", "tests/", "-v", "--tb=short"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


if __name__ == "__main__":
    command = sys.argv[1] if len(sys.argv) > 1 else "demo"

    if command == "demo":
        demo()
    elif command == "api":
        start_api()
    elif command == "dashboard":
        start_dashboard()
    elif command == "test":
        run_tests()
    else:
        print(f"Unknown command: {command}")
        print("Usage: python main.py [demo|api|dashboard|test]")
        sys.exit(1)
