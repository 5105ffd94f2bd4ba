"""JUnit XML formatter for CI/CD integration.

Each agent is one testcase; agents whose status is in ``fail_on`` are
reported as failures.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from xml.dom import minidom
from xml.etree import ElementTree as ET

from ..models.health import TeamAnalysis


def export_junit_results(
    analysis: TeamAnalysis,
    output_path: Path,
    fail_on: list[str] | None = None,
    project_name: str = "Agent Health",
) -> dict:
    """Export a team analysis as JUnit XML.

    Args:
        analysis: Ranked team analysis.
        output_path: Path to write the XML file.
        fail_on: Statuses to mark as failures. Default: critical.
        project_name: Name for the testsuites element.

    Returns:
        Dict with: path, total_tests, failures, passed.
    """
    if fail_on is None:
        fail_on = ["critical"]
    fail_set = {s.lower() for s in fail_on}

    testsuites = ET.Element("testsuites")
    testsuites.set("name", project_name)
    testsuites.set("timestamp", datetime.now().strftime("%Y-%m-%dT%H:%M:%S"))

    testsuite = ET.SubElement(testsuites, "testsuite")
    testsuite.set("name", "agent-health")
    testsuite.set("tests", str(analysis.team_size))

    failures = 0
    for scored in analysis.ranked:
        health = scored.health
        display = health.display()

        testcase = ET.SubElement(testsuite, "testcase")
        testcase.set("name", f"{scored.metrics.name} <{scored.metrics.email}>")
        testcase.set("classname", scored.metrics.role or "agent")

        status = health.status.value
        if status in fail_set:
            failures += 1
            failure = ET.SubElement(testcase, "failure")
            failure.set("message", f"[{status.upper()}] overall {display['overall']}/100")
            failure.set("type", status)
            failure.text = "\n".join(
                f"{key.capitalize()}: {display[key]}/100"
                for key in ("productivity", "quality", "collaboration", "reliability")
            )

    testsuite.set("failures", str(failures))
    testsuite.set("errors", "0")
    testsuite.set("skipped", "0")
    testsuites.set("tests", str(analysis.team_size))
    testsuites.set("failures", str(failures))
    testsuites.set("errors", "0")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    rough = ET.tostring(testsuites, encoding="unicode")
    dom = minidom.parseString(rough)
    xml_str = dom.toprettyxml(indent="  ", encoding="UTF-8")
    output_path.write_bytes(xml_str)

    return {
        "path": str(output_path),
        "total_tests": analysis.team_size,
        "failures": failures,
        "passed": analysis.team_size - failures,
    }
