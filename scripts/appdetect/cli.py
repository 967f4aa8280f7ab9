"""CLI entry point and directory traversal.

Walks a source tree depth-first in lexicographic order, hands every
directory to one JavaDetector, and prints the detected projects.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Iterator, Optional

from .detector import DetectorOptions, JavaDetector, Project
from .renderer import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

# Directories never worth descending into.
SKIP_DIRS = {"target", "node_modules"}


def walk_projects(root: Path, detector: JavaDetector) -> Iterator[Project]:
    """Yield every project the detector finds under ``root``.

    Directory and file names are sorted so that discovery order, and with it
    every first-match tie-break in the hierarchy, is reproducible across
    platforms. Hidden directories, ``target`` and ``node_modules`` are skipped.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d not in SKIP_DIRS)
        project = detector.detect_project(Path(dirpath), sorted(filenames))
        if project is not None:
            yield project


def _format(project: Project, root: Path) -> str:
    try:
        rel = project.path.relative_to(root)
    except ValueError:
        rel = project.path
    lines = [f"{rel}  ({project.detection_rule})"]
    if project.parent_path is not None:
        lines.append(f"  parent: {project.parent_path}")
    if project.spring_boot_version:
        lines.append(f"  spring boot: {project.spring_boot_version}")
    for requirement in project.requirements:
        lines.append(f"  requires: {requirement.display} {_describe(requirement)}".rstrip())
    for dep in project.dependencies:
        lines.append(f"  dependency: {dep}")
    if project.metadata.application_name:
        lines.append(f"  application: {project.metadata.application_name}")
    for flag in sorted(project.metadata.flags):
        lines.append(f"  flag: {flag}")
    return "\n".join(lines)


def _describe(requirement) -> str:
    names = (
        getattr(requirement, "destinations", None)
        or getattr(requirement, "names", None)
        or getattr(requirement, "container_names", None)
    )
    return f"[{', '.join(names)}]" if names else ""


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Detect Maven projects and the platform resources they need"
    )
    parser.add_argument("root", type=Path, help="Root directory to scan")
    parser.add_argument("--effective-pom", "-e", action="store_true",
                        help="Render each project with 'mvn help:effective-pom' for version resolution")
    parser.add_argument("--maven-command", default=None,
                        help="Maven executable (default: project mvnw, then mvn on PATH)")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                        help="Seconds allowed per effective-POM rendering")
    parser.add_argument("--bom", type=Path, action="append", default=[],
                        help="Extra local descriptor for BOM imports (repeatable)")
    parser.add_argument("--json", action="store_true", help="Print projects as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-level", default="WARNING", help="Log level name (default: WARNING)")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    """CLI entry point. Parses arguments and scans the tree."""
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else getattr(logging, args.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    root = args.root.absolute()
    if not root.is_dir():
        print(f"ERROR: {root} is not a directory", file=sys.stderr)
        return 1

    options = DetectorOptions(
        use_effective_pom=args.effective_pom,
        maven_command=args.maven_command,
        timeout=args.timeout,
        bom_descriptors=list(args.bom),
    )
    logger.debug("Scanning %s with %s", root, options)
    projects = list(walk_projects(root, JavaDetector(options)))

    if args.json:
        print(json.dumps([p.to_dict() for p in projects], indent=2))
    else:
        for project in projects:
            print(_format(project, root))
        print(f"\n{len(projects)} project(s) detected under {root}")
    return 0
