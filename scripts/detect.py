#!/usr/bin/env python3
"""Detect Maven projects and the platform resources they require.

Usage:
    python detect.py <path-to-source-tree> [--effective-pom] [--bom <pom.xml>] [--json]

Walks the tree, rebuilds multi-module hierarchies from pom.xml files, and
reports every runnable project with the databases, queues, event streams
and storage it needs.
"""

import sys

from appdetect.cli import main

if __name__ == "__main__":
    sys.exit(main())
