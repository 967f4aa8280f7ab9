"""Maven multi-module project detection.

Parses pom.xml files, rebuilds the aggregator/module hierarchy, resolves
effective dependency versions and infers the platform resources a project
needs from its dependencies and runtime configuration.
"""
