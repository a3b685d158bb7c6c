"""Component discovery — descriptors, the manifest parser, and scanners.

Discovery turns declared components into an ordered list of
``ComponentDescriptor`` records that the registry consumes.
"""

from roost.discovery.descriptor import (
    ComponentDescriptor,
    InjectionPoint,
    Operation,
    ParamShape,
    ReflectionFlags,
    describe,
    load_type,
    resolve,
)
from roost.discovery.manifest import dump_manifest, parse_manifest
from roost.discovery.scanner import ManifestScanner, PackageScanner, Scanner, StaticScanner

__all__ = [
    "ComponentDescriptor",
    "InjectionPoint",
    "ManifestScanner",
    "Operation",
    "PackageScanner",
    "ParamShape",
    "ReflectionFlags",
    "Scanner",
    "StaticScanner",
    "describe",
    "dump_manifest",
    "load_type",
    "parse_manifest",
    "resolve",
]
