"""Warden dependency injection registry.

Warden is a small service registry that builds services lazily, caches them as
singletons and enforces which services may depend on which others. Services
declare their dependencies explicitly; nothing is inferred from parameter
names, and nothing is built until it is first requested.

Key Features:
    - Lazy singleton construction from classes or factory functions
    - Explicit dependency manifests with required and optional services
    - Group-based allow/deny policies between services
    - Hierarchical injectors for request/session isolation
    - Cycle detection and overwrite diagnostics

Basic Usage:
    >>> from warden import Injector, injects
    >>>
    >>> injector = Injector()
    >>> injector.add_service("config", {"dsn": "sqlite://"})
    >>>
    >>> @injects("config")
    ... class Database:
    ...     def __init__(self, services):
    ...         self.dsn = services["config"]["dsn"]
    >>>
    >>> injector.add_service("db", Database, groups="storage")
    >>> injector.get_service("db").dsn
    'sqlite://'

The package consists of several modules:
    - injector: The public Injector facade
    - registry: Service entry storage and overwrite reporting
    - groups: Group membership and dependency policies
    - resolver: Manifest-driven construction
    - manifest: Declaring and reading dependency manifests
    - service_map: Lazily evaluated bulk retrieval results
    - diagnostics: Diagnostics sinks and registration call sites
    - domain: Core domain models (RawInstance, Factory, ResolvedPolicy)
    - errors: Framework-specific exceptions
"""

from warden.diagnostics import DiagnosticsSink, LoggingDiagnostics
from warden.domain import Factory, RawInstance, ResolvedPolicy, SourceTrace
from warden.errors import (
    CyclicDependencyError,
    DependencyError,
    MissingDependencyError,
    PolicyDeniedError,
    UnknownGroupError,
)
from warden.injector import Injector
from warden.manifest import injects, read_manifest
from warden.service_map import LazyService, ServiceMap
from warden.settings import InjectorSettings

__all__ = [
    "Injector",
    "InjectorSettings",
    "injects",
    "read_manifest",
    "RawInstance",
    "Factory",
    "ResolvedPolicy",
    "SourceTrace",
    "LazyService",
    "ServiceMap",
    "DiagnosticsSink",
    "LoggingDiagnostics",
    "DependencyError",
    "MissingDependencyError",
    "PolicyDeniedError",
    "CyclicDependencyError",
    "UnknownGroupError",
]
