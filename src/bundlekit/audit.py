# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Dependency auditor.

Checks that every package a bundle imports is declared somewhere the
published package can get it from, and works out which versions must be
added to the publish manifest's ``dependencies``.

Each imported package name is run through :data:`RULES` in order; the
first rule whose predicate matches decides the outcome::

    ┌───┬───────────────────┬──────────────────────────────┬──────────────────────┐
    │ # │ Rule              │ Matches when                 │ Outcome              │
    ├───┼───────────────────┼──────────────────────────────┼──────────────────────┤
    │ 1 │ private-workspace │ workspace package, private   │ PrivateDependency    │
    │ 2 │ public-workspace  │ workspace package, public    │ pin its version      │
    │ 3 │ declared          │ in own deps or peerDeps      │ nothing to add       │
    │ 4 │ root-hoisted      │ in root deps, with a version │ pin root's version   │
    │ 5 │ missing           │ always                       │ MissingDependencies  │
    └───┴───────────────────┴──────────────────────────────┴──────────────────────┘

Private imports are reported before missing ones, and each error names
every offending package, so one run surfaces every problem of a kind.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from bundlekit.errors import MissingDependenciesError, PrivateDependencyError
from bundlekit.graph import ModuleGraph
from bundlekit.logging import get_logger
from bundlekit.manifest import PackageManifest
from bundlekit.workspace import WorkspaceRegistry

logger = get_logger(__name__)


class Outcome(str, enum.Enum):
    """What a classification rule decides for an imported package."""

    PRIVATE = 'private'
    PIN = 'pin'
    DECLARED = 'declared'
    MISSING = 'missing'


@dataclass(frozen=True)
class AuditSubject:
    """Everything a rule may consult about the package being built."""

    manifest: PackageManifest
    registry: WorkspaceRegistry


@dataclass(frozen=True)
class Classification:
    """The decision for one imported package.

    Attributes:
        name: Imported package name.
        rule: Name of the rule that matched.
        outcome: What the rule decided.
        version: Version to record, for :attr:`Outcome.PIN` only.
    """

    name: str
    rule: str
    outcome: Outcome
    version: str | None = None


@dataclass(frozen=True)
class ClassificationRule:
    """A predicate and the action taken when it matches.

    Attributes:
        name: Rule name, used in logs and classifications.
        matches: Predicate over ``(imported name, subject)``.
        classify: Builds the classification for a matching name.
    """

    name: str
    matches: Callable[[str, AuditSubject], bool]
    classify: Callable[[str, AuditSubject], Classification]


def _local_is_private(name: str, subject: AuditSubject) -> bool:
    pkg = subject.registry.get(name)
    return pkg is not None and not pkg.is_public


def _local_is_public(name: str, subject: AuditSubject) -> bool:
    pkg = subject.registry.get(name)
    return pkg is not None and pkg.is_public


def _pin_local(name: str, subject: AuditSubject) -> Classification:
    pkg = subject.registry.by_name[name]
    return Classification(name, 'public-workspace', Outcome.PIN, pkg.manifest.version)


def _pin_root(name: str, subject: AuditSubject) -> Classification:
    return Classification(name, 'root-hoisted', Outcome.PIN, subject.registry.root_dependencies[name])


RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name='private-workspace',
        matches=_local_is_private,
        classify=lambda name, _: Classification(name, 'private-workspace', Outcome.PRIVATE),
    ),
    ClassificationRule(
        name='public-workspace',
        matches=_local_is_public,
        classify=_pin_local,
    ),
    ClassificationRule(
        name='declared',
        matches=lambda name, subject: subject.manifest.declares(name),
        classify=lambda name, _: Classification(name, 'declared', Outcome.DECLARED),
    ),
    ClassificationRule(
        name='root-hoisted',
        matches=lambda name, subject: bool(subject.registry.root_dependencies.get(name)),
        classify=_pin_root,
    ),
    ClassificationRule(
        name='missing',
        matches=lambda name, subject: True,
        classify=lambda name, _: Classification(name, 'missing', Outcome.MISSING),
    ),
)


def classify(
    name: str,
    subject: AuditSubject,
    rules: tuple[ClassificationRule, ...] = RULES,
) -> Classification:
    """Classify one imported package name with the first matching rule."""
    for rule in rules:
        if rule.matches(name, subject):
            return rule.classify(name, subject)
    # The last rule in RULES always matches; custom rule lists may not.
    raise ValueError(f'no classification rule matched {name!r}')


@dataclass(frozen=True)
class AuditResult:
    """Outcome of auditing one package's module graph.

    Attributes:
        resolved_imports: Package name to the version that must be added
            to the publish manifest, sorted by name.
        missing: Sorted names declared nowhere.
        private: Sorted names of private workspace packages imported.
        classifications: One entry per imported package, sorted by name.
    """

    resolved_imports: Mapping[str, str] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    private: list[str] = field(default_factory=list)
    classifications: list[Classification] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether the package can be published as is."""
        return not self.missing and not self.private


def classify_imports(
    graph: ModuleGraph,
    manifest: PackageManifest,
    registry: WorkspaceRegistry,
) -> AuditResult:
    """Classify every package the graph imports, without raising.

    Names are de-duplicated and visited in sorted order, so the result
    does not depend on chunk or edge order.
    """
    subject = AuditSubject(manifest=manifest, registry=registry)
    classifications = [classify(name, subject) for name in sorted(set(graph.imported_packages()))]
    return AuditResult(
        resolved_imports={c.name: c.version for c in classifications if c.outcome is Outcome.PIN and c.version},
        missing=[c.name for c in classifications if c.outcome is Outcome.MISSING],
        private=[c.name for c in classifications if c.outcome is Outcome.PRIVATE],
        classifications=classifications,
    )


def audit(
    graph: ModuleGraph,
    manifest: PackageManifest,
    registry: WorkspaceRegistry,
) -> AuditResult:
    """Audit a package's module graph.

    Args:
        graph: The compiled module graph.
        manifest: Manifest of the package being built.
        registry: The workspace registry.

    Returns:
        An :class:`AuditResult` whose ``missing`` and ``private`` are empty.

    Raises:
        PrivateDependencyError: If any private workspace package is
            imported. Names every one of them.
        MissingDependenciesError: If any imported package is declared
            nowhere. Names every one of them.
    """
    result = classify_imports(graph, manifest, registry)
    for c in result.classifications:
        logger.debug('classified_import', package=graph.package, imported=c.name, rule=c.rule, version=c.version)

    if result.private:
        raise PrivateDependencyError(graph.package, result.private)
    if result.missing:
        raise MissingDependenciesError(graph.package, result.missing)

    logger.info('audit_passed', package=graph.package, resolved=len(result.resolved_imports))
    return result


__all__ = [
    'RULES',
    'AuditResult',
    'AuditSubject',
    'Classification',
    'ClassificationRule',
    'Outcome',
    'audit',
    'classify',
    'classify_imports',
]
