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

"""Build orchestration.

Builds the workspace's eligible packages one after another::

    load registry ─→ load tsconfig ─→ clean output root
         │
         ▼
    for each selected package, in directory order:
        compile ─→ audit ─→ write ─→ declare ─→ derive
                     │
                     └─ failure: record, then next package
                        (or stop, with fail_fast)

    ConfigurationError at any point ends the run.

Run state lives in a :class:`RunContext` that is passed to every stage;
nothing is kept at module level. The registry is read-only for the
whole run and publish manifests are only ever added, keyed by directory.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from bundlekit.audit import audit
from bundlekit.backends.bundler import ModuleCompiler, RollupCompiler
from bundlekit.backends.declarations import DeclarationEmitter, TscEmitter
from bundlekit.config import BuildConfig
from bundlekit.declarations import TypeScriptConfig, load_base_config
from bundlekit.errors import (
    E,
    BuildFailure,
    BundleKitError,
    ConfigurationError,
    DiagnosticsOnly,
    PackageBuildError,
    PackageFailure,
)
from bundlekit.logging import get_logger, package_context
from bundlekit.manifest import PublishManifest
from bundlekit.observer import BuildObserver, BuildStage, NullBuildObserver
from bundlekit.publish import OutputLayout, build_publish_manifest
from bundlekit.workspace import WorkspacePackage, WorkspaceRegistry, load_registry

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a build run.

    Attributes:
        built: Directories built successfully, in build order.
        failed: One record per package whose build was aborted.
        skipped: Directories that were not built (private, unknown, or
            not reached after a ``fail_fast`` stop).
        publish_manifests: Publish manifest per built directory.
        warnings: Non-fatal type-checker reports.
        package_names: Package name per directory, for display.
    """

    built: tuple[str, ...] = ()
    failed: tuple[PackageFailure, ...] = ()
    skipped: tuple[str, ...] = ()
    publish_manifests: Mapping[str, PublishManifest] = field(default_factory=dict)
    warnings: tuple[DiagnosticsOnly, ...] = ()
    package_names: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether every selected package was built."""
        return not self.failed


@dataclass
class RunContext:
    """State threaded through one build run.

    Attributes:
        root: Workspace root.
        config: Validated configuration.
        registry: Workspace registry, read-only.
        compiler: Bundler backend.
        emitter: Declaration backend, or ``None`` when declarations are off.
        tsconfig: Shared type-checker config, when declarations are on.
        observer: Progress observer.
    """

    root: Path
    config: BuildConfig
    registry: WorkspaceRegistry
    compiler: ModuleCompiler
    emitter: DeclarationEmitter | None = None
    tsconfig: TypeScriptConfig | None = None
    observer: BuildObserver = field(default_factory=NullBuildObserver)
    built: list[str] = field(default_factory=list)
    failed: list[PackageFailure] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[DiagnosticsOnly] = field(default_factory=list)
    _publish_manifests: dict[str, PublishManifest] = field(default_factory=dict)

    def record_manifest(self, directory: str, manifest: PublishManifest) -> None:
        """Store a package's publish manifest. Each directory is stored once."""
        if directory in self._publish_manifests:
            raise ValueError(f'publish manifest for {directory!r} already recorded')
        self._publish_manifests[directory] = manifest

    @property
    def publish_manifests(self) -> Mapping[str, PublishManifest]:
        """Read-only view of the publish manifests recorded so far."""
        return MappingProxyType(self._publish_manifests)

    def result(self) -> BuildResult:
        """Snapshot the run state as a :class:`BuildResult`."""
        return BuildResult(
            built=tuple(self.built),
            failed=tuple(self.failed),
            skipped=tuple(self.skipped),
            publish_manifests=dict(self._publish_manifests),
            warnings=tuple(self.warnings),
            package_names={d: p.name for d, p in self.registry.by_directory.items()},
        )


def select_packages(
    registry: WorkspaceRegistry,
    config: BuildConfig,
    only: Iterable[str] | None = None,
) -> tuple[list[WorkspacePackage], list[str]]:
    """Choose the packages to build.

    Excluded directories never reach the registry. Private packages are
    skipped. With ``only``, directories not named are left out and named
    directories the registry does not know are skipped.

    Returns:
        ``(selected, skipped)``: packages in directory order, and the
        directory names skipped.
    """
    wanted = list(dict.fromkeys(only)) if only else None
    excluded = frozenset(config.exclude)
    selected: list[WorkspacePackage] = []
    skipped: list[str] = []

    for directory, pkg in sorted(registry.by_directory.items()):
        if wanted is not None and directory not in wanted:
            continue
        if directory in excluded or not pkg.is_public:
            logger.info('skipped_package', directory=directory, reason='private' if not pkg.is_public else 'excluded')
            skipped.append(directory)
            continue
        selected.append(pkg)

    for directory in wanted or ():
        if directory not in registry.by_directory:
            logger.warning('skipped_unknown_directory', directory=directory)
            skipped.append(directory)

    return selected, skipped


async def build_package(ctx: RunContext, pkg: WorkspacePackage) -> PublishManifest:
    """Run compile, audit, write, declare and derive for one package.

    Args:
        ctx: The run context.
        pkg: The package to build.

    Returns:
        The package's publish manifest, also recorded in ``ctx``.

    Raises:
        PackageBuildError: If the package cannot be built.
        ConfigurationError: If the toolchain or its configuration is unusable.
    """
    directory = pkg.directory
    manifest = pkg.manifest
    observer = ctx.observer

    with package_context(directory):
        logger.info('building_package', package=manifest.name, path=f'{ctx.config.packages_dir}/{directory}')

        observer.on_stage(directory, BuildStage.COMPILING)
        if not manifest.main:
            raise BuildFailure(directory, 'package.json has no "main" entry point', code=E.BUILD_NO_ENTRY)
        graph = await ctx.compiler.compile(directory, pkg.path, manifest.main)

        observer.on_stage(directory, BuildStage.AUDITING)
        audited = audit(graph, manifest, ctx.registry)

        observer.on_stage(directory, BuildStage.WRITING)
        layout = OutputLayout(ctx.config.output_dir, directory, tuple(ctx.config.formats))
        for fmt in layout.formats:
            await ctx.compiler.emit(graph, fmt, ctx.root / layout.bundle_path(fmt))

        if ctx.emitter is not None and ctx.tsconfig is not None:
            observer.on_stage(directory, BuildStage.DECLARING)
            report = await ctx.emitter.emit_declarations(directory, pkg.path, ctx.tsconfig)
            if not report.clean:
                ctx.warnings.append(DiagnosticsOnly(directory, len(report.diagnostics)))

        observer.on_stage(directory, BuildStage.DERIVING)
        publish_manifest = build_publish_manifest(manifest, audited.resolved_imports, layout)
        ctx.record_manifest(directory, publish_manifest)

        observer.on_stage(directory, BuildStage.BUILT)
        logger.info('package_built', package=manifest.name, directory=directory)
    return publish_manifest


def clean_output(root: Path, output_dir: str) -> None:
    """Delete the output root if it exists.

    Raises:
        BundleKitError: If the directory cannot be removed.
    """
    target = root / output_dir
    if not target.exists():
        return
    try:
        shutil.rmtree(target)
    except OSError as exc:
        raise BundleKitError(
            code=E.BUILD_CLEAN_FAILED,
            message=f'Failed to delete {target}: {exc}',
            hint="Check permissions, or set 'clean = false' in bundlekit.toml.",
        ) from exc
    logger.debug('cleaned_output', path=str(target))


async def run_build(ctx: RunContext, only: Iterable[str] | None = None) -> BuildResult:
    """Build the selected packages of a prepared run context.

    Packages are built strictly one after another. A failing package is
    recorded and the run moves on, unless ``fail_fast`` is set, in which
    case the remaining packages are skipped.

    Raises:
        ConfigurationError: Ends the run immediately.
    """
    selected, skipped = select_packages(ctx.registry, ctx.config, only)
    ctx.skipped.extend(skipped)
    observer = ctx.observer

    observer.init_packages([(pkg.directory, pkg.name) for pkg in selected])
    for directory in skipped:
        observer.on_stage(directory, BuildStage.SKIPPED)

    for index, pkg in enumerate(selected):
        try:
            await build_package(ctx, pkg)
        except ConfigurationError as exc:
            observer.on_error(pkg.directory, exc.message)
            raise
        except BundleKitError as exc:
            if isinstance(exc, PackageBuildError):
                failure = PackageFailure.from_error(exc)
            else:
                failure = PackageFailure(directory=pkg.directory, code=exc.code, message=exc.message)
            ctx.failed.append(failure)
            observer.on_error(pkg.directory, exc.message)
            logger.error('package_failed', directory=pkg.directory, code=exc.code.value, error=exc.message)
            if ctx.config.fail_fast:
                for rest in selected[index + 1 :]:
                    ctx.skipped.append(rest.directory)
                    observer.on_stage(rest.directory, BuildStage.SKIPPED)
                break
        else:
            ctx.built.append(pkg.directory)

    observer.on_complete()
    result = ctx.result()
    logger.info('build_complete', built=len(result.built), failed=len(result.failed), skipped=len(result.skipped))
    return result


async def build_workspace(
    root: Path,
    config: BuildConfig,
    *,
    only: Iterable[str] | None = None,
    compiler: ModuleCompiler | None = None,
    emitter: DeclarationEmitter | None = None,
    observer: BuildObserver | None = None,
) -> BuildResult:
    """Load the workspace and build its eligible packages.

    Args:
        root: Workspace root.
        config: Validated configuration.
        only: Restrict the build to these directory names.
        compiler: Bundler backend; defaults to :class:`RollupCompiler`.
        emitter: Declaration backend; defaults to :class:`TscEmitter`.
        observer: Progress observer; defaults to :class:`NullBuildObserver`.

    Raises:
        ConfigurationError: If the shared tsconfig or the toolchain is unusable.
        FileAccessError: If the root ``package.json`` is unreadable.
    """
    registry = await load_registry(root, config.packages_dir, config.exclude)

    tsconfig: TypeScriptConfig | None = None
    if config.declarations:
        tsconfig = load_base_config(root, config.tsconfig, config.output_dir)
        if emitter is None:
            emitter = TscEmitter(root, tsc=config.tsc)
    else:
        emitter = None

    if compiler is None:
        compiler = RollupCompiler(
            root,
            node=config.node,
            packages_dir=config.packages_dir,
            sourcemap=config.sourcemap,
            globals=config.globals,
            property_read_side_effects=config.property_read_side_effects,
        )

    if config.clean:
        clean_output(root, config.output_dir)

    ctx = RunContext(
        root=root,
        config=config,
        registry=registry,
        compiler=compiler,
        emitter=emitter,
        tsconfig=tsconfig,
        observer=observer or NullBuildObserver(),
    )
    with ctx.observer:
        return await run_build(ctx, only)


__all__ = [
    'BuildResult',
    'RunContext',
    'build_package',
    'build_workspace',
    'clean_output',
    'run_build',
    'select_packages',
]
