"""Power lifecycle orchestration.

PowerManager installs, updates and uninstalls Powers in a project. It is
the only component that mutates project state: the installed Power
copies, the shared MCP server config, the steering directory and the
installed-state manifest.

Every mutating operation runs under a single per-manager lock, and batch
operations run strictly one Power after another because each of them
reads, modifies and writes the same shared config. Expected failures
never escape: they are converted into the errors of the returned
InstallResult.
"""

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from functools import partial
from pathlib import Path

from powerctl.core.cache import PowerCacheManager
from powerctl.core.errors import (
    PowerConfigMergeError,
    PowerError,
    PowerFileSystemError,
    PowerNotFoundError,
    PowerValidationError,
)
from powerctl.core.filesystem import FileSystem, LocalFileSystem
from powerctl.core.mcp_config import SharedConfig, SharedConfigError
from powerctl.core.metadata import (
    extract_power_package,
    fetch_power_registry,
    read_declared_servers,
)
from powerctl.core.paths import (
    POWER_EXAMPLES_DIR,
    POWER_MANIFEST_FILE,
    POWER_MCP_CONFIG_FILE,
    POWER_PACKAGE_FILE,
    POWER_SERVERS_DIR,
    POWER_STEERING_DIR,
    get_cache_dir,
    get_installed_manifest_path,
    get_mcp_config_path,
    get_power_install_dir,
    get_powers_dir,
    get_powers_template_dir,
    get_scaffold_dir,
    get_steering_dir,
)
from powerctl.core.state import InstalledManifestError, InstalledStateManager
from powerctl.core.validation import validate_power_compatibility, validate_power_package
from powerctl.models.installed import (
    POWER_NAME_PATTERN,
    InstalledComponents,
    InstalledPowerRecord,
    PowerMetadata,
)
from powerctl.models.power import PowerPackage
from powerctl.models.result import InstallResult, ValidationResult

logger = logging.getLogger(__name__)

FOLDER_LABEL = "Power folder"
SERVER_LABEL = "MCP server"
STEERING_LABEL = "Steering file"


def _label(kind: str, name: str) -> str:
    return f"{kind}: {name}"


def _union(first: Iterable[str], second: Iterable[str]) -> list[str]:
    """Concatenate two name lists, dropping duplicates, keeping order."""
    seen: dict[str, None] = {}
    for name in (*first, *second):
        seen.setdefault(name, None)
    return list(seen)


def record_error(result: InstallResult, error: PowerError) -> None:
    """Append a PowerError and its troubleshooting hints to a result."""
    result.errors.append(error.message)
    for tip in error.troubleshooting:
        if tip not in result.troubleshooting:
            result.troubleshooting.append(tip)


class _Rollback:
    """Undo steps registered while an install progresses."""

    def __init__(self) -> None:
        self._steps: list[tuple[str, Callable[[], object]]] = []

    def push(self, description: str, undo: Callable[[], object]) -> None:
        self._steps.append((description, undo))

    def commit(self) -> None:
        self._steps.clear()

    def run(self) -> list[str]:
        """Undo every registered step, newest first.

        Returns:
            Messages for the undo steps that failed.
        """
        failures: list[str] = []
        for description, undo in reversed(self._steps):
            try:
                undo()
            except (OSError, SharedConfigError) as e:
                logger.warning("Rollback failed to %s: %s", description, e)
                failures.append(f"Rollback failed to {description}: {e}")
        self._steps.clear()
        return failures


class PowerManager:
    """Install, update and uninstall Powers in one project.

    Attributes:
        cwd: Project root.
        cache: Metadata cache for this invocation.
        state: Installed-state manifest access.
        shared_config: Shared MCP server config access.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        *,
        fs: FileSystem | None = None,
        cache: PowerCacheManager | None = None,
    ) -> None:
        """Initialize PowerManager.

        Nothing is read or written until an operation is called.

        Args:
            cwd: Project root. Default: the current working directory.
            fs: Filesystem implementation. Default: local disk.
            cache: Cache instance. Default: a fresh cache in the project.
        """
        self.cwd = cwd if cwd is not None else Path.cwd()
        self._fs: FileSystem = fs or LocalFileSystem()
        self.cache = (
            cache if cache is not None else PowerCacheManager(get_cache_dir(self.cwd), fs=self._fs)
        )
        self.state = InstalledStateManager(get_installed_manifest_path(self.cwd), self._fs)
        self.shared_config = SharedConfig(get_mcp_config_path(self.cwd), self._fs)
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def templates_dir(self) -> Path:
        """The effective Power templates source directory."""
        return get_powers_template_dir(self.cwd)

    def list_available(self, refresh: bool = False) -> list[PowerPackage]:
        """List the Powers available for installation.

        Args:
            refresh: Ignore a cached registry listing.
        """
        registry = None if refresh else self.cache.get_cached_registry()
        if registry is None:
            registry = fetch_power_registry(self.cwd, self._fs)
            self.cache.set_cached_registry(registry)
        return list(registry.powers)

    def list_installed(self) -> list[InstalledPowerRecord]:
        """List installed Powers, sorted by name.

        Raises:
            InstalledManifestError: If the manifest cannot be read.
        """
        return self.state.list_records()

    def is_installed(self, name: str) -> bool:
        """Check if a Power has an installed record."""
        return self.state.get_record(name) is not None

    def get_installed_version(self, name: str) -> str | None:
        """Return the installed version of a Power, if installed."""
        record = self.state.get_record(name)
        return record.version if record is not None else None

    def get_metadata(self, name: str) -> PowerMetadata | None:
        """Return an installed Power's record and descriptor.

        The result is cached until the Power is installed, updated or
        uninstalled again.

        Returns:
            PowerMetadata, or None if the Power is not installed.
        """
        if not POWER_NAME_PATTERN.match(name):
            return None

        cached = self.cache.get_cached_power_metadata(name)
        if cached is not None:
            return cached

        record = self.state.get_record(name)
        if record is None:
            return None

        package = extract_power_package(get_power_install_dir(name, self.cwd), self._fs)
        metadata = PowerMetadata(record=record, package=package)
        self.cache.set_cached_power_metadata(name, metadata)
        return metadata

    def find_template(self, name: str) -> PowerPackage | None:
        """Read the descriptor of an available Power template."""
        source = self.templates_dir / name
        if not POWER_NAME_PATTERN.match(name) or not self._fs.is_dir(source):
            return None
        return extract_power_package(source, self._fs)

    def validate_removal(self, name: str) -> ValidationResult:
        """Describe what uninstalling a Power would remove.

        Returns:
            ValidationResult with an error if the Power is not installed,
            and one warning per kind of component to be removed.
        """
        result = ValidationResult()
        record = self.state.get_record(name)
        if record is None:
            result.add_error(f"Power '{name}' is not installed")
            return result

        if record.components.mcp_servers:
            result.add_warning(f"Will remove {len(record.components.mcp_servers)} MCP server(s)")
        if record.components.steering_files:
            result.add_warning(
                f"Will remove {len(record.components.steering_files)} steering file(s)"
            )
        return result

    def find_orphaned_installs(self) -> list[str]:
        """List installed Power directories without a manifest record.

        These are left behind when a copy succeeded but recording the
        install did not, or when the manifest was edited by hand.
        """
        powers_dir = get_powers_dir(self.cwd)
        if not self._fs.is_dir(powers_dir):
            return []
        recorded = self.state.load().powers
        return [
            entry
            for entry in self._fs.read_dir(powers_dir)
            if not entry.startswith(".")
            and entry not in recorded
            and self._fs.is_dir(powers_dir / entry)
        ]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def install(self, name: str) -> InstallResult:
        """Install a Power from the templates directory.

        Steps:
        1. Resolve the source directory (missing: not-found error).
        2. Validate it, plus declared compatibility requirements.
        3. Extract its descriptor.
        4. Copy it into .kiro/powers/<name> via a staging directory.
        5. Merge its MCP servers into the shared config, skipping names
           that are already configured.
        6. Copy its steering files, skipping names that already exist.
        7. Record exactly what was added in the installed-state manifest.

        If any step after the copy fails, everything this call changed
        is undone and no manifest entry is written. Nothing is written
        at all when resolution or validation fails.

        Args:
            name: Power name (its template directory name).

        Returns:
            InstallResult with prefixed added and skipped components.
        """
        with self._lock:
            return self._install(name, updating=False)

    def install_from_path(self, path: Path, name: str | None = None) -> InstallResult:
        """Install a Power from a directory outside the templates tree.

        The directory goes through the same validation, copy, merge and
        record steps as install(), with the same rollback.

        Args:
            path: Power directory, for example one under development.
            name: Install name. Default: the directory name.

        Returns:
            InstallResult with prefixed added and skipped components.
        """
        source = path.resolve()
        with self._lock:
            return self._install(name or source.name, updating=False, source=source)

    def update(self, name: str) -> InstallResult:
        """Re-install an installed Power from its current template.

        Server entries already in the shared config (including any the
        user customized) stay untouched; newly declared servers and steering
        files are added. The manifest record gets the new version and the
        recomputed component list.
        """
        with self._lock:
            return self._install(name, updating=True)

    def uninstall(self, name: str) -> InstallResult:
        """Remove an installed Power.

        Only the servers and steering files recorded as added by this
        Power are removed. Removing the config entries and removing the
        installed copy are attempted independently; a failure in one is
        reported and the other still runs, then the manifest entry is
        removed.

        Returns:
            InstallResult listing removed components and any errors.
        """
        with self._lock:
            return self._uninstall(name)

    def install_many(self, names: Iterable[str]) -> dict[str, InstallResult]:
        """Install several Powers one after another."""
        return {name: self.install(name) for name in names}

    def uninstall_many(self, names: Iterable[str]) -> dict[str, InstallResult]:
        """Uninstall several Powers one after another."""
        return {name: self.uninstall(name) for name in names}

    def _install(
        self, name: str, *, updating: bool, source: Path | None = None
    ) -> InstallResult:
        result = InstallResult()
        rollback = _Rollback()
        backup: Path | None = None

        try:
            previous = self._load_record(name)
            if updating and previous is None:
                result.errors.append(f"Power '{name}' is not installed")
                return result

            source = self._resolve_source(name, source)
            package = self._check_source(name, source, result)

            if updating and previous is not None:
                result.warnings.append(self._describe_update(name, previous.version, package))

            logger.info("Installing Power %s v%s from %s", name, package.version, source)
            backup = self._copy_power_folder(name, source, rollback)
            result.added.append(_label(FOLDER_LABEL, name))

            added_servers = self._merge_servers(name, source, result, rollback)
            added_docs = self._copy_steering_files(name, source, package, result, rollback)
            self._record_install(name, package, previous, added_servers, added_docs, updating)
        except PowerError as e:
            logger.warning("Install of %s failed: %s", name, e.message)
            rolled_back = bool(result.added)
            failures = rollback.run()
            if rolled_back:
                result.added.clear()
                result.skipped.clear()
                result.warnings.append("Changes made by this install were rolled back")
            record_error(result, e)
            result.errors.extend(failures)
            return result

        rollback.commit()
        if backup is not None:
            self._discard(backup)
        self.cache.invalidate_power_metadata(name)
        logger.info(
            "Installed Power %s: %d added, %d skipped",
            name,
            len(result.added),
            len(result.skipped),
        )
        return result

    def _uninstall(self, name: str) -> InstallResult:
        result = InstallResult()

        try:
            record = self._load_record(name)
        except PowerError as e:
            record_error(result, e)
            return result

        if record is None:
            result.errors.append(f"Power '{name}' is not installed")
            return result

        logger.info("Uninstalling Power %s v%s", name, record.version)

        if record.components.mcp_servers:
            try:
                outcome = self.shared_config.remove_servers(record.components.mcp_servers)
            except SharedConfigError as e:
                record_error(result, PowerConfigMergeError(name, "uninstall", str(e)))
            else:
                result.removed.extend(_label(SERVER_LABEL, s) for s in outcome.removed)
                result.warnings.extend(
                    f"MCP server '{s}' was already removed" for s in outcome.missing
                )

        steering_dir = get_steering_dir(self.cwd)
        for doc in record.components.steering_files:
            path = steering_dir / doc
            try:
                if not self._fs.exists(path):
                    result.warnings.append(f"Steering file '{doc}' was already removed")
                    continue
                self._fs.remove(path)
            except OSError as e:
                record_error(result, PowerFileSystemError(name, "uninstall", str(path), str(e)))
            else:
                result.removed.append(_label(STEERING_LABEL, doc))

        install_dir = get_power_install_dir(name, self.cwd)
        try:
            if self._fs.exists(install_dir):
                self._fs.remove(install_dir)
                result.removed.append(_label(FOLDER_LABEL, name))
        except OSError as e:
            record_error(result, PowerFileSystemError(name, "uninstall", str(install_dir), str(e)))

        try:
            self.state.remove_record(name)
        except InstalledManifestError as e:
            path = str(self.state.manifest_path)
            record_error(result, PowerFileSystemError(name, "uninstall", path, str(e)))

        self.cache.invalidate_power_metadata(name)
        logger.info("Uninstalled Power %s: %d removed", name, len(result.removed))
        return result

    # -------------------------------------------------------------------------
    # Install steps
    # -------------------------------------------------------------------------

    def _load_record(self, name: str) -> InstalledPowerRecord | None:
        try:
            return self.state.get_record(name)
        except InstalledManifestError as e:
            raise PowerFileSystemError(
                name, "read installed manifest", str(self.state.manifest_path), str(e)
            ) from e

    def _resolve_source(self, name: str, source: Path | None = None) -> Path:
        if not POWER_NAME_PATTERN.match(name):
            raise PowerValidationError(name, [f"Invalid Power name '{name}'"])
        if source is not None:
            if not self._fs.is_dir(source):
                raise PowerValidationError(name, [f"Power directory {source} does not exist"])
            return source
        templates_dir = self.templates_dir
        source = templates_dir / name
        if not self._fs.is_dir(source):
            raise PowerNotFoundError(name, str(templates_dir))
        return source

    def _check_source(self, name: str, source: Path, result: InstallResult) -> PowerPackage:
        validation = validate_power_package(source, self._fs)
        if not validation.valid:
            raise PowerValidationError(name, validation.errors)
        result.warnings.extend(validation.warnings)

        package = extract_power_package(source, self._fs)
        if package is None:
            raise PowerValidationError(name, ["Failed to read Power package info"])

        if package.requirements is not None:
            compatibility = validate_power_compatibility(package)
            if not compatibility.valid:
                raise PowerValidationError(name, compatibility.errors)
            result.warnings.extend(compatibility.warnings)

        if package.name != name:
            result.warnings.append(
                f"{POWER_PACKAGE_FILE} name '{package.name}' differs from directory '{name}'"
            )
        return package

    @staticmethod
    def _describe_update(name: str, old_version: str, package: PowerPackage) -> str:
        if old_version == package.version:
            return f"Power '{name}' is already at v{package.version}, refreshing installed files"
        return f"Updating Power '{name}' from v{old_version} to v{package.version}"

    def _copy_power_folder(self, name: str, source: Path, rollback: _Rollback) -> Path | None:
        """Copy the source into place through a staging directory.

        An existing copy is moved aside first and restored on rollback.

        Returns:
            The backup of the previous copy, to discard on success.
        """
        target = get_power_install_dir(name, self.cwd)
        token = uuid.uuid4().hex[:8]
        staging = target.with_name(f".{name}.staging-{token}")
        backup = target.with_name(f".{name}.backup-{token}")

        try:
            self._fs.copy_tree(source, staging)
        except OSError as e:
            self._discard(staging)
            raise PowerFileSystemError(name, "copy", str(target), str(e)) from e

        moved_aside = False
        try:
            if self._fs.exists(target):
                self._fs.move(target, backup)
                moved_aside = True
                rollback.push(f"restore {target}", partial(self._restore, target, backup))
            else:
                rollback.push(f"remove {target}", partial(self._fs.remove, target))
            self._fs.move(staging, target)
        except OSError as e:
            self._discard(staging)
            raise PowerFileSystemError(name, "copy", str(target), str(e)) from e

        return backup if moved_aside else None

    def _restore(self, target: Path, backup: Path) -> None:
        self._fs.remove(target)
        self._fs.move(backup, target)

    def _discard(self, path: Path) -> None:
        try:
            self._fs.remove(path)
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)

    def _merge_servers(
        self,
        name: str,
        source: Path,
        result: InstallResult,
        rollback: _Rollback,
    ) -> list[str]:
        declared = read_declared_servers(source, self._fs)
        if not declared:
            return []

        try:
            outcome = self.shared_config.merge_servers(declared)
        except SharedConfigError as e:
            raise PowerConfigMergeError(name, "install", str(e)) from e

        if outcome.added:
            rollback.push(
                "remove added MCP servers",
                partial(self.shared_config.remove_servers, list(outcome.added)),
            )
        result.added.extend(_label(SERVER_LABEL, s) for s in outcome.added)
        result.skipped.extend(_label(SERVER_LABEL, s) for s in outcome.skipped)
        return outcome.added

    def _copy_steering_files(
        self,
        name: str,
        source: Path,
        package: PowerPackage,
        result: InstallResult,
        rollback: _Rollback,
    ) -> list[str]:
        steering_dir = get_steering_dir(self.cwd)
        added: list[str] = []

        for doc in package.steering_file_names:
            target = steering_dir / doc
            if self._fs.exists(target):
                logger.debug("Steering file %s already exists, skipping", target)
                result.skipped.append(_label(STEERING_LABEL, doc))
                continue
            try:
                self._fs.copy_file(source / POWER_STEERING_DIR / doc, target)
            except OSError as e:
                raise PowerFileSystemError(name, "copy steering file", str(target), str(e)) from e
            rollback.push(f"remove {target}", partial(self._fs.remove, target))
            added.append(doc)
            result.added.append(_label(STEERING_LABEL, doc))

        return added

    def _record_install(
        self,
        name: str,
        package: PowerPackage,
        previous: InstalledPowerRecord | None,
        added_servers: list[str],
        added_docs: list[str],
        updating: bool,
    ) -> None:
        kept_servers: list[str] = []
        kept_docs: list[str] = []
        if previous is not None:
            try:
                configured = set(self.shared_config.server_names())
            except SharedConfigError as e:
                raise PowerConfigMergeError(name, "install", str(e)) from e
            steering_dir = get_steering_dir(self.cwd)
            kept_servers = [s for s in previous.components.mcp_servers if s in configured]
            kept_docs = [
                d for d in previous.components.steering_files if self._fs.exists(steering_dir / d)
            ]

        components = InstalledComponents(
            mcp_servers=_union(kept_servers, added_servers),
            steering_files=_union(kept_docs, added_docs),
        )
        if (
            not updating
            and previous is not None
            and previous.version == package.version
            and previous.components == components
        ):
            logger.debug("Installed record for %s unchanged", name)
            return

        record = InstalledPowerRecord(
            name=name,
            version=package.version,
            installed_at=datetime.now(UTC),
            components=components,
        )
        try:
            self.state.put_record(record)
        except InstalledManifestError as e:
            raise PowerFileSystemError(
                name, "record install", str(self.state.manifest_path), str(e)
            ) from e

    # -------------------------------------------------------------------------
    # Development
    # -------------------------------------------------------------------------

    def check_scaffold_conflicts(self, name: str) -> ValidationResult:
        """Check whether scaffolding a Power would clobber existing files.

        A target that already holds Power files is an error; a non-empty
        target without them is a warning.
        """
        result = ValidationResult()
        target = get_scaffold_dir(name, self.cwd)
        if not self._fs.exists(target):
            return result

        important = (POWER_MANIFEST_FILE, POWER_PACKAGE_FILE, POWER_MCP_CONFIG_FILE)
        existing = [f for f in important if self._fs.exists(target / f)]
        if existing:
            result.add_error(
                f"Directory '{name}' already exists with power files: {', '.join(existing)}"
            )
        elif self._fs.is_dir(target) and self._fs.read_dir(target):
            result.add_warning(f"Directory '{name}' exists but contains no power files")
        return result

    def scaffold(self, name: str, force: bool = False) -> InstallResult:
        """Copy a Power template into <cwd>/<name> for development.

        Args:
            name: Template to copy.
            force: Overwrite a target that already holds Power files.

        Returns:
            InstallResult listing the scaffolded layout.
        """
        result = InstallResult()
        target = get_scaffold_dir(name, self.cwd)
        try:
            source = self._resolve_source(name)
            validation = validate_power_package(source, self._fs)
            if not validation.valid:
                result.errors.extend(validation.errors)
                return result
            result.warnings.extend(validation.warnings)

            conflicts = self.check_scaffold_conflicts(name)
            if not conflicts.valid and not force:
                result.errors.extend(conflicts.errors)
                return result
            result.warnings.extend(conflicts.warnings)

            try:
                self._fs.copy_tree(source, target)
            except OSError as e:
                raise PowerFileSystemError(name, "scaffold", str(target), str(e)) from e
        except PowerError as e:
            record_error(result, e)
            return result

        result.added.append(f"Power scaffolded: {name}")
        layout = (
            POWER_MANIFEST_FILE,
            POWER_PACKAGE_FILE,
            POWER_MCP_CONFIG_FILE,
            f"{POWER_STEERING_DIR}/",
            f"{POWER_EXAMPLES_DIR}/",
            f"{POWER_SERVERS_DIR}/",
        )
        result.added.extend(
            f"  {entry}" for entry in layout if self._fs.exists(target / entry.rstrip("/"))
        )
        logger.info("Scaffolded Power %s into %s", name, target)
        return result
