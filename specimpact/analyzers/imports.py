"""Import resolution and reverse-import lookup.

Finds the test files that import a given helper file. Only relative
specifiers ("./x", "../y") are resolved; package imports and path aliases
never match repository files.

The resolver keeps two caches: parsed import specifiers per file (keyed by
mtime and size) and a reverse-import index, a NetworkX DiGraph with an
edge from every scanned file to each file it imports.
"""

from pathlib import Path

import networkx as nx

from specimpact.analyzers.code_parser import extract_imports
from specimpact.analyzers.constants import AnalyzerConfig
from specimpact.logging import logger, progress_bar


def _is_relative_specifier(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../"))


class ImportResolver:
    """Resolve imports between the files of one repository checkout."""

    def __init__(self, repo_path: str | Path, config: AnalyzerConfig | None = None):
        self.repo_path = Path(repo_path).resolve()
        self.config = config or AnalyzerConfig.from_env()
        self._import_cache: dict[Path, tuple[float, int, list[str]]] = {}
        self._graph: nx.DiGraph | None = None
        self._graph_includes_helpers = False

    def _canonical(self, path: str | Path) -> Path:
        """Absolute, normalized form used for path equality."""
        path = Path(path)
        if not path.is_absolute():
            path = self.repo_path / path
        return path.resolve()

    def is_test_file(self, path: str | Path) -> bool:
        return self.config.is_test_file(Path(path).name)

    def _walk_files(self, include_helpers: bool) -> list[Path]:
        files = []
        for dirpath, dirnames, filenames in self.repo_path.walk():
            # Prune hidden and dependency directories in place
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(".") and d not in self.config.skip_dirs
            )
            for name in sorted(filenames):
                if self.config.is_test_file(name):
                    files.append(dirpath / name)
                elif include_helpers and self.config.is_helper_file(name):
                    files.append(dirpath / name)
        return files

    def find_test_files(self) -> list[Path]:
        """All test files in the repository, skipping hidden and dependency dirs."""
        return self._walk_files(include_helpers=False)

    def imports_of(self, file_path: str | Path) -> list[str]:
        """Module specifiers imported by a file, exactly as written.

        Unreadable or unparsable files yield an empty list.
        """
        path = self._canonical(file_path)
        try:
            stat = path.stat()
        except OSError:
            return []

        cached = self._import_cache.get(path)
        if cached and cached[0] == stat.st_mtime and cached[1] == stat.st_size:
            return list(cached[2])

        try:
            source = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
            return []

        specifiers = extract_imports(path.name, source)
        self._import_cache[path] = (stat.st_mtime, stat.st_size, specifiers)
        return list(specifiers)

    def resolve(self, from_file: str | Path, specifier: str) -> Path | None:
        """Resolve an import specifier written in from_file.

        Relative specifiers resolve against from_file's directory. When
        the literal path is not a file, '<path><ext>' and then
        '<path>/index<ext>' are tried; if neither exists the literal path
        is returned anyway.

        Returns:
            Canonical absolute path, or None for non-relative (package)
            specifiers and for paths the filesystem cannot represent.
        """
        if not _is_relative_specifier(specifier):
            return None

        try:
            resolved = (self._canonical(from_file).parent / specifier).resolve()
            if resolved.is_file():
                return resolved

            extension = self.config.source_extension
            # The filesystem root has no name to extend
            if resolved.name:
                with_extension = resolved.with_name(resolved.name + extension)
                if with_extension.is_file():
                    return with_extension

            index = resolved / f"index{extension}"
            if index.is_file():
                return index
        except (OSError, ValueError) as e:
            logger.debug("Cannot resolve %r from %s: %s", specifier, from_file, e)
            return None

        return resolved

    def import_graph(self, include_helpers: bool = False) -> nx.DiGraph:
        """Reverse-import index for the repository (built once, then cached).

        Args:
            include_helpers: Also scan non-test source files, so that
                helper-to-helper imports can be followed.

        Returns:
            DiGraph with an edge importer -> imported file (canonical paths).
            Node attribute 'test' marks test files.
        """
        if self._graph is not None and (self._graph_includes_helpers or not include_helpers):
            return self._graph

        files = self._walk_files(include_helpers=include_helpers)
        G = nx.DiGraph()
        for path in progress_bar(files, desc="Indexing imports", total=len(files), unit="files"):
            G.add_node(path, test=self.config.is_test_file(path.name))
            for specifier in self.imports_of(path):
                target = self.resolve(path, specifier)
                if target is not None:
                    G.add_edge(path, target)

        logger.debug(
            "Import index: %d files, %d edges", G.number_of_nodes(), G.number_of_edges()
        )
        self._graph = G
        self._graph_includes_helpers = include_helpers
        return G

    def test_files_importing(self, target_file: str | Path, depth: int = 1) -> set[Path]:
        """Test files that import target_file.

        Args:
            target_file: Helper path, absolute or relative to the repo root.
            depth: 1 for direct importers only. Larger values also follow
                helper files importing the target, up to that many hops.

        Returns:
            Canonical absolute paths of the importing test files.
        """
        target = self._canonical(target_file)
        G = self.import_graph(include_helpers=depth > 1)
        if target not in G:
            return set()

        # Level-by-level walk over importers
        found: set[Path] = set()
        current_level = {target}
        visited = {target}
        for _ in range(max(depth, 1)):
            next_level: set[Path] = set()
            for node in current_level:
                for importer in G.predecessors(node):
                    if importer in visited:
                        continue
                    visited.add(importer)
                    next_level.add(importer)
                    if G.nodes[importer].get("test"):
                        found.add(importer)
            current_level = next_level
            if not current_level:
                break

        return found

    def invalidate(self) -> None:
        """Drop cached imports and the import index."""
        self._import_cache.clear()
        self._graph = None
        self._graph_includes_helpers = False
