"""Hot-reload watcher for skill and documentation files."""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


class HotReloader:
    """Polls watched Markdown trees and runs their reload callbacks on change."""

    def __init__(self, auto_reload: bool = True, check_interval: float = 2.0):
        self.auto_reload = auto_reload
        self.check_interval = check_interval
        self._last_check = 0.0
        # (root, glob pattern, callback)
        self._watches: List[Tuple[Path, str, Callable]] = []
        self._watch_mtimes: Dict[str, float] = {}

    def add_watch(self, root, on_change: Callable, pattern: str = "**/*.md"):
        """Watch files matching *pattern* under *root*; call *on_change* when they change."""
        self._watches.append((Path(root), pattern, on_change))
        self.refresh_snapshot()

    def _iter_watch_files(self, root: Path, pattern: str):
        if not root.exists():
            return
        for path in root.glob(pattern):
            if path.is_file():
                yield path

    def _snapshot(self, root: Path, pattern: str) -> Dict[str, float]:
        snapshot: Dict[str, float] = {}
        for path in self._iter_watch_files(root, pattern):
            try:
                snapshot[str(path)] = path.stat().st_mtime
            except OSError:
                continue
        return snapshot

    def refresh_snapshot(self):
        """Capture latest file mtimes for all watched files."""
        snapshot: Dict[str, float] = {}
        for root, pattern, _ in self._watches:
            snapshot.update(self._snapshot(root, pattern))
        self._watch_mtimes = snapshot

    def _previous(self, root: Path) -> Dict[str, float]:
        return {
            path: mtime for path, mtime in self._watch_mtimes.items()
            if Path(path).is_relative_to(root)
        }

    def _detect_changes(self) -> List[Tuple[Path, Callable, List[str], Dict[str, float]]]:
        """Return (root, callback, changed paths, current snapshot) per changed watch."""
        changes = []
        for root, pattern, callback in self._watches:
            current = self._snapshot(root, pattern)
            previous = self._previous(root)
            changed = [p for p, m in current.items() if p not in previous or m > previous[p]]
            changed.extend(p for p in previous if p not in current)
            if changed:
                changes.append((root, callback, sorted(changed), current))
        return changes

    def _commit(self, root: Path, current: Dict[str, float]):
        for path in self._previous(root):
            del self._watch_mtimes[path]
        self._watch_mtimes.update(current)

    def check_and_apply(self, force: bool = False) -> int:
        """Run reload callbacks for changed trees; returns how many ran.

        Rate-limited to one check per *check_interval* unless *force*. A
        watch whose callback fails keeps its old snapshot and is retried on
        the next check.
        """
        if not self.auto_reload and not force:
            return 0
        now = time.time()
        if not force and now - self._last_check < self.check_interval:
            return 0
        self._last_check = now

        applied = 0
        for root, callback, changed, current in self._detect_changes():
            try:
                callback()
            except Exception:
                logger.exception("Hot-reload callback failed for %s", changed)
                continue
            self._commit(root, current)
            applied += 1
            logger.info("Hot-reload applied: %d changed files (%s)", len(changed), changed[:5])
        return applied
