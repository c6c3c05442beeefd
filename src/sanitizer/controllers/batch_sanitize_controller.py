# src/sanitizer/controllers/batch_sanitize_controller.py
from __future__ import annotations

import json
import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm.auto import tqdm

from mailview_shell.core.utils.parallel_workers import sanitize_file_worker

logger = logging.getLogger(__name__)


class BatchSanitizeController:
    """
    Sanitizes a directory of stored message bodies.
    Utilizes multiprocessing, since tree rewriting is CPU-bound and every file owns its own tree.
    """

    def __init__(self, *, default_workers: Optional[int] = None) -> None:
        self.default_workers = default_workers or (os.cpu_count() or 4)

    @staticmethod
    def _collect(source_dir: Path, pattern: str) -> List[Path]:
        return sorted(p for p in source_dir.glob(pattern) if p.is_file())

    def sanitize_directory(
            self,
            *,
            source_dir: Path,
            out_dir: Path,
            show_quotes: bool = True,
            paranoid: bool = True,
            workers: Optional[int] = None,
            pattern: str = "*.html",
            show_progress: bool = True,
    ) -> Dict[str, Any]:
        """
        Writes a sanitized copy of every matching file into `out_dir`.
        Returns a dictionary containing execution statistics.
        """
        files = self._collect(Path(source_dir), pattern)
        if not files:
            return self._empty_stats()

        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        n_workers = int(workers or self.default_workers)

        start = time.perf_counter()
        ok, ko = 0, 0
        bytes_in, bytes_out = 0, 0

        with ProcessPoolExecutor(max_workers=n_workers) as pool:
            futures = {
                pool.submit(sanitize_file_worker, str(f), str(out_dir), show_quotes, paranoid): f
                for f in files
            }
            iterator = as_completed(futures)
            if show_progress:
                iterator = tqdm(iterator, total=len(futures), desc="Sanitizing", unit=" file")

            for fut in iterator:
                path = futures[fut]
                try:
                    result_json = fut.result()
                    if not result_json:
                        ko += 1
                        continue

                    result = json.loads(result_json)
                    ok += 1
                    bytes_in += int(result.get("bytes_in", 0))
                    bytes_out += int(result.get("bytes_out", 0))
                except Exception as e:
                    ko += 1
                    logger.error("Failed to sanitize %s: %s", path, e, exc_info=True)

        dur = time.perf_counter() - start

        return {
            "files_total": len(files),
            "files_success": ok,
            "files_failed": ko,
            "bytes_in": bytes_in,
            "bytes_out": bytes_out,
            "duration_s": round(dur, 3),
            "files_per_s": round((len(files) / dur) if dur > 0 else 0.0, 2),
        }

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "files_total": 0, "files_success": 0, "files_failed": 0,
            "bytes_in": 0, "bytes_out": 0, "duration_s": 0.0, "files_per_s": 0.0,
        }
