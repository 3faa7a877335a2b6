"""
Output Manager — Timestamped report folders and retention cleanup.

Each build run writes build_report.json into a folder named
YYYYMMDD_HHMM_{shop} (e.g. "20261017_1430_glamorousdesi_myshopify_com")
under the base output directory. Folders older than retention_days are
removed before a new one is created; retention_days=0 keeps everything.
"""

import json
import os
import re
import shutil
from datetime import datetime, timedelta
from typing import Optional

REPORT_FILENAME = "build_report.json"
FOLDER_PATTERN = re.compile(r'^(\d{8})_(\d{4})_.*$')


class OutputManager:
    """Writes build reports into timestamped folders and prunes old ones.

    Attributes:
        base_dir: Root output directory (default: ./output).
        retention_days: Delete folders older than this many days (0 = keep forever).
        current_dir: Folder of the latest run (None until created).
    """

    def __init__(self, base_dir: str, retention_days: int = 30, debug: bool = False):
        self.base_dir = base_dir
        self.retention_days = retention_days
        self.debug = debug
        self.current_dir: Optional[str] = None

    def create_run_dir(self, shop: str, when: Optional[datetime] = None) -> str:
        """Create the folder for one run.

        Format: {base_dir}/YYYYMMDD_HHMM_{sanitized_shop}

        Args:
            shop: Shop domain, sanitized to alphanumerics, "-" and "_".
            when: Run time (defaults to now).

        Returns:
            The full path to the created directory.
        """
        timestamp = (when or datetime.now()).strftime("%Y%m%d_%H%M")
        safe_shop = "".join(c if c.isalnum() or c in '-_' else '_' for c in shop)
        self.current_dir = os.path.join(self.base_dir, f"{timestamp}_{safe_shop}")
        os.makedirs(self.current_dir, exist_ok=True)
        return self.current_dir

    def save_report(self, report) -> str:
        """Write report.to_dict() into a fresh run folder. Returns the file path."""
        self.cleanup_old_folders()
        self.create_run_dir(report.shop or "store")
        path = os.path.join(self.current_dir, REPORT_FILENAME)
        with open(path, "w") as f:
            json.dump(report.to_dict(), f, indent=2, default=str)
        print(f"  Saved build report: {path}")
        return path

    def cleanup_old_folders(self) -> int:
        """Remove run folders older than retention_days.

        Returns:
            The number of folders deleted.
        """
        if self.retention_days <= 0 or not os.path.exists(self.base_dir):
            return 0

        deleted_count = 0
        cutoff_date = datetime.now() - timedelta(days=self.retention_days)

        for folder_name in os.listdir(self.base_dir):
            folder_path = os.path.join(self.base_dir, folder_name)
            match = FOLDER_PATTERN.match(folder_name)
            if not match or not os.path.isdir(folder_path):
                continue

            try:
                folder_datetime = datetime.strptime(
                    f"{match.group(1)}_{match.group(2)}", "%Y%m%d_%H%M"
                )
                if folder_datetime < cutoff_date:
                    shutil.rmtree(folder_path)
                    deleted_count += 1
                    if self.debug:
                        print(f"  Deleted old report folder: {folder_name}")
            except (ValueError, OSError) as e:
                if self.debug:
                    print(f"  Warning: Could not process folder {folder_name}: {e}")

        return deleted_count
