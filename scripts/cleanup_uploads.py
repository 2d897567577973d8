import argparse
import datetime
import sys
from pathlib import Path
from typing import List

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from core.config import get_settings
from core.logging import logger

# --- Configuration ---
DEFAULT_TTL_DAYS = 7

# --- Helper Functions ---
def get_file_size(path: Path) -> float:
    """Returns the size of a file in MB."""
    return path.stat().st_size / (1024 * 1024)

def parse_args(argv=None):
    """Parses command-line arguments."""
    parser = argparse.ArgumentParser(description="Clean up stored chat uploads.")
    parser.add_argument(
        "--upload-dir",
        type=Path,
        default=None,
        help="Directory holding stored uploads. Default: UPLOAD_DIR from the application settings.",
    )
    parser.add_argument(
        "--ttl-days",
        type=int,
        default=DEFAULT_TTL_DAYS,
        help=f"Time-to-live in days. Uploads older than this will be deleted. Default: {DEFAULT_TTL_DAYS}",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate the cleanup without actually deleting any files.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging."
    )
    return parser.parse_args(argv)

def cleanup_uploads(upload_dir: Path, ttl_days: int, dry_run: bool = False, verbose: bool = False) -> List[Path]:
    """
    Deletes uploads whose modification time is older than ``ttl_days``.

    Returns the paths that were deleted, or would have been in dry-run mode.
    """
    upload_dir = Path(upload_dir)
    if not upload_dir.exists():
        logger.info(f"Upload directory '{upload_dir}' not found. Nothing to do.")
        return []

    cutoff_date = datetime.datetime.now() - datetime.timedelta(days=ttl_days)
    removed: List[Path] = []
    removed_size = 0.0

    for path in sorted(upload_dir.iterdir()):
        if not path.is_file():
            continue
        try:
            mtime = datetime.datetime.fromtimestamp(path.stat().st_mtime)
            if mtime >= cutoff_date:
                continue
            size = get_file_size(path)
            if verbose:
                logger.info(f"  - Deleting '{path.name}' (Reason: TTL, Size: {size:.2f} MB)")
            if not dry_run:
                path.unlink()
        except FileNotFoundError:
            # Can happen if a file is deleted by another process
            continue
        removed.append(path)
        removed_size += size

    logger.info(
        f"Upload cleanup ({'DRY RUN' if dry_run else 'DELETION'}): "
        f"{len(removed)} files older than {ttl_days} days (Total size: {removed_size:.2f} MB)."
    )
    return removed

def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)
    upload_dir = args.upload_dir or Path(get_settings().UPLOAD_DIR)
    cleanup_uploads(upload_dir, args.ttl_days, dry_run=args.dry_run, verbose=args.verbose)

if __name__ == "__main__":
    main()
