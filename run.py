"""Entry point for the Microread application.

Prepares storage and runs an integrity scan over the library. Pass
``--repair`` to rebuild flagged books instead of only reporting them.
"""

import logging
import sys
from pathlib import Path

from microread.config import load_config
from microread.ingestion.chunker import BookChunker
from microread.rechunk.integrity import repair_books
from microread.rechunk.rechunker import Rechunker
from microread.storage.database import get_connection, initialize_database


def main() -> None:
    """Initialize storage and report (or repair) chunk integrity issues."""
    config = load_config()
    logging.basicConfig(
        level=config.app.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Ensure required directories exist
    Path(config.storage.library_dir).mkdir(parents=True, exist_ok=True)

    # Initialize SQLite database
    initialize_database(config.storage.sqlite_path)

    conn = get_connection(config.storage.sqlite_path)
    try:
        rechunker = Rechunker(conn, BookChunker(config.chunking))
        report = repair_books(
            conn,
            rechunker,
            dry_run="--repair" not in sys.argv[1:],
            config=config.integrity,
        )
    finally:
        conn.close()

    print(f"Checked {report.checked} books, {report.flagged_count} flagged")
    for flagged in report.flagged:
        print(f"  {flagged.title} ({flagged.book_id}): {', '.join(flagged.issues)}")
    for repaired in report.repaired:
        print(
            f"  repaired {repaired.title}: {repaired.total_chunks} chunks, "
            f"at chunk {repaired.current_chunk_index}"
        )
    for book_id, error in report.failed.items():
        print(f"  repair failed for {book_id}: {error}")


if __name__ == "__main__":
    main()
