import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from pipelines import run_ingestion

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Chunk and embed text documents into the vector store"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml in project root)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Clear the index and re-ingest all documents",
    )
    parser.add_argument(
        "--incremental",
        action="store_true",
        help="Only ingest files that are new or changed since the last run",
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Specific files to consider with --incremental",
    )

    args = parser.parse_args()

    if args.config:
        config_path = args.config
    else:
        config_path = Path(__file__).parent.parent / "config.toml"
        if not config_path.exists():
            config_path = Path("config.toml")

    try:
        results = run_ingestion(
            config_path,
            force=args.force,
            incremental=args.incremental,
            files=args.files or None,
        )
    except Exception as e:
        logger.error(f"Ingestion failed: {e}")
        return 1

    print("\n=== Ingestion Complete ===")
    print(f"Documents processed: {results['documents']}")
    print(f"Chunks stored: {results['chunks']}")
    print(f"Total vectors in store: {results['total_vectors']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
