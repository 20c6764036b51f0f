#!/usr/bin/env python3
"""Build a photo-album PDF from a project JSON file.

Usage:
    python run_album.py project.json                  # write the PDF
    python run_album.py project.json --dry-run        # lay out only, log a page summary
    python run_album.py project.json --output-dir out
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from settings import Settings
from models.album import AlbumProject
from pipeline import album_builder
from pipeline.render_sink import RecordingSink

logger = logging.getLogger("run_album")


def _load_project(path: Path) -> AlbumProject:
    return AlbumProject.model_validate_json(path.read_text(encoding="utf-8"))


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("project", type=Path, help="Album project JSON (name + items)")
    parser.add_argument("--output-dir", type=Path, default=None, dest="output_dir",
                        help="Override ALBUM_OUTPUT_DIR")
    parser.add_argument("--dry-run", action="store_true", dest="dry_run",
                        help="Lay out pages without writing a PDF")
    return parser.parse_args(argv)


def build(argv: list[str] | None = None) -> Path:
    """Parse arguments, build the album and return the output path."""
    args = _parse_args(argv)

    settings = Settings()
    if args.output_dir is not None:
        settings = settings.model_copy(update={"output_dir": args.output_dir})

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    project = _load_project(args.project)
    logger.info("=== Album: %s (%d items) ===", project.name, len(project.items))

    if args.dry_run:
        sink = RecordingSink(settings.output_dir)
        output_path = album_builder.run(settings, project, sink=sink)
        for number, page in enumerate(sink.pages, start=1):
            logger.info("  page %-3d images=%d lines=%d", number, len(page.images), len(page.texts))
    else:
        output_path = album_builder.run(settings, project)

    logger.info("=== Done → %s ===", output_path)
    return output_path


def main(argv: list[str] | None = None) -> None:
    build(argv)


if __name__ == "__main__":
    main()
