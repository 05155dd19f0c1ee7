from __future__ import annotations

import argparse
import sys
from pathlib import Path

from subocr_core import __version__
from subocr_core.config import AppConfig
from subocr_core.errors import SubOcrError
from subocr_core.models.settings import OUTPUT_FORMATS, parse_engine_var
from subocr_core.pipeline import run
from subocr_core.pipeline_components import LogManager


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="subocr",
        description="Convert VobSub (.idx/.sub) image subtitles to SRT or ASS with Tesseract OCR",
    )
    p.add_argument("input", type=Path, metavar="FILE", help="VobSub .idx file")
    p.add_argument("-t", "--threshold", type=float,
                   help="binarization threshold between 0.0 and 1.0 (default 0.6)")
    p.add_argument("--dpi", type=int, help="resolution hint passed to Tesseract (default 150)")
    p.add_argument("-b", "--border", type=int,
                   help="white border in pixels around each line image (default 10)")
    p.add_argument("-o", "--output", type=Path, help="output subtitle file (default stdout)")
    p.add_argument("--tessdata", help="path to Tesseract's tessdata directory")
    p.add_argument("-l", "--lang", help="Tesseract language code (default eng)")
    p.add_argument("--blacklist", help="characters Tesseract must never produce")
    p.add_argument("-c", "--config", action="append", default=[], metavar="NAME=VALUE",
                   help="set a Tesseract variable; may be repeated")
    p.add_argument("-j", "--jobs", type=int, help="number of OCR workers (default: CPU count)")
    p.add_argument("--format", choices=OUTPUT_FORMATS, help="output format (default srt)")
    p.add_argument("--dump", action="store_true", default=None,
                   help="save every line image as PNG")
    p.add_argument("--dump-dir", help="directory for --dump images (default .)")
    p.add_argument("--settings", type=Path, metavar="FILE.json", help="JSON settings file")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="more logging (-vv for debug)")
    p.add_argument("--log-file", type=Path, help="also write the log to this file")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    handlers = LogManager.setup_logging(LogManager.resolve_level(args.verbose), args.log_file)
    try:
        config = AppConfig(args.settings)
        config.update({
            "ocr_threshold": args.threshold,
            "ocr_dpi": args.dpi,
            "ocr_border": args.border,
            "ocr_tessdata_path": args.tessdata,
            "ocr_language": args.lang,
            "ocr_char_blacklist": args.blacklist,
            "ocr_workers": args.jobs,
            "ocr_output_format": args.format,
            "ocr_dump_images": args.dump,
            "ocr_dump_dir": args.dump_dir,
        })
        if args.config:
            engine_vars = list(config.get("ocr_engine_vars") or [])
            engine_vars.extend(parse_engine_var(spec) for spec in args.config)
            config.set("ocr_engine_vars", engine_vars)

        settings = config.to_settings()
        return run(args.input, args.output, settings)
    except SubOcrError as e:
        print(f"An error occurred: {e}", file=sys.stderr)
        return 1
    finally:
        LogManager.cleanup_logging(handlers)


if __name__ == "__main__":
    sys.exit(main())
