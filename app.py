"""Command-line entry point for the document engine.

Examples:
    python app.py merge a.pdf b.pdf -o merged.pdf
    python app.py extract in.pdf --pages 1,3 -o out.pdf
    python app.py rotate in.pdf --degrees 90 -o out.pdf
    python app.py validate in.pdf
    python app.py diff first.pdf second.pdf
    python app.py ocr scan.pdf --auto-detect
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from config.settings import settings
from document.errors import DocumentEngineError
from document.models import Rect
from extraction.ocr_pipeline import OCRConfig
from pipeline.engine import DocumentEngine, EngineConfig, log_engine_settings
from utils.logging import configure_logging, logger
from utils.performance import summarize_timings


def _parse_int_list(value: str) -> List[int]:
    out: List[int] = []
    for part in value.split(","):
        part = part.strip()
        if part:
            out.append(int(part))
    return out


def _parse_ranges(values: List[str]) -> List[List[int]]:
    """Each value is one output document: ``0,1,2`` or ``0-2``."""
    ranges = []
    for value in values:
        if "-" in value and "," not in value:
            start, end = (int(v) for v in value.split("-", 1))
            ranges.append(list(range(start, end + 1)))
        else:
            ranges.append(_parse_int_list(value))
    return ranges


def _parse_rect(value: str) -> Rect:
    parts = [float(p) for p in value.split(",")]
    if len(parts) != 4:
        raise argparse.ArgumentTypeError("rectangle must be x,y,width,height")
    return Rect(*parts)


def _read(path: str) -> bytes:
    return Path(path).read_bytes()


def _write(path: Optional[str], data: bytes) -> None:
    if not path:
        raise DocumentEngineError("An output path is required (-o/--output)")
    Path(path).write_bytes(data)
    logger.info("Wrote %s (%d bytes)", path, len(data))


def _emit(report: Any) -> None:
    if hasattr(report, "to_dict"):
        report = report.to_dict()
    elif isinstance(report, list):
        report = [r.to_dict() if hasattr(r, "to_dict") else r for r in report]
    json.dump(report, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="docengine", description="Page-level PDF transforms, analysis, OCR and diff")
    ap.add_argument("--log-level", default=settings.log_level, help="DEBUG, INFO, WARNING, ERROR")
    ap.add_argument("--profile", action="store_true", help="Log per-operation timings on exit")
    sub = ap.add_subparsers(dest="command", required=True)

    def command(name: str, help_text: str, inputs: str = "single") -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        if inputs == "single":
            p.add_argument("input", help="Input PDF")
        elif inputs == "pair":
            p.add_argument("first", help="First PDF")
            p.add_argument("second", help="Second PDF")
        elif inputs == "many":
            p.add_argument("inputs", nargs="+", help="Input files")
        p.add_argument("-o", "--output", help="Output file (or prefix for multi-file output)")
        return p

    command("merge", "Concatenate PDFs in the order given", inputs="many")
    p = command("split", "One output PDF per page range")
    p.add_argument("--range", dest="ranges", action="append", required=True, help="e.g. 0-2 or 0,3 (repeatable)")
    for name, help_text in (("remove", "Remove pages"), ("extract", "Keep only these pages"),
                            ("duplicate", "Duplicate pages in place")):
        p = command(name, help_text)
        p.add_argument("--pages", type=_parse_int_list, required=True, help="0-based indices, comma-separated")
    p = command("organize", "Reorder pages")
    p.add_argument("--order", type=_parse_int_list, required=True, help="Permutation of 0..n-1")
    command("reverse", "Reverse page order")
    p = command("rotate", "Rotate every page")
    p.add_argument("--degrees", type=int, required=True)
    p = command("crop", "Crop every page")
    p.add_argument("--rect", type=_parse_rect, required=True, help="x,y,width,height (bottom-left origin)")
    p = command("resize", "Set every page's size (content is not scaled)")
    p.add_argument("--width", type=float, required=True)
    p.add_argument("--height", type=float, required=True)
    p = command("compress", "Re-serialize with object streams")
    p.add_argument("--quality", type=int, default=None, help="Advisory only")

    p = command("watermark", "Diagonal watermark text on every page")
    p.add_argument("--text", required=True)
    p.add_argument("--font-size", type=float, default=None)
    p.add_argument("--opacity", type=float, default=None)
    p.add_argument("--rotation", type=float, default=None)
    p = command("page-numbers", "Number every page")
    p.add_argument("--position", choices=["top", "bottom"], default="bottom")
    p.add_argument("--alignment", choices=["left", "center", "right"], default="center")
    p = command("add-text", "Write text on a page")
    p.add_argument("--text", required=True)
    p.add_argument("--page", type=int, default=0)
    p.add_argument("--x", type=float, default=50)
    p.add_argument("--y", type=float, default=50)
    p.add_argument("--font-size", type=float, default=12)
    p.add_argument("--color", default="0,0,0", help="r,g,b in 0-255")
    p = command("redact", "Cover a region with a box (visual only)")
    p.add_argument("--page", type=int, default=0)
    p.add_argument("--rect", type=_parse_rect, required=True)
    p = command("stamp", "Bordered label in the top-right corner")
    p.add_argument("--text", default="APPROVED")
    p.add_argument("--pages", type=_parse_int_list, default=None)
    p = command("header-footer", "Header/footer text; {page} and {total} are substituted")
    p.add_argument("--header", default=None)
    p.add_argument("--footer", default=None)
    p.add_argument("--alignment", choices=["left", "center", "right"], default="center")
    p = command("link", "Clickable link over a region")
    p.add_argument("--page", type=int, default=0)
    p.add_argument("--rect", type=_parse_rect, required=True)
    p.add_argument("--uri", required=True)
    p = command("sign", "Visual (non-cryptographic) signature block")
    p.add_argument("--name", required=True)
    p.add_argument("--title", default=None)
    p.add_argument("--date", default=None)
    p = command("set-metadata", "Update metadata fields")
    p.add_argument("--field", dest="fields", action="append", required=True, help="name=value (repeatable)")
    command("info", "Page count, pages and metadata as JSON")

    p = command("protect", "Restrict permissions (delegated to qpdf)")
    p.add_argument("--owner-password", required=True)
    p = command("encrypt", "Require a password to open (delegated to qpdf)")
    p.add_argument("--user-password", required=True)
    p.add_argument("--owner-password", default=None)
    p = command("unlock", "Remove encryption (delegated to qpdf)")
    p.add_argument("--password", required=True)

    command("dedupe", "Remove byte-identical duplicate pages")
    command("remove-blank", "Remove pages with almost no text")
    command("orient", "Normalize page rotation from page shape")
    command("validate", "Structural validation report as JSON")
    command("forms", "List form fields as JSON")
    p = command("fill-form", "Set form field values")
    p.add_argument("--field", dest="fields", action="append", required=True, help="name=value (repeatable)")

    command("diff", "Word-level comparison report as JSON", inputs="pair")
    command("review", "Interleave pages of two PDFs", inputs="pair")
    p = command("ocr", "OCR every page; JSON report")
    p.add_argument("--lang", default=None, help="Tesseract language, e.g. eng or eng+deu")
    p.add_argument("--dpi", type=int, default=None)
    p.add_argument("--workers", type=int, default=None)
    p.add_argument("--auto-detect", action="store_true", help="Try candidate languages and keep the best")
    p.add_argument("--candidate", dest="candidates", action="append", default=None)

    command("images-to-pdf", "One page per image", inputs="many")
    p = command("text-to-pdf", "Lay out a UTF-8 text file on A4 pages")
    p.add_argument("--font-size", type=float, default=12)
    command("html-to-pdf", "Render headings and paragraphs of an HTML file on A4 pages")
    command("office-to-pdf", "Convert an office document with LibreOffice")
    p = command("to-images", "Render every page; writes <output>-<n>.<fmt>")
    p.add_argument("--dpi", type=int, default=150)
    p.add_argument("--format", dest="fmt", choices=["png", "jpeg"], default="png")
    command("to-text", "Extract plain text")
    command("to-html", "Extract text into a standalone HTML page")
    return ap


def _key_values(pairs: List[str]) -> dict:
    out = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise DocumentEngineError(f"Expected name=value, got {pair!r}")
        out[key.strip()] = value
    return out


def _engine_for(args: argparse.Namespace) -> DocumentEngine:
    if args.command != "ocr":
        return DocumentEngine()
    overrides = {}
    if args.dpi:
        overrides["dpi"] = args.dpi
    if args.workers:
        overrides["max_workers"] = args.workers
    return DocumentEngine(EngineConfig(ocr=OCRConfig(**overrides)))


def run(args: argparse.Namespace) -> None:
    engine = _engine_for(args)
    cmd = args.command

    if cmd == "merge":
        _write(args.output, engine.merge([_read(p) for p in args.inputs]))
    elif cmd == "split":
        parts = engine.split(_read(args.input), _parse_ranges(args.ranges))
        stem = args.output or Path(args.input).stem
        for n, part in enumerate(parts, start=1):
            _write(f"{stem}-{n}.pdf", part)
    elif cmd == "remove":
        _write(args.output, engine.remove_pages(_read(args.input), args.pages))
    elif cmd == "extract":
        _write(args.output, engine.extract_pages(_read(args.input), args.pages))
    elif cmd == "duplicate":
        _write(args.output, engine.duplicate(_read(args.input), args.pages))
    elif cmd == "organize":
        _write(args.output, engine.organize(_read(args.input), args.order))
    elif cmd == "reverse":
        _write(args.output, engine.reverse(_read(args.input)))
    elif cmd == "rotate":
        _write(args.output, engine.rotate(_read(args.input), args.degrees))
    elif cmd == "crop":
        _write(args.output, engine.crop(_read(args.input), args.rect))
    elif cmd == "resize":
        _write(args.output, engine.resize(_read(args.input), args.width, args.height))
    elif cmd == "compress":
        _write(args.output, engine.compress(_read(args.input), args.quality))
    elif cmd == "watermark":
        _write(args.output, engine.add_watermark(
            _read(args.input), args.text,
            font_size=args.font_size, opacity=args.opacity, rotation_angle=args.rotation,
        ))
    elif cmd == "page-numbers":
        _write(args.output, engine.add_page_numbers(_read(args.input), position=args.position, alignment=args.alignment))
    elif cmd == "add-text":
        _write(args.output, engine.add_text(
            _read(args.input), args.text,
            page_index=args.page, x=args.x, y=args.y, font_size=args.font_size, color=args.color,
        ))
    elif cmd == "redact":
        _write(args.output, engine.redact(_read(args.input), args.page, args.rect))
    elif cmd == "stamp":
        _write(args.output, engine.add_stamp(_read(args.input), args.text, page_indices=args.pages))
    elif cmd == "header-footer":
        _write(args.output, engine.add_header_footer(
            _read(args.input), header=args.header, footer=args.footer, alignment=args.alignment,
        ))
    elif cmd == "link":
        _write(args.output, engine.add_hyperlink(_read(args.input), args.page, args.rect, args.uri))
    elif cmd == "sign":
        _write(args.output, engine.sign(_read(args.input), args.name, title=args.title, date=args.date))
    elif cmd == "set-metadata":
        _write(args.output, engine.set_metadata(_read(args.input), _key_values(args.fields)))
    elif cmd == "info":
        _emit(engine.get_info(_read(args.input)))
    elif cmd == "protect":
        _write(args.output, engine.protect(_read(args.input), args.owner_password))
    elif cmd == "encrypt":
        _write(args.output, engine.encrypt(_read(args.input), args.user_password, args.owner_password))
    elif cmd == "unlock":
        _write(args.output, engine.unlock(_read(args.input), args.password))
    elif cmd == "dedupe":
        _write(args.output, engine.remove_duplicate_pages(_read(args.input)))
    elif cmd == "remove-blank":
        _write(args.output, engine.remove_blank_pages(_read(args.input)))
    elif cmd == "orient":
        _write(args.output, engine.normalize_orientation(_read(args.input)))
    elif cmd == "validate":
        _emit(engine.validate(_read(args.input)))
    elif cmd == "forms":
        _emit(engine.extract_form_fields(_read(args.input)))
    elif cmd == "fill-form":
        _write(args.output, engine.fill_form_fields(_read(args.input), _key_values(args.fields)))
    elif cmd == "diff":
        _emit(engine.diff(_read(args.first), _read(args.second)))
    elif cmd == "review":
        _write(args.output, engine.review(_read(args.first), _read(args.second)))
    elif cmd == "ocr":
        data = _read(args.input)
        if args.auto_detect:
            _emit(engine.ocr_auto_detect(data, args.candidates))
        else:
            _emit(engine.ocr(data, args.lang))
    elif cmd == "images-to-pdf":
        _write(args.output, engine.images_to_pdf([_read(p) for p in args.inputs]))
    elif cmd == "text-to-pdf":
        text = Path(args.input).read_text(encoding="utf-8")
        _write(args.output, engine.text_to_pdf(text, font_size=args.font_size))
    elif cmd == "html-to-pdf":
        html = Path(args.input).read_text(encoding="utf-8")
        _write(args.output, engine.html_to_pdf(html))
    elif cmd == "office-to-pdf":
        _write(args.output, engine.office_to_pdf(_read(args.input), Path(args.input).suffix))
    elif cmd == "to-images":
        stem = args.output or Path(args.input).stem
        for n, image in enumerate(engine.pdf_to_images(_read(args.input), dpi=args.dpi, fmt=args.fmt), start=1):
            _write(f"{stem}-{n}.{'jpg' if args.fmt == 'jpeg' else 'png'}", image)
    elif cmd == "to-html":
        html = engine.pdf_to_html(_read(args.input))
        if args.output:
            Path(args.output).write_text(html, encoding="utf-8")
        else:
            sys.stdout.write(html)
    elif cmd == "to-text":
        text = engine.pdf_to_text(_read(args.input))
        if args.output:
            Path(args.output).write_text(text, encoding="utf-8")
        else:
            sys.stdout.write(text)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    log_engine_settings()
    try:
        run(args)
    except DocumentEngineError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 2
    finally:
        if args.profile:
            for name, seconds in summarize_timings().items():
                logger.info("Profile: %s %.3fs", name, seconds)
    return 0


if __name__ == "__main__":
    sys.exit(main())
