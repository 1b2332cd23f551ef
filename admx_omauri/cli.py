# (C) 2025 Noverse. All Rights Reserved.
# https://github.com/nohuto
# https://discord.gg/E2ybG4j9jU

import argparse, logging
from pathlib import Path
from typing import Optional, Sequence

from .documents import DocumentError, load_adml, load_admx
from .export import OUTPUT_EXTENSIONS, summarize, write_payload
from .extractor import extract
from .resolver import resolve

LOG = logging.getLogger("admx_omauri")
DEFAULT_LANGUAGE = "en-us"

def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert ADMX/ADML policy templates into MDM OMA-URI policy settings.",
    )
    parser.add_argument(
        "admx",
        type=Path,
        help="Path to the ADMX file.",
    )
    parser.add_argument(
        "-l",
        "--language",
        default=DEFAULT_LANGUAGE,
        help=f"Language folder holding the ADML companion. Defaults to {DEFAULT_LANGUAGE}.",
    )
    parser.add_argument(
        "--adml",
        type=Path,
        help="Explicit path to the ADML file. Skips the language folder lookup.",
    )
    parser.add_argument(
        "--format",
        choices=tuple(OUTPUT_EXTENSIONS),
        default="json",
        help="Output format. xlsx writes one worksheet per scope.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional path to save the output. Defaults to <admx name> with the format's extension.",
    )
    parser.add_argument(
        "--compress",
        action="store_true",
        help="Emit minified JSON output (ignored for yaml and xlsx).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-item diagnostics.",
    )
    return parser

def locate_adml(admx_path: Path, language: str = DEFAULT_LANGUAGE) -> Path:
    file_name = f"{admx_path.stem}.adml"
    candidates = [_resolve_language_directory(admx_path.parent, language) / file_name, admx_path.parent / file_name]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(candidate) for candidate in candidates)
    raise FileNotFoundError(f"ADML companion for '{admx_path.name}' was not found (searched {searched}).")

def _resolve_language_directory(base: Path, language: str) -> Path:
    candidate = base / language
    if candidate.exists():
        return candidate
    lower = language.casefold()
    for directory in base.iterdir():
        if directory.is_dir() and directory.name.casefold() == lower:
            return directory
    return candidate

def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    admx_path = args.admx.expanduser().resolve()
    try:
        if not admx_path.is_file():
            raise FileNotFoundError(f"ADMX file '{admx_path}' was not found.")
        adml_path = args.adml.expanduser().resolve() if args.adml else locate_adml(admx_path, args.language)
        admx = load_admx(admx_path)
        adml = load_adml(adml_path)
    except (FileNotFoundError, DocumentError) as exc:
        LOG.error(str(exc))
        return 1
    LOG.debug(f"Using ADML {adml_path}")

    area_map = resolve(admx)
    records = extract(admx, adml, area_map)

    output_format = args.format
    pretty_output = not args.compress
    if args.compress and output_format != "json":
        LOG.info(f"--compress is ignored for {output_format} output.")
    output_path = args.output
    if output_path is None:
        output_path = Path(admx_path.stem + OUTPUT_EXTENSIONS[output_format])
    write_payload(output_path, records, fmt=output_format, pretty=pretty_output)

    print(f"Wrote {len(records)} policies to {output_path}")
    if records:
        print(f"By Scope: {summarize(records)}")
    return 0
