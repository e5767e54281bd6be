import json
import sys
from pathlib import Path

from comp_directory.config import default_config, load_config
from comp_directory.csvparse import parse_header


def write_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def header_coverage(cfg, csv_text: str) -> dict:
    """
    Which configured headers actually occur in an export.
    Returns {"fields": {logical: matched header or None}, "unused_sections": [...]}.
    """
    present = {h.lower() for h in parse_header(csv_text)}

    fields = {}
    for logical, headers in cfg.field_map.items():
        fields[logical] = next((h for h in headers if h.strip().lower() in present), None)

    unused = []
    for title, entries in cfg.sections.items():
        for e in entries:
            if e.header.strip().lower() not in present:
                unused.append(f"{title}/{e.label}")
    return {"fields": fields, "unused_sections": unused}


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    root = Path(__file__).resolve().parents[1]
    out_path = root / "data" / "directory_config.json"

    cfg = load_config(argv[1]) if len(argv) > 1 else default_config()
    write_json(out_path, cfg.model_dump())
    print(f"Wrote {out_path}")

    if argv:
        sample = Path(argv[0])
        if not sample.exists():
            raise FileNotFoundError(f"Missing: {sample}")
        report = header_coverage(cfg, sample.read_text(encoding="utf-8-sig"))
        for logical, header in report["fields"].items():
            print(f"{logical:<10} -> {header or '(not found)'}")
        if report["unused_sections"]:
            print(f"Section lines with no column: {', '.join(report['unused_sections'])}")


if __name__ == "__main__":
    main()
