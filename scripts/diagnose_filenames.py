import argparse
import os
import sys

SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from callreport.audio_utils import SUPPORTED_EXTENSIONS, get_audio_duration
from callreport.filename_parsers import FilenameParserRegistry
from callreport.sidecars import has_analysis, has_transcript


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("folder", help="Folder of recordings (not recursive).")
    parser.add_argument("--parser", help="Force one filename parser.")
    parser.add_argument("--no-duration", action="store_true", help="Skip duration probing.")
    args = parser.parse_args()

    registry = FilenameParserRegistry.from_names(override=args.parser)
    names = sorted(os.listdir(args.folder))
    unmatched = 0
    for name in names:
        if os.path.splitext(name)[1].lower() not in SUPPORTED_EXTENSIONS:
            continue
        path = os.path.join(args.folder, name)
        matched = next((p.name for p in registry.parsers if p.can_parse(name)), None)
        if registry.override is not None:
            matched = f"{registry.override.name} (override)"
        if matched is None:
            unmatched += 1
        meta = registry.resolve(name)
        duration = "-" if args.no_duration else (get_audio_duration(path) or "N/A")
        flags = ("T" if has_transcript(path) else "-") + ("A" if has_analysis(path) else "-")
        print(
            f"{name}\n  parser={matched or 'none'} ts={meta.timestamp} "
            f"phone={meta.phone_number} type={meta.call_type} duration={duration} {flags}"
        )
    print(f"Unmatched: {unmatched}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
