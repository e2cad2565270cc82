import argparse
import json
import sys
from pathlib import Path

from loguru import logger

from .codeviews.CFG.CFG_driver import CFGDriver


def build_argparser():
    ap = argparse.ArgumentParser(
        prog="sketchflow",
        description="Render the control flow of a C/C++ sketch as a Mermaid flowchart",
    )
    ap.add_argument("path", help="source file (.ino, .cpp, .c)")
    ap.add_argument("--lang", choices=["cpp", "c"], help="grammar (default: from extension)")
    ap.add_argument("--format", choices=["mermaid", "json", "dot"], default="mermaid")
    ap.add_argument("--mapping", action="store_true", help="print the line index as JSON instead")
    ap.add_argument("--output", help="write to this file instead of stdout")
    ap.add_argument("--repeat-loop", action="store_true", help="draw loop_End --> loop_Start")
    ap.add_argument("--verbose", action="store_true")
    return ap


def guess_language(path):
    return "c" if Path(path).suffix.lower() in (".c", ".h") else "cpp"


def main(argv=None):
    args = build_argparser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    code = Path(args.path).read_text(encoding="utf-8", errors="ignore")
    driver = CFGDriver(
        src_language=args.lang or guess_language(args.path),
        src_code=code,
        properties={"repeat_main_loop": args.repeat_loop},
    )

    if args.mapping:
        text = json.dumps({str(k): v for k, v in sorted(driver.line_index.items())}, indent=2)
    elif args.format == "json" and driver.graph is not None:
        text = json.dumps(driver.to_json(), indent=2)
    elif args.format == "dot" and driver.graph is not None:
        text = driver.to_dot()
    else:
        text = driver.markup

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")

    return 1 if driver.error else 0


if __name__ == "__main__":
    sys.exit(main())
