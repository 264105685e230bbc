# Version: 3.0
import os
import sys
import json
import traceback
from datetime import datetime

import importlib


def check_dependencies() -> None:
    missing = []
    installable = []

    if sys.version_info < (3, 10):
        missing.append("Python 3.10+ is required.")

    for module, package in [
        ("pdfplumber", "pdfplumber"),
    ]:
        try:
            importlib.import_module(module)
        except ImportError:
            missing.append(f"Missing dependency: {package}")
            installable.append(package)

    if missing:
        message = "The application cannot start because required dependencies are missing:\n\n"
        message += "\n".join(f"- {item}" for item in missing)
        if installable:
            message += "\n\nInstall them with:\n  python -m pip install " + " ".join(installable)
        print(message, file=sys.stderr)
        raise SystemExit(1)


def _print_report(transactions, as_json: bool) -> None:
    import recurring
    import trends

    groups = recurring.detect_recurring_transactions(transactions)
    summary = recurring.get_recurring_summary(groups)

    if as_json:
        print(json.dumps([t.to_dict() for t in transactions], indent=2, ensure_ascii=False))
        return

    first = transactions[0]
    print(f"Parsed {len(transactions)} transactions ({first.parser_used} parser, confidence {first.confidence:.2f})")
    for t in transactions:
        print(f"  {t.date}  {t.signed_amount:>10.2f}  {t.category:<24} {t.description}")

    print()
    for line in recurring.generate_recurring_insights(groups, summary):
        print(f"- {line}")
    for line in trends.generate_multi_month_insights(transactions):
        print(f"- {line}")


def main(argv: list[str]) -> int:
    check_dependencies()

    import core

    args = [a for a in argv if not a.startswith("--")]
    if not args:
        print("Usage: python main.py <statement.pdf> [--json]", file=sys.stderr)
        return 2

    core.setup_logging("DEBUG" if "--verbose" in argv else "INFO")

    if not os.path.isdir(core.PARSERS_DIR):
        raise FileNotFoundError(f"Missing Parsers folder: {core.PARSERS_DIR}")

    try:
        transactions = core.parse_statement_pdf(args[0], config=core.PipelineConfig.from_env())
    except core.ParsingError as e:
        print(f"{e.kind.value}: {e}", file=sys.stderr)
        return 1

    _print_report(transactions, as_json="--json" in argv)
    return 0


def cli() -> None:
    if "--selftest" in sys.argv:
        import core
        core._run_self_tests()
        raise SystemExit(0)

    try:
        raise SystemExit(main(sys.argv[1:]))
    except Exception as e:
        try:
            import core

            core.ensure_folder(core.LOGS_DIR)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            crash_path = os.path.join(core.LOGS_DIR, f"crash_{ts}.txt")
            err = "".join(traceback.format_exception(type(e), e, e.__traceback__))
            with open(crash_path, "w", encoding="utf-8") as f:
                f.write(err)
        except OSError:
            pass
        raise


if __name__ == "__main__":
    cli()
