import argparse
from pathlib import Path
from typing import List, Optional

from .env import load_env, get_settings

from . import __version__
from .xform import DisplayMode, explain


def _read_input(path_str: str) -> str:
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    return input_path.read_text(encoding="utf-8")


def _write_output(path_str: Optional[str], html: str) -> None:
    if not path_str:
        return
    output_path = Path(path_str)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    print(f"Wrote: {output_path}")


def cmd_xform(args: argparse.Namespace) -> None:
    settings = get_settings()
    result = explain(args.url, args.hash, DisplayMode(args.mode), settings.site_root)
    print(result.url)
    if args.explain:
        print(f"Rule: {result.provenance.value}")


def cmd_finalize(args: argparse.Namespace) -> None:
    from .page import finalize_page

    settings = get_settings()
    html = _read_input(args.input)
    page = finalize_page(html, args.hash, site_root=settings.site_root)
    print(f"Old URL: {page.urls.old_url}")
    print(f"New URL: {page.urls.new_url}")
    _write_output(args.output, page.html)


def cmd_selftest(args: argparse.Namespace) -> None:
    from . import selftest
    from .selftest import finalize_tests, summarize

    html = _read_input(args.input)
    report = finalize_tests(html, args.hash)
    for r in report.results:
        status = "pass" if r.passed else "FAIL"
        print(f"[{status}] {r.case.id}: {r.got}")
        if not r.passed:
            print(f"    expected: {r.case.expected_url}")
    counts = summarize(report.results)
    print(f"Done. total={counts['total']} passed={counts['passed']} failed={counts['failed']}")
    selftest.logger.log_metrics_summary()
    _write_output(args.output, report.html)
    if not report.ok:
        raise SystemExit(1)


def main(argv: Optional[List[str]] = None):
    # Load .env if present (REDIRECTOR_SITE_ROOT, REDIRECTOR_LOG_LEVEL, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="redirector", description="Reconcile redirect targets with browser URL fragments")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    xf = subparsers.add_parser("xform", help="Reconcile one URL with a browser fragment")
    xf.add_argument("--url", required=True, help="Server-computed redirect target")
    xf.add_argument("--hash", default="", help="Browser fragment, including the leading '#'")
    xf.add_argument("--mode", choices=[m.value for m in DisplayMode], default=DisplayMode.PATH.value, help="full (scheme + host) or path (default: path)")
    xf.add_argument("--explain", action="store_true", help="Also print which rule produced the result")
    xf.set_defaults(func=cmd_xform)

    fin = subparsers.add_parser("finalize", help="Finalize a redirect page for a browser fragment")
    fin.add_argument("--input", required=True, help="Path to redirect page HTML")
    fin.add_argument("--hash", default="", help="Browser fragment, including the leading '#'")
    fin.add_argument("--output", help="Write the finalized page here")
    fin.set_defaults(func=cmd_finalize)

    st = subparsers.add_parser("selftest", help="Run the test fixtures on a debug page")
    st.add_argument("--input", required=True, help="Path to debug page HTML")
    st.add_argument("--hash", default="", help="Browser fragment to record on the page")
    st.add_argument("--output", help="Write the page with results here")
    st.set_defaults(func=cmd_selftest)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
