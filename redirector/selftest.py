"""
Self-test harness for the fragment reconciler.

Fixtures are (input URL, server-transformed URL, expected URL) records. The
transformed and expected values are entity-encoded literals as they appear on
the debug page; results are compared in encoded form. A failing case is a
result, never an error, and never stops the remaining cases.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from bs4 import BeautifulSoup

from .entities import decode, encode
from .logger import get_logger
from .page import read_meta
from .xform import DisplayMode, explain

logger = get_logger()

PASS_CLASS = "test-pass"
FAIL_CLASS = "test-fail"


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    id: str
    input_url: str
    transformed_url: str
    expected_url: str


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    case: TestCase
    fragment: str
    got: str
    passed: bool


def derive_fragment(input_url: str) -> str:
    """Everything from the first '#' on, or '' when there is none."""
    pos = input_url.find("#")
    if pos == -1:
        return ""
    return input_url[pos:]


def run_case(case: TestCase) -> TestResult:
    fragment = derive_fragment(case.input_url)
    result = explain(decode(case.transformed_url), fragment, DisplayMode.PATH)
    got = encode(result.url)
    passed = got == case.expected_url

    logger.record_reconciliation(result.provenance)
    logger.record_case(case.id, passed)
    if passed:
        logger.debug("Case passed", id=case.id, got=got)
    else:
        logger.warning("Case failed", id=case.id, expected=case.expected_url, got=got)
    return TestResult(case=case, fragment=fragment, got=got, passed=passed)


def run_cases(cases: Iterable[TestCase]) -> List[TestResult]:
    return [run_case(case) for case in cases]


def summarize(results: List[TestResult]) -> Dict[str, int]:
    passed = sum(1 for r in results if r.passed)
    return {"total": len(results), "passed": passed, "failed": len(results) - passed}


def _inner_html(soup: BeautifulSoup, element_id: str) -> Optional[str]:
    el = soup.find(id=element_id)
    if el is None:
        return None
    return el.decode_contents().strip()


def load_cases(soup: BeautifulSoup) -> List[TestCase]:
    """
    Collect fixtures from a debug page, in document order.

    Each element with class "test-id" holds a case id; the case's literals
    live in the url_in_<id>, url_trans_<id> and url_out_exp_<id> elements.
    Cases with a missing element are skipped.
    """
    cases: List[TestCase] = []
    for id_el in soup.find_all(class_="test-id"):
        case_id = id_el.decode_contents().strip()
        input_url = _inner_html(soup, f"url_in_{case_id}")
        transformed = _inner_html(soup, f"url_trans_{case_id}")
        expected = _inner_html(soup, f"url_out_exp_{case_id}")
        if input_url is None or transformed is None or expected is None:
            logger.warning("Skipping incomplete test case", id=case_id)
            continue
        cases.append(TestCase(case_id, input_url, transformed, expected))
    return cases


def render_results(
    soup: BeautifulSoup,
    results: Iterable[TestResult],
    scheme: str,
    server_name: str,
) -> None:
    """Write each result as a link into client_url_got_<id>, styled pass/fail."""
    for result in results:
        el = soup.find(id=f"client_url_got_{result.case.id}")
        if el is None:
            logger.warning("Result element not found", id=result.case.id)
            continue
        url = decode(result.got)
        link = soup.new_tag("a", href=f"{scheme}://{server_name}{url}")
        link.string = url
        el.clear()
        el.append(link)
        el["class"] = [PASS_CLASS if result.passed else FAIL_CLASS]


def _set_text(soup: BeautifulSoup, element_id: str, text: str) -> None:
    el = soup.find(id=element_id)
    if el is not None:
        el.string = text


@dataclass
class SelfTestReport:
    results: List[TestResult]
    html: str

    @property
    def ok(self) -> bool:
        return all(r.passed for r in self.results)


def finalize_tests(html: str, fragment: str = "") -> SelfTestReport:
    """
    Run every fixture on a debug page and write the outcomes back into it.

    Args:
        html: Debug page HTML
        fragment: Browser fragment, recorded in the debug_fragment element

    Returns:
        SelfTestReport with per-case results and the updated HTML
    """
    soup = BeautifulSoup(html, "html.parser")
    scheme = read_meta(soup, "meta_scheme")
    server_name = read_meta(soup, "meta_server_name")

    _set_text(soup, "debug_javascript", "yes")
    _set_text(soup, "debug_fragment", fragment)

    results = run_cases(load_cases(soup))
    render_results(soup, results, scheme, server_name)

    counts = summarize(results)
    logger.info("Self-test complete", **counts)
    return SelfTestReport(results=results, html=str(soup))
