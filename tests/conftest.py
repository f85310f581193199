"""
Pytest configuration and shared fixtures.
"""

import pytest

from redirector import page, selftest
from redirector.logger import StructuredLogger


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch) -> StructuredLogger:
    """Give page and selftest a fresh, silent logger for each test."""
    logger = StructuredLogger(name="redirector-test", enable_file=False, enable_console=False)
    monkeypatch.setattr(page, "logger", logger)
    monkeypatch.setattr(selftest, "logger", logger)
    return logger


@pytest.fixture
def redirect_page_html() -> str:
    """Sample server-rendered redirect page."""
    return """
    <html>
    <head>
        <title>This page has moved</title>
        <meta id="meta_old_url" name="old_url" content="/books/n/toolkit/ch_libconfig/table/ch_libconfig.T8/%3Freport%3Dobjectonly">
        <meta id="meta_new_url" name="new_url" content="/toolkit/doc/book/ch_libconfig/%3Freport%3Dobjectonly%23ch_libconfig.T8">
    </head>
    <body>
        <p>The page <span id="old_url"></span> has moved to
        <a id="new_url" href="#"></a>.</p>
    </body>
    </html>
    """


@pytest.fixture
def debug_page_html() -> str:
    """Sample debug page with one fixture per rule and one deliberate failure."""
    return """
    <html>
    <head>
        <meta id="meta_scheme" name="scheme" content="http">
        <meta id="meta_server_name" name="server_name" content="www.ncbi.nlm.nih.gov">
    </head>
    <body>
        <p>JavaScript: <span id="debug_javascript">no</span></p>
        <p>Fragment: <span id="debug_fragment"></span></p>
        <table>
            <tr>
                <td class="test-id">1</td>
                <td id="url_in_1">/books/n/toolkit/ch_libconfig/table/ch_libconfig.T8/?report=objectonly#__pp_ch_libconfig_TF_24</td>
                <td id="url_trans_1">/toolkit/doc/book/ch_libconfig/?report=objectonly#ch_libconfig.T8</td>
                <td id="url_out_exp_1">/toolkit/doc/book/ch_libconfig/?report=objectonly#ch_libconfig.TF.24</td>
                <td id="client_url_got_1"></td>
            </tr>
            <tr>
                <td class="test-id">2</td>
                <td id="url_in_2">/books/n/toolkit/ch_intro/#ch_intro.Section1</td>
                <td id="url_trans_2">/toolkit/doc/book/ch_intro/</td>
                <td id="url_out_exp_2">/toolkit/doc/book/ch_intro/#ch_intro.Section1</td>
                <td id="client_url_got_2"></td>
            </tr>
            <tr>
                <td class="test-id">3</td>
                <td id="url_in_3">/books/NBK7160/?a=1&amp;b=2#x</td>
                <td id="url_trans_3">/toolkit/doc/book/x/?a=1&amp;b=2</td>
                <td id="url_out_exp_3">/toolkit/doc/book/x/?a=1&amp;b=2#x</td>
                <td id="client_url_got_3"></td>
            </tr>
            <tr>
                <td class="test-id">4</td>
                <td id="url_in_4">/books/n/toolkit/x/#_ncbi_dlg_cpyrght_NBK7160</td>
                <td id="url_trans_4">/toolkit/doc/book/x/</td>
                <td id="url_out_exp_4">/About/disclaimer.html</td>
                <td id="client_url_got_4"></td>
            </tr>
            <tr>
                <td class="test-id">5</td>
                <td id="url_in_5">/books/n/toolkit/ch_core/#top</td>
                <td id="url_trans_5">/toolkit/doc/book/ch_core/</td>
                <td id="url_out_exp_5">/wrong/</td>
                <td id="client_url_got_5"></td>
            </tr>
        </table>
    </body>
    </html>
    """


@pytest.fixture
def passing_debug_page_html(debug_page_html) -> str:
    """Debug page with the deliberate failure fixed."""
    return debug_page_html.replace(
        '<td id="url_out_exp_5">/wrong/</td>',
        '<td id="url_out_exp_5">/toolkit/doc/book/ch_core/#top</td>',
    )
