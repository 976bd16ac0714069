"""Shared fixtures: a small archive page in the site's three-row layout."""

import pytest

ARCHIVE_HTML = """<html><head><title>Stream archive</title></head><body>
<table class="nav"><tr class="visible"><td class="align-left">not a chat row</td>
<td class="comment">menu</td></tr></table>
<div id="chatarea"><table>
<tbody>
<tr class="visible"><td class="align-left">$5.00</td><td class="align-right">¥750</td><td class="comment"></td></tr>
<tr class="visible"><td class="align-left">Alice(2)</td><td class="comment"><span class="placeholder">無言スパチャ</span></td></tr>
<tr class="visible"><td class="align-left">Great stream!</td><td class="comment"></td></tr>
</tbody>
<tbody>
<tr class="visible hidden"><td class="align-left">Carol</td><td class="comment">New member!</td></tr>
</tbody>
<tbody>
<tr class="visible"><td class="align-left">¥500</td><td class="comment"></td></tr>
<tr class="visible"><td class="align-left">Bob</td><td class="comment"><span class="placeholder">無言スパチャ</span></td></tr>
<tr class="visible"><td class="align-left"></td><td class="comment"></td></tr>
</tbody>
<tbody>
<tr class="visible"><td class="align-left">¥1,000</td><td class="comment"></td></tr>
<tr class="visible"><td class="align-left">Alice(3)</td><td class="comment"><span class="placeholder">無言スパチャ</span></td></tr>
<tr class="visible"><td class="align-left">Again!</td><td class="comment"></td></tr>
</tbody>
</table></div>
</body></html>
"""


@pytest.fixture
def archive_html() -> str:
    return ARCHIVE_HTML
