import pytest

CHART_SVG = """<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" \
class="highcharts-root" width="800" height="600" viewBox="0 0 800 600">
<desc>Created with Highcharts</desc>
<defs><clipPath id="plot-clip"><rect x="0" y="0" width="800" height="600"/></clipPath></defs>
<rect class="highcharts-background" x="0" y="0" width="800" height="600" fill="#ffffff"/>
<g class="highcharts-series-group" clip-path="url(#plot-clip)">
<rect x="100" y="300" width="200" height="300" fill="#7cb5ec"/>
</g>
<text x="400" y="24" text-anchor="middle">Résumé</text>
<g class="highcharts-label highcharts-tooltip" transform="translate(0,0)">
<rect x="0" y="0" width="800" height="600" fill="#ff0000"/>
</g>
</svg>"""

BARE_SVG = "<svg width='800' height='600'><rect width='800' height='600' fill='#336699'/></svg>"


@pytest.fixture
def chart_svg():
    return CHART_SVG


@pytest.fixture
def bare_svg():
    return BARE_SVG
