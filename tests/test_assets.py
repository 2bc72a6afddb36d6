"""Tests for backend.app.assets cache busting."""

import pytest

from backend.app.assets import inject_asset_versions, stamp_stylesheet, versioned


def test_versioned():
    assert versioned("script.js", 42) == "script.js?v=42"


@pytest.mark.parametrize("raw,expected", [
    ('<script src="script.js"></script>', '<script src="script.js?v=7"></script>'),
    ('<script src="/script.js"></script>', '<script src="/script.js?v=7"></script>'),
    ("<script src='./script.js?v=1'></script>", "<script src='./script.js?v=7'></script>"),
    ('<link rel="stylesheet" href="styles.css">', '<link rel="stylesheet" href="styles.css?v=7">'),
])
def test_inject_asset_versions(raw, expected):
    assert inject_asset_versions(raw, ("script.js", "styles.css"), 7) == expected


def test_inject_leaves_other_references_alone():
    html = '<script src="vendor/script.json"></script><a href="script.js.map">map</a>'
    assert inject_asset_versions(html, ("script.js",), 7) == html


def test_stamp_stylesheet():
    assert stamp_stylesheet("body { margin: 0; }", 3) == "/* v3 */\nbody { margin: 0; }"
