from __future__ import annotations

import pytest

from utils import export_name, to_snake


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("myConfig.values.cue", "my_config_values"),
        ("deploy.cue", "deploy"),
        ("HTTPServer.cue", "http_server"),
        ("my-config.cue", "my_config"),
        ("values2.cue", "values_2"),
        ("v1alpha1.cue", "v_1_alpha_1"),
        ("HTTP2Server.cue", "http_2_server"),
    ],
)
def test_export_name(filename: str, expected: str) -> None:
    assert export_name(filename) == expected


def test_to_snake_collapses_separators() -> None:
    assert to_snake("already_snake") == "already_snake"
    assert to_snake("a--b..c") == "a_b_c"


def test_to_snake_splits_digits_from_letters() -> None:
    assert to_snake("k8s") == "k_8_s"
    assert to_snake("app_2") == "app_2"
