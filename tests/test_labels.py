from __future__ import annotations

import pytest

from contract.labels import Label, format_target, instance_name


def test_format_target_uses_repository_verbatim() -> None:
    assert format_target("R", "x", "x_instance") == "R//x:x_instance"
    assert format_target("@deps", "a/b", "b_instance") == "@deps//a/b:b_instance"
    assert format_target("", "/a/b/", "n") == "//a/b:n"


def test_instance_name() -> None:
    assert instance_name("config") == "config_instance"


def test_parse_full_and_relative_labels() -> None:
    assert Label.parse("@repo//a/b:c") == Label(repo="@repo", pkg="a/b", name="c")
    assert Label.parse("//a/b") == Label(pkg="a/b", name="b")
    assert Label.parse(":c") == Label(name="c")


def test_parse_rejects_unqualified_label() -> None:
    with pytest.raises(ValueError, match="invalid label"):
        Label.parse("a/b:c")


def test_rel_drops_repository_and_package() -> None:
    label = Label(repo="", pkg="lib", name="lib_instance")

    assert str(label.rel("", "apps")) == "//lib:lib_instance"
    assert str(label.rel("", "lib")) == ":lib_instance"
    assert str(label.rel("@other", "lib")) == "//lib:lib_instance"

    external = Label(repo="@deps", pkg="lib", name="lib_instance")
    assert str(external.rel("", "lib")) == "@deps//lib:lib_instance"


def test_parent_walks_to_root() -> None:
    label = Label(pkg="a/b", name="n")

    assert label.parent() == Label(pkg="a", name="n")
    assert label.parent().parent() == Label(pkg="", name="n")
