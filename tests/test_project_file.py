from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from copywriter.exceptions import ProjectFileError
from copywriter.models import Change, RunConfig
from copywriter.project_file import handle_project_file, update_project_file

PROJECT = """\
<Project Sdk="Microsoft.NET.Sdk">

    <PropertyGroup>
        <TargetFramework>net8.0</TargetFramework>
        <Copyright>Copyright © 2019 Ben Hutchison</Copyright>
    </PropertyGroup>

</Project>
"""


def _config(tmp_path: Path, **kwargs: object) -> RunConfig:
    kwargs.setdefault("include_names", frozenset({"Acme", "Ben Hutchison", "Smith"}))
    return RunConfig(root=tmp_path, year=2024, **kwargs)  # type: ignore[arg-type]


def test_rewrites_copyright_element(tmp_path: Path) -> None:
    path = tmp_path / "App.csproj"
    data, changes = update_project_file(PROJECT.encode(), path, _config(tmp_path))

    assert data.decode() == PROJECT.replace("2019", "2024")
    assert changes == [
        Change(
            path=path,
            line=5,
            old="Copyright © 2019 Ben Hutchison",
            new="Copyright © 2024 Ben Hutchison",
        )
    ]


def test_declaration_and_line_endings_are_preserved(tmp_path: Path) -> None:
    original = (
        '\ufeff<?xml version="1.0" encoding="utf-8"?>\r\n'
        "<Project>\r\n"
        "  <!-- keep me -->\r\n"
        "  <PropertyGroup><Copyright>(c) 2001-2020 Acme</Copyright></PropertyGroup>\r\n"
        "</Project>"
    ).encode("utf-8")

    data, changes = update_project_file(original, tmp_path / "A.csproj", _config(tmp_path))

    assert data == original.replace(b"2020", b"2024")
    assert [c.line for c in changes] == [4]


def test_nested_and_multiple_elements(tmp_path: Path) -> None:
    original = (
        "<Project>"
        "<PropertyGroup><Copyright>2018 Acme</Copyright></PropertyGroup>"
        "<ItemGroup><Foo><Copyright>2017 Acme</Copyright></Foo></ItemGroup>"
        "<Copyright>2024 Acme</Copyright>"
        "</Project>"
    ).encode()

    data, changes = update_project_file(original, tmp_path / "A.csproj", _config(tmp_path))

    assert data.count(b"2024 Acme") == 3
    assert [c.old for c in changes] == ["2018 Acme", "2017 Acme"]


def test_escaped_text_is_written_back_escaped(tmp_path: Path) -> None:
    original = b"<Project><Copyright>Smith &amp; Sons 2020</Copyright></Project>"

    data, changes = update_project_file(original, tmp_path / "A.csproj", _config(tmp_path))

    assert data == b"<Project><Copyright>Smith &amp; Sons 2024</Copyright></Project>"
    assert changes[0].old == "Smith & Sons 2020"


def test_cdata_is_kept_as_cdata(tmp_path: Path) -> None:
    original = b"<Project><Copyright><![CDATA[Acme <Inc> 2020]]></Copyright></Project>"

    data, _ = update_project_file(original, tmp_path / "A.csproj", _config(tmp_path))

    assert data == b"<Project><Copyright><![CDATA[Acme <Inc> 2024]]></Copyright></Project>"


def test_elements_without_leading_text_are_skipped(tmp_path: Path) -> None:
    original = (
        b"<Project>"
        b"<Copyright/>"
        b"<Copyright><!-- 2020 --></Copyright>"
        b"<Copyright><Inner>2020</Inner></Copyright>"
        b"</Project>"
    )

    data, changes = update_project_file(original, tmp_path / "A.csproj", _config(tmp_path))

    assert data == original
    assert changes == []


def test_namespaced_copyright_is_ignored(tmp_path: Path) -> None:
    original = (
        b'<Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">'
        b"<Copyright>2020 Acme</Copyright></Project>"
    )

    data, changes = update_project_file(original, tmp_path / "A.csproj", _config(tmp_path))

    assert data == original
    assert changes == []


def test_excluded_owner_is_left_alone(tmp_path: Path) -> None:
    config = _config(tmp_path, exclude_names=frozenset({"Ben Hutchison"}))

    data, changes = update_project_file(PROJECT.encode(), tmp_path / "A.csproj", config)

    assert data == PROJECT.encode()
    assert changes == []


def test_malformed_project_raises(tmp_path: Path) -> None:
    with pytest.raises(ProjectFileError) as excinfo:
        update_project_file(b"<Project>\n<Copyright>2020</Project>", tmp_path / "A.csproj", _config(tmp_path))
    assert excinfo.value.line == 2


def test_handle_writes_unless_dry_run(tmp_path: Path) -> None:
    path = tmp_path / "App.csproj"
    path.write_text(PROJECT, encoding="utf-8")

    queue: asyncio.Queue[Change | None] = asyncio.Queue()
    result = asyncio.run(handle_project_file(path, _config(tmp_path, dry_run=True), queue))
    assert result.replacements == 1
    assert queue.qsize() == 1
    assert path.read_text(encoding="utf-8") == PROJECT

    queue = asyncio.Queue()
    result = asyncio.run(handle_project_file(path, _config(tmp_path), queue))
    assert result.changed
    assert "Copyright © 2024 Ben Hutchison" in path.read_text(encoding="utf-8")


def test_nothing_is_editable_without_include_names(tmp_path: Path) -> None:
    config = _config(tmp_path, include_names=frozenset())

    data, changes = update_project_file(PROJECT.encode(), tmp_path / "A.csproj", config)

    assert data == PROJECT.encode()
    assert changes == []


def test_character_references_in_changed_text_become_characters(tmp_path: Path) -> None:
    original = b"<Project><Copyright>&#169; 2020 Acme</Copyright></Project>"

    data, changes = update_project_file(original, tmp_path / "A.csproj", _config(tmp_path))

    assert data == "<Project><Copyright>© 2024 Acme</Copyright></Project>".encode()
    assert changes[0].old == "© 2020 Acme"
