from __future__ import annotations

import sys
from pathlib import Path

import pytest

from nyaaseek import cli
from nyaaseek.search.types import (
    CandidateItem,
    DiscoveryOutcome,
    DiscoveryStatus,
    MatchedRelease,
    SearchMode,
)


def test_ui_info_error_emit_prefixed_messages(monkeypatch: pytest.MonkeyPatch) -> None:
    lines: list[str] = []
    monkeypatch.setattr(cli.console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    cli._ui_info("hello")
    cli._ui_error("boom")

    assert lines == [
        "[cyan][INFO][/cyan] hello",
        "[red][ERROR][/red] boom",
    ]


def test_parse_episode_list_expands_ranges_and_dedupes() -> None:
    assert cli.parse_episode_list(None) == []
    assert cli.parse_episode_list("") == []
    assert cli.parse_episode_list("5-7, 1,2,6,") == [1, 2, 5, 6, 7]


@pytest.mark.parametrize("value", ["1,x", "3-", "a-4"])
def test_parse_episode_list_rejects_garbage(value: str) -> None:
    with pytest.raises(ValueError):
        cli.parse_episode_list(value)


def test_exit_codes_follow_outcome_status() -> None:
    release = MatchedRelease(
        candidate=CandidateItem(title="[Group] Show - 03 [1080p]", seeders=10),
        episode="03",
        mode=SearchMode.EPISODE,
        title="Show",
    )

    assert cli.exit_code_for(DiscoveryOutcome.not_searchable()) == cli.EXIT_NOT_SEARCHABLE
    assert cli.exit_code_for(DiscoveryOutcome.from_matches(SearchMode.EPISODE, ())) == cli.EXIT_NOT_FOUND
    assert cli.exit_code_for(DiscoveryOutcome.from_matches(SearchMode.EPISODE, (release,))) == cli.EXIT_FOUND


def test_resolve_config_path_accepts_directory(tmp_path: Path) -> None:
    assert cli.resolve_config_path(str(tmp_path)) == tmp_path / "config.toml"
    explicit = tmp_path / "custom.toml"
    assert cli.resolve_config_path(str(explicit)) == explicit


def test_resolve_config_path_prefers_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "config.toml").write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert cli.resolve_config_path(None) == tmp_path / "config.toml"


def test_main_without_arguments_shows_help(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr(sys, "argv", ["nyaaseek"])

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 0
    assert "NYAASEEK v" in capsys.readouterr().out


def test_main_exit_code_reflects_discovery(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    seen: dict[str, object] = {}

    async def _fake_discovery(config, media_id, downloaded, progress=None):
        seen.update(media_id=media_id, downloaded=downloaded, progress=progress, resolution=config.matching.resolution)
        return DiscoveryOutcome.from_matches(SearchMode.EPISODE, ())

    monkeypatch.setattr(cli, "run_discovery", _fake_discovery)
    monkeypatch.setattr(cli, "emit", lambda *_args, **_kwargs: None)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        sys,
        "argv",
        ["nyaaseek", "--downloaded", "1-2", "--progress", "2", "--resolution", "720p", "154587"],
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == cli.EXIT_NOT_FOUND
    assert seen == {"media_id": 154587, "downloaded": [1, 2], "progress": 2, "resolution": "720p"}


def test_main_watching_without_user_id_fails(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    lines: list[str] = []
    monkeypatch.setattr(cli.console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "argv", ["nyaaseek", "--watching"])

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 1
    assert any("user_id is not configured" in line for line in lines)
