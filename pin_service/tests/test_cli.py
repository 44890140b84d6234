from __future__ import annotations

import json

import pytest

from pin_service.__main__ import main


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ADMIN_TOKEN", "cli-token")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")


def test_issue_and_redeem(cli_env, capsys):
    assert main(["issue", "--owner", "u1", "--ttl", "5"]) == 0
    issued = json.loads(capsys.readouterr().out)
    assert issued["ok"] is True
    assert issued["ownerId"] == "u1"

    assert main(["redeem", issued["pin"]]) == 0
    redeemed = json.loads(capsys.readouterr().out)
    assert redeemed["usedAt"]

    assert main(["redeem", issued["pin"]]) == 1
    assert json.loads(capsys.readouterr().out) == {"ok": False, "message": "PIN already used"}


def test_issue_rejects_out_of_range_ttl(cli_env, capsys):
    assert main(["issue", "--ttl", "500"]) == 1
    assert json.loads(capsys.readouterr().out)["ok"] is False
