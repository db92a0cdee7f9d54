from __future__ import annotations

import json
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from dmphub.app import PlanView
from dmphub.domain.errors import DuplicateError, NotFoundError
from dmphub.domain.model import ApiClient, Org, PrivilegeLevel, User
from dmphub.ui import cli as cli_module
from tests.helpers.plans import FIXED_NOW

if TYPE_CHECKING:
    from pathlib import Path


def _view(title: str = "Example Plan") -> PlanView:
    return PlanView(
        id=uuid4(),
        title=title,
        description=None,
        visibility="private",
        org=None,
        api_client_id=None,
        dmp_id=None,
        created_at=FIXED_NOW,
        owner=None,
    )


def test_plans_create_reads_document_and_prints_json(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}
    view = _view()

    def fake_create_plan(document: dict[str, object], **kwargs: object) -> PlanView:
        captured["document"] = document
        captured.update(kwargs)
        return view

    monkeypatch.setattr(cli_module, "create_plan", fake_create_plan)
    path = tmp_path / "plan.json"
    path.write_text('{"items": [{"dmp": {"title": "Example Plan"}}]}', encoding="utf-8")
    client_id = uuid4()

    cli_module.main(["plans", "create", str(path), "--as-client", str(client_id)])

    assert captured["document"] == {"items": [{"dmp": {"title": "Example Plan"}}]}
    assert captured["api_client_id"] == client_id
    assert captured["user_email"] is None
    output = json.loads(capsys.readouterr().out)
    assert output["id"] == str(view.id)


def test_plans_list_as_user(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_list_plans(**kwargs: object) -> list[PlanView]:
        captured.update(kwargs)
        return [_view("A"), _view("B")]

    monkeypatch.setattr(cli_module, "list_plans", fake_list_plans)

    cli_module.main(["plans", "list", "--as-user", "jane@example.org"])

    assert captured == {"user_email": "jane@example.org", "api_client_id": None}
    titles = [item["title"] for item in json.loads(capsys.readouterr().out)]
    assert titles == ["A", "B"]


def test_users_create_passes_privilege(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_create_user(email: str, **kwargs: object) -> User:
        captured.update(kwargs)
        return User(email=email)

    monkeypatch.setattr(cli_module, "create_user", fake_create_user)

    cli_module.main(
        ["users", "create", "--email", "admin@example.edu", "--privilege", "org_admin"]
    )

    assert captured["privilege"] is PrivilegeLevel.ORG_ADMIN
    assert json.loads(capsys.readouterr().out)["email"] == "admin@example.edu"


def test_orgs_and_api_clients_create(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        cli_module, "create_org", lambda name, **_: Org(name=name)
    )
    monkeypatch.setattr(
        cli_module, "create_api_client", lambda name, **_: ApiClient(name=name)
    )

    cli_module.main(["orgs", "create", "--name", "Org One", "--ror", "https://ror.org/x"])
    cli_module.main(["api-clients", "create", "--name", "Harvester"])

    lines = capsys.readouterr().out
    assert '"name": "Org One"' in lines
    assert '"name": "Harvester"' in lines


def test_invalid_document_exits_with_usage_error(tmp_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_text("not json", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli_module.main(["plans", "create", str(path), "--as-user", "jane@example.org"])

    assert exc.value.code == cli_module.EXIT_USAGE


def test_duplicate_submission_exits_with_usage_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def fake_create_plan(*_: object, **__: object) -> PlanView:
        raise DuplicateError

    monkeypatch.setattr(cli_module, "create_plan", fake_create_plan)
    path = tmp_path / "plan.json"
    path.write_text('{"items": []}', encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli_module.main(["plans", "create", str(path), "--as-user", "jane@example.org"])

    assert exc.value.code == cli_module.EXIT_USAGE


def test_hidden_plan_exits_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_show_plan(*_: object, **__: object) -> PlanView:
        raise NotFoundError("Plan not found")

    monkeypatch.setattr(cli_module, "show_plan", fake_show_plan)

    with pytest.raises(SystemExit) as exc:
        cli_module.main(["plans", "show", str(uuid4()), "--as-user", "jane@example.org"])

    assert exc.value.code == cli_module.EXIT_FAILURE


def test_invalid_client_id_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        cli_module.main(["plans", "list", "--as-client", "not-a-uuid"])

    assert exc.value.code == cli_module.EXIT_USAGE


def test_caller_is_required() -> None:
    with pytest.raises(SystemExit) as exc:
        cli_module.main(["plans", "list"])

    assert exc.value.code == 2
