from __future__ import annotations

import pytest
import requests

from inspection.infra.store_client import SheetStoreClient, StoreError


def test_load_all_issues_single_get(client: SheetStoreClient, fake_session) -> None:
    assert client.load_all() == {"status": "success"}
    assert fake_session.gets == [{"url": "https://store.example/exec", "timeout": 5}]


@pytest.mark.parametrize(
    "status_code, payload",
    [
        (502, {"status": "success"}),
        (200, None),
        (200, ["not", "an", "object"]),
    ],
)
def test_load_all_rejects_bad_responses(make_session, make_response, status_code, payload) -> None:
    client = SheetStoreClient("https://store.example/exec", session=make_session(get_result=make_response(status_code, payload)))
    with pytest.raises(StoreError):
        client.load_all()


def test_transport_errors_become_store_errors(make_session) -> None:
    client = SheetStoreClient("https://store.example/exec", session=make_session(get_result=requests.Timeout("slow")))
    with pytest.raises(StoreError, match="unreachable"):
        client.load_all()


def test_missing_url_is_not_configured(make_session) -> None:
    client = SheetStoreClient("", session=make_session())
    assert not client.configured()
    with pytest.raises(StoreError):
        client.post_action({"action": "SUBMIT"})


def test_write_actions_are_tagged(client: SheetStoreClient, fake_session) -> None:
    client.append_report({"id": 1, "site": "Musiri"})
    client.update_status(1, "Pending EE", "done")
    client.upsert_officer({"name": "A"}, update=False)
    client.upsert_officer({"name": "B", "oldName": "A"}, update=True)

    actions = [p["json"]["action"] for p in fake_session.posts]
    assert actions == ["SUBMIT", "UPDATE_STATUS", "ADD_USER", "UPDATE_USER"]
    assert fake_session.posts[1]["json"] == {
        "action": "UPDATE_STATUS",
        "rowId": 1,
        "status": "Pending EE",
        "note": "done",
    }


def test_write_response_body_is_not_interpreted(make_session, make_response) -> None:
    session = make_session(post_result=make_response(200, None, text="<html>ok</html>"))
    SheetStoreClient("https://store.example/exec", session=session).post_action({"action": "SUBMIT"})
    assert len(session.posts) == 1


def test_failed_post_raises(make_session) -> None:
    session = make_session(post_result=requests.ConnectionError("down"))
    with pytest.raises(StoreError, match="SUBMIT failed"):
        SheetStoreClient("https://store.example/exec", session=session).append_report({"id": 1})
