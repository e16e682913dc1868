import logging

import pytest

from adminnotices.models import Notice
from adminnotices.notices import NoticeQueue, NoticeUsageWarning


def test_add_appends_in_insertion_order(queue):
    queue.add_info("first")
    queue.add_warning("second")
    queue.add_success("third")

    assert [n.message for n in queue.notices()] == ["first", "second", "third"]
    assert [n.type for n in queue.notices()] == ["info", "warning", "success"]


def test_unique_duplicates_are_suppressed(queue):
    queue.add_error("Disk full", unique=True, code="disk")
    queue.add_error("Disk full", unique=True, code="disk")

    assert len(queue.notices()) == 1


def test_non_unique_duplicates_are_kept(queue):
    queue.add_error("Disk full", code="disk")
    queue.add_error("Disk full", code="disk")

    assert len(queue.notices()) == 2


def test_both_sides_must_be_unique_to_suppress(queue):
    queue.add_error("Disk full", unique=True, code="disk")
    queue.add_error("Disk full", unique=False, code="disk")
    assert len(queue.notices()) == 2

    queue.add_info("Saved")
    queue.add_info("Saved", unique=True)
    assert len(queue.notices()) == 4

    queue.add_info("Saved", unique=True)
    assert len(queue.notices()) == 4


def test_unique_compares_type_message_and_code(queue):
    queue.add_error("Disk full", unique=True, code="disk")
    queue.add_warning("Disk full", unique=True, code="disk")
    queue.add_error("Disk nearly full", unique=True, code="disk")
    queue.add_error("Disk full", unique=True, code="other")
    queue.add_error("Disk full", unique=True)

    assert len(queue.notices()) == 5


@pytest.mark.parametrize("kwargs, message", [
    ({"type": "", "message": "x"}, "No type was provided."),
    ({"type": "fatal", "message": "x"}, "Wrong type."),
    ({"type": "error", "message": ""}, "No message was provided."),
    ({"type": "error", "message": "x", "persistent": True}, "Persistent notices must contain a code."),
    ({"type": "error", "message": "x", "persistent": True, "code": ""}, "Persistent notices must contain a code."),
])
def test_invalid_add_warns_and_does_not_mutate(queue, store, kwargs, message):
    with pytest.warns(NoticeUsageWarning, match=message):
        queue.add(**kwargs)

    assert store.get("admin_notices") is None


def test_persistent_wrapper_without_code_is_rejected(queue, store):
    queue.add_info("kept")
    before = store.get("admin_notices")

    with pytest.warns(NoticeUsageWarning):
        queue.add_persistent_warning(None, "Storage quota low")

    assert store.get("admin_notices") == before


def test_persistent_wrappers_default_to_dismissible_and_unique(queue):
    queue.add_persistent_success("done", "All done")

    [notice] = queue.notices()
    assert notice == Notice(type="success", message="All done", dismissible=True,
                            unique=True, persistent=True, code="done")


def test_log_flag_writes_type_and_message(queue, caplog):
    with caplog.at_level(logging.INFO, logger="adminnotices.notices"):
        queue.add_error("Disk full", log=True)
        queue.add_info("Quiet")

    records = [r for r in caplog.records
               if r.name == "adminnotices.notices" and r.levelno >= logging.INFO]
    assert [r.getMessage() for r in records] == ["ERROR: Disk full"]
    assert records[0].levelno == logging.ERROR


def test_remove_on_absent_queue_returns_false(queue):
    assert queue.remove("anything") is False


def test_remove_on_empty_queue_returns_false(queue, store):
    store.set("admin_notices", [])
    assert queue.remove("anything") is False


def test_remove_drops_every_match_and_keeps_the_rest(queue):
    queue.add_persistent_error("a", "one")
    queue.add_info("no code")
    queue.add_error("two", code="a")
    queue.add_warning("other code", code="b")

    assert queue.remove("a") is True

    assert [(n.message, n.code) for n in queue.notices()] == [("no code", None), ("other code", "b")]


def test_remove_unknown_code_still_writes(queue, store):
    queue.add_info("hello")
    assert queue.remove("missing") is True
    assert len(queue.notices()) == 1


def test_remove_reports_failed_write(queue, store, monkeypatch):
    queue.add_info("hello", code="x")
    monkeypatch.setattr(store, "set", lambda key, value, expiration=0: False)

    assert queue.remove("x") is False


def test_display_renders_one_block_per_notice(queue):
    queue.add_error("Disk full", dismissible=True, code="disk-full")
    queue.add_info("Saved")

    html = str(queue.display())

    assert html == (
        '<div data-notice-type="error" data-notice-dismissible="true" '
        'data-notice-code="disk-full" class="notice notice-error is-dismissible"><p>Disk full</p></div>'
        '<div data-notice-type="info" data-notice-dismissible="false" '
        'data-notice-code="" class="notice notice-info"><p>Saved</p></div>'
    )


def test_display_escapes_message_and_code(queue):
    queue.add_warning("<script>alert(1)</script>", code='x" onclick="y')

    html = str(queue.display())

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert 'data-notice-code="x&#34; onclick=&#34;y"' in html


def test_display_of_empty_queue_is_empty(queue):
    assert str(queue.display()) == ""


def test_display_does_not_mutate(queue):
    queue.add_info("Saved")
    queue.display()
    assert len(queue.notices()) == 1


def test_sweep_keeps_only_persistent_notices(queue):
    queue.add_info("transient")
    queue.add_persistent_info("keep", "persistent")
    queue.add_error("also transient", code="keep")
    persistent_before = [n for n in queue.notices() if n.persistent]

    queue.sweep()

    assert queue.notices() == persistent_before


def test_sweep_on_absent_queue_does_not_write(queue, store):
    queue.sweep()
    assert store.get("admin_notices") is None


def test_transient_notice_is_shown_once(queue):
    queue.add_error("Disk full", dismissible=True, code="disk-full")

    [notice] = queue.notices()
    assert (notice.type, notice.dismissible, notice.persistent) == ("error", True, False)

    html = str(queue.display())
    assert 'class="notice notice-error is-dismissible"' in html
    assert 'data-notice-code="disk-full"' in html

    queue.sweep()
    assert queue.notices() == []


def test_persistent_notice_survives_until_removed(queue):
    queue.add_persistent_warning("quota-low", "Storage quota low")

    for _ in range(2):
        assert "Storage quota low" in str(queue.display())
        queue.sweep()
        assert len(queue.notices()) == 1

    assert queue.remove("quota-low") is True
    assert queue.notices() == []


def test_malformed_entries_are_dropped(store):
    store.set("k", [{"type": "info", "message": "ok"}, {"message": "no type"}])
    queue = NoticeQueue(store, "k")

    assert [n.message for n in queue.notices()] == ["ok"]


@pytest.mark.parametrize("raw", [{"type": "info", "message": "x"}, "garbage", 42])
def test_non_list_value_reads_as_empty_queue(store, raw):
    store.set("k", raw)
    queue = NoticeQueue(store, "k")

    assert queue.notices() == []
    assert str(queue.display()) == ""
    assert queue.remove("x") is False
    queue.add_info("fresh")
    assert [n.message for n in queue.notices()] == ["fresh"]


def test_non_dict_and_unknown_type_entries_are_dropped(store):
    store.set("k", ["garbage", None, {"type": "fatal", "message": "bad"},
                    {"type": "error", "message": "ok"}])
    queue = NoticeQueue(store, "k")

    assert [(n.type, n.message) for n in queue.notices()] == [("error", "ok")]
    assert "notice-fatal" not in str(queue.display())


@pytest.mark.parametrize("call", [
    lambda q: q.add("fatal", "x"),
    lambda q: q.add_error(""),
    lambda q: q.add_persistent("info", None, "x"),
    lambda q: q.add_persistent_warning(None, "x"),
])
def test_usage_warning_points_at_the_caller(queue, call):
    with pytest.warns(NoticeUsageWarning) as record:
        call(queue)

    assert record[0].filename == __file__
