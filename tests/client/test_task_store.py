from __future__ import annotations

import pytest

from tasktracker.client import (
    AuthError,
    AuthResult,
    NotFoundError,
    NotificationLevel,
    ServerError,
    SessionState,
    TaskStatus,
    TransportError,
    UserInfo,
    ValidationError,
)

pytestmark = pytest.mark.asyncio


def _ids(store) -> list[str]:
    return [task.id for task in store.tasks]


async def test_create_shows_exactly_one_entry_before_and_after_settling(store, fake_api, make_task, flush) -> None:
    pending = store.create("  Buy milk  ")

    assert pending is not None
    [entry] = store.tasks
    assert entry.is_placeholder
    assert entry.title == "Buy milk"
    assert entry.status is TaskStatus.PENDING

    await flush()
    [call] = fake_api.pending("create_task")
    assert call.kwargs["title"] == "Buy milk"
    call.resolve(make_task("Buy milk", task_id="srv-1"))
    await pending

    assert _ids(store) == ["srv-1"]
    assert not store.get("srv-1").is_placeholder


async def test_create_failure_removes_placeholder_and_notifies(store, fake_api, notifier, flush) -> None:
    pending = store.create("Buy milk")
    await flush()

    fake_api.pending("create_task")[0].fail(ValidationError("Title must be 1-200 characters", status_code=400))
    await pending

    assert store.tasks == []
    [notification] = notifier.pop_all()
    assert notification.level is NotificationLevel.ERROR
    assert notification.message == "Title must be 1-200 characters"


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
async def test_blank_titles_are_rejected_locally(store, fake_api, title: str, flush) -> None:
    assert store.create(title) is None
    await flush()

    assert store.tasks == []
    assert fake_api.called("create_task") == []


async def test_placeholder_is_replaced_in_place(seeded_store, fake_api, make_task, flush) -> None:
    first = seeded_store.create("First")
    second = seeded_store.create("Second")
    await flush()
    placeholder_second = seeded_store.tasks[0].id

    first_call, second_call = fake_api.pending("create_task")
    first_call.resolve(make_task("First", task_id="srv-1"))
    await first

    assert _ids(seeded_store) == [placeholder_second, "srv-1", "c", "b", "a"]

    second_call.resolve(make_task("Second", task_id="srv-2"))
    await second
    assert _ids(seeded_store) == ["srv-2", "srv-1", "c", "b", "a"]


async def test_mutations_of_unsaved_tasks_are_rejected(store, fake_api, make_task, flush) -> None:
    created = store.create("Draft")
    placeholder_id = store.tasks[0].id

    assert store.toggle(placeholder_id) is None
    assert store.rename(placeholder_id, "Renamed") is None
    assert store.delete(placeholder_id) is None
    await flush()

    assert fake_api.called("update_task") == []
    assert fake_api.called("delete_task") == []
    assert store.tasks[0].title == "Draft"
    assert store.is_busy(placeholder_id)

    fake_api.pending("create_task")[0].resolve(make_task("Draft", task_id="srv-1"))
    await created


async def test_toggle_applies_immediately_and_commits(seeded_store, fake_api, flush) -> None:
    pending = seeded_store.toggle("b")

    assert seeded_store.get("b").status is TaskStatus.COMPLETED
    await flush()
    [call] = fake_api.pending("update_task")
    assert call.kwargs == {"token": "token-ann", "task_id": "b", "status": TaskStatus.COMPLETED}

    call.resolve(seeded_store.get("b"))
    await pending

    assert seeded_store.get("b").status is TaskStatus.COMPLETED
    assert not seeded_store.is_busy("b")


async def test_toggle_failure_restores_captured_status(seeded_store, fake_api, notifier, flush) -> None:
    pending = seeded_store.toggle("b")
    await flush()

    fake_api.pending("update_task")[0].fail(NotFoundError("Task not found.", status_code=404))
    await pending

    assert seeded_store.get("b").status is TaskStatus.PENDING
    assert [n.message for n in notifier.pop_all()] == ["Task not found."]


@pytest.mark.parametrize("failure_order", [(0, 1), (1, 0)])
async def test_double_toggle_rolls_back_to_original_whatever_the_failure_order(
    seeded_store,
    fake_api,
    flush,
    failure_order: tuple[int, int],
) -> None:
    first = seeded_store.toggle("b")
    second = seeded_store.toggle("b")
    assert seeded_store.get("b").status is TaskStatus.PENDING
    await flush()

    calls = fake_api.pending("update_task")
    assert [call.kwargs["status"] for call in calls] == [TaskStatus.COMPLETED, TaskStatus.PENDING]
    for index in failure_order:
        calls[index].fail(ServerError("Internal server error.", status_code=500))
        await flush()
    await first
    await second

    assert seeded_store.get("b").status is TaskStatus.PENDING
    assert not seeded_store.is_busy("b")


async def test_older_failure_hands_snapshot_to_newer_mutation(seeded_store, fake_api, flush) -> None:
    first = seeded_store.rename("b", "One")
    second = seeded_store.rename("b", "Two")
    await flush()
    first_call, second_call = fake_api.pending("update_task")

    first_call.fail(TransportError())
    await first
    assert seeded_store.get("b").title == "Two"

    second_call.fail(TransportError())
    await second
    assert seeded_store.get("b").title == "Beta"


async def test_older_success_never_overwrites_newer_value(seeded_store, fake_api, make_task, flush) -> None:
    first = seeded_store.rename("b", "One")
    second = seeded_store.rename("b", "Two")
    await flush()
    first_call, second_call = fake_api.pending("update_task")

    second_call.resolve(make_task("Two", task_id="b"))
    await second
    first_call.resolve(make_task("One", task_id="b"))
    await first

    assert seeded_store.get("b").title == "Two"


async def test_older_success_arriving_first_keeps_newer_optimistic_value(
    seeded_store,
    fake_api,
    make_task,
    flush,
) -> None:
    first = seeded_store.rename("b", "One")
    second = seeded_store.rename("b", "Two")
    await flush()
    first_call, second_call = fake_api.pending("update_task")

    first_call.resolve(make_task("One", task_id="b"))
    await first
    assert seeded_store.get("b").title == "Two"

    second_call.resolve(make_task("Two", task_id="b"))
    await second
    assert seeded_store.get("b").title == "Two"


async def test_older_failure_after_newer_success_is_ignored(seeded_store, fake_api, make_task, flush) -> None:
    first = seeded_store.rename("b", "One")
    second = seeded_store.rename("b", "Two")
    await flush()
    first_call, second_call = fake_api.pending("update_task")

    second_call.resolve(make_task("Two", task_id="b"))
    await second
    first_call.fail(ServerError(status_code=500))
    await first

    assert seeded_store.get("b").title == "Two"


async def test_newer_failure_falls_back_to_older_optimistic_value(seeded_store, fake_api, make_task, flush) -> None:
    first = seeded_store.rename("b", "One")
    second = seeded_store.rename("b", "Two")
    await flush()
    first_call, second_call = fake_api.pending("update_task")

    second_call.fail(ServerError(status_code=500))
    await second
    assert seeded_store.get("b").title == "One"

    first_call.resolve(make_task("One", task_id="b"))
    await first
    assert seeded_store.get("b").title == "One"


async def test_rename_failure_restores_previous_title_verbatim(seeded_store, fake_api, flush) -> None:
    pending = seeded_store.rename("a", "  Alpha prime  ")
    assert seeded_store.get("a").title == "Alpha prime"
    await flush()

    fake_api.pending("update_task")[0].fail(ValidationError(status_code=400))
    await pending

    assert seeded_store.get("a").title == "Alpha"


async def test_blank_or_unchanged_rename_sends_nothing(seeded_store, fake_api, flush) -> None:
    assert seeded_store.rename("a", "   ") is None
    assert seeded_store.rename("a", "Alpha") is None
    await flush()

    assert fake_api.called("update_task") == []
    assert seeded_store.get("a").title == "Alpha"


async def test_rollback_only_touches_the_affected_entry(seeded_store, fake_api, make_task, flush) -> None:
    toggle = seeded_store.toggle("b")
    rename = seeded_store.rename("b", "Beta two")
    other = seeded_store.rename("c", "Gamma two")
    await flush()
    toggle_call, rename_call, other_call = fake_api.pending("update_task")

    toggle_call.fail(ServerError(status_code=500))
    await toggle

    assert seeded_store.get("b").status is TaskStatus.PENDING
    assert seeded_store.get("b").title == "Beta two"
    assert seeded_store.get("c").title == "Gamma two"
    assert seeded_store.get("a").title == "Alpha"

    rename_call.resolve(make_task("Beta two", task_id="b"))
    other_call.resolve(make_task("Gamma two", task_id="c"))
    await seeded_store.wait_idle()


async def test_delete_removes_immediately_and_commits(seeded_store, fake_api, notifier, flush) -> None:
    pending = seeded_store.delete("b")
    assert _ids(seeded_store) == ["c", "a"]
    await flush()

    fake_api.pending("delete_task")[0].resolve(None)
    await pending

    assert _ids(seeded_store) == ["c", "a"]
    assert notifier.pop_all() == []


@pytest.mark.parametrize("task_id", ["c", "b", "a"])
async def test_failed_delete_reinserts_at_original_position(seeded_store, fake_api, notifier, flush, task_id: str) -> None:
    pending = seeded_store.delete(task_id)
    await flush()

    fake_api.pending("delete_task")[0].fail(TransportError())
    await pending

    assert _ids(seeded_store) == ["c", "b", "a"]
    assert [n.message for n in notifier.pop_all()] == ["Could not reach the server."]


async def test_failed_delete_of_head_stays_below_newer_tasks(seeded_store, fake_api, make_task, flush) -> None:
    pending = seeded_store.delete("c")
    created = seeded_store.create("Newer")
    await flush()
    fake_api.pending("create_task")[0].resolve(make_task("Newer", task_id="n"))
    await created

    fake_api.pending("delete_task")[0].fail(TransportError())
    await pending

    assert _ids(seeded_store) == ["n", "c", "b", "a"]


async def test_failed_delete_falls_back_to_predecessor(seeded_store, fake_api, flush) -> None:
    middle = seeded_store.delete("b")
    tail = seeded_store.delete("a")
    await flush()
    middle_call, tail_call = fake_api.pending("delete_task")

    tail_call.resolve(None)
    await tail
    middle_call.fail(TransportError())
    await middle

    assert _ids(seeded_store) == ["c", "b"]


async def test_field_changes_follow_a_task_through_a_failed_delete(seeded_store, fake_api, flush) -> None:
    toggle = seeded_store.toggle("b")
    delete = seeded_store.delete("b")
    await flush()

    fake_api.pending("update_task")[0].fail(ServerError(status_code=500))
    await toggle
    fake_api.pending("delete_task")[0].fail(ServerError(status_code=500))
    await delete

    assert _ids(seeded_store) == ["c", "b", "a"]
    assert seeded_store.get("b").status is TaskStatus.PENDING


async def test_unauthorized_response_rolls_back_then_signs_out(
    seeded_store,
    signed_in,
    token_store,
    fake_api,
    notifier,
    flush,
) -> None:
    seen: list[TaskStatus] = []
    seeded_store.subscribe(lambda s: seen.append(s.get("b").status) if s.get("b") else None)
    pending = seeded_store.toggle("b")
    await flush()

    fake_api.pending("update_task")[0].fail(AuthError("Token has expired.", status_code=401))
    await pending

    assert seen[-1] is TaskStatus.PENDING
    assert signed_in.state is SessionState.ANONYMOUS
    assert seeded_store.tasks == []
    assert token_store.load() is None
    assert [n.message for n in notifier.pop_all()] == ["Token has expired."]


async def test_responses_after_logout_are_ignored(store, signed_in, fake_api, make_task, notifier, flush) -> None:
    pending = store.create("Buy milk")
    await flush()

    signed_in.logout()
    fake_api.pending("create_task")[0].resolve(make_task("Buy milk", task_id="srv-1"))
    await pending

    assert store.tasks == []
    assert store.create("After logout") is None
    assert notifier.pop_all() == []


async def test_switching_user_clears_previous_tasks(seeded_store, signed_in, fake_api) -> None:
    bob = UserInfo(id="u-bob", name="Bob", email="bob@example.com")
    fake_api.reply("login", AuthResult(user=bob, token="token-bob"))

    await signed_in.login("bob@example.com", "secret1")

    assert seeded_store.tasks == []


async def test_refresh_keeps_placeholders_on_top(store, fake_api, make_task, flush) -> None:
    created = store.create("Unsaved")
    placeholder_id = store.tasks[0].id
    fake_api.reply("list_tasks", [make_task("Saved", task_id="s1")])

    await store.refresh()

    assert _ids(store) == [placeholder_id, "s1"]

    await flush()
    fake_api.pending("create_task")[0].resolve(make_task("Unsaved", task_id="s2"))
    await created
    assert _ids(store) == ["s2", "s1"]


async def test_refresh_preserves_in_flight_values(seeded_store, fake_api, make_task, flush) -> None:
    pending = seeded_store.toggle("a")
    removed = seeded_store.delete("c")
    fake_api.reply(
        "list_tasks",
        [make_task("Gamma", task_id="c"), make_task("Beta", task_id="b"), make_task("Alpha", task_id="a")],
    )

    await seeded_store.refresh()

    assert _ids(seeded_store) == ["b", "a"]
    assert seeded_store.get("a").status is TaskStatus.COMPLETED
    await flush()
    for call in fake_api.pending():
        call.resolve(None if call.name == "delete_task" else seeded_store.get("a"))
    await pending
    await removed


async def test_filter_and_stats_project_the_view(seeded_store, fake_api, flush) -> None:
    pending = seeded_store.toggle("a")
    await flush()
    fake_api.pending("update_task")[0].resolve(seeded_store.get("a"))
    await pending

    assert [t.id for t in seeded_store.filter("ALP")] == ["a"]
    assert [t.id for t in seeded_store.filter(status="completed")] == ["a"]
    assert [t.id for t in seeded_store.filter("a", status="pending")] == ["c", "b"]
    assert [t.id for t in seeded_store.filter("zzz")] == []

    stats = seeded_store.stats()
    assert (stats.total, stats.completed, stats.pending, stats.completion_rate) == (3, 1, 2, 33)


async def test_stats_of_empty_view(store) -> None:
    stats = store.stats()

    assert (stats.total, stats.completion_rate) == (0, 0)


async def test_wait_idle_awaits_every_reconciliation(seeded_store, fake_api, make_task, flush) -> None:
    seeded_store.toggle("a")
    seeded_store.rename("b", "Beta two")
    await flush()
    for call in fake_api.pending("update_task"):
        task_id = call.kwargs["task_id"]
        call.resolve(seeded_store.get(task_id))

    await seeded_store.wait_idle()

    assert not seeded_store.is_busy("a")
    assert not seeded_store.is_busy("b")


async def test_failed_delete_without_surviving_neighbours_uses_clamped_index(seeded_store, fake_api, flush) -> None:
    middle = seeded_store.delete("b")
    head = seeded_store.delete("c")
    tail = seeded_store.delete("a")
    await flush()
    middle_call, head_call, tail_call = fake_api.pending("delete_task")

    head_call.resolve(None)
    tail_call.resolve(None)
    await head
    await tail
    middle_call.fail(TransportError())
    await middle

    assert _ids(seeded_store) == ["b"]


async def test_server_error_on_create_leaves_nothing_behind(store, fake_api, notifier, flush) -> None:
    pending = store.create("Buy milk")
    await flush()

    fake_api.pending("create_task")[0].fail(ServerError("Invalid response from server."))
    await store.wait_idle()

    assert pending.done() and pending.exception() is None
    assert store.tasks == []
    assert [n.message for n in notifier.pop_all()] == ["Invalid response from server."]
