import pytest

from notion_shelf.core.icons import FALLBACK_ICON, STATUS_ICONS, IconPolicy, expected_icon
from notion_shelf.core.models import Icon, RemotePage
from notion_shelf.errors import TransportError
from notion_shelf.maintenance import MaintenanceResult, update_icons

from fakes import FakeNotion, NoPace


def _page(status, emoji=None) -> RemotePage:
    icon = Icon.emoji(emoji) if emoji is not None else None
    return RemotePage(page_id="p1", title="Book", status=status, icon=icon)


@pytest.mark.parametrize("status", list(STATUS_ICONS))
def test_skip_iff_icon_matches_status(status) -> None:
    policy = IconPolicy()
    want = STATUS_ICONS[status]

    same = policy(_page(status, want))
    assert not same.is_update
    assert same.outcome == "skipped"

    other = policy(_page(status, FALLBACK_ICON))
    assert other.is_update
    assert other.patch.icon == Icon.emoji(want)
    assert other.patch.properties == {}


def test_unknown_status_uses_fallback() -> None:
    policy = IconPolicy()
    assert expected_icon("Abandoned") == FALLBACK_ICON
    assert policy(_page("Abandoned", FALLBACK_ICON)).outcome == "skipped"
    assert policy(_page("Abandoned", "📘")).patch.icon.value == FALLBACK_ICON


def test_missing_status_and_non_emoji_icon() -> None:
    policy = IconPolicy()
    assert policy(_page(None)).outcome == "missing_status"

    external = RemotePage(page_id="p2", status="DNF", icon=Icon(kind="external", value="📕"))
    assert policy(external).is_update


def test_update_icons_run_is_idempotent() -> None:
    notion = FakeNotion([
        _page("Completed", "📘"),
        RemotePage(page_id="p2", title="Two", status="DNF", icon=Icon.emoji("📕")),
        RemotePage(page_id="p3", title="Three"),
    ])
    first = update_icons(notion, throttle=NoPace())
    assert first.stats.snapshot_dict() == {"updated": 1, "skipped": 1, "missing_status": 1, "failed": 0}
    assert notion.patches[0][1].icon == Icon.emoji("📗")

    second = update_icons(notion, throttle=NoPace())
    assert second.stats["updated"] == 0
    assert second.stats["skipped"] == 2


def test_update_icons_keeps_counts_when_a_query_fails() -> None:
    notion = FakeNotion(
        [_page("To Read"), _page("Completed", STATUS_ICONS["Completed"]), _page("DNF")],
        page_size=2,
        fail_on_query=2,
    )
    result = MaintenanceResult.for_icons()
    with pytest.raises(TransportError, match="query failed"):
        update_icons(notion, throttle=NoPace(), result=result)

    assert result.stats["updated"] == 1
    assert result.stats["skipped"] == 1
