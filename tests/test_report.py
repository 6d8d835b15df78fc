from notion_shelf.core.stats_tracker import RunStats
from notion_shelf.io.report import summary_lines


def test_summary_lists_every_expected_counter() -> None:
    stats = RunStats(["updated", "force_updated", "skipped"])
    stats.inc("updated", 3)
    stats.inc("custom_bucket")
    stats.inc_pages(2)

    lines = summary_lines(stats, "Summary", failed_file="failed-isbns-x.txt")

    assert "--- Summary ---" in lines
    assert "Total books updated: 3" in lines
    assert "Total books force updated: 0" in lines
    assert "Total books skipped: 0" in lines
    assert "Custom bucket: 1" in lines
    assert "Pages fetched: 2" in lines
    assert lines[-1] == "Failed ISBNs: failed-isbns-x.txt"
