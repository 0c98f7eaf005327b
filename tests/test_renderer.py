from callreport.models import FolderResult, HourBucket, OverviewReport, OverviewRow
from callreport.renderer import render_folder_summary, render_overview, render_table


def test_render_table_aligns_columns_and_strips_quotes():
    table = render_table(["Folder", "Calls"], [['"A"', "3"], ["Longer name", "12"]])
    lines = table.splitlines()
    assert lines[0] == "Folder      | Calls"
    assert lines[2] == "A           | 3"
    assert lines[3] == "Longer name | 12"
    assert set(lines[1]) <= {"-", "+"}


def test_render_overview_includes_both_tables():
    report = OverviewReport(
        base_folder="/calls",
        rows=[OverviewRow("OVERALL", 3, 2, 2, 1, 2, 1, "00:04:00")],
        hours=[HourBucket(hour=h) for h in range(24)],
    )
    text = render_overview(report)
    assert "Total Talk Time" in text
    assert "OVERALL" in text
    assert "23:00-00:00" in text


def test_render_folder_summary():
    result = FolderResult(folder="/calls/A")
    assert render_folder_summary(result) == (
        "/calls/A: 0 recordings, 0 transcribed, 0 analysed "
        "(outgoing: 0, incoming: 0, deactivation: 0)"
    )
