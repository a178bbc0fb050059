"""Preset queries over the ``git_stats`` table."""

PRESETS = {
    "churn": (
        "SELECT file, SUM(additions) AS additions, SUM(deletions) AS deletions, "
        "SUM(additions) + SUM(deletions) AS churn "
        "FROM git_stats GROUP BY file ORDER BY churn DESC LIMIT 20"
    ),
    "commit-sizes": (
        "SELECT commit_id, COUNT(*) AS files, SUM(additions) AS additions, "
        "SUM(deletions) AS deletions "
        "FROM git_stats GROUP BY commit_id "
        "ORDER BY SUM(additions) + SUM(deletions) DESC LIMIT 20"
    ),
    "file-commits": (
        "SELECT file, COUNT(DISTINCT commit_id) AS commits "
        "FROM git_stats GROUP BY file ORDER BY commits DESC LIMIT 20"
    ),
    "totals": (
        "SELECT COUNT(DISTINCT commit_id) AS commits, COUNT(DISTINCT file) AS files, "
        "SUM(additions) AS additions, SUM(deletions) AS deletions FROM git_stats"
    ),
}
