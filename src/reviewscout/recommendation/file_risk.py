"""Knowledge concentration of changed files.

A file nobody has touched is abandoned; a file only one contributor has
touched is hoarded (bus-factor risk).
"""

from reviewscout.recommendation.schemas import FileActivity, FileRisk, FileRiskReport


def classify_files(activity: dict[str, FileActivity]) -> list[FileRiskReport]:
    """Classify each changed file by its number of historical contributors."""
    reports: list[FileRiskReport] = []
    for path, file in activity.items():
        count = file.developer_count
        if count == 0:
            reports.append(
                FileRiskReport(path=path, developer_count=0, risk=FileRisk.ABANDONED)
            )
        elif count == 1:
            (owner,) = file.developers.values()
            reports.append(
                FileRiskReport(
                    path=path,
                    developer_count=1,
                    risk=FileRisk.HOARDED,
                    owner=owner.login,
                )
            )
        else:
            reports.append(
                FileRiskReport(path=path, developer_count=count, risk=FileRisk.SHARED)
            )
    return reports
