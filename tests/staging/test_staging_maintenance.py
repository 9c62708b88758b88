from datetime import datetime

from src.nexlinx_ems.nexlinx_ems.staging.service import StagingMaintenanceService
from tests.fakes import InMemoryStaging


def test_removes_all_but_the_first_copy_of_a_punch():
    staging = InMemoryStaging()
    keep = staging.add("1001", datetime(2025, 3, 10, 9, 0), "0", biotime_id=1)
    staging.add("1001", datetime(2025, 3, 10, 9, 0), "0", biotime_id=None)
    staging.add("1001", datetime(2025, 3, 10, 9, 0), "0", biotime_id=7)
    staging.add("1001", datetime(2025, 3, 10, 9, 0), "1", biotime_id=8)
    svc = StagingMaintenanceService(staging)

    assert svc.count_duplicates() == 2
    result = svc.remove_duplicates()

    assert (result.groups, result.removed) == (1, 2)
    assert keep.staging_id in staging.rows
    assert len(staging.rows) == 2
    assert svc.count_duplicates() == 0
