import os
import time

from receiver.services.cleanup import CleanupService


def age(path, hours: float) -> None:
    stamp = time.time() - hours * 3600
    os.utime(path, (stamp, stamp))


def test_stale_temp_files_are_removed(storage):
    old = storage.create()
    fresh = storage.create()
    age(old, 48)

    deleted = CleanupService(storage).delete_stale_temp_files(24)

    assert deleted == 1
    assert not old.exists()
    assert fresh.exists()


def test_foreign_files_in_temp_dir_are_left_alone(storage, tmp_dir):
    foreign = tmp_dir / "someone-else.tmp"
    foreign.write_bytes(b"keep")
    age(foreign, 48)

    assert CleanupService(storage).delete_stale_temp_files(24) == 0
    assert foreign.exists()


def test_zero_hours_disables_the_sweep(storage):
    old = storage.create()
    age(old, 48)

    assert CleanupService(storage).delete_stale_temp_files(0) == 0
    assert old.exists()
